"""
Configuration file for the TA / Node / Middleware handshake simulation

This file specifies all default parameters used across the project:
- Simulation settings
- Network and processing delays
- Protocol settings (keys, tokens)
- Report and log locations
"""

#Simulation settings
NUM_NODES = 100 #Number of simulated nodes per run
NODES_FALLBACK = 1000 #Used when a non-positive node count is requested
WORKER_COUNT = 2 #Simulate weak CPU: only 2 concurrent workers
TAMPER_PERCENT = 0.0 #Chance (0-100) that a node submits a bogus token
FAIL_PERCENT = 0.0 #Chance (0-100) that a node's exchange is dropped
PAYLOAD_BYTES = 500 #Typical small IoT/LAN message body
WORKER_SEED_STRIDE = 7919 #Mixed into each worker's RNG seed

#Network Configuration (milliseconds)
NODE_START_JITTER_MS = 50 #Upper bound of staggered node start
NET_TA_NODE_MS = (5, 20) #LAN: low network delay TA -> Node
NET_NODE_MW_MS = (5, 20) #LAN: low network delay Node -> MW
DB_DELAY_MS = (10, 30) #Simulated slow DB or processing after validation

#Protocol Settings
KEY_SIZE = 16 #Bytes of SHA-256 digest kept as AES-128 key
IV_SIZE = 16 #AES block size
TOKEN_BYTES = 16 #Random bytes in an issued token
TAMPER_TOKEN_BYTES = 8 #Random bytes in a forged token
NODE_ID_BASE = "node-"
PASSPHRASE_TA_NODE = "passphrase_ta_node_v1"
PASSPHRASE_NODE_MW = "passphrase_node_mw_v1"
PASSPHRASE_TA_MW = "passphrase_ta_mw_v1"

#Reports and logs
# Make data/log paths absolute (based on repository layout) so runs write to a
# consistent place regardless of the current working directory.
import os
_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), '..'))
DATA_DIR = os.path.join(_ROOT, 'data', 'results')
LOG_DIR = os.path.join(_ROOT, 'data', 'logs')
PERF_CSV_FILENAME = "realistic_perf.csv"
SUMMARY_FILENAME = "final.txt"
LOG_FILENAME = "simulation.log"
