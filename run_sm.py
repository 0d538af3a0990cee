"""Command-line runner for the TA / Node / Middleware handshake simulation.
Usage:
  python run_sm.py --nodes 200 --workers 4 --tamper-percent 1 --payload-bytes 512 --node-jitter 100 \
      --net-ta-node 10 50 --net-node-mw 10 50 --db-delay 20 60 --fail-percent 3 --out results.csv
"""
import os
import sys
import argparse

from config import (
    DATA_DIR, LOG_DIR, LOG_FILENAME, PERF_CSV_FILENAME, SUMMARY_FILENAME,
    NUM_NODES, WORKER_COUNT, TAMPER_PERCENT, PAYLOAD_BYTES, NODE_START_JITTER_MS,
    NET_TA_NODE_MS, NET_NODE_MW_MS, DB_DELAY_MS, FAIL_PERCENT, SimConfig,
)
from core.errors import ConfigurationError
from simulation.session_manager import SessionManager
from utils.logging_setup import configure_logging


def build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        description='Simulate the TA -> Node -> Middleware token handshake.',
        epilog='Example: run_sm.py --nodes 1000 --workers 4 --tamper-percent 5 '
               '--payload-bytes 512 --fail-percent 2')
    p.add_argument('--nodes', type=int, default=NUM_NODES, help='Number of simulated nodes')
    p.add_argument('--workers', type=int, default=WORKER_COUNT, help='Concurrent worker threads')
    p.add_argument('--tamper-percent', type=float, default=TAMPER_PERCENT,
                   help='Chance (0-100) that a node submits a forged token')
    p.add_argument('--payload-bytes', type=int, default=PAYLOAD_BYTES, help='Request body size')
    p.add_argument('--node-jitter', type=int, default=NODE_START_JITTER_MS, metavar='MS',
                   help='Upper bound of the random node start offset')
    p.add_argument('--net-ta-node', type=int, nargs=2, default=list(NET_TA_NODE_MS), metavar=('MIN', 'MAX'),
                   help='TA -> Node network delay range (ms)')
    p.add_argument('--net-node-mw', type=int, nargs=2, default=list(NET_NODE_MW_MS), metavar=('MIN', 'MAX'),
                   help='Node -> MW network delay range (ms)')
    p.add_argument('--db-delay', type=int, nargs=2, default=list(DB_DELAY_MS), metavar=('MIN', 'MAX'),
                   help='Database/processing delay range (ms)')
    p.add_argument('--fail-percent', type=float, default=FAIL_PERCENT,
                   help='Chance (0-100) that a node exchange is dropped')
    p.add_argument('--out', default=os.path.join(DATA_DIR, PERF_CSV_FILENAME), help='Performance CSV file')
    p.add_argument('--summary', default=os.path.join(DATA_DIR, SUMMARY_FILENAME), help='Text summary file')
    p.add_argument('--no-csv', dest='write_csv', action='store_false', help='Do not append to the CSV')
    p.add_argument('--seed', type=int, default=None, help='Run seed for reproducible delay/drop draws')
    p.add_argument('--log-level', default='INFO', choices=['DEBUG', 'INFO', 'WARNING', 'ERROR'])
    p.add_argument('--log-file', default=os.path.join(LOG_DIR, LOG_FILENAME), help='Run log file')
    return p


def config_from_args(args: argparse.Namespace) -> SimConfig:
    return SimConfig.from_overrides(
        nodes=args.nodes,
        workers=args.workers,
        tamper_percent=args.tamper_percent,
        payload_bytes=args.payload_bytes,
        node_jitter_ms=args.node_jitter,
        net_ta_node=tuple(args.net_ta_node),
        net_node_mw=tuple(args.net_node_mw),
        db_delay=tuple(args.db_delay),
        fail_percent=args.fail_percent,
        out_file=args.out,
        summary_file=args.summary,
    )


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.log_level, args.log_file or None)
    try:
        cfg = config_from_args(args)
    except ConfigurationError as e:
        parser.error(str(e))

    sm = SessionManager(cfg, seed=args.seed, write_csv=args.write_csv)
    result = sm.run()
    stats = result.stats
    print(f"Done. Avg node time: {stats.avg_us / 1000.0:.3f} ms, Success: {stats.success_pct:.2f}%, "
          f"Dropped: {stats.drop_pct:.2f}%, Wall time: {result.wall_time_s:.3f} s")
    print('Results written to:', ' and '.join(result.written))
    return 0


if __name__ == '__main__':
    sys.exit(main())
