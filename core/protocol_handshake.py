"""
core/protocol_handshake.py

One node's TA -> Node -> MW handshake, run start to finish:

    jitter, TA->Node delay, drop check,
    TA issues token (two envelopes), Node decrypts, optional tamper,
    Node builds request, Node->MW delay, Node encrypts,
    MW recovers ground truth and the claimed token, compares,
    DB delay, stop clock.

Errors from the cipher codec (FormatError / DecryptionError) are not caught
here; the scheduler turns them into a failed record for this node only.
"""

import logging
import random
import time
from dataclasses import dataclass
from typing import Optional

from config import NODE_ID_BASE, TAMPER_TOKEN_BYTES, SimConfig
from core.crypto_utils import encrypt_message, decrypt_text, generate_token_hex
from core.keystore import KeyMaterial
from core.token_issuer import issue_tokens, extract_token, TOKEN_MARKER
from network.latency import inject_delay, roll, Sleeper

log = logging.getLogger("core.protocol_handshake")

HEADER_OPEN = "HEADER["
HEADER_CLOSE = "]"
BODY_OPEN = "|BODY["
BODY_CLOSE = "]"


@dataclass
class NodeMetrics:
    node_index: int
    total_us: int = 0
    success: bool = False
    dropped: bool = False
    error: Optional[str] = None


def node_id_for(index: int) -> str:
    return f"{NODE_ID_BASE}{index}"


def body_char_for(index: int) -> str:
    return chr(ord('A') + index % 26)


def build_request(index: int, token: str, payload_bytes: int) -> str:
    """Node's request: a header carrying id + token and a uniform body of payload_bytes."""
    body = body_char_for(index) * payload_bytes
    header = f"NODE_ID:{node_id_for(index)};{TOKEN_MARKER}{token}"
    return f"{HEADER_OPEN}{header}{HEADER_CLOSE}{BODY_OPEN}{body}{BODY_CLOSE}"


def parse_request_body(request: str) -> Optional[str]:
    start = request.find(BODY_OPEN)
    if start == -1 or not request.endswith(BODY_CLOSE):
        return None
    return request[start + len(BODY_OPEN):-len(BODY_CLOSE)]


def parse_request_token(request: str) -> Optional[str]:
    """Token claimed in the request header; None when the header is missing or unterminated."""
    hpos = request.find(HEADER_OPEN)
    if hpos == -1:
        return None
    start = hpos + len(HEADER_OPEN)
    hend = request.find(HEADER_CLOSE, start)
    if hend == -1:
        return None
    return extract_token(request[start:hend])


def elapsed_us(t_start: float) -> int:
    return int((time.perf_counter() - t_start) * 1_000_000)


def simulate_node(node_index: int, config: SimConfig, keys: KeyMaterial, rng: random.Random,
                  sleep: Sleeper = time.sleep) -> NodeMetrics:
    m = NodeMetrics(node_index=node_index)
    t_start = time.perf_counter()

    # Staggered node start
    inject_delay(rng, (0, config.node_jitter_ms), sleep, label="jitter")
    inject_delay(rng, config.net_ta_node, sleep, label="TA->Node")

    if roll(rng, config.fail_percent):
        m.dropped = True
        m.total_us = elapsed_us(t_start)
        log.debug("node %d dropped after %d us", node_index, m.total_us)
        return m

    node_id = node_id_for(node_index)
    issued = issue_tokens(node_id, keys)

    # Node side
    token = extract_token(decrypt_text(keys.ta_node, issued.enc_for_node))
    if roll(rng, config.tamper_percent):
        token = generate_token_hex(TAMPER_TOKEN_BYTES)
        log.debug("node %d tampered with its token", node_index)
    request = build_request(node_index, token, config.payload_bytes)

    inject_delay(rng, config.net_node_mw, sleep, label="Node->MW")
    encrypted_request = encrypt_message(keys.node_mw, request)

    # Middleware side
    ta_token = extract_token(decrypt_text(keys.ta_mw, issued.enc_for_mw))
    mw_request = decrypt_text(keys.node_mw, encrypted_request)
    claimed = parse_request_token(mw_request)
    body = parse_request_body(mw_request)
    log.debug("MW received node %d request, body %s bytes", node_index, len(body) if body is not None else "missing")
    m.success = claimed is not None and claimed == ta_token

    inject_delay(rng, config.db_delay, sleep, label="DB")

    m.total_us = elapsed_us(t_start)
    log.debug("node %d finished in %d us success=%s", node_index, m.total_us, m.success)
    return m
