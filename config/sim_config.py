"""
config/sim_config.py

Run configuration record for one simulation run. Defaults come from
config/settings.py; normalized() sanitizes user input the way the
command-line tool always has (clamp probabilities, fall back on bad counts).
"""

import logging
from dataclasses import dataclass, fields, replace
from typing import Tuple

from core.errors import ConfigurationError
from .settings import (
    NUM_NODES, NODES_FALLBACK, WORKER_COUNT, TAMPER_PERCENT, FAIL_PERCENT,
    PAYLOAD_BYTES, NODE_START_JITTER_MS, NET_TA_NODE_MS, NET_NODE_MW_MS,
    DB_DELAY_MS, PERF_CSV_FILENAME, SUMMARY_FILENAME,
)

log = logging.getLogger("config.sim_config")

DelayRange = Tuple[int, int]


def _clamp_percent(value: float) -> float:
    return min(100.0, max(0.0, float(value)))


def _sanitize_range(name: str, bounds) -> DelayRange:
    lo, hi = (max(0, int(b)) for b in bounds)
    if lo > hi:
        log.warning("%s range %d..%d is reversed, using %d..%d", name, lo, hi, hi, lo)
        lo, hi = hi, lo
    return lo, hi


@dataclass(frozen=True)
class SimConfig:
    nodes: int = NUM_NODES
    workers: int = WORKER_COUNT
    tamper_percent: float = TAMPER_PERCENT
    payload_bytes: int = PAYLOAD_BYTES
    node_jitter_ms: int = NODE_START_JITTER_MS
    net_ta_node: DelayRange = NET_TA_NODE_MS
    net_node_mw: DelayRange = NET_NODE_MW_MS
    db_delay: DelayRange = DB_DELAY_MS
    fail_percent: float = FAIL_PERCENT
    out_file: str = PERF_CSV_FILENAME
    summary_file: str = SUMMARY_FILENAME

    @classmethod
    def from_overrides(cls, **overrides) -> "SimConfig":
        """Build a config from keyword overrides; unknown keys are rejected."""
        known = {f.name for f in fields(cls)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(f"unknown configuration option(s): {', '.join(unknown)}")
        return cls(**overrides)

    def normalized(self) -> "SimConfig":
        nodes = int(self.nodes)
        if nodes <= 0:
            log.warning("node count %d is not positive, using %d", nodes, NODES_FALLBACK)
            nodes = NODES_FALLBACK
        workers = int(self.workers)
        if workers <= 0:
            log.warning("worker count %d is not positive, using 1", workers)
            workers = 1
        return replace(
            self,
            nodes=nodes,
            workers=workers,
            tamper_percent=_clamp_percent(self.tamper_percent),
            fail_percent=_clamp_percent(self.fail_percent),
            payload_bytes=max(0, int(self.payload_bytes)),
            node_jitter_ms=max(0, int(self.node_jitter_ms)),
            net_ta_node=_sanitize_range("TA->Node", self.net_ta_node),
            net_node_mw=_sanitize_range("Node->MW", self.net_node_mw),
            db_delay=_sanitize_range("DB", self.db_delay),
        )

    @property
    def effective_workers(self) -> int:
        return min(self.workers, self.nodes)
