"""
simulation/session_manager.py

Orchestrator for one simulation run: derives the channel keys once, runs the
worker pool over every node, aggregates the records and writes the run
artifacts (performance CSV row and text summary).

Usage:
    from config import SimConfig
    from simulation.session_manager import SessionManager
    result = SessionManager(SimConfig(nodes=200, workers=4)).run()
"""

import logging
import time
from dataclasses import dataclass, field
from typing import List, Optional

from config import SimConfig
from core.keystore import KeyMaterial, build_key_material
from core.protocol_handshake import NodeMetrics
from simulation.aggregator import AggregateStats, aggregate
from simulation.scheduler import WorkerPool
from utils.report import append_perf_csv, write_summary_txt

log = logging.getLogger("simulation.session_manager")


@dataclass
class RunResult:
    config: SimConfig
    workers: int
    stats: AggregateStats
    wall_time_s: float
    records: List[NodeMetrics] = field(default_factory=list)
    written: List[str] = field(default_factory=list)


class SessionManager:
    def __init__(self,
                 config: Optional[SimConfig] = None,
                 seed: Optional[int] = None,
                 keys: Optional[KeyMaterial] = None,
                 write_reports: bool = True,
                 write_csv: bool = True):
        self.config = (config or SimConfig()).normalized()
        self.seed = seed
        # derived once, before any worker exists; read-only afterwards
        self.keys = keys if keys is not None else build_key_material()
        self.write_reports = write_reports
        self.write_csv = write_csv

    def _log_parameters(self):
        cfg = self.config
        log.info("Simulating %d nodes with %d workers", cfg.nodes, cfg.workers)
        log.info("Network delays: TA->Node %d-%dms, Node->MW %d-%dms, DB %d-%dms",
                 cfg.net_ta_node[0], cfg.net_ta_node[1],
                 cfg.net_node_mw[0], cfg.net_node_mw[1],
                 cfg.db_delay[0], cfg.db_delay[1])
        log.info("Tamper %%: %s, Drop %%: %s, Payload: %d bytes",
                 cfg.tamper_percent, cfg.fail_percent, cfg.payload_bytes)

    def _write_reports(self, stats: AggregateStats, workers: int, wall_time_s: float) -> List[str]:
        written = []
        if self.write_csv:
            written.append(append_perf_csv(stats, workers, wall_time_s, self.config.out_file))
        written.append(write_summary_txt(stats, workers, wall_time_s, self.config.summary_file))
        log.info("Results written to: %s", " and ".join(written))
        return written

    def run(self) -> RunResult:
        self._log_parameters()
        pool = WorkerPool(self.config, self.keys, seed=self.seed)

        run_start = time.perf_counter()
        records = pool.run()
        wall_time_s = time.perf_counter() - run_start

        stats = aggregate(records, self.config.nodes)
        log.info("Done. Avg node time: %.3f ms, Success: %.2f%%, Dropped: %.2f%%, Wall time: %.3f s",
                 stats.avg_us / 1000.0, stats.success_pct, stats.drop_pct, wall_time_s)
        if stats.error_count:
            log.warning("%d node(s) failed with protocol errors", stats.error_count)

        result = RunResult(config=self.config, workers=pool.size, stats=stats,
                           wall_time_s=wall_time_s, records=records)
        if self.write_reports:
            result.written = self._write_reports(stats, pool.size, wall_time_s)
        return result
