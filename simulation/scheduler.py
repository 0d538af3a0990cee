"""
simulation/scheduler.py

Fixed-size worker pool. Workers pull node indices from one shared counter
until it runs past the node count; each claimed index is simulated exactly
once and its NodeMetrics appended to a shared, lock-guarded list.
"""

import logging
import random
import secrets
import threading
import time
from typing import Callable, List, Optional

from config import WORKER_SEED_STRIDE, SimConfig
from core.errors import SimulationError
from core.keystore import KeyMaterial
from core.protocol_handshake import NodeMetrics, simulate_node, elapsed_us
from network.latency import Sleeper

log = logging.getLogger("simulation.scheduler")


class WorkCounter:
    """Atomic fetch-and-increment counter."""

    def __init__(self, start: int = 0):
        self._next = start
        self._lock = threading.Lock()

    def claim(self) -> int:
        with self._lock:
            idx = self._next
            self._next += 1
            return idx


def worker_rng(worker_id: int, seed: Optional[int] = None) -> random.Random:
    """Private RNG for one worker: from entropy, or derived from the run seed."""
    if seed is None:
        return random.Random(secrets.randbits(32) ^ (worker_id * WORKER_SEED_STRIDE))
    return random.Random(seed * WORKER_SEED_STRIDE + worker_id)


class NodeWorker(threading.Thread):
    def __init__(self, worker_id: int, counter: WorkCounter, config: SimConfig, keys: KeyMaterial,
                 results: List[NodeMetrics], results_lock: threading.Lock, rng: random.Random,
                 simulate: Callable[..., NodeMetrics] = simulate_node, sleep: Sleeper = time.sleep):
        super().__init__(name=f"node-worker-{worker_id}", daemon=True)
        self.worker_id = worker_id
        self.counter = counter
        self.config = config
        self.keys = keys
        self.results = results
        self.results_lock = results_lock
        self.rng = rng
        self.simulate = simulate
        self.sleep = sleep
        self.processed = 0
        self.exc: Optional[BaseException] = None

    def _run_one(self, idx: int) -> NodeMetrics:
        t_start = time.perf_counter()
        try:
            return self.simulate(idx, self.config, self.keys, self.rng, sleep=self.sleep)
        except SimulationError as e:
            log.warning("worker %d: node %d failed: %s", self.worker_id, idx, e)
            return NodeMetrics(node_index=idx, total_us=elapsed_us(t_start), error=str(e))

    def run(self):
        log.debug("worker %d started", self.worker_id)
        try:
            while True:
                idx = self.counter.claim()
                if idx >= self.config.nodes:
                    break
                m = self._run_one(idx)
                with self.results_lock:
                    self.results.append(m)
                self.processed += 1
        except Exception as e:
            log.exception("worker %d crashed: %s", self.worker_id, e)
            self.exc = e
            return
        log.debug("worker %d finished after %d nodes", self.worker_id, self.processed)


class WorkerPool:
    """Runs every node index in [0, config.nodes) across min(workers, nodes) threads."""

    def __init__(self, config: SimConfig, keys: KeyMaterial, seed: Optional[int] = None,
                 simulate: Callable[..., NodeMetrics] = simulate_node, sleep: Sleeper = time.sleep):
        self.config = config
        self.keys = keys
        self.seed = seed
        self.simulate = simulate
        self.sleep = sleep
        self.results: List[NodeMetrics] = []
        self._lock = threading.Lock()
        self.workers: List[NodeWorker] = []

    @property
    def size(self) -> int:
        return max(0, self.config.effective_workers)

    def run(self) -> List[NodeMetrics]:
        counter = WorkCounter()
        self.results = []
        self._lock = threading.Lock()
        self.workers = [
            NodeWorker(i, counter, self.config, self.keys, self.results, self._lock,
                       worker_rng(i, self.seed), simulate=self.simulate, sleep=self.sleep)
            for i in range(self.size)
        ]
        for w in self.workers:
            w.start()
        for w in self.workers:
            w.join()
        for w in self.workers:
            if w.exc is not None:
                raise w.exc
        log.info("worker pool finished: %d workers, %d records", len(self.workers), len(self.results))
        return self.results
