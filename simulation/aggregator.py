"""
simulation/aggregator.py

Turns the per-node records of one run into latency and success/drop statistics.
Latency figures are computed over non-dropped records only; percentages are
taken against the configured node count.
"""

from dataclasses import dataclass, asdict
from typing import Dict, Iterable, List, Sequence

import numpy as np
import pandas as pd

from core.protocol_handshake import NodeMetrics

RECORD_COLUMNS = ["node_index", "total_us", "success", "dropped", "error"]


@dataclass(frozen=True)
class AggregateStats:
    node_count: int
    completed_count: int
    success_count: int
    drop_count: int
    error_count: int
    avg_us: float
    min_us: float
    max_us: float
    median_us: float
    success_pct: float
    drop_pct: float

    def as_dict(self) -> Dict:
        return asdict(self)


def median(values: Sequence[float]) -> float:
    """Middle value; mean of the two middle values for even counts; 0 when empty."""
    if len(values) == 0:
        return 0
    ordered = sorted(values)
    n = len(ordered)
    if n % 2 == 1:
        return ordered[n // 2]
    return (ordered[n // 2 - 1] + ordered[n // 2]) / 2


def _percent(count: int, total: int) -> float:
    return 100.0 * count / total if total > 0 else 0.0


def aggregate(records: Iterable[NodeMetrics], node_count: int) -> AggregateStats:
    records = list(records)
    completed = [m for m in records if not m.dropped]
    success_count = sum(1 for m in completed if m.success)
    drop_count = len(records) - len(completed)
    error_count = sum(1 for m in completed if m.error is not None)

    if completed:
        totals = np.array([m.total_us for m in completed], dtype=float)
        avg_us = float(np.mean(totals))
        min_us = float(np.min(totals))
        max_us = float(np.max(totals))
        median_us = float(median(totals.tolist()))
    else:
        avg_us = min_us = max_us = median_us = 0.0

    return AggregateStats(
        node_count=node_count,
        completed_count=len(completed),
        success_count=success_count,
        drop_count=drop_count,
        error_count=error_count,
        avg_us=avg_us,
        min_us=min_us,
        max_us=max_us,
        median_us=median_us,
        success_pct=_percent(success_count, node_count),
        drop_pct=_percent(drop_count, node_count),
    )


def records_frame(records: List[NodeMetrics]) -> pd.DataFrame:
    """Per-node table keyed by node index (collection order is completion order)."""
    if not records:
        return pd.DataFrame(columns=RECORD_COLUMNS)
    df = pd.DataFrame([asdict(m) for m in records], columns=RECORD_COLUMNS)
    return df.sort_values("node_index").reset_index(drop=True)
