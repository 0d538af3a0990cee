"""
utils/report.py

Run artifacts:
 - an appendable performance CSV (one row per run, header written once)
 - an appendable human-readable summary block
"""

import os
from datetime import datetime
from typing import Optional

import pandas as pd

from simulation.aggregator import AggregateStats

PERF_COLUMNS = [
    "Timestamp", "Nodes", "Workers", "Avg Total (us)", "Min (us)", "Max (us)",
    "Median (us)", "Success %", "Dropped %", "Wall Time (s)",
]
SEPARATOR = "-----------------------------------------"


def current_timestamp() -> str:
    return datetime.now().strftime("%Y-%m-%d %H:%M:%S")


def _ensure_parent(path: str):
    parent = os.path.dirname(os.path.abspath(path))
    os.makedirs(parent, exist_ok=True)


def perf_row(stats: AggregateStats, workers: int, wall_time_s: float,
             timestamp: Optional[str] = None) -> dict:
    return {
        "Timestamp": timestamp or current_timestamp(),
        "Nodes": stats.node_count,
        "Workers": workers,
        "Avg Total (us)": int(stats.avg_us),
        "Min (us)": int(stats.min_us),
        "Max (us)": int(stats.max_us),
        "Median (us)": int(stats.median_us),
        "Success %": f"{stats.success_pct:.2f}",
        "Dropped %": f"{stats.drop_pct:.2f}",
        "Wall Time (s)": f"{wall_time_s:.6f}",
    }


def append_perf_csv(stats: AggregateStats, workers: int, wall_time_s: float, path: str,
                    timestamp: Optional[str] = None) -> str:
    """Append one run to the perf CSV; the header is written only for a new file."""
    _ensure_parent(path)
    new_file = not os.path.exists(path)
    df = pd.DataFrame([perf_row(stats, workers, wall_time_s, timestamp)], columns=PERF_COLUMNS)
    df.to_csv(path, mode="a", header=new_file, index=False)
    return path


def format_summary(stats: AggregateStats, workers: int, wall_time_s: float,
                   timestamp: Optional[str] = None) -> str:
    lines = [
        "Performance Summary Report",
        f"Generated: {timestamp or current_timestamp()}",
        SEPARATOR,
        f"Nodes: {stats.node_count}",
        f"Workers: {workers}",
        f"Average Time Per Node: {stats.avg_us / 1000.0:.3f} ms",
        f"Minimum Time Observed: {stats.min_us / 1000.0:.3f} ms",
        f"Maximum Time Observed: {stats.max_us / 1000.0:.3f} ms",
        f"Median Time Per Node: {stats.median_us / 1000.0:.3f} ms",
        f"Success Percentage: {stats.success_pct:.2f} %",
        f"Dropped Percentage: {stats.drop_pct:.2f} %",
        f"Run Wall Time: {wall_time_s:.6f} s",
        SEPARATOR,
    ]
    return "\n".join(lines) + "\n\n"


def write_summary_txt(stats: AggregateStats, workers: int, wall_time_s: float, path: str,
                      timestamp: Optional[str] = None) -> str:
    _ensure_parent(path)
    with open(path, "a", encoding="utf-8") as f:
        f.write(format_summary(stats, workers, wall_time_s, timestamp))
    return path


def load_perf_history(path: str) -> pd.DataFrame:
    if not os.path.exists(path):
        return pd.DataFrame(columns=PERF_COLUMNS)
    return pd.read_csv(path)
