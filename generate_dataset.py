"""Generate a performance dataset by running the simulator once per worker count.

Usage:
    python generate_dataset.py --nodes 500 --workers-list 1 2 4 8 --fail-percent 2

Every run is appended to the performance CSV; afterwards the CSV is read back
and a per-worker-count summary is printed.
"""
import sys
import time
import logging
from dataclasses import replace

import pandas as pd

from core.errors import ConfigurationError
from core.keystore import build_key_material
from run_sm import build_parser, config_from_args
from simulation.session_manager import SessionManager
from utils.logging_setup import configure_logging
from utils.report import load_perf_history

log = logging.getLogger("generate_dataset")


def run_sweep(base_config, workers_list, seed=None, write_csv=True):
    """Run one simulation per worker count, sharing one key set across runs."""
    keys = build_key_material()
    results = []
    for workers in workers_list:
        cfg = replace(base_config, workers=workers)
        log.info("sweep: running with %d workers", workers)
        results.append(SessionManager(cfg, seed=seed, keys=keys, write_csv=write_csv).run())
    return results


def summarize(df: pd.DataFrame) -> pd.DataFrame:
    if df.empty:
        return df
    return (df.groupby("Workers")
              .agg(runs=("Nodes", "size"),
                   avg_us=("Avg Total (us)", "mean"),
                   median_us=("Median (us)", "mean"),
                   success_pct=("Success %", "mean"),
                   dropped_pct=("Dropped %", "mean"),
                   wall_time_s=("Wall Time (s)", "mean"))
              .reset_index())


def main(argv=None) -> int:
    p = build_parser()
    p.description = 'Run the handshake simulation across several worker counts.'
    p.add_argument('--workers-list', type=int, nargs='+', default=[1, 2, 4], metavar='N',
                   help='Worker counts to sweep (overrides --workers)')
    args = p.parse_args(argv)
    configure_logging(args.log_level, args.log_file or None)
    try:
        base = config_from_args(args)
    except ConfigurationError as e:
        p.error(str(e))

    start = time.time()
    results = run_sweep(base, args.workers_list, seed=args.seed, write_csv=args.write_csv)
    elapsed = time.time() - start

    df = load_perf_history(args.out)
    print(f"Wrote {len(results)} runs to {args.out} in {elapsed:.1f}s ({len(df)} rows total)")
    summary = summarize(df)
    if not summary.empty:
        print(summary.to_string(index=False))
    return 0


if __name__ == '__main__':
    sys.exit(main())
