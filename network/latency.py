"""
network/latency.py

Synthetic link and processing delays. There is no real transport in the
simulation: every hop is a uniform draw in milliseconds followed by a sleep.
"""

import logging
import random
import time
from typing import Callable, Tuple

log = logging.getLogger("network.latency")

Sleeper = Callable[[float], None]


def draw_delay_ms(rng: random.Random, bounds: Tuple[int, int]) -> int:
    """Uniform integer draw over the inclusive [min, max] millisecond range."""
    lo, hi = bounds
    return rng.randint(lo, hi)


def inject_delay(rng: random.Random, bounds: Tuple[int, int], sleep: Sleeper = time.sleep,
                 label: str = "") -> int:
    delay_ms = draw_delay_ms(rng, bounds)
    if delay_ms > 0:
        sleep(delay_ms / 1000.0)
    log.debug("%s delay %d ms", label or "link", delay_ms)
    return delay_ms


def roll(rng: random.Random, percent: float) -> bool:
    """True with probability percent/100 (uniform real draw in [0, 1))."""
    return rng.random() < (percent / 100.0)
