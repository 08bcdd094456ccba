"""Cycle counters for timing code, with optional timer-interrupt compensation.

Counts come from the highest-resolution clock available (nanoseconds), so
"cycles" here are clock units rather than processor cycles.
"""

from __future__ import annotations

import os
import sys
import time
from collections.abc import Callable
from typing import Optional

NEVENT = 100
THRESHOLD = 1000
RECORDTHRESH = 3000

Clock = Callable[[], float]


def _clock_ticks_per_second() -> int:
    try:
        return int(os.sysconf("SC_CLK_TCK"))
    except (AttributeError, ValueError, OSError):
        return 100


_TICKS_PER_SECOND = _clock_ticks_per_second()


def _user_ticks() -> int:
    """User CPU time of this process, in clock ticks."""
    return int(os.times().user * _TICKS_PER_SECOND)


class CycleCounter:
    """Measures elapsed counts since the last call to ``start``."""

    def __init__(self, clock: Clock = time.perf_counter_ns) -> None:
        self._clock = clock
        self._start = self._clock()

    def start(self) -> None:
        """Record the current counter value."""
        self._start = self._clock()

    def elapsed(self) -> float:
        """Counts since the last ``start``."""
        result = float(self._clock() - self._start)
        if result < 0:
            print(f"Error: counter returns neg value: {result:.0f}", file=sys.stderr)
        return result


class CompensatedCounter:
    """A counter that subtracts the time spent in timer interrupts.

    The cost of one timer tick is calibrated on first use unless it is given.
    """

    def __init__(
        self,
        counter: Optional[CycleCounter] = None,
        ticks: Callable[[], int] = _user_ticks,
        cycles_per_tick: Optional[float] = None,
        nevent: int = NEVENT,
    ) -> None:
        self.counter = counter if counter is not None else CycleCounter()
        self._ticks = ticks
        self.cycles_per_tick = cycles_per_tick
        self.nevent = nevent
        self._start_tick = 0

    def _calibrate(self) -> float:
        per_tick = 0.0
        old_ticks = self._ticks()
        self.counter.start()
        old_time = self.counter.elapsed()
        events = 0
        while events < self.nevent:
            new_time = self.counter.elapsed()
            if new_time - old_time >= THRESHOLD:
                new_ticks = self._ticks()
                if new_ticks > old_ticks:
                    candidate = (new_time - old_time) / (new_ticks - old_ticks)
                    if (per_tick == 0.0 or per_tick > candidate) and candidate > RECORDTHRESH:
                        per_tick = candidate
                    events += 1
                    old_ticks = new_ticks
                old_time = new_time
        return per_tick

    def start(self) -> None:
        """Calibrate if needed, then record the counter and tick values."""
        if self.cycles_per_tick is None:
            self.cycles_per_tick = self._calibrate()
        self._start_tick = self._ticks()
        self.counter.start()

    def elapsed(self) -> float:
        """Counts since ``start``, less the estimated timer-interrupt cost."""
        raw = self.counter.elapsed()
        ticks = self._ticks() - self._start_tick
        return raw - ticks * (self.cycles_per_tick or 0.0)


def overhead() -> float:
    """Counts measured between back-to-back start and read of the counter."""
    counter = CycleCounter()
    result = 0.0
    for _ in range(2):
        counter.start()
        result = counter.elapsed()
    return result


def mhz_full(verbose: bool, sleeptime: float) -> float:
    """Counter rate in millions per second, measured over ``sleeptime`` seconds."""
    counter = CycleCounter()
    counter.start()
    time.sleep(sleeptime)
    rate = counter.elapsed() / (1e6 * sleeptime)
    if verbose:
        print(f"Processor clock rate ~= {rate:.1f} MHz")
    return rate


def mhz(verbose: bool) -> float:
    """Counter rate measured over the default two seconds."""
    return mhz_full(verbose, 2)