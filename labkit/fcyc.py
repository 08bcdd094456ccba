"""Measure the time a function takes as the best of several converging samples."""

from __future__ import annotations

import bisect
from collections.abc import Callable
from dataclasses import dataclass, field
from functools import lru_cache
from typing import Any, Optional, Protocol

from labkit.clock import CompensatedCounter, CycleCounter

K = 3
MAXSAMPLES = 20
EPSILON = 0.01
CACHE_BYTES = 1 << 19
CACHE_BLOCK = 32


class _Counter(Protocol):
    def start(self) -> None: ...

    def elapsed(self) -> float: ...


@dataclass
class FcycConfig:
    """Parameters of a measurement."""

    k: int = K
    maxsamples: int = MAXSAMPLES
    epsilon: float = EPSILON
    compensate: bool = False
    clear_cache: bool = False
    cache_bytes: int = CACHE_BYTES
    cache_block: int = CACHE_BLOCK
    counter: Optional[_Counter] = field(default=None, compare=False)


class Sampler:
    """Keeps the k smallest samples seen so far, in ascending order."""

    def __init__(self, k: int = K, epsilon: float = EPSILON) -> None:
        if k < 1:
            raise ValueError("k must be at least 1")
        self.k = k
        self.epsilon = epsilon
        self.values: list[float] = []
        self.count = 0

    def add(self, value: float) -> None:
        """Record a sample."""
        if len(self.values) < self.k:
            bisect.insort(self.values, value)
        elif value < self.values[-1]:
            self.values.pop()
            bisect.insort(self.values, value)
        self.count += 1

    def converged(self) -> bool:
        """True once the k best samples lie within epsilon of each other."""
        return (
            self.count >= self.k
            and (1 + self.epsilon) * self.values[0] >= self.values[self.k - 1]
        )


_cache_buffers: dict[int, bytearray] = {}
_sink = 0


def _clear(config: FcycConfig) -> None:
    global _sink
    buffer = _cache_buffers.get(config.cache_bytes)
    if buffer is None:
        _cache_buffers.clear()
        buffer = bytearray(config.cache_bytes)
        _cache_buffers[config.cache_bytes] = buffer
    _sink += sum(buffer[:: max(1, config.cache_block)])


@lru_cache(maxsize=None)
def _shared_compensated() -> CompensatedCounter:
    return CompensatedCounter()


def _counter_for(config: FcycConfig) -> _Counter:
    if config.counter is not None:
        return config.counter
    if config.compensate:
        return _shared_compensated()
    return CycleCounter()


def fcyc(func: Callable[[Any], Any], params: Any = None, config: Optional[FcycConfig] = None) -> float:
    """Smallest time measured for ``func(params)`` over up to ``maxsamples`` runs."""
    config = config if config is not None else FcycConfig()
    counter = _counter_for(config)
    sampler = Sampler(config.k, config.epsilon)
    while True:
        if config.clear_cache:
            _clear(config)
        counter.start()
        func(params)
        sampler.add(counter.elapsed())
        if sampler.converged() or sampler.count >= config.maxsamples:
            break
    return sampler.values[0]