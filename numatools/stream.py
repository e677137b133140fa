"""STREAM memory bandwidth benchmark on numpy arrays."""

from __future__ import annotations

import math
import time
from itertools import pairwise

import numpy as np

NTIMES = 10
OFFSET = 0
STREAM_NAMES = ("Copy", "Scale", "Add", "Triad")

_LABELS = ("Copy:      ", "Scale:     ", "Add:       ", "Triad:     ")
_HLINE = "-" * 61
_WORD = np.dtype(np.float64).itemsize
_TICK_SAMPLES = 20


def check_tick() -> int:
    """Estimate the clock granularity in microseconds."""
    found = []
    t1 = time.time()
    for _ in range(_TICK_SAMPLES):
        t2 = time.time()
        while t2 - t1 < 1.0e-6:
            t2 = time.time()
        found.append(t2)
        t1 = t2
    deltas = (max(int(1.0e6 * (later - earlier)), 0) for earlier, later in pairwise(found))
    return min(1_000_000, *deltas)


class StreamBenchmark:
    """Copy, Scale, Add and Triad kernels over three arrays of ``n`` doubles."""

    def __init__(self, n: int = 8_000_000, verbose: bool = True) -> None:
        if n < 1:
            raise ValueError("array size must be at least 1")
        self.n = n
        self.verbose = verbose
        self._arrays: tuple[np.ndarray, np.ndarray, np.ndarray] | None = None

    def _say(self, text: str = "") -> None:
        if self.verbose:
            print(text)

    def set_memsize(self, size: int) -> None:
        """Size the arrays so that all three fit in ``size`` bytes."""
        n = (size - OFFSET) // (3 * _WORD)
        if n < 1:
            raise ValueError(f"{size} bytes is too small for the benchmark")
        self.n = n
        self._arrays = None

    def memsize(self) -> int:
        """Return the number of bytes the three arrays take."""
        return 3 * _WORD * (self.n + OFFSET)

    def _prepare(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        if self._arrays is None or self._arrays[0].size != self.n:
            stride = self.n + OFFSET
            memory = np.empty(3 * stride, dtype=np.float64)
            self._arrays = (
                memory[: self.n],
                memory[stride : stride + self.n],
                memory[2 * stride : 2 * stride + self.n],
            )
        return self._arrays

    def check(self) -> None:
        """Initialise the arrays and report the timer granularity."""
        a, b, c = self._prepare()
        self._say(_HLINE)
        self._say(f"This system uses {_WORD} bytes per DOUBLE PRECISION word.")
        self._say(_HLINE)
        self._say(f"Array size = {self.n}, Offset = {OFFSET}")
        self._say(f"Total memory required = {(3 * self.n * _WORD) / 1048576.0:.1f} MB.")
        self._say(f"Each test is run {NTIMES} times, but only")
        self._say("the *best* time for each is used.")

        a.fill(1.0)
        b.fill(2.0)
        c.fill(0.0)

        self._say(_HLINE)
        quantum = check_tick()
        if quantum >= 1:
            self._say(f"Your clock granularity/precision appears to be {quantum} microseconds.")
        else:
            self._say("Your clock granularity appears to be less than one microsecond.")

        started = time.time()
        a *= 2.0
        elapsed = 1.0e6 * (time.time() - started)

        self._say(f"Each test below will take on the order of {int(elapsed)} microseconds.")
        self._say(f"   (= {int(elapsed / max(quantum, 1))} clock ticks)")
        self._say("Increase the size of the arrays if this shows that")
        self._say("you are not getting at least 20 clock ticks per test.")
        self._say(_HLINE)
        self._say("WARNING -- The above is only a rough guideline.")
        self._say("For best results, please be sure you know the")
        self._say("precision of your system timer.")
        self._say(_HLINE)

    def run(self) -> dict[str, float]:
        """Run every kernel NTIMES times and return the best rate of each in MB/s."""
        if self._arrays is None or self._arrays[0].size != self.n:
            self.check()
        a, b, c = self._prepare()
        scalar = 3.0

        def triad() -> None:
            np.multiply(c, scalar, out=a)
            np.add(a, b, out=a)

        kernels = (
            lambda: np.copyto(c, a),
            lambda: np.multiply(c, scalar, out=b),
            lambda: np.add(a, b, out=c),
            triad,
        )
        times: list[list[float]] = [[] for _ in kernels]
        for _ in range(NTIMES):
            for kernel, samples in zip(kernels, times):
                started = time.perf_counter()
                kernel()
                samples.append(time.perf_counter() - started)

        moved = (2 * _WORD * self.n, 2 * _WORD * self.n, 3 * _WORD * self.n, 3 * _WORD * self.n)
        self._say("Function      Rate (MB/s)   RMS time     Min time     Max time")
        results: dict[str, float] = {}
        for name, label, samples, nbytes in zip(STREAM_NAMES, _LABELS, times, moved):
            best = min(samples)
            rms = math.sqrt(sum(t * t for t in samples) / NTIMES)
            speed = 1.0e-6 * nbytes / best if best > 0 else math.inf
            self._say(f"{label}{speed:11.4f}  {rms:11.4f}  {best:11.4f}  {max(samples):11.4f}")
            results[name] = speed
        return results