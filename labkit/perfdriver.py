"""Check and time the registered rotate and smooth kernels of the performance lab."""

from __future__ import annotations

import getopt
import math
import random
import re
import sys
from collections.abc import Callable, Sequence
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, TextIO

from labkit import kernels
from labkit.fcyc import FcycConfig, fcyc
from labkit.kernels import (
    ROTATE_BASELINE_CPES,
    ROTATE_DIMS,
    SMOOTH_BASELINE_CPES,
    SMOOTH_DIMS,
    Pixel,
    ridx,
)

MAX_BENCHMARKS = 100
ODD_DIM = 96
CHANNEL_LIMIT = 65536
DEFAULT_SEED = 1729
BLACK = Pixel(0, 0, 0)

KernelFunc = Callable[[int, list, list], None]


@dataclass
class Benchmark:
    """A kernel under test, its description and its measured CPEs."""

    func: KernelFunc
    description: str
    valid: bool = False
    cpes: list[float] = field(default_factory=list)


@dataclass
class BenchmarkRegistry:
    """The rotate and smooth kernels registered for testing, in order."""

    rotate: list[Benchmark] = field(default_factory=list)
    smooth: list[Benchmark] = field(default_factory=list)

    @staticmethod
    def _add(entries: list[Benchmark], func: KernelFunc, description: str) -> Benchmark:
        if len(entries) >= MAX_BENCHMARKS:
            raise ValueError(f"at most {MAX_BENCHMARKS} benchmarks can be registered")
        bench = Benchmark(func, description)
        entries.append(bench)
        return bench

    def add_rotate(self, func: KernelFunc, description: str) -> Benchmark:
        """Register a rotate kernel."""
        return self._add(self.rotate, func, description)

    def add_smooth(self, func: KernelFunc, description: str) -> Benchmark:
        """Register a smooth kernel."""
        return self._add(self.smooth, func, description)


@dataclass
class TestImages:
    """An original image, an untouched copy of it, and a black result image."""

    __test__ = False

    orig: list[Pixel]
    copy: list[Pixel]
    result: list[Pixel]


def create_image(dim: int, rng: Optional[random.Random] = None) -> TestImages:
    """A random dim x dim image, its copy and an all-black result image."""
    rng = rng if rng is not None else random.Random(DEFAULT_SEED)
    orig = [
        Pixel(
            rng.randrange(CHANNEL_LIMIT),
            rng.randrange(CHANNEL_LIMIT),
            rng.randrange(CHANNEL_LIMIT),
        )
        for _ in range(dim * dim)
    ]
    return TestImages(orig, list(orig), [BLACK] * (dim * dim))


def _orig_changed(dim: int, images: TestImages, out: TextIO) -> bool:
    size = dim * dim
    if images.orig[:size] != images.copy[:size]:
        print(file=out)
        print("Error: Original image has been changed!", file=out)
        return True
    return False


def _rgb(p: Pixel) -> str:
    return f"{{{p.red},{p.green},{p.blue}}}"


def check_rotate(
    dim: int, orig: Sequence[Pixel], result: Sequence[Pixel], out: Optional[TextIO] = None
) -> int:
    """Count the pixels of result that are not orig rotated; report the last one."""
    out = out if out is not None else sys.stdout
    errors = 0
    bad: Optional[tuple[int, int, Pixel, Pixel]] = None
    for i in range(dim):
        for j in range(dim):
            src = orig[ridx(i, j, dim)]
            dst = result[ridx(dim - 1 - j, i, dim)]
            if src != dst:
                errors += 1
                bad = (i, j, src, dst)
    if bad is not None:
        i, j, src, dst = bad
        print(file=out)
        print(f"ERROR: Dimension={dim}, {errors} errors", file=out)
        print("E.g., The following two pixels should have equal value:", file=out)
        print(f"src[{i}][{j}].{{red,green,blue}} = {_rgb(src)}", file=out)
        print(f"dst[{dim - 1 - j}][{i}].{{red,green,blue}} = {_rgb(dst)}", file=out)
    return errors


def check_average(dim: int, i: int, j: int, src: Sequence[Pixel]) -> Pixel:
    """Expected smoothed value at (i, j): the mean of its in-image neighbourhood."""
    rows = range(max(i - 1, 0), min(i + 1, dim - 1) + 1)
    cols = range(max(j - 1, 0), min(j + 1, dim - 1) + 1)
    block = [src[ridx(ii, jj, dim)] for ii in rows for jj in cols]
    count = len(block)
    return Pixel(
        sum(p.red for p in block) // count,
        sum(p.green for p in block) // count,
        sum(p.blue for p in block) // count,
    )


def check_smooth(
    dim: int, orig: Sequence[Pixel], result: Sequence[Pixel], out: Optional[TextIO] = None
) -> int:
    """Count the pixels of result that are not the smoothed orig; report the last one."""
    out = out if out is not None else sys.stdout
    errors = 0
    bad: Optional[tuple[int, int, Pixel, Pixel]] = None
    for i in range(dim):
        for j in range(dim):
            expected = check_average(dim, i, j, orig)
            got = result[ridx(i, j, dim)]
            if got != expected:
                errors += 1
                bad = (i, j, got, expected)
    if bad is not None:
        i, j, wrong, right = bad
        print(file=out)
        print(f"ERROR: Dimension={dim}, {errors} errors", file=out)
        print("E.g., ", file=out)
        print(f"You have dst[{i}][{j}].{{red,green,blue}} = {_rgb(wrong)}", file=out)
        print(f"It should be dst[{i}][{j}].{{red,green,blue}} = {_rgb(right)}", file=out)
    return errors


def geometric_mean(values: Sequence[float]) -> float:
    """Geometric mean of positive values; raises ValueError otherwise."""
    values = list(values)
    if not values:
        raise ValueError("no values")
    if any(v <= 0.0 for v in values):
        raise ValueError("Non-positive CPE value")
    return math.prod(values) ** (1.0 / len(values))


Checker = Callable[[int, Sequence[Pixel], Sequence[Pixel], Optional[TextIO]], int]


def _passes(
    bench: Benchmark, dim: int, rng: random.Random, checker: Checker, out: TextIO
) -> bool:
    images = create_image(dim, rng)
    bench.func(dim, images.orig, images.result)
    if _orig_changed(dim, images, out) or checker(dim, images.orig, images.result, out):
        print(
            f'Benchmark "{bench.description}" failed correctness check for dimension {dim}.',
            file=out,
        )
        return False
    return True


def _measure(
    title: str,
    bench: Benchmark,
    dims: Sequence[int],
    baselines: Sequence[float],
    checker: Checker,
    rng: Optional[random.Random],
    config: Optional[FcycConfig],
    out: Optional[TextIO],
) -> Optional[float]:
    out = out if out is not None else sys.stdout
    rng = rng if rng is not None else random.Random(DEFAULT_SEED)
    config = config if config is not None else FcycConfig()
    cpes: list[float] = []
    for dim in dims:
        if not _passes(bench, ODD_DIM, rng, checker, out):
            return None
        if not _passes(bench, dim, rng, checker, out):
            return None
        images = create_image(dim, rng)
        cycles = fcyc(
            lambda _params, d=dim, im=images: bench.func(d, im.orig, im.result),
            None,
            config,
        )
        cpes.append(cycles / float(dim * dim))
    bench.cpes = cpes

    print(f"{title}: Version = {bench.description}:", file=out)
    print("Dim\t" + "".join(f"\t{d}" for d in dims) + "\tMean", file=out)
    print("Your CPEs" + "".join(f"\t{c:.1f}" for c in cpes), file=out)
    print("Baseline CPEs" + "".join(f"\t{b:.1f}" for b in baselines), file=out)
    print("Speedup\t", end="", file=out)
    ratios = []
    for cpe, base in zip(cpes, baselines):
        if cpe <= 0.0:
            raise ValueError("Non-positive CPE value")
        ratio = base / cpe
        ratios.append(ratio)
        print(f"\t{ratio:.1f}", end="", file=out)
    mean = geometric_mean(ratios)
    print(f"\t{mean:.1f}", file=out)
    print(file=out)
    return mean


def measure_rotate(
    bench: Benchmark,
    rng: Optional[random.Random] = None,
    config: Optional[FcycConfig] = None,
    out: Optional[TextIO] = None,
) -> Optional[float]:
    """Check and time a rotate kernel; return its mean speedup, or None if it is wrong."""
    return _measure(
        "Rotate", bench, ROTATE_DIMS, ROTATE_BASELINE_CPES, check_rotate, rng, config, out
    )


def measure_smooth(
    bench: Benchmark,
    rng: Optional[random.Random] = None,
    config: Optional[FcycConfig] = None,
    out: Optional[TextIO] = None,
) -> Optional[float]:
    """Check and time a smooth kernel; return its mean speedup, or None if it is wrong."""
    return _measure(
        "Smooth", bench, SMOOTH_DIMS, SMOOTH_BASELINE_CPES, check_smooth, rng, config, out
    )


def _usage(prog: str) -> None:
    err = sys.stderr
    print(f"Usage: {prog} [-hqg] [-f <func_file>] [-d <dump_file>]", file=err)
    print("Options:", file=err)
    print("  -h         Print this message", file=err)
    print("  -q         Quit after dumping (use with -d )", file=err)
    print("  -g         Autograder mode: checks only rotate() and smooth()", file=err)
    print("  -f <file>  Get test function names from dump file <file>", file=err)
    print("  -d <file>  Emit a dump file <file> for later use with -f", file=err)


def _atoi(text: str) -> int:
    match = re.match(r"\s*([+-]?\d+)", text)
    return int(match.group(1)) if match else 0


def _dump(registry: BenchmarkRegistry, path: str) -> bool:
    lines = [f"R:{b.description}\n" for b in registry.rotate]
    lines += [f"S:{b.description}\n" for b in registry.smooth]
    try:
        Path(path).write_text("".join(lines))
    except OSError:
        return False
    return True


def _select_from_file(registry: BenchmarkRegistry, path: str) -> bool:
    try:
        text = Path(path).read_text()
    except OSError:
        return False
    for line in text.splitlines(keepends=True):
        token, sep, rest = line.partition(":")
        if not sep:
            continue
        flag = token[:1]
        name = rest.split("\n", 1)[0]
        entries = {"R": registry.rotate, "S": registry.smooth}.get(flag, [])
        for bench in entries:
            if bench.description == name:
                bench.valid = True
    return True


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point of the performance lab driver."""
    prog = "driver"
    args = list(sys.argv[1:] if argv is None else argv)

    registry = BenchmarkRegistry()
    kernels.register_rotate_functions(registry)
    kernels.register_smooth_functions(registry)

    try:
        options, _ = getopt.getopt(args, "tgqf:d:s:h")
    except getopt.GetoptError:
        _usage(prog)
        return 1

    quit_after_dump = False
    skip_team_check = False
    autograder = False
    seed = DEFAULT_SEED
    bench_func_file: Optional[str] = None

    for flag, value in options:
        if flag == "-t":
            skip_team_check = True
        elif flag == "-s":
            seed = _atoi(value)
        elif flag == "-g":
            autograder = True
        elif flag == "-q":
            quit_after_dump = True
        elif flag == "-f":
            bench_func_file = value
        elif flag == "-d":
            if not _dump(registry, value):
                print(f"Can't open file {value}")
                return -5
        elif flag == "-h":
            _usage(prog)
            return 1

    if quit_after_dump:
        return 0

    team = kernels.team
    if not skip_team_check:
        if team.team == "bovik":
            print(f"{prog}: Please fill in the team struct in kernels.c.")
            return 1
        print(f"Teamname: {team.team}")
        print(f"Member 1: {team.name1}")
        print(f"Email 1: {team.email1}")
        if team.name2 or team.email2:
            print(f"Member 2: {team.name2}")
            print(f"Email 2: {team.email2}")
        print()

    rng = random.Random(seed)

    if autograder:
        registry = BenchmarkRegistry(
            rotate=[Benchmark(kernels.rotate, "rotate() function", True)],
            smooth=[Benchmark(kernels.smooth, "smooth() function", True)],
        )
    elif bench_func_file is not None:
        if not _select_from_file(registry, bench_func_file):
            print(f"Can't open file {bench_func_file}")
            return -5
    else:
        for bench in registry.rotate + registry.smooth:
            bench.valid = True

    config = FcycConfig(cache_bytes=1 << 14, clear_cache=True, compensate=True)

    rotate_best, rotate_desc = 0.0, None
    smooth_best, smooth_desc = 0.0, None
    try:
        for bench in registry.rotate:
            if bench.valid:
                mean = measure_rotate(bench, rng, config, sys.stdout)
                if mean is not None and mean > rotate_best:
                    rotate_best, rotate_desc = mean, bench.description
        for bench in registry.smooth:
            if bench.valid:
                mean = measure_smooth(bench, rng, config, sys.stdout)
                if mean is not None and mean > smooth_best:
                    smooth_best, smooth_desc = mean, bench.description
    except ValueError:
        print("Fatal Error: Non-positive CPE value...")
        return 1

    if autograder:
        print(f"\nbestscores:{rotate_best:.1f}:{smooth_best:.1f}:")
    else:
        print("Summary of Your Best Scores:")
        print(f"  Rotate: {rotate_best:3.1f} ({rotate_desc if rotate_desc else '(null)'})")
        print(f"  Smooth: {smooth_best:3.1f} ({smooth_desc if smooth_desc else '(null)'})")
    return 0


if __name__ == "__main__":
    sys.exit(main())