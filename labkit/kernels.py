"""Image kernels tuned in the performance lab: rotate and smooth."""

from __future__ import annotations

from collections.abc import MutableSequence, Sequence
from dataclasses import dataclass
from typing import Any

ROTATE_DIMS = (64, 128, 256, 512, 1024)
SMOOTH_DIMS = (32, 64, 128, 256, 512)
ROTATE_BASELINE_CPES = (14.7, 40.1, 46.4, 65.9, 94.5)
SMOOTH_BASELINE_CPES = (695.0, 698.0, 702.0, 717.0, 722.0)

_CHANNEL_MAX = 0xFFFF


def ridx(i: int, j: int, n: int) -> int:
    """Index of row i, column j in a flat n-wide image."""
    return i * n + j


@dataclass(frozen=True)
class Pixel:
    """An RGB pixel with 16-bit channels."""

    red: int
    green: int
    blue: int

    def __post_init__(self) -> None:
        for channel in (self.red, self.green, self.blue):
            if not 0 <= channel <= _CHANNEL_MAX:
                raise ValueError(f"channel value out of range: {channel}")


@dataclass(frozen=True)
class Team:
    """The people who wrote the kernels."""

    team: str
    name1: str
    email1: str
    name2: str = ""
    email2: str = ""


team = Team("bovik", "Harry Q. Bovik", "bovik@example.com")

Image = Sequence[Pixel]
MutableImage = MutableSequence[Pixel]

NAIVE_ROTATE_DESCR = "naive_rotate: Naive baseline implementation"
ROTATE_DESCR = "rotate: Current working version"
NAIVE_SMOOTH_DESCR = "naive_smooth: Naive baseline implementation"
SMOOTH_DESCR = "smooth: Current working version"


def naive_rotate(dim: int, src: Image, dst: MutableImage) -> None:
    """Rotate the image 90 degrees counter-clockwise into dst."""
    for i in range(dim):
        for j in range(dim):
            dst[ridx(dim - 1 - j, i, dim)] = src[ridx(i, j, dim)]


def rotate(dim: int, src: Image, dst: MutableImage) -> None:
    """The graded rotate kernel."""
    naive_rotate(dim, src, dst)


def avg(dim: int, i: int, j: int, src: Image) -> Pixel:
    """Average of the pixel at (i, j) and its neighbours inside the image."""
    red = green = blue = count = 0
    for ii in range(max(i - 1, 0), min(i + 1, dim - 1) + 1):
        for jj in range(max(j - 1, 0), min(j + 1, dim - 1) + 1):
            p = src[ridx(ii, jj, dim)]
            red += p.red
            green += p.green
            blue += p.blue
            count += 1
    return Pixel(red // count, green // count, blue // count)


def naive_smooth(dim: int, src: Image, dst: MutableImage) -> None:
    """Replace each pixel by the average of its neighbourhood."""
    for i in range(dim):
        for j in range(dim):
            dst[ridx(i, j, dim)] = avg(dim, i, j, src)


def smooth(dim: int, src: Image, dst: MutableImage) -> None:
    """The graded smooth kernel."""
    naive_smooth(dim, src, dst)


def register_rotate_functions(registry: Any) -> None:
    """Register the rotate kernels with a benchmark registry."""
    registry.add_rotate(naive_rotate, NAIVE_ROTATE_DESCR)
    registry.add_rotate(rotate, ROTATE_DESCR)


def register_smooth_functions(registry: Any) -> None:
    """Register the smooth kernels with a benchmark registry."""
    registry.add_smooth(smooth, SMOOTH_DESCR)
    registry.add_smooth(naive_smooth, NAIVE_SMOOTH_DESCR)