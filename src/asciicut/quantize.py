"""Modified median cut colour quantization.

Colours are bucketed into a 32x32x32 histogram (5 significant bits per
channel). The populated region of that histogram is split recursively into
boxes, and the population-weighted average colour of each box becomes one
palette entry.
"""

import logging
import math
from dataclasses import dataclass, field, replace
from functools import cached_property

import numpy as np

from asciicut.errors import InternalInvariantViolation, InvalidArgument

logger = logging.getLogger(__name__)

SIGBITS = 5
RSHIFT = 8 - SIGBITS
MULT = 1 << RSHIFT
HISTOSIZE = 1 << (3 * SIGBITS)
VBOX_LENGTH = 1 << SIGBITS
FRACT_BY_POPULATION = 0.75
MAX_ITERATIONS = 1000

AXES = ("r", "g", "b")

RGB = tuple[int, int, int]


def _as_pixels(pixels) -> np.ndarray:
    arr = np.asarray(pixels, dtype=np.int64)
    if arr.size == 0:
        raise InvalidArgument("No pixels to quantize")
    if arr.ndim != 2 or arr.shape[1] != 3:
        raise InvalidArgument(f"Expected RGB samples of shape (N, 3), got {arr.shape}")
    if arr.min() < 0 or arr.max() > 255:
        raise InvalidArgument("Channel values must be in the range 0-255")
    return arr


def build_histogram(pixels: np.ndarray) -> np.ndarray:
    """Count pixels per quantized colour. Returns a (32, 32, 32) array indexed [r, g, b]."""
    q = pixels >> RSHIFT
    index = (q[:, 0] << (2 * SIGBITS)) + (q[:, 1] << SIGBITS) + q[:, 2]
    return np.bincount(index, minlength=HISTOSIZE).reshape(VBOX_LENGTH, VBOX_LENGTH, VBOX_LENGTH)


@dataclass(frozen=True)
class VBox:
    """Axis-aligned box of quantized colour space with inclusive bounds."""

    r1: int
    r2: int
    g1: int
    g2: int
    b1: int
    b2: int
    histogram: np.ndarray = field(repr=False, compare=False)

    def bounds(self, axis: str) -> tuple[int, int]:
        return getattr(self, f"{axis}1"), getattr(self, f"{axis}2")

    def with_bounds(self, axis: str, lo: int, hi: int) -> "VBox":
        return replace(self, **{f"{axis}1": lo, f"{axis}2": hi})

    def region(self) -> np.ndarray:
        return self.histogram[self.r1 : self.r2 + 1, self.g1 : self.g2 + 1, self.b1 : self.b2 + 1]

    @cached_property
    def volume(self) -> int:
        return (self.r2 - self.r1 + 1) * (self.g2 - self.g1 + 1) * (self.b2 - self.b1 + 1)

    @cached_property
    def count(self) -> int:
        return int(self.region().sum())

    @cached_property
    def average(self) -> RGB:
        """Population-weighted centre of the box, or its geometric centre when empty."""
        if not self.count:
            return tuple(MULT * (lo + hi + 1) // 2 for lo, hi in map(self.bounds, AXES))

        region = self.region()
        result = []
        for axis, name in enumerate(AXES):
            lo, hi = self.bounds(name)
            others = tuple(a for a in range(3) if a != axis)
            marginal = region.sum(axis=others)
            # Bucket centres, (i + 0.5) * MULT, kept in integers
            centres = np.arange(lo, hi + 1) * MULT + MULT // 2
            result.append(int((marginal * centres).sum()) // self.count)
        return tuple(result)

    def contains(self, pixel) -> bool:
        r, g, b = (int(c) >> RSHIFT for c in pixel)
        return self.r1 <= r <= self.r2 and self.g1 <= g <= self.g2 and self.b1 <= b <= self.b2


def median_cut(box: VBox) -> tuple[VBox, ...]:
    """Split a box at the population median of its longest axis.

    Returns two boxes partitioning the parent, a single box when the parent
    cannot be split any further, or an empty tuple when no median exists.
    """
    if not box.count:
        return ()
    if box.count == 1 or box.volume == 1:
        return (box,)

    widths = [hi - lo + 1 for lo, hi in map(box.bounds, AXES)]
    axis = widths.index(max(widths))
    name = AXES[axis]
    lo, hi = box.bounds(name)

    others = tuple(a for a in range(3) if a != axis)
    partial = np.cumsum(box.region().sum(axis=others))
    total = int(partial[-1])
    lookahead = total - partial

    def partial_at(coord: int) -> int:
        return int(partial[coord - lo]) if lo <= coord <= hi else 0

    crossings = np.flatnonzero(partial > total / 2)
    if not len(crossings):
        return ()

    i = lo + int(crossings[0])
    left = i - lo
    right = hi - i
    # Lean the cut toward the roomier side of the median
    if left <= right:
        cut = min(hi - 1, int(i + right / 2))
    else:
        cut = max(lo, int(i - 1 - left / 2))

    while not partial_at(cut):
        cut += 1
    remainder = int(lookahead[cut - lo])
    while not remainder and partial_at(cut - 1):
        cut -= 1
        remainder = int(lookahead[cut - lo])
    cut = min(cut, hi - 1)

    return box.with_bounds(name, lo, cut), box.with_bounds(name, cut + 1, hi)


def _split_boxes(queue: list[VBox], target: float, key) -> None:
    """Split boxes from the front of ``queue`` until it holds ``target`` boxes.

    Unsplittable boxes go to the back of the queue. The pass ends early once
    every box has been passed over without a successful split.
    """
    stalled = 0
    for _ in range(MAX_ITERATIONS):
        if len(queue) >= target or stalled >= len(queue):
            return
        box = queue.pop(0)
        if not box.count:
            queue.append(box)
            stalled += 1
            continue

        children = median_cut(box)
        if not children:
            raise InternalInvariantViolation(f"Median cut produced no boxes for populated {box}")
        if len(children) == 1:
            queue.append(children[0])
            stalled += 1
            continue

        queue.extend(children)
        queue.sort(key=key)
        stalled = 0


class Palette:
    """Ordered, immutable set of boxes produced by :func:`quantize`."""

    def __init__(self, boxes):
        self._boxes = tuple(boxes)

    def __len__(self) -> int:
        return len(self._boxes)

    def __repr__(self) -> str:
        return f"Palette({self.colours!r})"

    @property
    def boxes(self) -> tuple[VBox, ...]:
        return self._boxes

    @property
    def colours(self) -> list[RGB]:
        return [box.average for box in self._boxes]

    def map(self, pixel) -> RGB:
        """Colour of the box containing ``pixel``, else the nearest palette colour."""
        for box in self._boxes:
            if box.contains(pixel):
                return box.average
        return self.nearest(pixel)

    def nearest(self, pixel) -> RGB:
        best_colour = (0, 0, 0)
        best_dist = math.inf
        for colour in self.colours:
            dist = sum((int(a) - b) ** 2 for a, b in zip(pixel, colour))
            if dist < best_dist:
                best_dist = dist
                best_colour = colour
        return best_colour


def quantize(pixels, max_colours: int) -> Palette:
    """Reduce RGB samples to a palette of at most ``max_colours`` colours.

    Args:
        pixels: sequence of (r, g, b) triples or an (N, 3) array, values 0-255
        max_colours: palette size bound, 2 to 256 inclusive
    """
    if not 2 <= max_colours <= 256:
        raise InvalidArgument(f"max_colours must be between 2 and 256, got {max_colours}")
    arr = _as_pixels(pixels)

    histogram = build_histogram(arr)
    q = arr >> RSHIFT
    lows = q.min(axis=0)
    highs = q.max(axis=0)
    box = VBox(
        int(lows[0]),
        int(highs[0]),
        int(lows[1]),
        int(highs[1]),
        int(lows[2]),
        int(highs[2]),
        histogram=histogram,
    )

    queue = [box]
    _split_boxes(queue, FRACT_BY_POPULATION * max_colours, key=lambda b: b.count * b.volume)

    queue = sorted((b for b in queue if b.count), key=lambda b: b.count)
    _split_boxes(queue, max_colours, key=lambda b: b.count)

    logger.debug("Quantized %d pixels to %d colours", len(arr), len(queue))
    return Palette(queue)
