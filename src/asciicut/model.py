from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from asciicut.config import RenderOptions

WHITE = (255, 255, 255)


@dataclass(frozen=True)
class Cell:
    char: str
    colour: tuple[int, int, int] | None  # None means transparent
    brightness: float

    @property
    def blank(self) -> bool:
        return self.colour is None


@dataclass(frozen=True, eq=False)
class CharGrid:
    """Finished conversion result. Arrays are read-only once constructed."""

    chars: tuple[str, ...]  # one string per row
    colours: np.ndarray  # (rows, cols, 3) uint8
    brightness: np.ndarray  # (rows, cols) float32, 0 for blank cells
    visible: np.ndarray  # (rows, cols) bool, False for transparent cells
    options: RenderOptions | None = None
    shape: str | None = None  # opaque shape markup, only set in shape glyph mode

    def __post_init__(self):
        object.__setattr__(self, "chars", tuple(self.chars))
        shapes = {self.colours.shape[:2], self.brightness.shape, self.visible.shape}
        if len(shapes) != 1 or any(len(line) != self.colours.shape[1] for line in self.chars):
            raise ValueError("Grid rows must all have the same length")
        if len(self.chars) != self.colours.shape[0]:
            raise ValueError("Grid has mismatched row counts")
        for arr in (self.colours, self.brightness, self.visible):
            arr.setflags(write=False)

    @property
    def rows(self) -> int:
        return len(self.chars)

    @property
    def cols(self) -> int:
        return self.colours.shape[1]

    def __len__(self) -> int:
        return self.rows

    def cell(self, row: int, col: int) -> Cell:
        if not self.visible[row, col]:
            return Cell(self.chars[row][col], None, 0.0)
        colour = tuple(int(v) for v in self.colours[row, col])
        return Cell(self.chars[row][col], colour, float(self.brightness[row, col]))

    def __getitem__(self, key: tuple[int, int]) -> Cell:
        row, col = key
        return self.cell(row, col)

    def __iter__(self):
        for r in range(self.rows):
            yield [self.cell(r, c) for c in range(self.cols)]
