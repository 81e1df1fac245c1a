import asyncio
import logging
from enum import Enum
from pathlib import Path
from typing import Callable, Iterator

import numpy as np
from PIL import Image, UnidentifiedImageError

from asciicut.config import ConverterConfig, RenderOptions
from asciicut.errors import DecodeFailure, EmptyImage, MissingInput
from asciicut.model import WHITE, CharGrid
from asciicut.quantize import quantize
from asciicut.sampling import (
    flatten,
    glyph_indices,
    grid_size,
    luminance,
    nearest_colours,
    preview_pixels,
    resample_band,
    sequence_indices,
)

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[float], None]


class State(str, Enum):
    IDLE = "idle"
    VALIDATING = "validating"
    BUILDING_PALETTE = "building_palette"
    SAMPLING = "sampling"
    COMPLETE = "complete"
    FAILED = "failed"


def load_image(source: Image.Image | str | Path) -> Image.Image:
    """Open and fully decode an image, raising DecodeFailure if that isn't possible."""
    try:
        image = source if isinstance(source, Image.Image) else Image.open(source)
        image.load()
    except (UnidentifiedImageError, Image.DecompressionBombError, OSError, SyntaxError) as e:
        raise DecodeFailure(f"Could not decode image: {e}") from e
    return image


def build_palette(image: Image.Image, max_colours: int, config: ConverterConfig) -> np.ndarray:
    """Quantize a downsampled preview of the whole image. Returns (k, 3) uint8, possibly empty."""
    pixels = preview_pixels(image, config.preview_width)
    if not len(pixels):
        logger.warning("Palette preview of %dx%d image has no pixels, using white", image.width, image.height)
        return np.empty((0, 3), dtype=np.uint8)
    palette = quantize(pixels, max_colours)
    return np.array(palette.colours, dtype=np.uint8)


class Conversion:
    """One image-to-art request.

    The work is split into bands of at most ``config.chunk_height`` rows.
    :meth:`steps` processes one band per iteration so the caller decides what
    happens between bands; :meth:`run` and :meth:`run_async` are the usual
    drivers.
    """

    def __init__(
        self,
        image: Image.Image,
        options: RenderOptions | None = None,
        shape: str | None = None,
        config: ConverterConfig | None = None,
    ):
        self.image = image
        self.options = options if options is not None else RenderOptions()
        self.shape = shape
        self.config = config if config is not None else ConverterConfig()
        self.state = State.IDLE
        self.progress = 0.0
        self.grid: CharGrid | None = None

    def steps(self) -> Iterator[float]:
        """Yield the completion percentage after each band."""
        if self.state is not State.IDLE:
            raise RuntimeError(f"Conversion already {self.state.value}")
        try:
            yield from self._steps()
        except Exception:
            self.state = State.FAILED
            self.grid = None
            raise

    def _steps(self) -> Iterator[float]:
        self.state = State.VALIDATING
        options = self.options.clamped(self.config)
        if options.glyph_mode == "shape" and not self.shape:
            raise MissingInput("Shape glyph mode needs shape markup")
        if self.image.width == 0 or self.image.height == 0:
            raise EmptyImage(f"Image has no pixels ({self.image.width}x{self.image.height})")
        image = flatten(load_image(self.image))

        cols, rows = grid_size(image.size, options, self.config)
        logger.info("Processing %dx%d image at %dx%d", image.width, image.height, cols, rows)

        palette = np.empty((0, 3), dtype=np.uint8)
        if options.colour_mode == "colour":
            self.state = State.BUILDING_PALETTE
            palette = build_palette(image, options.max_colours, self.config)

        self.state = State.SAMPLING
        ramp = np.array(list(options.ramp))
        counter = 0
        chars: list[str] = []
        colours, brightness, visible = [], [], []

        for start in range(0, rows, self.config.chunk_height):
            stop = min(start + self.config.chunk_height, rows)
            band = resample_band(image, cols, rows, start, stop)
            lum = luminance(band)
            shown = lum * 100 >= options.brightness_threshold

            if options.sequential:
                indices, counter = sequence_indices(shown, len(ramp), counter)
            else:
                indices = glyph_indices(lum, len(ramp))
            band_chars = np.where(shown, ramp[indices], " ")
            chars.extend("".join(line) for line in band_chars)

            if len(palette):
                band_colours = nearest_colours(band, palette)
            else:
                band_colours = np.empty_like(band)
                band_colours[:] = WHITE
            band_colours[~shown] = 0

            colours.append(band_colours)
            brightness.append(np.where(shown, lum, 0.0).astype(np.float32))
            visible.append(shown)

            self.progress = stop / rows * 100
            logger.debug("Rows %d-%d of %d done", start, stop, rows)
            yield self.progress

        self.grid = CharGrid(
            chars=chars,
            colours=np.concatenate(colours),
            brightness=np.concatenate(brightness),
            visible=np.concatenate(visible),
            options=options,
            shape=self.shape if options.glyph_mode == "shape" else None,
        )
        self.state = State.COMPLETE
        logger.info("Converted to %dx%d grid", cols, rows)

    def run(self, on_progress: ProgressCallback | None = None) -> CharGrid:
        for progress in self.steps():
            if on_progress is not None:
                on_progress(progress)
        return self.grid

    async def run_async(self, on_progress: ProgressCallback | None = None) -> CharGrid:
        """Like :meth:`run`, handing control back to the event loop between bands."""
        for progress in self.steps():
            if on_progress is not None:
                on_progress(progress)
            await asyncio.sleep(0)
        return self.grid


def convert(
    image: Image.Image | str | Path,
    options: RenderOptions | None = None,
    shape: str | None = None,
    on_progress: ProgressCallback | None = None,
    config: ConverterConfig | None = None,
) -> CharGrid:
    """Convert an image, or a path to one, into a character grid."""
    if not isinstance(image, Image.Image):
        image = load_image(image)
    return Conversion(image, options, shape=shape, config=config).run(on_progress)
