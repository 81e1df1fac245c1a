import math

import numpy as np
from PIL import Image

from asciicut.config import ConverterConfig, RenderOptions

# ITU-R BT.601 luma weights in thousandths, so pure white is exactly 1.0
LUMA_WEIGHTS = (299, 587, 114)

# Monospace glyphs are roughly twice as tall as wide
TEXT_ASPECT_CORRECTION = 0.5


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def flatten(image: Image.Image) -> Image.Image:
    """Convert to RGB, compositing any transparency onto opaque black."""
    if image.mode in ("RGBA", "LA", "PA") or (image.mode == "P" and "transparency" in image.info):
        rgba = image.convert("RGBA")
        backdrop = Image.new("RGBA", rgba.size, (0, 0, 0, 255))
        return Image.alpha_composite(backdrop, rgba).convert("RGB")
    return image.convert("RGB")


def sampling_size(image_size: tuple[int, int], options: RenderOptions, config: ConverterConfig) -> tuple[int, int]:
    """Resolution the source is sampled at, before capping to the requested art box.

    Text glyphs follow the image aspect ratio from the art width alone; shape
    glyphs scale the whole art box.
    """
    width, height = image_size
    if options.glyph_mode == "shape":
        growth = config.shape_growth ** (options.scale - 1)
        cols = round_half_up(options.art_width * growth)
        rows = round_half_up(options.art_height * growth)
    else:
        growth = config.text_growth ** (options.scale - 1)
        cols = round_half_up(options.art_width * growth)
        rows = round_half_up(cols * (height / width) * TEXT_ASPECT_CORRECTION)
    return max(cols, 1), max(rows, 1)


def grid_size(image_size: tuple[int, int], options: RenderOptions, config: ConverterConfig) -> tuple[int, int]:
    """Dimensions (cols, rows) of the emitted grid, never larger than the art box."""
    cols, rows = sampling_size(image_size, options, config)
    return min(options.art_width, cols), min(options.art_height, rows)


def preview_pixels(image: Image.Image, preview_width: int) -> np.ndarray:
    """Downsample to ``preview_width`` columns keeping aspect. Returns (N, 3) uint8."""
    preview_height = round_half_up(preview_width * image.height / image.width)
    if preview_height == 0:
        return np.empty((0, 3), dtype=np.uint8)
    preview = image.resize((preview_width, preview_height), Image.BILINEAR)
    return np.asarray(preview, dtype=np.uint8).reshape(-1, 3)


def resample_band(image: Image.Image, cols: int, rows: int, start: int, stop: int) -> np.ndarray:
    """Resample the slice of ``image`` covering grid rows [start, stop).

    Returns array of shape (stop - start, cols, 3) as uint8.
    """
    top = start / rows * image.height
    bottom = stop / rows * image.height
    band = image.resize((cols, stop - start), Image.BILINEAR, box=(0, top, image.width, bottom))
    return np.asarray(band, dtype=np.uint8)


def luminance(pixels: np.ndarray) -> np.ndarray:
    """Perceived brightness in [0, 1] for an (..., 3) uint8 array."""
    rgb = pixels.astype(np.int64)
    wr, wg, wb = LUMA_WEIGHTS
    return (wr * rgb[..., 0] + wg * rgb[..., 1] + wb * rgb[..., 2]) / (255 * 1000)


def glyph_indices(brightness: np.ndarray, ramp_length: int) -> np.ndarray:
    """Map brightness to ramp positions, reading the ramp back to front.

    The brightest samples land on index 0, the first (densest) glyph.
    """
    last = ramp_length - 1
    index = np.clip(np.floor(brightness * last).astype(np.int64), 0, last)
    return last - index


def sequence_indices(shown: np.ndarray, ramp_length: int, counter: int) -> tuple[np.ndarray, int]:
    """Cycle through the ramp over visible cells in row-major order.

    Returns the per-cell ramp positions and the counter for the next band.
    """
    flat = shown.ravel()
    order = np.cumsum(flat) - 1 + counter
    indices = np.mod(order, ramp_length).reshape(shown.shape)
    return indices, counter + int(flat.sum())


def nearest_colours(pixels: np.ndarray, palette: np.ndarray) -> np.ndarray:
    """Replace each pixel with its closest palette colour by Euclidean distance.

    Ties go to the earliest palette entry. Works one row at a time so the
    distance matrix stays small for very wide bands.
    """
    pal = palette.astype(np.int64)
    out = np.empty(pixels.shape, dtype=np.uint8)
    for y, row in enumerate(pixels.astype(np.int64)):
        dist = ((row[:, np.newaxis, :] - pal[np.newaxis, :, :]) ** 2).sum(axis=2)
        out[y] = palette[dist.argmin(axis=1)]
    return out
