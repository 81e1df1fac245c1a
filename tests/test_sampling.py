import numpy as np
import pytest
from PIL import Image

from asciicut.config import ConverterConfig, RenderOptions
from asciicut.sampling import (
    flatten,
    glyph_indices,
    grid_size,
    luminance,
    nearest_colours,
    preview_pixels,
    resample_band,
    round_half_up,
    sampling_size,
    sequence_indices,
)

CONFIG = ConverterConfig()


@pytest.mark.parametrize("value, expected", [(0.49, 0), (0.5, 1), (1.5, 2), (2.5, 3), (7.0, 7)])
def test_round_half_up(value, expected):
    assert round_half_up(value) == expected


def test_luminance_extremes():
    pixels = np.array([[[0, 0, 0], [255, 255, 255], [255, 0, 0]]], dtype=np.uint8)
    lum = luminance(pixels)
    assert lum[0, 0] == 0.0
    assert lum[0, 1] == 1.0
    assert lum[0, 2] == pytest.approx(0.299)


def test_glyph_indices_read_ramp_backwards():
    brightness = np.array([0.0, 0.6, 1.0])
    np.testing.assert_array_equal(glyph_indices(brightness, 2), [1, 1, 0])
    np.testing.assert_array_equal(glyph_indices(brightness, 10), [9, 4, 0])


def test_glyph_indices_clipped_to_ramp():
    np.testing.assert_array_equal(glyph_indices(np.array([1.5, -0.2]), 10), [0, 9])


def test_sequence_indices_skip_hidden_cells():
    shown = np.array([[True, False, True], [True, True, False]])
    indices, counter = sequence_indices(shown, 3, 0)
    assert counter == 4
    assert [indices[0, 0], indices[0, 2], indices[1, 0], indices[1, 1]] == [0, 1, 2, 0]


def test_sequence_indices_continue_from_counter():
    shown = np.ones((1, 4), dtype=bool)
    indices, counter = sequence_indices(shown, 3, 5)
    np.testing.assert_array_equal(indices, [[2, 0, 1, 2]])
    assert counter == 9


def test_nearest_colours():
    palette = np.array([[0, 0, 0], [255, 255, 255]], dtype=np.uint8)
    pixels = np.array([[[10, 10, 10], [250, 240, 230]]], dtype=np.uint8)
    np.testing.assert_array_equal(nearest_colours(pixels, palette), [[[0, 0, 0], [255, 255, 255]]])


def test_nearest_colours_tie_goes_to_first_entry():
    pixels = np.array([[[10, 0, 0]]], dtype=np.uint8)
    palette = np.array([[0, 0, 0], [20, 0, 0]], dtype=np.uint8)
    np.testing.assert_array_equal(nearest_colours(pixels, palette), [[[0, 0, 0]]])
    np.testing.assert_array_equal(nearest_colours(pixels, palette[::-1]), [[[20, 0, 0]]])


def test_text_sampling_follows_aspect_ratio():
    options = RenderOptions(art_width=120, art_height=60)
    assert sampling_size((200, 100), options, CONFIG) == (120, 30)
    assert grid_size((200, 100), options, CONFIG) == (120, 30)


def test_grid_capped_to_art_box():
    options = RenderOptions(art_width=120, art_height=60)
    assert sampling_size((100, 200), options, CONFIG) == (120, 120)
    assert grid_size((100, 200), options, CONFIG) == (120, 60)


def test_scale_grows_sampling_geometrically():
    options = RenderOptions(art_width=100, art_height=100, scale=3)
    cols, _ = sampling_size((100, 100), options, CONFIG)
    assert cols == round_half_up(100 * 1.3**2)
    assert grid_size((100, 100), options, CONFIG)[0] == 100


def test_shape_sampling_uses_whole_art_box():
    options = RenderOptions(glyph_mode="shape", art_width=40, art_height=30, scale=2)
    assert sampling_size((500, 100), options, CONFIG) == (48, 36)
    assert grid_size((500, 100), options, CONFIG) == (40, 30)


def test_growth_is_configurable():
    options = RenderOptions(art_width=100, scale=2)
    config = ConverterConfig(text_growth=1.5)
    assert sampling_size((100, 100), options, config)[0] == 150


def test_sampling_never_collapses_to_zero_rows():
    options = RenderOptions(art_width=10)
    assert sampling_size((10000, 1), options, CONFIG) == (10, 1)


def test_preview_keeps_aspect_ratio():
    pixels = preview_pixels(Image.new("RGB", (1000, 500), (1, 2, 3)), 500)
    assert pixels.shape == (500 * 250, 3)
    assert pixels.dtype == np.uint8


def test_preview_of_very_wide_image_is_empty():
    assert preview_pixels(Image.new("RGB", (10000, 1)), 500).shape == (0, 3)


def test_resample_band_shape():
    img = Image.new("RGB", (50, 40), (9, 9, 9))
    band = resample_band(img, 10, 8, 3, 7)
    assert band.shape == (4, 10, 3)
    np.testing.assert_array_equal(band, 9)


def test_flatten_composites_alpha_onto_black():
    img = Image.new("RGBA", (2, 2), (255, 0, 0, 0))
    flat = flatten(img)
    assert flat.mode == "RGB"
    assert flat.getpixel((0, 0)) == (0, 0, 0)


def test_flatten_converts_greyscale():
    flat = flatten(Image.new("L", (2, 2), 200))
    assert flat.getpixel((1, 1)) == (200, 200, 200)
