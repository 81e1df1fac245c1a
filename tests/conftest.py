import pytest
from PIL import Image

CIRCLE_SVG = (
    '<svg xmlns="http://www.w3.org/2000/svg" viewBox="0 0 24 24" fill="currentColor">'
    '<circle cx="12" cy="12" r="10"/></svg>'
)


@pytest.fixture
def circle_svg():
    return CIRCLE_SVG


@pytest.fixture
def split_image():
    """40x40 image, black on the left half and white on the right."""
    img = Image.new("RGB", (40, 40), (0, 0, 0))
    img.paste((255, 255, 255), (20, 0, 40, 40))
    return img
