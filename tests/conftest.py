"""Shared pytest fixtures for the specimen test suite.

Fixtures:
    font_bytes: TrueType bytes of Pillow's bundled default face
    font_paths: three font files on disk with distinct names
    fonts: FontHandles loaded from font_paths
    surface: a fresh RenderSurface
"""

import sys
from pathlib import Path

import pytest
from PIL import Image, ImageChops, ImageFont

# Add project root to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent))

from specimen_render import RenderSurface, load_fonts  # noqa: E402

FONT_NAMES = ["SpecimenSans-Regular.ttf", "SpecimenSans-Bold.ttf", "SpecimenSans-Italic.ttf"]


class FixedAdvanceFont:
    """Stand-in face where every glyph advances ``advance`` px unless listed in ``wide``."""

    def __init__(self, advance=10, wide=None):
        self.advance = advance
        self.wide = wide or {}

    def getlength(self, text, **kwargs):
        return sum(self.wide.get(ch, self.advance) for ch in text)


def ink_bbox(image):
    """Bounding box of every non-white pixel, or None for a blank image."""
    white = Image.new("RGB", image.size, (255, 255, 255))
    return ImageChops.difference(image.convert("RGB"), white).getbbox()


@pytest.fixture
def fixed_font():
    return FixedAdvanceFont(advance=10)


@pytest.fixture(scope="session")
def font_bytes():
    face = ImageFont.load_default(size=24)
    data = getattr(face, "font_bytes", None)
    if not data:
        pytest.skip("Pillow was built without FreeType support")
    return data


@pytest.fixture
def font_paths(tmp_path, font_bytes):
    paths = []
    for name in FONT_NAMES:
        p = tmp_path / name
        p.write_bytes(font_bytes)
        paths.append(str(p))
    return paths


@pytest.fixture
def fonts(font_paths):
    return load_fonts(font_paths)


@pytest.fixture
def surface():
    return RenderSurface()
