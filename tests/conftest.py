import numpy as np
import pytest
from PIL import Image

from catpicture.glyph_atlas import GLYPH_COUNT, GlyphSet

GLYPH_WIDTH = 4
GLYPH_HEIGHT = 6


def strip_from_cells(cells: np.ndarray) -> Image.Image:
    """Lay out (GLYPH_COUNT, h, w) uint8 cells left to right as a reference strip."""
    count, height, width = cells.shape
    return Image.fromarray(cells.transpose(1, 0, 2).reshape(height, count * width).astype(np.uint8))


def flat_glyph_set() -> GlyphSet:
    """Glyph i is a solid block of luma 2 * i."""
    cells = np.empty((GLYPH_COUNT, GLYPH_HEIGHT, GLYPH_WIDTH), dtype=np.uint8)
    for i in range(GLYPH_COUNT):
        cells[i] = 2 * i
    return GlyphSet.from_strip(strip_from_cells(cells))


def random_glyph_set(seed: int = 7) -> GlyphSet:
    rng = np.random.default_rng(seed)
    cells = rng.integers(0, 256, size=(GLYPH_COUNT, GLYPH_HEIGHT, GLYPH_WIDTH), dtype=np.uint8)
    return GlyphSet.from_strip(strip_from_cells(cells))


def luma_image(values) -> Image.Image:
    return Image.fromarray(np.asarray(values, dtype=np.uint8))


@pytest.fixture
def flat_glyphs() -> GlyphSet:
    return flat_glyph_set()


@pytest.fixture
def random_glyphs() -> GlyphSet:
    return random_glyph_set()
