import numpy as np
import pytest
from PIL import Image

from catpicture.errors import ImageDecodeError, MalformedGlyphSet
from catpicture.glyph_atlas import GLYPH_CHARACTERS, GLYPH_COUNT, GlyphSet, default_glyph_set, render_strip
from tests.conftest import GLYPH_HEIGHT, GLYPH_WIDTH


def test_printable_range_excludes_tilde():
    assert GLYPH_COUNT == 94
    assert GLYPH_CHARACTERS[0] == " "
    assert GLYPH_CHARACTERS[-1] == "}"


def test_strip_sliced_in_code_point_order(flat_glyphs):
    assert len(flat_glyphs) == GLYPH_COUNT
    assert flat_glyphs.bitmaps.shape == (GLYPH_COUNT, GLYPH_HEIGHT, GLYPH_WIDTH)
    assert (flat_glyphs.glyph_width, flat_glyphs.glyph_height) == (GLYPH_WIDTH, GLYPH_HEIGHT)
    for i in (0, 1, 33, GLYPH_COUNT - 1):
        np.testing.assert_array_equal(flat_glyphs.glyph_at(i), 2 * i)


def test_bitmaps_are_read_only(flat_glyphs):
    with pytest.raises(ValueError):
        flat_glyphs.bitmaps[0, 0, 0] = 1


@pytest.mark.parametrize("width", [GLYPH_COUNT * 3 + 1, GLYPH_COUNT - 1, GLYPH_COUNT * 2 - 5])
def test_uneven_strip_is_rejected(width):
    with pytest.raises(MalformedGlyphSet):
        GlyphSet.from_strip(Image.new("L", (width, 8), 0))


def test_rgb_strip_is_converted():
    glyphs = GlyphSet.from_strip(Image.new("RGB", (GLYPH_COUNT * 2, 3), (255, 255, 255)))
    np.testing.assert_array_equal(glyphs.bitmaps, 255)


def test_nearest_exact_duplicate(random_glyphs):
    for i in (0, 17, 60):
        char, distance = random_glyphs.nearest(random_glyphs.glyph_at(i).copy())
        assert char == GLYPH_CHARACTERS[i]
        assert distance == 0


def test_nearest_closest_flat_glyph(flat_glyphs):
    patch = np.full((GLYPH_HEIGHT, GLYPH_WIDTH), 41, dtype=np.uint8)
    char, distance = flat_glyphs.nearest(patch)
    # 40 (index 20) and 42 (index 21) tie; the lower code point wins
    assert char == GLYPH_CHARACTERS[20]
    assert distance == GLYPH_WIDTH * GLYPH_HEIGHT


def test_identical_glyphs_pick_first():
    glyphs = GlyphSet.from_strip(Image.new("L", (GLYPH_COUNT * 2, 2), 0))
    assert glyphs.nearest(np.zeros((2, 2), dtype=np.uint8)) == (" ", 0)


def test_nearest_is_deterministic(random_glyphs):
    patch = np.random.default_rng(3).integers(0, 256, size=(GLYPH_HEIGHT, GLYPH_WIDTH), dtype=np.uint8)
    assert {random_glyphs.nearest(patch) for _ in range(5)} == {random_glyphs.nearest(patch)}


def test_nearest_rejects_wrong_patch_shape(flat_glyphs):
    with pytest.raises(ValueError, match="does not match"):
        flat_glyphs.nearest(np.zeros((GLYPH_HEIGHT + 1, GLYPH_WIDTH), dtype=np.uint8))


def test_load_strip_from_file(tmp_path):
    path = tmp_path / "characters.png"
    strip = Image.fromarray(np.tile(np.arange(GLYPH_COUNT, dtype=np.uint8).repeat(3), (5, 1)))
    strip.save(path)
    glyphs = GlyphSet.load(path)
    assert glyphs.bitmaps.shape == (GLYPH_COUNT, 5, 3)
    for i in (0, 50, GLYPH_COUNT - 1):
        np.testing.assert_array_equal(glyphs.glyph_at(i), i)


def test_load_missing_strip(tmp_path):
    with pytest.raises(ImageDecodeError):
        GlyphSet.load(tmp_path / "nope.png")


def test_load_bad_font(tmp_path):
    path = tmp_path / "font.ttf"
    path.write_bytes(b"not a font")
    with pytest.raises(ImageDecodeError):
        GlyphSet.from_font(path)


def test_rendered_strip_divides_evenly():
    strip = render_strip()
    assert strip.mode == "L"
    assert strip.width % GLYPH_COUNT == 0
    assert strip.height > 0


def test_default_glyph_set():
    glyphs = default_glyph_set()
    assert glyphs is default_glyph_set()
    assert len(glyphs) == GLYPH_COUNT
    assert glyphs.glyph_at(GLYPH_CHARACTERS.index(" ")).sum() == 0
    assert glyphs.glyph_at(GLYPH_CHARACTERS.index("#")).sum() > 0
    assert glyphs.glyph_at(GLYPH_CHARACTERS.index("@")).sum() > glyphs.glyph_at(GLYPH_CHARACTERS.index(".")).sum()


def test_load_oversized_strip(tmp_path, monkeypatch):
    path = tmp_path / "characters.png"
    Image.new("L", (GLYPH_COUNT * 2, 4), 0).save(path)
    monkeypatch.setattr(Image, "MAX_IMAGE_PIXELS", 10)
    with pytest.raises(ImageDecodeError, match="Cannot read glyph strip"):
        GlyphSet.load(path)
