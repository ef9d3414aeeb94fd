import logging
from dataclasses import dataclass
from functools import lru_cache
from pathlib import Path

import numpy as np
from PIL import Image, ImageDraw, ImageFont

from catpicture.errors import ImageDecodeError, MalformedGlyphSet

# ' ' up to, but not including, '~'
GLYPH_CHARACTERS = "".join(chr(i) for i in range(ord(" "), ord("~")))
GLYPH_COUNT = len(GLYPH_CHARACTERS)

logger = logging.getLogger(__name__)


def _cell_metrics(font: ImageFont.ImageFont | ImageFont.FreeTypeFont) -> tuple[int, int, int, int]:
    """Union of every glyph's bounding box: (x_offset, y_offset, cell_width, cell_height)."""
    boxes = [font.getbbox(char) for char in GLYPH_CHARACTERS]
    left = min(0, min(box[0] for box in boxes))
    top = min(box[1] for box in boxes)
    right = max(box[2] for box in boxes)
    bottom = max(box[3] for box in boxes)
    return -left, -top, max(1, right - left), max(1, bottom - top)


def render_strip(font_path: str | Path | None = None, font_size: int = 16) -> Image.Image:
    """Draw the reference strip: one fixed-width cell per glyph, white ink on black.

    Uses Pillow's built-in font unless a TrueType font path is given.
    """
    if font_path is None:
        font = ImageFont.load_default()
    else:
        font = ImageFont.truetype(str(font_path), font_size)
    x_offset, y_offset, cell_width, cell_height = _cell_metrics(font)

    strip = Image.new("L", (cell_width * GLYPH_COUNT, cell_height), 0)
    draw = ImageDraw.Draw(strip)
    for i, char in enumerate(GLYPH_CHARACTERS):
        draw.text((i * cell_width + x_offset, y_offset), char, fill=255, font=font)
    return strip


@dataclass(frozen=True)
class GlyphSet:
    characters: str
    bitmaps: np.ndarray  # (GLYPH_COUNT, glyph_h, glyph_w) uint8 luma

    @property
    def glyph_width(self) -> int:
        return self.bitmaps.shape[2]

    @property
    def glyph_height(self) -> int:
        return self.bitmaps.shape[1]

    def __len__(self) -> int:
        return len(self.characters)

    def glyph_at(self, index: int) -> np.ndarray:
        return self.bitmaps[index]

    @classmethod
    def from_strip(cls, strip: Image.Image) -> "GlyphSet":
        """Slice a reference strip into equal-width glyph cells in code-point order."""
        width, height = strip.size
        if width < GLYPH_COUNT or width % GLYPH_COUNT != 0 or height == 0:
            raise MalformedGlyphSet(
                f"Reference strip is {width}x{height}; width must be a positive multiple of {GLYPH_COUNT}"
            )
        glyph_width = width // GLYPH_COUNT
        arr = np.asarray(strip.convert("L"), dtype=np.uint8)
        # (h, count * w) -> (count, h, w)
        bitmaps = arr.reshape(height, GLYPH_COUNT, glyph_width).transpose(1, 0, 2).copy()
        bitmaps.setflags(write=False)
        logger.debug("Glyph set: %d glyphs of %dx%d", GLYPH_COUNT, glyph_width, height)
        return cls(characters=GLYPH_CHARACTERS, bitmaps=bitmaps)

    @classmethod
    def load(cls, path: str | Path) -> "GlyphSet":
        try:
            with Image.open(path) as strip:
                strip.load()
                return cls.from_strip(strip)
        except (OSError, Image.UnidentifiedImageError, Image.DecompressionBombError) as e:
            raise ImageDecodeError(f"Cannot read glyph strip {path}: {e}") from e

    @classmethod
    def from_font(cls, font_path: str | Path | None = None, font_size: int = 16) -> "GlyphSet":
        try:
            strip = render_strip(font_path, font_size)
        except OSError as e:
            raise ImageDecodeError(f"Cannot load font {font_path}: {e}") from e
        return cls.from_strip(strip)

    def nearest(self, patch: np.ndarray) -> tuple[str, int]:
        """Glyph with the smallest sum of absolute luma differences to ``patch``.

        ``patch`` must already match the glyph size. Ties keep the lowest code point.
        """
        if patch.shape != self.bitmaps.shape[1:]:
            raise ValueError(f"Patch shape {patch.shape} does not match glyph shape {self.bitmaps.shape[1:]}")
        distances = np.abs(self.bitmaps.astype(np.int32) - patch.astype(np.int32)).sum(axis=(1, 2))
        best_index = int(np.argmin(distances))
        best_distance = int(distances[best_index])
        if best_distance > self.glyph_width * self.glyph_height * 255:
            return " ", best_distance
        return self.characters[best_index], best_distance


@lru_cache(maxsize=1)
def default_glyph_set() -> GlyphSet:
    """Glyph set rendered from Pillow's built-in font, built once per process."""
    return GlyphSet.from_font()
