import numpy as np
from PIL import Image

from catpicture.engine import Art, Block, DrawMode, FixedChar, Line
from catpicture.glyph_atlas import GlyphSet, default_glyph_set
from catpicture.sampling import LINE_PATCH_SIZE, cell_scale, line_character, patch_gradients


class CharacterSelector:
    """Chooses the character for each output cell by sampling the source image.

    ``source`` is the cropped image before it is resized to the output grid;
    line and art modes read patches of it at full resolution.
    """

    def __init__(
        self,
        source: Image.Image,
        output_width: int,
        output_height: int,
        mode: DrawMode,
        glyphs: GlyphSet | None = None,
    ):
        self.mode = mode
        self.output_width = output_width
        self.output_height = output_height
        self.pixel_width, self.pixel_height = cell_scale(source.width, source.height, output_width, output_height)
        self._gray = source.convert("L")
        self._luma = np.asarray(self._gray, dtype=np.int32)
        if isinstance(mode, Art) and glyphs is None:
            glyphs = default_glyph_set()
        self.glyphs = glyphs

    def select(self, x: int, y: int) -> str:
        mode = self.mode
        if isinstance(mode, Block):
            return " "
        if isinstance(mode, FixedChar):
            return mode.char
        if isinstance(mode, Line):
            return self._line(x, y)
        if isinstance(mode, Art):
            return self._art(x, y)
        raise TypeError(f"Unknown draw mode: {mode!r}")

    def _line(self, x: int, y: int) -> str:
        left = x * self.pixel_width
        top = y * self.pixel_height
        height, width = self._luma.shape
        if left + LINE_PATCH_SIZE > width or top + LINE_PATCH_SIZE > height:
            return " "
        patch = self._luma[top : top + LINE_PATCH_SIZE, left : left + LINE_PATCH_SIZE]
        return line_character(*patch_gradients(patch))

    def art_patch(self, x: int, y: int) -> np.ndarray:
        """Source patch for a cell, resized to the glyph size."""
        left, patch_width = self._span(x, self.pixel_width, self._gray.width, self.output_width)
        top, patch_height = self._span(y, self.pixel_height, self._gray.height, self.output_height)
        region = self._gray.crop((left, top, left + patch_width, top + patch_height))
        size = (self.glyphs.glyph_width, self.glyphs.glyph_height)
        return np.asarray(region.resize(size, Image.BICUBIC), dtype=np.uint8)

    @staticmethod
    def _span(index: int, scale: int, source_size: int, output_size: int) -> tuple[int, int]:
        if scale == 0:
            # Output larger than the source: each cell takes the one pixel under it
            return index * source_size // output_size, 1
        return index * scale, scale

    def _art(self, x: int, y: int) -> str:
        char, _ = self.glyphs.nearest(self.art_patch(x, y))
        return char


def select_character(
    x: int,
    y: int,
    output_width: int,
    output_height: int,
    source: Image.Image,
    mode: DrawMode,
    glyphs: GlyphSet | None = None,
) -> str:
    """One-off selection for a single cell. Use CharacterSelector when rendering a grid."""
    return CharacterSelector(source, output_width, output_height, mode, glyphs).select(x, y)
