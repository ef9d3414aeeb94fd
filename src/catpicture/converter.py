import io
import logging
import sys
from dataclasses import dataclass, field
from pathlib import Path
from typing import BinaryIO, TextIO

import numpy as np
from PIL import Image

from catpicture.colour import quantize
from catpicture.dimensions import Region, resolve_dimensions
from catpicture.engine import Block, DrawMode
from catpicture.errors import ImageDecodeError, InvalidImage
from catpicture.glyph_atlas import GlyphSet
from catpicture.sampler import CharacterSelector

STDIN = "-"

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderConfig:
    width: int | None = None
    height: int | None = None
    region: Region | None = None
    force_grey: bool = False
    full_colour: bool = False
    draw_mode: DrawMode = field(default_factory=Block)


def load_image(source: str | Path | BinaryIO | None = None) -> Image.Image:
    """Decode an image from a path, a binary stream, or stdin (``None`` or ``"-"``)."""
    if source is None or source == STDIN:
        source = io.BytesIO(sys.stdin.buffer.read())
        name = "<stdin>"
    else:
        name = getattr(source, "name", str(source))
    try:
        with Image.open(source) as image:
            return image.convert("RGB")
    except (OSError, Image.UnidentifiedImageError, Image.DecompressionBombError) as e:
        raise ImageDecodeError(f"Cannot decode image {name}: {e}") from e


def _prepare(image: Image.Image, config: RenderConfig) -> tuple[Image.Image, Image.Image]:
    """Return (cropped source, resized output image), validating before anything is drawn."""
    image = image.convert("RGB")
    width, height = resolve_dimensions(config.width, config.height, image.width, image.height)
    logger.debug("Rendering %dx%d source as %dx%d cells", image.width, image.height, width, height)

    if config.region is not None:
        config.region.validate(image.width, image.height)
        image = image.crop(config.region.box)
        logger.debug("Cropped source to %s", config.region.box)

    resized = image.resize((width, height), Image.BICUBIC)
    return image, resized


def render(
    image: Image.Image,
    config: RenderConfig,
    out: TextIO | None = None,
    glyphs: GlyphSet | None = None,
) -> None:
    """Stream ``image`` to ``out`` as ANSI-coloured text, one line per output row."""
    if out is None:
        out = sys.stdout
    if image.width == 0 or image.height == 0:
        raise InvalidImage(f"Source image has zero area ({image.width}x{image.height})")

    source, resized = _prepare(image, config)
    selector = CharacterSelector(source, resized.width, resized.height, config.draw_mode, glyphs)
    block = isinstance(config.draw_mode, Block)

    colours = np.asarray(resized, dtype=np.uint8)
    for y in range(resized.height):
        for x in range(resized.width):
            r, g, b = (int(v) for v in colours[y, x])
            if config.force_grey:
                r = g = b = (r + g + b) // 3
            rgb = (r, g, b)
            char = selector.select(x, y)
            if block:
                out.write(quantize(char, None, rgb, config.full_colour))
            else:
                out.write(quantize(char, rgb, None, config.full_colour))
        out.write("\n")


def image_to_ansi(
    image: Image.Image | str | Path,
    config: RenderConfig | None = None,
    glyphs: GlyphSet | None = None,
) -> str:
    if not isinstance(image, Image.Image):
        image = load_image(image)
    buffer = io.StringIO()
    render(image, config or RenderConfig(), buffer, glyphs)
    return buffer.getvalue()
