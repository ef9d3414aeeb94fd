import logging
from dataclasses import dataclass

from catpicture.errors import InvalidConfiguration, InvalidImage

DEFAULT_WIDTH = 80

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Region:
    """Crop rectangle in source pixel coordinates (right and bottom exclusive)."""

    left: int
    top: int
    right: int
    bottom: int

    @property
    def box(self) -> tuple[int, int, int, int]:
        return (self.left, self.top, self.right, self.bottom)

    def validate(self, width: int, height: int) -> None:
        if not (0 <= self.left < self.right <= width and 0 <= self.top < self.bottom <= height):
            raise InvalidConfiguration(f"Crop region {self.box} is outside the {width}x{height} source image")


def _explicit(value: int | None, name: str) -> int | None:
    if value is not None and value <= 0:
        raise InvalidConfiguration(f"Output {name} must be positive, got {value}")
    return value


def resolve_dimensions(
    width: int | None,
    height: int | None,
    source_width: int,
    source_height: int,
    default_width: int = DEFAULT_WIDTH,
) -> tuple[int, int]:
    """Work out the output size in character cells.

    A missing side is derived from the source aspect ratio and truncated towards
    zero. The division is done on integers, so ``width * source_height //
    source_width`` is exactly what you get. Derived sides never drop below 1.
    Giving both sides skips aspect correction entirely.
    """
    if source_width <= 0 or source_height <= 0:
        raise InvalidImage(f"Source image has zero area ({source_width}x{source_height})")
    width = _explicit(width, "width")
    height = _explicit(height, "height")

    if width is not None and height is not None:
        return (width, height)
    if height is not None:
        return (max(1, height * source_width // source_height), height)
    if width is None:
        width = default_width
    return (width, max(1, width * source_height // source_width))
