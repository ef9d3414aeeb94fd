class CatpictureError(ValueError):
    """Base class for errors that abort a render before any output is written."""


class InvalidImage(CatpictureError):
    """The source image has zero area."""


class InvalidConfiguration(CatpictureError):
    """A crop region, output size or draw mode that cannot be rendered."""


class MalformedGlyphSet(CatpictureError):
    """A reference strip that does not split into equal glyph cells."""


class ImageDecodeError(CatpictureError):
    """The image source could not be read or decoded."""
