from __future__ import annotations

from dataclasses import dataclass

from catpicture.errors import InvalidConfiguration


@dataclass(frozen=True)
class Block:
    """Blank cells; the colour goes in the background."""


@dataclass(frozen=True)
class FixedChar:
    """The same character in every cell, coloured in the foreground."""

    char: str

    def __post_init__(self):
        if len(self.char) != 1:
            raise InvalidConfiguration(f"Draw character must be a single character, got {self.char!r}")


@dataclass(frozen=True)
class Line:
    """A line glyph following the dominant gradient of each patch."""


@dataclass(frozen=True)
class Art:
    """The glyph whose bitmap best matches each patch."""


DrawMode = Block | FixedChar | Line | Art

MODE_NAMES = ("block", "char", "line", "art")


def parse_draw_mode(token: str, char: str | None = None) -> DrawMode:
    """Map a command-line mode token (and its character for ``char``) to a draw mode."""
    name = token.lower()
    if name == "block":
        return Block()
    if name == "line":
        return Line()
    if name == "art":
        return Art()
    if name == "char":
        if not char:
            raise InvalidConfiguration("Draw mode 'char' needs a character")
        return FixedChar(char[0])
    raise InvalidConfiguration(f"Unrecognized draw mode {token!r}; expected one of {', '.join(MODE_NAMES)}")
