"""Terminal colour escapes for a single output cell."""

ESC = "\033"
RESET = f"{ESC}[0m"

DEFAULT_FOREGROUND = 39
DEFAULT_BACKGROUND = 49
BACKGROUND_OFFSET = 10

# Ascending code order; ties resolve to the first entry
PALETTE: tuple[tuple[tuple[int, int, int], int], ...] = (
    ((0, 0, 0), 30),  # black
    ((255, 0, 0), 31),  # red
    ((0, 255, 0), 32),  # green
    ((255, 255, 0), 33),  # yellow
    ((0, 0, 255), 34),  # blue
    ((255, 0, 255), 35),  # magenta
    ((0, 255, 255), 36),  # cyan
    ((255, 255, 255), 37),  # white
)

RGB = tuple[int, int, int]


def nearest_code(rgb: RGB) -> int:
    """Foreground code of the palette entry closest to ``rgb`` in RGB space."""
    best_code = DEFAULT_FOREGROUND
    best_dist = 3 * 255 * 255 + 1
    r, g, b = (int(v) for v in rgb)
    for (pr, pg, pb), code in PALETTE:
        dist = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2
        if dist < best_dist:
            best_dist = dist
            best_code = code
    return best_code


def _truecolour(char: str, foreground: RGB | None, background: RGB | None) -> str:
    # Block mode colours only the background, every other mode only the foreground
    parts = []
    if foreground is not None:
        fr, fg, fb = (int(v) for v in foreground)
        parts.append(f"{ESC}[38;2;{fr};{fg};{fb}m")
    if background is not None:
        br, bg, bb = (int(v) for v in background)
        parts.append(f"{ESC}[48;2;{br};{bg};{bb}m")
    parts.append(char)
    parts.append(RESET)
    return "".join(parts)


def quantize(char: str, foreground: RGB | None, background: RGB | None, full_colour: bool = False) -> str:
    """Wrap ``char`` in the escapes for its colours, followed by a reset.

    A colour of ``None`` leaves that layer at the terminal default. With
    ``full_colour`` the literal RGB values are emitted as 24-bit escapes,
    otherwise both layers snap to the nearest of the eight basic colours.
    """
    if full_colour:
        return _truecolour(char, foreground, background)
    fg_code = DEFAULT_FOREGROUND if foreground is None else nearest_code(foreground)
    bg_code = DEFAULT_BACKGROUND if background is None else nearest_code(background) + BACKGROUND_OFFSET
    return f"{ESC}[{fg_code}m{ESC}[{bg_code}m{char}{RESET}"
