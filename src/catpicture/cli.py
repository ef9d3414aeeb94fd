import argparse
import logging
import os
import sys

from catpicture.converter import STDIN, RenderConfig, load_image, render
from catpicture.dimensions import Region
from catpicture.engine import MODE_NAMES, Art, parse_draw_mode
from catpicture.errors import CatpictureError, InvalidConfiguration
from catpicture.glyph_atlas import GlyphSet


def setup_logging(debug: bool) -> None:
    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter("%(levelname)s: %(message)s"))
    logger = logging.getLogger("catpicture")
    logger.handlers[:] = [handler]
    logger.setLevel(logging.DEBUG if debug else logging.WARNING)
    logger.propagate = False


def build_parser() -> argparse.ArgumentParser:
    # -h is the output height, so argparse's own help flag is replaced by -?
    parser = argparse.ArgumentParser(
        prog="catpicture", description="Render an image as coloured text in the terminal", add_help=False
    )
    parser.add_argument("-?", "--help", action="help", help="Show this message and exit")
    parser.add_argument("image", nargs="?", default=STDIN, help="Image to open (default: read from stdin)")
    parser.add_argument(
        "-c", "--colour", action="store_true", default=False, help="Use 24-bit colour instead of the nearest of 8"
    )
    parser.add_argument("-w", "--width", type=int, default=None, help="Output width in columns")
    parser.add_argument("-h", "--height", type=int, default=None, help="Output height in rows")
    parser.add_argument(
        "-r",
        "--region",
        type=int,
        nargs=4,
        metavar=("LEFT", "TOP", "RIGHT", "BOTTOM"),
        default=None,
        help="Crop this region from the picture before drawing",
    )
    parser.add_argument("-g", "--grey", action="store_true", default=False, help="Force greyscale")
    parser.add_argument(
        "-d",
        "--draw",
        nargs="+",
        metavar="MODE",
        default=["block"],
        help=f"Draw mode: {', '.join(MODE_NAMES)}. 'char' takes the character to draw, e.g. -d char '#'",
    )
    parser.add_argument("--glyphs", default=None, help="Reference glyph strip image for art mode")
    parser.add_argument("--font", default=None, help="TrueType font to render art mode glyphs from")
    parser.add_argument("--debug", action="store_true", default=False, help="Log diagnostics to stderr")
    return parser


def _split_draw(args: argparse.Namespace) -> tuple[str, str | None]:
    """Separate the draw mode, its character, and an image path swallowed by ``-d``."""
    token, *rest = args.draw
    char = rest.pop(0) if token.lower() == "char" and rest else None
    if len(rest) == 1 and args.image == STDIN:
        args.image = rest.pop()
    if rest:
        raise InvalidConfiguration(f"Unexpected draw mode arguments: {' '.join(rest)}")
    return token, char


def config_from_args(args: argparse.Namespace) -> RenderConfig:
    token, char = _split_draw(args)
    draw_mode = parse_draw_mode(token, char)
    region = Region(*args.region) if args.region is not None else None
    return RenderConfig(
        width=args.width,
        height=args.height,
        region=region,
        force_grey=args.grey,
        full_colour=args.colour,
        draw_mode=draw_mode,
    )


def main(argv: list[str] | None = None) -> None:
    args = build_parser().parse_args(argv)
    setup_logging(args.debug)

    try:
        config = config_from_args(args)
        glyphs = None
        if isinstance(config.draw_mode, Art):
            if args.glyphs is not None:
                glyphs = GlyphSet.load(args.glyphs)
            elif args.font is not None:
                glyphs = GlyphSet.from_font(args.font)
        image = load_image(args.image)
        render(image, config, sys.stdout, glyphs)
    except CatpictureError as e:
        print(f"catpicture: {e}", file=sys.stderr)
        sys.exit(1)
    except BrokenPipeError:
        # The reader closed the pipe early; stop shutdown from flushing into it
        devnull = os.open(os.devnull, os.O_WRONLY)
        os.dup2(devnull, sys.stdout.fileno())
        sys.exit(1)
