import argparse
import logging
import sys
from pathlib import Path

from asciicut.charsets import RAMPS
from asciicut.config import ConverterConfig, RenderOptions
from asciicut.converter import convert
from asciicut.errors import ConversionError
from asciicut.export import to_ansi, to_html, to_text
from asciicut.terminal import get_terminal_size, supports_truecolour

FORMATS = ("auto", "text", "ansi", "html")


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="Render an image as coloured character art")
    parser.add_argument("image", help="Path to input image")
    parser.add_argument(
        "-W", "--width", type=int, default=None, help="Art width in columns (default: terminal width)"
    )
    parser.add_argument(
        "-H",
        "--height",
        type=int,
        default=None,
        help="Maximum art height in rows (default: follow the image aspect ratio)",
    )
    parser.add_argument("-m", "--mono", action="store_true", default=False, help="Render every glyph in white")
    parser.add_argument(
        "-c", "--colours", type=int, default=64, help="Palette size, 8 to 256 (default: 64)"
    )
    parser.add_argument(
        "-r", "--ramp", default="default", choices=sorted(RAMPS), help="Named glyph ramp (default: default)"
    )
    parser.add_argument("--chars", default=None, help="Custom glyph ramp, densest first (overrides --ramp)")
    parser.add_argument(
        "-t",
        "--threshold",
        type=float,
        default=5.0,
        help="Brightness percentage below which cells are left blank (default: 5)",
    )
    parser.add_argument("-s", "--scale", type=float, default=1.0, help="Detail scale (default: 1)")
    parser.add_argument(
        "--sequence", action="store_true", default=False, help="Cycle through the ramp instead of following brightness"
    )
    parser.add_argument("--shape", default=None, help="SVG file used as the glyph for every cell (HTML output)")
    parser.add_argument(
        "--transparent", action="store_true", default=False, help="Transparent HTML background instead of black"
    )
    parser.add_argument("-f", "--format", default="auto", choices=FORMATS, help="Output format (default: auto)")
    parser.add_argument("-v", "--verbose", action="count", default=0, help="Log progress to stderr")
    return parser


def main(argv=None):
    args = _build_parser().parse_args(argv)

    level = logging.WARNING - 10 * min(args.verbose, 2)
    logging.basicConfig(level=level, format="%(levelname)s %(name)s: %(message)s")

    image_path = Path(args.image)
    if not image_path.exists():
        print(f"File not found: {image_path}", file=sys.stderr)
        sys.exit(1)

    shape = None
    if args.shape is not None:
        shape_path = Path(args.shape)
        if not shape_path.exists():
            print(f"File not found: {shape_path}", file=sys.stderr)
            sys.exit(1)
        shape = shape_path.read_text(encoding="utf-8")

    output = args.format
    if output == "auto":
        if shape is not None:
            output = "html"
        else:
            output = "ansi" if not args.mono and supports_truecolour() else "text"

    try:
        config = ConverterConfig.from_env()
        width = args.width if args.width is not None else get_terminal_size()[0]
        height = args.height if args.height is not None else config.max_art_dimension
        options = RenderOptions(
            colour_mode="mono" if args.mono else "colour",
            glyph_mode="shape" if shape is not None else "text",
            chars=args.chars or RAMPS[args.ramp],
            use_full_chars=args.chars is None and args.ramp == "full",
            max_colours=args.colours,
            art_width=width,
            art_height=height,
            brightness_threshold=args.threshold,
            force_sequence=args.sequence,
            scale=args.scale,
            background="transparent" if args.transparent else "black",
        )
        grid = convert(image_path, options, shape=shape, config=config)
    except ConversionError as e:
        print(f"{type(e).__name__}: {e}", file=sys.stderr)
        sys.exit(1)

    if output == "html":
        print(to_html(grid))
    elif output == "ansi":
        print(to_ansi(grid))
    else:
        print(to_text(grid))
