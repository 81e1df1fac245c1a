"""Presentation of finished grids as plain text, ANSI truecolor text or HTML."""

from asciicut.model import WHITE, CharGrid

SHAPE_CELL_SIZE = 20

_HTML_ESCAPES = {"<": "&lt;", ">": "&gt;", "&": "&amp;"}

_HTML_HEAD = (
    '<!DOCTYPE html><html lang="en"><head><meta charset="UTF-8">'
    '<meta name="viewport" content="width=device-width, initial-scale=1.0">'
    "<title>ASCII Art</title><style>{styles}</style></head>"
)


def css_colour(colour: tuple[int, int, int] | None) -> str:
    if colour is None:
        return "transparent"
    if colour == WHITE:
        return "#FFFFFF"
    r, g, b = colour
    return f"rgb({r}, {g}, {b})"


def to_text(grid: CharGrid) -> str:
    return "\n".join(grid.chars)


def to_ansi(grid: CharGrid) -> str:
    """Wrap each visible character in an ANSI truecolor escape sequence."""
    out = []
    for r, line in enumerate(grid.chars):
        parts = []
        for c, char in enumerate(line):
            if not grid.visible[r, c]:
                parts.append(char)
                continue
            fr, fg, fb = (int(v) for v in grid.colours[r, c])
            parts.append(f"\033[38;2;{fr};{fg};{fb}m{char}")
        parts.append("\033[0m")
        out.append("".join(parts))
    return "\n".join(out)


def _background(grid: CharGrid) -> str:
    if grid.options is not None and grid.options.background == "transparent":
        return "transparent"
    return "#000"


def _shape_html(grid: CharGrid) -> tuple[str, list[str]]:
    styles = (
        f"body {{ background-color: {_background(grid)}; margin: 0; font-family: sans-serif; }} "
        f".grid-container {{ display: flex; flex-wrap: wrap; width: {grid.cols * SHAPE_CELL_SIZE}px; }} "
        f".grid-cell {{ width: {SHAPE_CELL_SIZE}px; height: {SHAPE_CELL_SIZE}px; display: flex; "
        "align-items: center; justify-content: center; } "
        ".svg-wrapper { width: 100%; height: 100%; display: flex; align-items: center; justify-content: center; } "
        ".svg-wrapper svg { width: 100%; height: 100%; }"
    )
    parts = ['<body><div class="grid-container">']
    for row in grid:
        for cell in row:
            if cell.char == " ":
                parts.append('<div class="grid-cell"></div>')
                continue
            # Shape size follows brightness
            parts.append(
                f'<div class="grid-cell"><div class="svg-wrapper" style="color: {css_colour(cell.colour)}; '
                f'transform: scale({cell.brightness:.4g});">{grid.shape}</div></div>'
            )
    parts.append("</div></body>")
    return styles, parts


def _text_html(grid: CharGrid) -> tuple[str, list[str]]:
    styles = (
        f"body {{ background-color: {_background(grid)}; margin: 0; }} "
        "pre { font-family: 'Courier New', Courier, monospace; font-size: 10px; line-height: 0.9; "
        "letter-spacing: 0; white-space: pre; } "
        "div { display: block; }"
    )
    parts = ["<body><pre>"]
    for row in grid:
        parts.append("<div>")
        for cell in row:
            char = _HTML_ESCAPES.get(cell.char, cell.char)
            if char == " ":
                char = "&nbsp;"
            parts.append(f'<span style="color: {css_colour(cell.colour)};">{char}</span>')
        parts.append("</div>")
    parts.append("</pre></body>")
    return styles, parts


def to_html(grid: CharGrid) -> str:
    """Render a standalone HTML document. Shape grids embed their markup in every visible cell."""
    if grid.shape is not None:
        styles, parts = _shape_html(grid)
    else:
        styles, parts = _text_html(grid)
    return "".join([_HTML_HEAD.format(styles=styles), *parts, "</html>"])
