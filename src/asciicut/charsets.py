# Ramps are ordered densest glyph first; bright samples pick from the front.
DEFAULT_CHARS = "@%#*+=-:. "

# Classic character density ramp, reversed into the same densest-first order
FULL_CHARS = " .'\"^,:;Il!i><~+_-?][}{1)(|/\\tfjrxnuvczYXCJUQL0OZmwqpdbkhao*#MW&8%B@$"[::-1]

# Block element shades: full block, dark, medium, light, blank
SHADES = "█▓▒░ "

RAMPS = {
    "default": DEFAULT_CHARS,
    "full": FULL_CHARS,
    "shades": SHADES,
}
