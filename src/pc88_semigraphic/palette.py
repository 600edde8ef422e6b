"""PC-8801 digital 8-color palette and attribute helpers."""

# Reference: PC-8801 text attribute (color) byte
# Bit   | Meaning
# ------|--------------------------------------------------------------
# 7-5   | Color (GRB): 0=black 1=blue 2=red 3=magenta 4=green 5=cyan 6=yellow 7=white
# 4     | Semi-graphic mode
# 3     | Color/decoration switch (1 = color attribute)
# 2-0   | Unused for color attributes
#
# Semi-graphic dot layout inside a 2x4 cell (one pattern byte):
#   bit0 bit4
#   bit1 bit5
#   bit2 bit6
#   bit3 bit7

from __future__ import annotations

from typing import Sequence, Tuple

Color = Tuple[int, int, int]

BLACK = 0
WHITE = 7

DIGITAL_COLORS: Tuple[Color, ...] = (
    (0, 0, 0),
    (0, 0, 255),
    (255, 0, 0),
    (255, 0, 255),
    (0, 255, 0),
    (0, 255, 255),
    (255, 255, 0),
    (255, 255, 255),
)

COLOR_NAMES: Tuple[str, ...] = (
    "black",
    "blue",
    "red",
    "magenta",
    "green",
    "cyan",
    "yellow",
    "white",
)

UNKNOWN_COLOR_NAME = "unknown"

# Color attribute value per color code: (code << 5) | 0x18
ATTRIBUTE_COLOR_CODES: Tuple[int, ...] = (
    0x18,
    0x38,
    0x58,
    0x78,
    0x98,
    0xB8,
    0xD8,
    0xF8,
)

WHITE_ATTRIBUTE = ATTRIBUTE_COLOR_CODES[WHITE]


def nearest_color_index(rgb: Color, palette: Sequence[Color] = DIGITAL_COLORS) -> int:
    """
    Return the palette entry closest to ``rgb`` using squared distance.
    Entries are compared in index order and only a strictly smaller distance
    replaces the current best, so the lowest index wins ties.
    """
    r, g, b = rgb
    best_idx = 0
    best_dist = float("inf")
    for i, (pr, pg, pb) in enumerate(palette):
        dist = (r - pr) ** 2 + (g - pg) ** 2 + (b - pb) ** 2
        if dist < best_dist:
            best_idx = i
            best_dist = dist
    return best_idx


def get_color_name(color_code: int) -> str:
    if 0 <= color_code < len(COLOR_NAMES):
        return COLOR_NAMES[color_code]
    return UNKNOWN_COLOR_NAME


def attribute_color_code(color_code: int) -> int:
    """Map a color code to its attribute byte; out-of-range codes fall back to white."""

    if 0 <= color_code < len(ATTRIBUTE_COLOR_CODES):
        return ATTRIBUTE_COLOR_CODES[color_code]
    return WHITE_ATTRIBUTE


def format_palette_text(palette: Sequence[Color] = DIGITAL_COLORS) -> str:
    entries = [
        f"{idx}: {get_color_name(idx)} ({r},{g},{b})"
        for idx, (r, g, b) in enumerate(palette)
    ]
    return ", ".join(entries)
