"""Byte-to-color mapping and the ANSI escapes used in colorized dumps."""

from __future__ import annotations

import math

FAINT = "\x1b[;2m"
NORMAL = "\x1b[;22m"
RESET = "\x1b[0m"

SATURATION = 0.4
VALUE = 0.75

RGB = tuple[int, int, int]


def hsv_to_rgb(hue: float, saturation: float, value: float) -> RGB:
    """Convert HSV (hue in degrees, 0 <= hue < 360) to 8-bit RGB channels."""

    chroma = saturation * value
    h = hue / 60
    x = chroma * (1 - abs(math.fmod(h, 2) - 1))
    match int(h):
        case 0:
            r, g, b = chroma, x, 0.0
        case 1:
            r, g, b = x, chroma, 0.0
        case 2:
            r, g, b = 0.0, chroma, x
        case 3:
            r, g, b = 0.0, x, chroma
        case 4:
            r, g, b = x, 0.0, chroma
        case _:
            r, g, b = chroma, 0.0, x
    m = value - chroma
    return int((r + m) * 256), int((g + m) * 256), int((b + m) * 256)


def rgb_for_byte(byte: int) -> RGB:
    """Spread byte values around the hue wheel so neighbours look alike."""

    hue = ((byte & 0xFF) / 256) * 360
    return hsv_to_rgb(hue, SATURATION, VALUE)


def foreground(rgb: RGB) -> str:
    r, g, b = rgb
    return f"\x1b[38;2;{r};{g};{b}m"


# Every byte maps to the same escape, so build them once.
_BYTE_ESCAPES: tuple[str, ...] = tuple(foreground(rgb_for_byte(value)) for value in range(256))


def foreground_for_byte(byte: int) -> str:
    return _BYTE_ESCAPES[byte & 0xFF]
