"""
Nearest named color for an RGB triple.

The palette is the rainbow family (red..violet) followed by neutrals.
Distance is Euclidean in CIE L*a*b* (D65), so the match follows perceived
difference rather than raw channel difference.
"""

from __future__ import annotations

import math
from typing import Any, Tuple


PALETTE: Tuple[Tuple[str, str], ...] = (
    ("red", "FF0000"),
    ("orange", "FFA500"),
    ("yellow", "FFFF00"),
    ("green", "008000"),
    ("blue", "0000FF"),
    ("indigo", "4B0082"),
    ("violet", "EE82EE"),
    ("black", "000000"),
    ("gray", "808080"),
    ("white", "FFFFFF"),
)

Lab = Tuple[float, float, float]

# D65 reference white
_XN, _YN, _ZN = 0.95047, 1.0, 1.08883


def _srgb_to_linear(c: float) -> float:
    c = c / 255.0
    if c <= 0.04045:
        return c / 12.92
    return ((c + 0.055) / 1.055) ** 2.4


def _lab_f(t: float) -> float:
    if t > (6 / 29) ** 3:
        return t ** (1 / 3)
    return t / (3 * (6 / 29) ** 2) + 4 / 29


def rgb_to_lab(r: int, g: int, b: int) -> Lab:
    rl, gl, bl = _srgb_to_linear(r), _srgb_to_linear(g), _srgb_to_linear(b)

    x = 0.4124564 * rl + 0.3575761 * gl + 0.1804375 * bl
    y = 0.2126729 * rl + 0.7151522 * gl + 0.0721750 * bl
    z = 0.0193339 * rl + 0.1191920 * gl + 0.9503041 * bl

    fx, fy, fz = _lab_f(x / _XN), _lab_f(y / _YN), _lab_f(z / _ZN)
    return (116 * fy - 16, 500 * (fx - fy), 200 * (fy - fz))


def _hex_to_rgb(hex_code: str) -> Tuple[int, int, int]:
    return int(hex_code[0:2], 16), int(hex_code[2:4], 16), int(hex_code[4:6], 16)


_PALETTE_LAB: Tuple[Tuple[str, Lab], ...] = tuple(
    (name, rgb_to_lab(*_hex_to_rgb(hex_code))) for name, hex_code in PALETTE
)


def _clamp_channel(value: Any) -> int:
    try:
        v = int(value)
    except (TypeError, ValueError, OverflowError):
        return 0
    return max(0, min(255, v))


def name_color(r: int, g: int, b: int) -> str:
    """
    Return the palette name closest to (r, g, b).

    Out-of-range or non-numeric channels are clamped, so every input gets a
    name. Ties go to the earlier palette entry.
    """
    lab = rgb_to_lab(_clamp_channel(r), _clamp_channel(g), _clamp_channel(b))

    best_name = _PALETTE_LAB[0][0]
    best_dist = math.inf
    for name, ref in _PALETTE_LAB:
        dist = math.dist(lab, ref)
        if dist < best_dist:
            best_name, best_dist = name, dist
    return best_name
