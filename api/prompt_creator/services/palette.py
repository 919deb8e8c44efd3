from __future__ import annotations

import math
import re
from dataclasses import dataclass
from typing import Optional, Tuple

from ..models.exceptions import ValidationError

HEX_COLOR_RE = re.compile(r'^#?([A-Fa-f0-9]{6}|[A-Fa-f0-9]{3})$')

# Largest possible distance between two colors (black to white)
MAX_DISTANCE = math.sqrt(3 * 255 ** 2)


@dataclass(frozen=True)
class Color:
    """A 24-bit RGB color. Equality is by channel value, never by spelling."""

    r: int
    g: int
    b: int

    @classmethod
    def parse(cls, code: str, field: str = "color") -> Color:
        """Parse ``#RRGGBB``, ``RRGGBB`` or ``#RGB`` (any case)."""
        if not isinstance(code, str):
            raise ValidationError(field, "color code must be a string", code)
        m = HEX_COLOR_RE.match(code.strip())
        if not m:
            raise ValidationError(field, "invalid hex color code", code)
        digits = m.group(1)
        if len(digits) == 3:
            digits = "".join(ch * 2 for ch in digits)
        return cls(int(digits[0:2], 16), int(digits[2:4], 16), int(digits[4:6], 16))

    @property
    def hex(self) -> str:
        return f"#{self.r:02X}{self.g:02X}{self.b:02X}"

    def __str__(self) -> str:
        return self.hex


@dataclass(frozen=True)
class PaletteColor:
    name: str
    color: Color


def _entry(name: str, code: str) -> PaletteColor:
    return PaletteColor(name=name, color=Color.parse(code))


# Declaration order is significant: it breaks ties in nearest().
PALETTE: Tuple[PaletteColor, ...] = (
    _entry("White", "#FFFFFF"),
    _entry("Black", "#000000"),
    _entry("Red", "#FF0000"),
    _entry("Orange", "#FF9500"),
    _entry("Yellow", "#FFCC00"),
    _entry("Green", "#34C759"),
    _entry("Blue", "#007AFF"),
    _entry("Purple", "#9D00FF"),
    _entry("Pink", "#FF1493"),
)


def distance(c1: Color, c2: Color) -> float:
    """Plain Euclidean distance over the three 8-bit channels."""
    return math.sqrt((c1.r - c2.r) ** 2 + (c1.g - c2.g) ** 2 + (c1.b - c2.b) ** 2)


def nearest(c: Color, palette: Tuple[PaletteColor, ...] = PALETTE) -> Tuple[PaletteColor, float]:
    """Closest palette entry and its distance; first declared entry wins ties."""
    best = palette[0]
    best_distance = distance(c, best.color)
    for entry in palette[1:]:
        d = distance(c, entry.color)
        if d < best_distance:
            best, best_distance = entry, d
    return best, best_distance


def palette_entry(c: Color, palette: Tuple[PaletteColor, ...] = PALETTE) -> Optional[PaletteColor]:
    """The palette entry exactly equal to ``c``, if any."""
    for entry in palette:
        if entry.color == c:
            return entry
    return None


def is_palette_color(c: Color, palette: Tuple[PaletteColor, ...] = PALETTE) -> bool:
    return palette_entry(c, palette) is not None
