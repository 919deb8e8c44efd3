"""Color reconciliation between analysis guesses, the palette and outbound requests.

Only analysis-derived colors are snapped onto the palette. A color the user
picked by hand is stored exactly as picked, because manual intent is
authoritative: ``SelectionState.toggle_color`` never calls into
``reconcile_one``. Both kinds are formatted for the generative service by
``format_for_request``, so the outbound text does not reveal provenance.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional, Union

from ..core.config import settings
from .palette import Color, PALETTE, PaletteColor, nearest, palette_entry

logger = logging.getLogger(__name__)

ColorLike = Union[Color, str]


def _as_color(raw: ColorLike, field: str = "color") -> Color:
    return raw if isinstance(raw, Color) else Color.parse(raw, field=field)


def reconcile_one(raw: ColorLike, threshold: Optional[float] = None) -> Color:
    """Snap ``raw`` to the nearest palette color when within ``threshold``.

    Args:
        raw: Color or hex code coming from image analysis.
        threshold: Maximum RGB distance for snapping. Defaults to
            ``settings.palette_snap_threshold``.

    Returns:
        The palette color, or ``raw`` itself (a custom color) when nothing
        is close enough.
    """
    color = _as_color(raw)
    limit = settings.palette_snap_threshold if threshold is None else threshold
    entry, d = nearest(color)
    if d <= limit:
        if entry.color != color:
            logger.debug(f"Snapped {color.hex} to palette {entry.name} (distance {d:.1f})")
        return entry.color
    return color


def reconcile_many(raws: Iterable[ColorLike], threshold: Optional[float] = None) -> List[Color]:
    """Reconcile each color, then drop duplicates keeping first-seen order."""
    out: List[Color] = []
    seen = set()
    for i, raw in enumerate(raws):
        color = reconcile_one(_as_color(raw, field=f"colors[{i}]"), threshold)
        if color in seen:
            continue
        seen.add(color)
        out.append(color)
    return out


def format_for_request(colors: Iterable[Color]) -> List[str]:
    """Palette colors become lower-case names, custom colors stay hex codes."""
    formatted: List[str] = []
    for color in colors:
        entry: Optional[PaletteColor] = palette_entry(color, PALETTE)
        formatted.append(entry.name.casefold() if entry else color.hex)
    return formatted
