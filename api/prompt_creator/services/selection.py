"""The user's brief as an immutable value plus the state holder around it.

Transitions are plain functions from ``Brief`` to a new ``Brief``;
``SelectionState`` owns the current value, applies transitions and tells
subscribers (the HTTP layer, tests, a UI) about the result. Completeness is
not checked here: the only hard precondition, a non-empty idea, is enforced
when a generation request is built.
"""

from __future__ import annotations

import dataclasses
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence, Tuple, Union

from ..models.exceptions import ValidationError
from ..models.schemas import (
    AnalysisResult,
    Camera,
    ColorRole,
    DEFAULT_CAMERA,
    DEFAULT_RATIO,
    Ratio,
    ReferenceImage,
    StyleTag,
)
from .palette import Color


Subscriber = Callable[["Brief"], None]


@dataclass(frozen=True)
class Brief:
    """Everything the user (or an analysis) has specified so far.

    Tag and color collections are tuples used as insertion-ordered sets:
    the transitions below never let a duplicate in.
    """

    idea: str = ""
    style_tags: Tuple[StyleTag, ...] = ()
    background_colors: Tuple[Color, ...] = ()
    object_colors: Tuple[Color, ...] = ()
    camera: Camera = DEFAULT_CAMERA
    ratio: Ratio = DEFAULT_RATIO
    reference_image: Optional[ReferenceImage] = None

    def colors_for(self, role: ColorRole) -> Tuple[Color, ...]:
        return self.background_colors if role == ColorRole.BACKGROUND else self.object_colors


def _coerce_enum(enum_cls, value, field: str):
    try:
        return enum_cls(value)
    except ValueError:
        raise ValidationError(field, f"must be one of {[m.value for m in enum_cls]}", value)


def _dedupe(items: Sequence) -> tuple:
    seen = set()
    out = []
    for item in items:
        if item not in seen:
            seen.add(item)
            out.append(item)
    return tuple(out)


def _toggle(items: Tuple, item) -> Tuple:
    if item in items:
        return tuple(i for i in items if i != item)
    return items + (item,)


# Pure transitions

def set_idea(brief: Brief, idea: str) -> Brief:
    return dataclasses.replace(brief, idea=idea or "")


def toggle_style_tag(brief: Brief, tag: Union[StyleTag, str]) -> Brief:
    tag = _coerce_enum(StyleTag, tag, "style_tag")
    return dataclasses.replace(brief, style_tags=_toggle(brief.style_tags, tag))


def toggle_color(brief: Brief, role: Union[ColorRole, str], color: Union[Color, str]) -> Brief:
    """Add or remove a manually picked color. Never snapped to the palette."""
    role = _coerce_enum(ColorRole, role, "role")
    if not isinstance(color, Color):
        color = Color.parse(color, field=f"{role.value}_color")
    if role == ColorRole.BACKGROUND:
        return dataclasses.replace(brief, background_colors=_toggle(brief.background_colors, color))
    return dataclasses.replace(brief, object_colors=_toggle(brief.object_colors, color))


def set_camera(brief: Brief, camera: Union[Camera, str]) -> Brief:
    return dataclasses.replace(brief, camera=_coerce_enum(Camera, camera, "camera"))


def set_ratio(brief: Brief, ratio: Union[Ratio, str]) -> Brief:
    return dataclasses.replace(brief, ratio=_coerce_enum(Ratio, ratio, "ratio"))


def set_reference_image(brief: Brief, image: Optional[ReferenceImage]) -> Brief:
    return dataclasses.replace(brief, reference_image=image)


def replace_from_analysis(brief: Brief, result: AnalysisResult) -> Brief:
    """Swap style tags, both color sets, camera and ratio for the analysis ones.

    The previous tags and colors are discarded, never merged. Idea text and
    reference image are kept. Colors are taken as given; reconciling them
    against the palette is the caller's job.
    """
    return dataclasses.replace(
        brief,
        style_tags=_dedupe(result.style_tags),
        background_colors=_dedupe([Color.parse(c, field="bgColors") for c in result.bg_colors]),
        object_colors=_dedupe([Color.parse(c, field="objColors") for c in result.obj_colors]),
        camera=result.camera,
        ratio=result.ratio,
    )


def reset(brief: Brief) -> Brief:
    return Brief()


class SelectionState:
    """Holds the current brief and notifies subscribers after each change."""

    def __init__(self, brief: Optional[Brief] = None):
        self._brief = brief or Brief()
        self._subscribers: List[Subscriber] = []
        self._analysis_seq = 0

    @property
    def brief(self) -> Brief:
        return self._brief

    def subscribe(self, callback: Subscriber) -> Callable[[], None]:
        """Register ``callback``; returns a function that unregisters it."""
        self._subscribers.append(callback)

        def _unsubscribe() -> None:
            if callback in self._subscribers:
                self._subscribers.remove(callback)

        return _unsubscribe

    def _commit(self, new: Brief) -> Brief:
        if new == self._brief:
            return self._brief
        self._brief = new
        for callback in list(self._subscribers):
            callback(new)
        return new

    def set_idea(self, idea: str) -> Brief:
        return self._commit(set_idea(self._brief, idea))

    def toggle_style_tag(self, tag: Union[StyleTag, str]) -> Brief:
        return self._commit(toggle_style_tag(self._brief, tag))

    def toggle_color(self, role: Union[ColorRole, str], color: Union[Color, str]) -> Brief:
        return self._commit(toggle_color(self._brief, role, color))

    def set_camera(self, camera: Union[Camera, str]) -> Brief:
        return self._commit(set_camera(self._brief, camera))

    def set_ratio(self, ratio: Union[Ratio, str]) -> Brief:
        return self._commit(set_ratio(self._brief, ratio))

    def set_reference_image(self, image: ReferenceImage) -> Brief:
        # An analysis of the previous image must not overwrite the brief
        self._analysis_seq += 1
        return self._commit(set_reference_image(self._brief, image))

    def clear_reference_image(self) -> Brief:
        self._analysis_seq += 1
        return self._commit(set_reference_image(self._brief, None))

    def replace_from_analysis(self, result: AnalysisResult) -> Brief:
        # Computed in full before commit so a bad color cannot leave a half-applied brief
        new = replace_from_analysis(self._brief, result)
        return self._commit(new)

    def reset(self) -> Brief:
        # An analysis started before the reset must not repopulate the brief
        self._analysis_seq += 1
        return self._commit(reset(self._brief))

    # Analysis sequencing

    def begin_analysis(self) -> int:
        """Start a new analysis; any earlier in-flight analysis becomes stale."""
        self._analysis_seq += 1
        return self._analysis_seq

    def is_current(self, token: int) -> bool:
        return token == self._analysis_seq
