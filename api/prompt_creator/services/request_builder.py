"""Build the outbound generation request from a brief.

Colors are formatted (palette names vs. hex codes) here and only here, at
serialization time; the brief keeps ``Color`` values so it stays canonical
and re-editable.
"""

from __future__ import annotations

import base64
import binascii
import logging
import re
from typing import Any, Dict, List, Optional, Union

from ..core.config import settings
from ..models.exceptions import ValidationError
from ..models.schemas import GenerationRequest, OutputLanguage, ReferenceImage
from .colors import format_for_request
from .guardrails import response_format_schema
from .prompts import NOT_SPECIFIED, generation_system
from .response_validator import GENERATION_CONTRACT
from .selection import Brief

logger = logging.getLogger(__name__)

_DATA_URL_RE = re.compile(r"^data:([^;,]*)(;base64)?,(.*)$", re.DOTALL)


def parse_reference_image(image: str, field: str = "image") -> ReferenceImage:
    """Split a ``data:`` URL (or bare base64) into mime type and payload."""
    if not image or not image.strip():
        raise ValidationError(field, "image payload is empty")
    image = image.strip()
    mime_type, data = "image/png", image
    m = _DATA_URL_RE.match(image)
    if m:
        mime_type = m.group(1) or "image/png"
        if not m.group(2):
            raise ValidationError(field, "data URL must be base64 encoded")
        data = m.group(3)
    if not mime_type.startswith("image/"):
        raise ValidationError(field, "reference must be an image", mime_type)
    try:
        raw = base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError):
        raise ValidationError(field, "invalid base64 image data")
    if len(raw) > settings.max_reference_image_bytes:
        raise ValidationError(field, f"image exceeds {settings.max_reference_image_bytes} bytes", len(raw))
    return ReferenceImage(mime_type=mime_type, data=data)


def _language(value: Optional[Union[OutputLanguage, str]]) -> OutputLanguage:
    value = value or settings.default_output_language
    try:
        return OutputLanguage(value)
    except ValueError:
        raise ValidationError("output_language", "must be 'en' or 'ko'", value)


def build_request(brief: Brief, output_language: Optional[Union[OutputLanguage, str]] = None) -> GenerationRequest:
    """Serialize ``brief`` into a GenerationRequest.

    Raises:
        ValidationError: if the idea text is empty. No request is built and
            nothing is sent.
    """
    if not brief.idea or not brief.idea.strip():
        raise ValidationError("idea", "idea text is required to generate prompts")
    logger.debug(
        "Building generation request",
        extra={
            "style_tags": len(brief.style_tags),
            "background_colors": len(brief.background_colors),
            "object_colors": len(brief.object_colors),
            "has_reference_image": brief.reference_image is not None,
        },
    )
    return GenerationRequest(
        idea=brief.idea.strip(),
        style_tags=tuple(tag.value for tag in brief.style_tags),
        background_colors=tuple(format_for_request(brief.background_colors)),
        object_colors=tuple(format_for_request(brief.object_colors)),
        camera=brief.camera.value,
        ratio=brief.ratio.value,
        output_language=_language(output_language),
        reference_image=brief.reference_image,
    )


def _listed(values) -> str:
    return ", ".join(values) if values else NOT_SPECIFIED


def build_generation_messages(request: GenerationRequest) -> List[Dict[str, Any]]:
    user_text = "\n".join([
        f'User idea: "{request.idea}"',
        f"Selected style options: [{', '.join(request.style_tags)}]",
        f"Background colors: {_listed(request.background_colors)}",
        f"Object colors: {_listed(request.object_colors)}",
        f"Camera angle: {request.camera or NOT_SPECIFIED}",
        f"Aspect ratio: {request.ratio or NOT_SPECIFIED}",
    ])
    content: List[Dict[str, Any]] = [{"type": "text", "text": user_text}]
    if request.reference_image is not None:
        content.append({"type": "image_url", "image_url": {"url": request.reference_image.data_url}})
    return [
        {"role": "system", "content": generation_system(request.output_language)},
        {"role": "user", "content": content},
    ]


def generation_response_format() -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "generation_result",
            "strict": True,
            "schema": response_format_schema(GENERATION_CONTRACT),
        },
    }
