"""Turn raw model output into a trusted ``GenerationResult`` or fail loudly.

Validation is all-or-nothing: the raw text is parsed as JSON, checked
against the ``generation_result.json`` guardrails contract, and only then
converted into pydantic models. Scores are not clamped; values outside
0-100 are passed through and logged.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Any, Optional

from ..models.exceptions import ParseError
from ..models.schemas import GenerationResult
from .guardrails import validate_contract

logger = logging.getLogger(__name__)

GENERATION_CONTRACT = "generation_result.json"

_FENCE_RE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL | re.IGNORECASE)

SCORE_MIN = 0.0
SCORE_MAX = 100.0


def parse_json(raw_text: Optional[str]) -> Any:
    """Parse model output as JSON, tolerating a surrounding markdown code fence.

    ``NaN``, ``Infinity`` and ``-Infinity`` are not JSON and are rejected.
    """
    if raw_text is None or not raw_text.strip():
        raise ParseError("Empty response from generative service")
    text = raw_text.strip()
    m = _FENCE_RE.match(text)
    if m:
        text = m.group(1)

    def _reject_constant(name: str) -> Any:
        raise ParseError(f"Response is not valid JSON: {name} is not a JSON value", raw_excerpt=text[:200])

    try:
        return json.loads(text, parse_constant=_reject_constant)
    except json.JSONDecodeError as e:
        raise ParseError(
            f"Response is not valid JSON: {e.msg} (line {e.lineno}, column {e.colno})",
            raw_excerpt=text[:200],
        ) from e


def validate_response(raw_text: Optional[str]) -> GenerationResult:
    payload = parse_json(raw_text)
    validate_contract(GENERATION_CONTRACT, payload)
    result = GenerationResult.model_validate(payload)

    out_of_range = {
        name: value for name, value in result.insight.scores().items()
        if not SCORE_MIN <= value <= SCORE_MAX
    }
    if out_of_range:
        logger.warning("Insight scores outside 0-100 passed through", extra={"scores": out_of_range})
    return result
