from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Dict, List, Optional

from ..core.config import settings
from ..models.schemas import AnalysisResult, ReferenceImage
from . import openrouter
from .colors import reconcile_many
from .guardrails import response_format_schema, validate_contract
from .prompts import ANALYSIS_SYSTEM, ANALYSIS_USER
from .response_validator import parse_json
from .selection import SelectionState

logger = logging.getLogger(__name__)

ANALYSIS_CONTRACT = "image_analysis.json"

Analyzer = Callable[[ReferenceImage], Awaitable[str]]


def parse_analysis(raw_text: Optional[str]) -> AnalysisResult:
    """Parse and contract-check an image analysis reply."""
    payload = parse_json(raw_text)
    validate_contract(ANALYSIS_CONTRACT, payload)
    return AnalysisResult.model_validate(payload)


def build_analysis_messages(image: ReferenceImage) -> List[Dict[str, Any]]:
    return [
        {"role": "system", "content": ANALYSIS_SYSTEM},
        {
            "role": "user",
            "content": [
                {"type": "image_url", "image_url": {"url": image.data_url}},
                {"type": "text", "text": ANALYSIS_USER},
            ],
        },
    ]


def analysis_response_format() -> Dict[str, Any]:
    return {
        "type": "json_schema",
        "json_schema": {
            "name": "image_analysis",
            "strict": True,
            "schema": response_format_schema(ANALYSIS_CONTRACT),
        },
    }


async def openrouter_analyzer(image: ReferenceImage) -> str:
    return await openrouter.complete(
        build_analysis_messages(image),
        model=settings.analysis_model,
        response_format=analysis_response_format(),
        task="analysis",
        temperature=0.2,
    )


class ImageAnalysisAdapter:
    """Feeds image analysis guesses into a SelectionState.

    The external call happens before anything is touched. If it fails, or its
    reply breaks the contract, the error propagates and the brief is left
    exactly as it was. A reply that arrives after a newer analysis has begun
    is dropped.
    """

    def __init__(self, analyzer: Optional[Analyzer] = None, threshold: Optional[float] = None):
        self._analyzer = analyzer or openrouter_analyzer
        self.threshold = settings.palette_snap_threshold if threshold is None else threshold

    async def analyze(self, image: ReferenceImage) -> AnalysisResult:
        raw = await self._analyzer(image)
        return parse_analysis(raw)

    def reconcile(self, result: AnalysisResult) -> AnalysisResult:
        """Snap both color lists onto the palette with the same threshold."""
        bg = reconcile_many(result.bg_colors, self.threshold)
        obj = reconcile_many(result.obj_colors, self.threshold)
        return result.model_copy(update={
            "bg_colors": tuple(c.hex for c in bg),
            "obj_colors": tuple(c.hex for c in obj),
        })

    async def analyze_into(self, state: SelectionState, image: ReferenceImage) -> bool:
        """Analyze ``image`` and replace the brief's tags and colors.

        The sequence token is taken before the external call, so starting an
        analysis supersedes any earlier one still in flight even if this one
        then fails. A failure leaves the brief itself untouched.

        Returns:
            True if the result was applied, False if a newer analysis, a
            reference image change or a reset superseded it while the call
            was in flight.
        """
        token = state.begin_analysis()
        try:
            result = await self.analyze(image)
        except Exception as e:
            logger.warning(f"Image analysis failed, brief left unchanged: {type(e).__name__}: {e}")
            raise
        if not state.is_current(token):
            logger.info("Discarding stale image analysis result", extra={"token": token})
            return False
        state.replace_from_analysis(self.reconcile(result))
        return True
