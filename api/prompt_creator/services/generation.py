from __future__ import annotations

import logging
import time
from typing import Any, Awaitable, Callable, Dict, List, Optional, Tuple, Union

from ..core.config import settings
from ..models.schemas import GenerationRequest, GenerationResult, OutputLanguage
from . import openrouter
from .request_builder import build_generation_messages, build_request, generation_response_format
from .response_validator import validate_response
from .sessions import BriefSession

logger = logging.getLogger(__name__)

Transport = Callable[..., Awaitable[str]]


class GenerationService:
    """Brackets one generation call: build the request, send it, validate the reply.

    A session's ``last_result`` changes only on success. Any failure
    (ValidationError, TransportError, ParseError, SchemaError) propagates to
    the caller and the previous result stays in place.
    """

    def __init__(self, transport: Optional[Transport] = None):
        self._transport = transport or openrouter.complete

    async def send(self, request: GenerationRequest) -> str:
        messages: List[Dict[str, Any]] = build_generation_messages(request)
        return await self._transport(
            messages,
            model=settings.generation_model,
            response_format=generation_response_format(),
            task="generation",
        )

    async def generate(
        self,
        session: BriefSession,
        output_language: Optional[Union[OutputLanguage, str]] = None,
    ) -> Tuple[GenerationRequest, GenerationResult]:
        # Raises ValidationError before any external call
        request = build_request(session.state.brief, output_language)

        start = time.time()
        raw = await self.send(request)
        result = validate_response(raw)
        session.last_result = result

        logger.info(
            "Generation completed",
            extra={
                "session_id": session.session_id,
                "output_language": request.output_language.value,
                "duration_ms": int((time.time() - start) * 1000),
            },
        )
        return request, result
