"""OpenRouter chat-completions transport.

Returns the raw message text of the first choice and nothing more; parsing
and contract checks belong to the callers. Every failure surfaces as
``TransportError``. Retries for timeouts, network errors and 5xx replies
live here, in the transport, and are bounded by configuration.
"""

import asyncio
import logging
import os
from typing import Any, Dict, List, Optional

import httpx

from ..core.config import settings
from ..models.exceptions import TransportError

logger = logging.getLogger(__name__)


def _headers() -> Dict[str, str]:
    """Build standard OpenRouter headers."""
    api_key = settings.openrouter_api_key or os.getenv("OPENROUTER_API_KEY", "")
    return {
        "Authorization": f"Bearer {api_key}",
        "Content-Type": "application/json",
        "HTTP-Referer": os.getenv("SERVICE_BASE_URL", "http://localhost:8000"),
        "X-Title": "Prompt Creator",
    }


def _extract_message_text(response: Dict[str, Any]) -> str:
    """Extract text content from an OpenRouter-style response."""
    choices = response.get("choices") or []
    if not choices:
        return ""
    msg = choices[0].get("message") or {}
    content = msg.get("content", "")
    if isinstance(content, str):
        return content
    if isinstance(content, list):
        parts = [p.get("text", "") for p in content if isinstance(p, dict) and "text" in p]
        return "\n".join([p for p in parts if p])
    return ""


def is_configured() -> bool:
    return bool(settings.openrouter_api_key or os.getenv("OPENROUTER_API_KEY"))


async def complete(
    messages: List[Dict[str, Any]],
    *,
    model: str,
    response_format: Optional[Dict[str, Any]] = None,
    task: str = "generation",
    temperature: float = 0.7,
    max_tokens: int = 2000,
) -> str:
    """Send a chat completion and return the raw text of the reply.

    Raises:
        TransportError: missing API key, non-200 reply, timeout, network
            failure, or a reply without any text.
    """
    if not is_configured():
        raise TransportError("OPENROUTER_API_KEY is not configured", model=model, details={"task": task})

    payload: Dict[str, Any] = {
        "model": model,
        "messages": messages,
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if response_format is not None:
        payload["response_format"] = response_format

    timeout_seconds = max(settings.openrouter_timeout, settings.min_timeout_seconds)
    max_attempts = max(1, settings.openrouter_max_attempts)
    url = f"{settings.openrouter_base_url.rstrip('/')}/chat/completions"

    last_err: Optional[TransportError] = None
    for attempt in range(1, max_attempts + 1):
        logger.debug(f"OpenRouter request: task={task}, model={model}, attempt={attempt}")
        try:
            async with httpx.AsyncClient(timeout=timeout_seconds) as client:
                response = await client.post(url, headers=_headers(), json=payload)
        except httpx.TimeoutException as e:
            last_err = TransportError(f"OpenRouter request timed out after {timeout_seconds}s", model=model, timed_out=True, details={"task": task})
            logger.warning(f"OpenRouter timeout for {task} (attempt {attempt}/{max_attempts}): {e}")
        except httpx.HTTPError as e:
            last_err = TransportError(f"OpenRouter request failed: {e}", model=model, details={"task": task})
            logger.warning(f"OpenRouter network error for {task} (attempt {attempt}/{max_attempts}): {e}")
        else:
            if response.status_code == 200:
                try:
                    body = response.json()
                except ValueError:
                    raise TransportError("OpenRouter returned a non-JSON envelope", status_code=200, model=model, details={"task": task})
                text = _extract_message_text(body)
                if not text.strip():
                    raise TransportError("OpenRouter returned an empty completion", status_code=200, model=model, details={"task": task})
                logger.info(f"OpenRouter API call successful for {task} using {model}")
                return text

            last_err = TransportError(
                f"OpenRouter API request failed: {response.status_code}",
                status_code=response.status_code,
                model=model,
                details={"task": task},
            )
            # Client errors will not improve on retry
            if response.status_code < 500 and response.status_code != 429:
                raise last_err
            logger.warning(f"OpenRouter returned {response.status_code} for {task} (attempt {attempt}/{max_attempts})")

        if attempt < max_attempts:
            await asyncio.sleep(settings.openrouter_backoff_ms * attempt / 1000.0)

    assert last_err is not None
    raise last_err
