"""Exception classes for the Prompt Creator API.

Four failure kinds reach callers: a brief that cannot be turned into a
request (``ValidationError``), an external call that failed or timed out
(``TransportError``), a reply that is not JSON (``ParseError``) and a reply
that is JSON but breaks the contract (``SchemaError``). None of them are
retried inside the core.
"""

from typing import Dict, Any, Optional
from fastapi import HTTPException


class PromptCreatorException(Exception):
    """Base exception for all Prompt Creator errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ValidationError(PromptCreatorException):
    """Raised when a brief or a user input fails a local precondition."""

    def __init__(self, field: str, message: str, value: Any = None):
        self.field = field
        self.value = value
        validation_message = f"Validation error for field '{field}': {message}"
        details = {"field": field, "message": message}
        if value is not None:
            details["value"] = value
        super().__init__(validation_message, details)


class TransportError(PromptCreatorException):
    """Raised when a call to the generative service fails or times out."""

    def __init__(self,
                 message: str,
                 status_code: Optional[int] = None,
                 model: Optional[str] = None,
                 timed_out: bool = False,
                 details: Optional[Dict[str, Any]] = None):
        self.status_code = status_code
        self.model = model
        self.timed_out = timed_out
        transport_details = details or {}
        if status_code is not None:
            transport_details["upstream_status"] = status_code
        if model:
            transport_details["model"] = model
        if timed_out:
            transport_details["timed_out"] = True
        super().__init__(message, transport_details)


class ParseError(PromptCreatorException):
    """Raised when a reply is empty or not valid JSON."""

    def __init__(self, message: str, raw_excerpt: Optional[str] = None):
        self.raw_excerpt = raw_excerpt
        details = {}
        if raw_excerpt:
            details["raw_excerpt"] = raw_excerpt
        super().__init__(message, details)


class SchemaError(PromptCreatorException):
    """Raised when a reply is JSON but a required field is missing or mistyped."""

    def __init__(self, contract: str, field: str, message: str):
        self.contract = contract
        self.field = field
        schema_message = f"Contract '{contract}' violated at '{field}': {message}"
        details = {"contract": contract, "field": field, "reason": message}
        super().__init__(schema_message, details)


class SessionNotFound(PromptCreatorException):
    """Raised when a brief session id is unknown."""

    def __init__(self, session_id: str):
        self.session_id = session_id
        super().__init__(f"Brief session '{session_id}' not found", {"session_id": session_id})


# HTTP Exception converters for FastAPI
def to_http_exception(exc: PromptCreatorException, status_code: int = 500) -> HTTPException:
    """Convert custom exception to HTTPException for FastAPI."""
    detail = {
        "error": exc.__class__.__name__,
        "message": exc.message,
        **exc.details
    }
    return HTTPException(status_code=status_code, detail=detail)


def validation_to_http_exception(exc: ValidationError) -> HTTPException:
    """Convert local precondition failures to HTTP 400."""
    return to_http_exception(exc, status_code=400)


def transport_to_http_exception(exc: TransportError) -> HTTPException:
    """Convert transport failures to 502, or 504 on timeout."""
    return to_http_exception(exc, status_code=504 if exc.timed_out else 502)


def contract_to_http_exception(exc: PromptCreatorException) -> HTTPException:
    """Upstream replies that cannot be trusted are a bad gateway."""
    return to_http_exception(exc, status_code=502)


def session_to_http_exception(exc: SessionNotFound) -> HTTPException:
    return to_http_exception(exc, status_code=404)


# Exception handler registry
EXCEPTION_HANDLERS = {
    ValidationError: validation_to_http_exception,
    TransportError: transport_to_http_exception,
    ParseError: contract_to_http_exception,
    SchemaError: contract_to_http_exception,
    SessionNotFound: session_to_http_exception,
}
