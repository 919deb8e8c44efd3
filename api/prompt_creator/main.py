import logging
from typing import List

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from .core.config import settings
from .core.logging import setup_logging
from .middleware.request_response import RequestResponseMiddleware
from .models.exceptions import EXCEPTION_HANDLERS, PromptCreatorException, to_http_exception
from .routers import briefs, health

setup_logging(settings.log_level)
logger = logging.getLogger(__name__)


def cors_origins() -> List[str]:
    """Configured origins; wildcard in dev, none in production unless listed."""
    configured = [o.strip() for o in (settings.cors_allow_origins or "").split(",") if o.strip()]
    if configured:
        return configured
    return [] if settings.service_env in ("prod", "production") else ["*"]


app = FastAPI(
    title=settings.service_name,
    description="Design briefs in, schema-checked image prompts and design insight out",
    version="1.0.0",
)

app.add_middleware(RequestResponseMiddleware)
_origins = cors_origins()
app.add_middleware(
    CORSMiddleware,
    allow_origins=_origins,
    allow_credentials="*" not in _origins,
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "X-Request-ID"],
)


@app.exception_handler(PromptCreatorException)
async def handle_prompt_creator_error(request: Request, exc: PromptCreatorException):
    # Most specific registered converter wins; unknown subclasses are a 500
    convert = next((EXCEPTION_HANDLERS[cls] for cls in type(exc).__mro__ if cls in EXCEPTION_HANDLERS), None)
    http_exc = convert(exc) if convert else to_http_exception(exc, status_code=500)

    logger.log(
        logging.WARNING if http_exc.status_code < 500 else logging.ERROR,
        f"{type(exc).__name__} on {request.method} {request.url.path}: {exc.message}",
        extra={"status_code": http_exc.status_code, "error_details": exc.details},
    )
    return JSONResponse(status_code=http_exc.status_code, content=http_exc.detail)


@app.exception_handler(RequestValidationError)
async def handle_request_validation_error(request: Request, exc: RequestValidationError):
    """Malformed request bodies and paths get the same error shape as domain errors."""
    errors = jsonable_encoder(exc.errors())
    first = errors[0] if errors else {}
    field = ".".join(str(p) for p in first.get("loc", ()) if p not in ("body", "path", "query"))
    logger.warning(
        f"Request validation failed on {request.method} {request.url.path}",
        extra={"status_code": 422, "validation_errors": errors},
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": "RequestValidationError",
            "message": first.get("msg", "Invalid request"),
            "field": field or None,
            "errors": errors,
        },
    )


app.include_router(briefs.router)
app.include_router(health.router)
