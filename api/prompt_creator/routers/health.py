import time
from typing import Any, Dict

from fastapi import APIRouter

from ..core.config import settings
from ..models.schemas import Camera, DEFAULT_CAMERA, DEFAULT_RATIO, OutputLanguage, Ratio, STYLE_CATEGORIES
from ..services.openrouter import is_configured
from ..services.palette import PALETTE
from ..services.sessions import session_store

router = APIRouter()

_start_time = time.time()


@router.get("/healthz")
async def health() -> Dict[str, Any]:
    """Liveness plus a view of what the service is configured to call."""
    transport_ready = is_configured()
    return {
        "ok": True,
        "status": "healthy" if transport_ready else "degraded",
        "uptime_seconds": round(time.time() - _start_time, 2),
        "active_sessions": len(session_store),
        "services": {
            "openrouter": transport_ready,
        },
    }


@router.get("/palette")
async def palette() -> Dict[str, Any]:
    """The fixed palette in declaration order."""
    return {
        "colors": [{"name": entry.name, "hex": entry.color.hex} for entry in PALETTE],
        "snap_threshold": settings.palette_snap_threshold,
    }


@router.get("/options")
async def options() -> Dict[str, Any]:
    """Closed vocabularies accepted by the briefs API."""
    return {
        "cameras": [c.value for c in Camera],
        "ratios": [r.value for r in Ratio],
        "style_tags": {category: [t.value for t in tags] for category, tags in STYLE_CATEGORIES.items()},
        "output_languages": [lang.value for lang in OutputLanguage],
        "defaults": {
            "camera": DEFAULT_CAMERA.value,
            "ratio": DEFAULT_RATIO.value,
            "output_language": settings.default_output_language,
        },
    }
