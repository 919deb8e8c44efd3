from __future__ import annotations

import os
from dataclasses import dataclass


def getenv(name: str, default: str | None = None) -> str | None:
    v = os.getenv(name, default)
    return v


@dataclass
class Settings:
    # Service
    service_name: str = getenv("SERVICE_NAME", "prompt-creator") or "prompt-creator"
    service_env: str = getenv("SERVICE_ENV", "dev") or "dev"
    log_level: str = getenv("LOG_LEVEL", "INFO") or "INFO"

    # External endpoints/keys
    openrouter_api_key: str | None = getenv("OPENROUTER_API_KEY")
    openrouter_base_url: str = getenv("OPENROUTER_BASE_URL", "https://openrouter.ai/api/v1") or "https://openrouter.ai/api/v1"
    generation_model: str = getenv("GENERATION_MODEL", "google/gemini-2.5-flash") or "google/gemini-2.5-flash"
    analysis_model: str = getenv("ANALYSIS_MODEL", "google/gemini-2.5-flash") or "google/gemini-2.5-flash"

    # OpenRouter timeout and retry configuration (seconds / attempts / ms)
    openrouter_timeout: int = int(getenv("OPENROUTER_TIMEOUT", "60") or "60")
    openrouter_max_attempts: int = int(getenv("OPENROUTER_MAX_ATTEMPTS", "2") or "2")
    openrouter_backoff_ms: int = int(getenv("OPENROUTER_BACKOFF_MS", "400") or "400")
    min_timeout_seconds: int = int(getenv("MIN_TIMEOUT_SECONDS", "3") or "3")

    # Color reconciliation: max Euclidean RGB distance (0..441) for snapping
    # an analysis-derived color onto the fixed palette.
    palette_snap_threshold: float = float(getenv("PALETTE_SNAP_THRESHOLD", "60") or "60")

    # Brief defaults
    default_output_language: str = getenv("DEFAULT_OUTPUT_LANGUAGE", "ko") or "ko"
    max_reference_image_bytes: int = int(getenv("MAX_REFERENCE_IMAGE_BYTES", "10485760") or "10485760")  # 10MB

    # Security & policy
    cors_allow_origins: str | None = getenv("CORS_ALLOW_ORIGINS")


settings = Settings()
