"""Pytest configuration and fixtures for the Prompt Creator API."""

import base64
import json
import os
import sys
from pathlib import Path
from typing import Any, Dict, Generator, List
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

# Add the api directory to Python path
api_dir = Path(__file__).parent
sys.path.insert(0, str(api_dir))

from prompt_creator.main import app
from prompt_creator.core.config import settings
from prompt_creator.routers import briefs
from prompt_creator.services.generation import GenerationService
from prompt_creator.services.image_analysis import ImageAnalysisAdapter
from prompt_creator.services.sessions import SessionStore


class FakeTransport:
    """Async stand-in for a model call.

    Each call pops the next queued reply; an exception instance in the queue
    is raised instead of returned. Calls are recorded for assertions.
    """

    def __init__(self, *replies: Any):
        self.replies: List[Any] = list(replies)
        self.calls: List[Dict[str, Any]] = []

    def queue(self, *replies: Any) -> None:
        self.replies.extend(replies)

    async def __call__(self, *args: Any, **kwargs: Any) -> str:
        self.calls.append({"args": args, "kwargs": kwargs})
        if not self.replies:
            raise AssertionError("FakeTransport called with no queued reply")
        reply = self.replies.pop(0)
        if isinstance(reply, BaseException):
            raise reply
        return reply


@pytest.fixture(autouse=True)
def setup_test_env(monkeypatch):
    """Set up test environment variables and matching settings."""
    test_env = {
        "TESTING": "true",
        "OPENROUTER_API_KEY": "test-key",
        "SERVICE_BASE_URL": "http://localhost:8000",
        "LOG_LEVEL": "DEBUG",
    }
    for key, value in test_env.items():
        monkeypatch.setenv(key, value)

    # Settings are read once at import; pin the values tests rely on
    monkeypatch.setattr(settings, "openrouter_api_key", "test-key")
    monkeypatch.setattr(settings, "palette_snap_threshold", 60.0)
    monkeypatch.setattr(settings, "default_output_language", "ko")
    monkeypatch.setattr(settings, "openrouter_max_attempts", 2)
    monkeypatch.setattr(settings, "openrouter_backoff_ms", 0)
    yield


@pytest.fixture
def sample_generation_payload() -> Dict[str, Any]:
    """A reply that satisfies the generation contract."""
    return {
        "midjourney": "a cozy reading nook, warm light --ar 1:1",
        "dalle": "A cozy reading nook bathed in warm afternoon light.",
        "stableDiffusion": "cozy reading nook, warm light, 3d render, matte",
        "designIntent": "따뜻하고 아늑한 분위기를 강조했습니다.",
        "insight": {
            "visual_balance": {
                "vibrancy": 62,
                "minimalism": 40,
                "complexity": 55,
                "softness": 80,
                "futurism": 15,
            },
            "tone_manner": {"temperature": "Warm", "dynamism": "Calm"},
            "texture_density": {"reflectivity": 20, "transparency": 10, "roughness": 65},
            "designer_comment": "부드러운 질감이 공간의 온기를 살립니다.",
        },
    }


@pytest.fixture
def sample_generation_json(sample_generation_payload) -> str:
    return json.dumps(sample_generation_payload, ensure_ascii=False)


@pytest.fixture
def sample_analysis_payload() -> Dict[str, Any]:
    """A reply that satisfies the image analysis contract."""
    return {
        "camera": "Isometric",
        "ratio": "16:9",
        "artStyle": "3D Render",
        "texture": "Matte",
        "lighting": "Day",
        "bgColors": ["#FF0001", "#000000"],
        "objColors": ["#123456"],
    }


@pytest.fixture
def sample_analysis_json(sample_analysis_payload) -> str:
    return json.dumps(sample_analysis_payload)


@pytest.fixture
def png_base64() -> str:
    """Tiny payload with a PNG signature; only its encoding is checked."""
    return base64.b64encode(b"\x89PNG\r\n\x1a\n" + b"\x00" * 24).decode("ascii")


@pytest.fixture
def png_data_url(png_base64) -> str:
    return f"data:image/png;base64,{png_base64}"


@pytest.fixture
def session_store() -> SessionStore:
    return SessionStore()


@pytest.fixture
def make_transport():
    """Factory for FakeTransport instances with queued replies."""
    return FakeTransport


@pytest.fixture
def generation_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def analysis_transport() -> FakeTransport:
    return FakeTransport()


@pytest.fixture
def client(session_store, generation_transport, analysis_transport) -> Generator[TestClient, None, None]:
    """Create a test client with an isolated session store and fake model calls."""
    app.dependency_overrides[briefs.get_session_store] = lambda: session_store
    app.dependency_overrides[briefs.get_generation_service] = lambda: GenerationService(transport=generation_transport)
    app.dependency_overrides[briefs.get_analysis_adapter] = lambda: ImageAnalysisAdapter(analyzer=analysis_transport)
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def subscriber() -> MagicMock:
    """Callable mock usable as a SelectionState subscriber."""
    return MagicMock()
