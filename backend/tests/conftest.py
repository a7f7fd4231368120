from __future__ import annotations

import importlib
import sys
from pathlib import Path
from typing import Any, Callable

import httpx
import pytest
from fastapi.testclient import TestClient

BACKEND_DIR = Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))


@pytest.fixture
def backend_module(tmp_path, monkeypatch):
    monkeypatch.setenv("OURABOT_DB_PATH", str(tmp_path / "ourabot-test.sqlite"))
    monkeypatch.setenv("SECRET_OURA_API_KEY", "oura-test-key")
    monkeypatch.setenv("SECRET_OPENAI_API_KEY", "openai-test-key")
    monkeypatch.setenv("OURABOT_PROMPTS_DIR", str(BACKEND_DIR / "prompts"))
    monkeypatch.setenv("OURABOT_LOG_REQUESTS", "false")

    if "main" in sys.modules:
        module = importlib.reload(sys.modules["main"])
    else:
        module = importlib.import_module("main")
    return module


@pytest.fixture
def client(backend_module):
    with TestClient(backend_module.app) as test_client:
        yield test_client


@pytest.fixture
def oura_record() -> dict[str, Any]:
    return {
        "id": "8f9a5221-639e-4a85-81cb-4065ef23f979",
        "day": "2024-03-11",
        "score": 88,
        "timestamp": "2024-03-11T00:00:00+00:00",
        "contributors": {"sleep_balance": 90, "note": "good", "hrv_balance": None},
        "tags": ["travel"],
    }


@pytest.fixture
def provider_transport() -> Callable[..., httpx.MockTransport]:
    """Build a MockTransport that answers every provider GET with ``body``."""

    def _make(body: Any = None, *, status_code: int = 200, seen: list[httpx.Request] | None = None):
        def handler(request: httpx.Request) -> httpx.Response:
            if seen is not None:
                seen.append(request)
            return httpx.Response(status_code, json=body)

        return httpx.MockTransport(handler)

    return _make
