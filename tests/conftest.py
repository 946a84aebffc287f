# tests/conftest.py
"""
Shared pytest fixtures for the Screenshop Engine tests.

Provides:
- Settings pointed at a test API key
- A fake Anthropic endpoint (httpx.MockTransport) recording every request
- Image byte factories
- An ASGI client with dependency overrides
"""
import io
import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from PIL import Image

from config import Settings
from models import GeneratedFile
from services.preview_store import PreviewStore
from services.prompt_builder import REQUIRED_PATHS
from services.storefront_generator import StorefrontGenerator
from services.wizard import WizardSessionStore


# ═══════════════════════════════════════════════════════
# FAKE ANTHROPIC ENDPOINT
# ═══════════════════════════════════════════════════════

def message_response(*texts: str) -> Dict[str, Any]:
    """Body of a successful Messages API response"""
    return {
        "id": "msg_test",
        "type": "message",
        "role": "assistant",
        "model": "claude-sonnet-4-5",
        "content": [{"type": "text", "text": t} for t in texts],
        "stop_reason": "end_turn",
        "stop_sequence": None,
        "usage": {"input_tokens": 120, "output_tokens": 480},
    }


def files_json(paths: List[str], content: str = "export default function X() {}") -> str:
    return json.dumps({"files": [{"path": p, "content": content} for p in paths]})


class FakeAnthropic:
    """Records requests and replies with a canned response"""

    def __init__(self):
        self.requests: List[httpx.Request] = []
        self.status_code = 200
        self.body: Any = message_response(files_json(list(REQUIRED_PATHS)))
        self.raise_error: Optional[Exception] = None

    @property
    def calls(self) -> int:
        return len(self.requests)

    def last_json(self) -> Dict[str, Any]:
        return json.loads(self.requests[-1].content)

    def reply_with_text(self, *texts: str) -> None:
        self.status_code = 200
        self.body = message_response(*texts)

    def reply_with_error(self, status_code: int, body: Any) -> None:
        self.status_code = status_code
        self.body = body

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if self.raise_error is not None:
            raise self.raise_error
        if isinstance(self.body, str):
            return httpx.Response(self.status_code, text=self.body)
        return httpx.Response(self.status_code, json=self.body)

    def http_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handler))


@pytest.fixture
def fake_anthropic() -> FakeAnthropic:
    return FakeAnthropic()


# ═══════════════════════════════════════════════════════
# SETTINGS / SERVICES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        ENVIRONMENT="test",
        ANTHROPIC_API_KEY="sk-ant-test",
        ANTHROPIC_BASE_URL="https://api.anthropic.com",
        SHOPIFY_STORE_DOMAIN="demo-store.myshopify.com",
        SHOPIFY_STOREFRONT_ACCESS_TOKEN="storefront-token",
        ENFORCE_REQUIRED_FILES=True,
        MAX_SCREENSHOTS=5,
        MAX_UPLOAD_BYTES=10 * 1024 * 1024,
    )


@pytest.fixture
def generator(test_settings, fake_anthropic) -> StorefrontGenerator:
    return StorefrontGenerator(settings=test_settings, http_client=fake_anthropic.http_client())


@pytest.fixture
def previews() -> PreviewStore:
    return PreviewStore()


@pytest.fixture
def session_store(test_settings, previews) -> WizardSessionStore:
    return WizardSessionStore(settings=test_settings, previews=previews)


# ═══════════════════════════════════════════════════════
# IMAGES
# ═══════════════════════════════════════════════════════

@pytest.fixture
def make_image() -> Callable[..., bytes]:
    def _make(width: int = 800, height: int = 600, fmt: str = "PNG", mode: str = "RGB") -> bytes:
        color = (30, 60, 90, 255)[:len(mode)] if mode in ("RGB", "RGBA") else 128
        image = Image.new(mode, (width, height), color)
        buffer = io.BytesIO()
        image.save(buffer, format=fmt)
        return buffer.getvalue()
    return _make


class StubGenerator:
    """Stands in for StorefrontGenerator in wizard tests"""

    def __init__(self, files: Optional[List[GeneratedFile]] = None, error: Optional[Exception] = None):
        self.files = files if files is not None else [GeneratedFile(path="src/app/page.tsx", content="x")]
        self.error = error
        self.calls: List[Dict[str, Any]] = []

    async def generate(self, screenshots, page_hints):
        self.calls.append({"screenshots": list(screenshots), "page_hints": list(page_hints)})
        if self.error is not None:
            raise self.error
        return self.files


# ═══════════════════════════════════════════════════════
# API CLIENT
# ═══════════════════════════════════════════════════════

@pytest_asyncio.fixture
async def async_client(generator, session_store, previews):
    """Async HTTP client for the FastAPI app with test services wired in."""
    from dependencies import get_preview_store, get_session_store, get_storefront_generator
    from main import app

    app.dependency_overrides[get_storefront_generator] = lambda: generator
    app.dependency_overrides[get_session_store] = lambda: session_store
    app.dependency_overrides[get_preview_store] = lambda: previews

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()
