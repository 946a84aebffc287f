import httpx
import pytest

from exceptions import (
    ConfigurationError,
    MalformedResponse,
    ModelTransportError,
    ParseFailure,
    UpstreamError,
)
from services.model_client import AnthropicModelClient

MESSAGES = [{"role": "user", "content": [{"type": "text", "text": "hi"}]}]


def _client(fake_anthropic, api_key="sk-ant-test", **kwargs):
    return AnthropicModelClient(
        api_key=api_key,
        model="claude-sonnet-4-5",
        max_tokens=8192,
        http_client=fake_anthropic.http_client(),
        **kwargs
    )


def test_missing_api_key_fails_before_network(fake_anthropic):
    with pytest.raises(ConfigurationError, match="ANTHROPIC_API_KEY"):
        _client(fake_anthropic, api_key="")
    assert fake_anthropic.calls == 0


@pytest.mark.asyncio
async def test_returns_first_text_block(fake_anthropic):
    fake_anthropic.reply_with_text("first", "second")
    text = await _client(fake_anthropic).complete("system", MESSAGES)
    assert text == "first"


@pytest.mark.asyncio
async def test_request_shape(fake_anthropic):
    fake_anthropic.reply_with_text("{}")
    await _client(fake_anthropic).complete("the system prompt", MESSAGES)

    assert fake_anthropic.calls == 1
    request = fake_anthropic.requests[0]
    assert request.method == "POST"
    assert request.url.path == "/v1/messages"
    assert request.headers["x-api-key"] == "sk-ant-test"
    assert request.headers["anthropic-version"] == "2023-06-01"

    body = fake_anthropic.last_json()
    assert body["model"] == "claude-sonnet-4-5"
    assert body["max_tokens"] == 8192
    assert body["system"] == "the system prompt"
    assert body["messages"] == MESSAGES
    assert not body.get("stream")


@pytest.mark.asyncio
async def test_upstream_error_is_surfaced_verbatim_without_retry(fake_anthropic):
    error_body = '{"type":"error","error":{"type":"overloaded_error","message":"Overloaded"}}'
    fake_anthropic.reply_with_error(529, error_body)

    with pytest.raises(UpstreamError) as exc_info:
        await _client(fake_anthropic).complete("system", MESSAGES)

    assert exc_info.value.upstream_status == 529
    assert exc_info.value.detail == error_body
    assert exc_info.value.message == f"Anthropic API error: {error_body}"
    assert exc_info.value.status_code == 502
    assert fake_anthropic.calls == 1


@pytest.mark.asyncio
async def test_client_error_status_is_upstream_error(fake_anthropic):
    fake_anthropic.reply_with_error(400, {"type": "error", "error": {"type": "invalid_request_error", "message": "image too large"}})
    with pytest.raises(UpstreamError, match="image too large"):
        await _client(fake_anthropic).complete("system", MESSAGES)


@pytest.mark.asyncio
async def test_transport_failure(fake_anthropic):
    fake_anthropic.raise_error = httpx.ConnectError("connection refused")
    with pytest.raises(ModelTransportError):
        await _client(fake_anthropic).complete("system", MESSAGES)
    assert fake_anthropic.calls == 1


@pytest.mark.asyncio
async def test_response_without_text_block(fake_anthropic):
    fake_anthropic.reply_with_text()
    with pytest.raises(MalformedResponse) as exc_info:
        await _client(fake_anthropic).complete("system", MESSAGES)
    assert exc_info.value.reason == ParseFailure.NO_TEXT_BLOCK


def test_timeout_is_passed_to_sdk(fake_anthropic):
    client = _client(fake_anthropic, timeout=42.0)
    assert client.client.timeout == 42.0
