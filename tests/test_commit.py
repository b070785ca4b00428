import asyncio

import httpx
import pytest

from wscmt.commit import (
    FALLBACK_COMMIT_MESSAGE,
    CommitGenerator,
    FallbackMessage,
    GeneratedMessage,
)
from wscmt.config import Config
from wscmt.llm import LLMClient


def _generator(handler):
    config = Config()
    client = LLMClient(config, transport=httpx.MockTransport(handler))
    return CommitGenerator(config, llm_client=client)


def test_generated_message_is_tagged(monkeypatch):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "k")

    def handler(request):
        return httpx.Response(200, json={"content": [{"text": "feat: update config"}]})

    msg = asyncio.run(_generator(handler).generate("diff"))
    assert msg == GeneratedMessage("feat: update config")
    assert msg.is_fallback is False


def _network_error(request):
    raise httpx.ConnectTimeout("timed out", request=request)


def _server_error(request):
    return httpx.Response(503, text="unavailable")


def _malformed(request):
    return httpx.Response(200, content=b"<html>")


@pytest.mark.parametrize("handler", [_network_error, _server_error, _malformed])
def test_failures_fall_back_to_fixed_message(monkeypatch, caplog, handler):
    monkeypatch.setenv("ANTHROPIC_API_KEY", "k")

    msg = asyncio.run(_generator(handler).generate("diff"))

    assert isinstance(msg, FallbackMessage)
    assert msg.is_fallback is True
    assert msg.text == FALLBACK_COMMIT_MESSAGE == "chore: update submodule changes"
    assert msg.cause
    assert "Error generating commit message" in caplog.text


def test_missing_credential_falls_back():
    def handler(request):  # pragma: no cover - must not be called
        raise AssertionError("unexpected request")

    msg = asyncio.run(_generator(handler).generate("diff"))
    assert msg.text == FALLBACK_COMMIT_MESSAGE
    assert "ANTHROPIC_API_KEY" in msg.cause


def test_unsupported_provider_falls_back():
    gen = CommitGenerator(Config(provider="unknown"))
    msg = asyncio.run(gen.generate("diff"))
    assert isinstance(msg, FallbackMessage)
    assert "Unsupported provider" in msg.cause
