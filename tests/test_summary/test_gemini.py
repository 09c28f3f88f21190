"""Tests for the Gemini client — response parsing, HTTP mocking, session management."""

from __future__ import annotations

import asyncio
from unittest.mock import AsyncMock, MagicMock

import aiohttp
import pytest
from pydantic import SecretStr

from src.core.config import GeminiConfig
from src.summary.exceptions import SummarizerUnavailableError
from src.summary.gemini import GeminiClient, extract_narrative

# ── Helpers ─────────────────────────────────────────────────────


def _config(**kw: object) -> GeminiConfig:
    defaults: dict[str, object] = {
        "api_key": SecretStr("gm-key"),
        "model": "gemini-test",
        "base_url": "https://gemini.test/v1beta/",
    }
    defaults.update(kw)
    return GeminiConfig(**defaults)  # type: ignore[arg-type]


def _payload(text: str) -> dict[str, object]:
    return {"candidates": [{"content": {"parts": [{"text": text}]}}]}


def _mock_response(
    status: int = 200,
    json_body: object = None,
    text: str = "",
) -> AsyncMock:
    resp = AsyncMock()
    resp.status = status
    resp.text = AsyncMock(return_value=text)
    resp.json = AsyncMock(return_value=json_body)
    resp.__aenter__ = AsyncMock(return_value=resp)
    resp.__aexit__ = AsyncMock(return_value=False)
    return resp


def _client_with(post: MagicMock, **kw: object) -> GeminiClient:
    client = GeminiClient(_config(**kw))
    mock_session = MagicMock()
    mock_session.post = post
    mock_session.closed = False
    client._session = mock_session
    return client


# ── extract_narrative ──────────────────────────────────────────


class TestExtractNarrative:
    def test_happy_path(self) -> None:
        assert extract_narrative(_payload("# Report")) == "# Report"

    def test_no_candidates(self) -> None:
        with pytest.raises(SummarizerUnavailableError):
            extract_narrative({"candidates": []})

    def test_missing_parts(self) -> None:
        with pytest.raises(SummarizerUnavailableError):
            extract_narrative({"candidates": [{"content": {}}]})

    def test_not_a_mapping(self) -> None:
        with pytest.raises(SummarizerUnavailableError):
            extract_narrative(None)

    def test_blank_text(self) -> None:
        with pytest.raises(SummarizerUnavailableError, match="empty"):
            extract_narrative(_payload("   "))


# ── generate ───────────────────────────────────────────────────


class TestGenerate:
    async def test_success(self) -> None:
        post = MagicMock(return_value=_mock_response(200, _payload("narrative")))
        client = _client_with(post)

        result = await client.generate("prompt text")

        assert result == "narrative"
        post.assert_called_once()
        url = post.call_args[0][0]
        assert url == "https://gemini.test/v1beta/models/gemini-test:generateContent"
        assert post.call_args[1]["params"] == {"key": "gm-key"}
        payload = post.call_args[1]["json"]
        assert payload["contents"][0]["parts"][0]["text"] == "prompt text"

    async def test_missing_key_makes_no_call(self) -> None:
        post = MagicMock()
        client = _client_with(post, api_key=SecretStr(""))
        with pytest.raises(SummarizerUnavailableError, match="not configured"):
            await client.generate("p")
        post.assert_not_called()

    async def test_non_200(self) -> None:
        post = MagicMock(return_value=_mock_response(429, text="quota exceeded"))
        client = _client_with(post)
        with pytest.raises(SummarizerUnavailableError, match="429"):
            await client.generate("p")

    async def test_timeout(self) -> None:
        post = MagicMock(side_effect=asyncio.TimeoutError())
        client = _client_with(post)
        with pytest.raises(SummarizerUnavailableError, match="timed out"):
            await client.generate("p")

    async def test_transport_error(self) -> None:
        post = MagicMock(side_effect=aiohttp.ClientConnectionError("refused"))
        client = _client_with(post)
        with pytest.raises(SummarizerUnavailableError, match="failed"):
            await client.generate("p")

    async def test_invalid_json(self) -> None:
        resp = _mock_response(200)
        resp.json = AsyncMock(side_effect=ValueError("bad json"))
        client = _client_with(MagicMock(return_value=resp))
        with pytest.raises(SummarizerUnavailableError, match="invalid JSON"):
            await client.generate("p")

    async def test_empty_candidate(self) -> None:
        post = MagicMock(return_value=_mock_response(200, {"candidates": []}))
        client = _client_with(post)
        with pytest.raises(SummarizerUnavailableError):
            await client.generate("p")


# ── Session lifecycle ──────────────────────────────────────────


class TestSession:
    async def test_close_session(self) -> None:
        client = GeminiClient(_config())
        mock_session = AsyncMock()
        mock_session.closed = False
        client._session = mock_session

        await client.close()
        mock_session.close.assert_awaited_once()

    async def test_close_when_no_session(self) -> None:
        client = GeminiClient(_config())
        await client.close()  # should not raise

    def test_model_property(self) -> None:
        assert GeminiClient(_config()).model == "gemini-test"
