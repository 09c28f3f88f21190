"""Gemini ``generateContent`` client — one prompt in, narrative text out."""

from __future__ import annotations

import asyncio
from typing import Any

import aiohttp
import structlog

from src.core.config import GeminiConfig
from src.summary.exceptions import SummarizerUnavailableError

logger = structlog.get_logger(__name__)


def extract_narrative(payload: object) -> str:
    """Pull ``candidates[0].content.parts[0].text`` out of a response body."""
    try:
        text = payload["candidates"][0]["content"]["parts"][0]["text"]  # type: ignore[index]
    except (KeyError, IndexError, TypeError) as exc:
        raise SummarizerUnavailableError("No narrative in Gemini response") from exc
    if not isinstance(text, str) or not text.strip():
        raise SummarizerUnavailableError("Gemini returned an empty narrative")
    return text


class GeminiClient:
    """Single-shot text generation against the Gemini REST API."""

    def __init__(self, config: GeminiConfig) -> None:
        self._api_key = config.api_key.get_secret_value()
        self._model = config.model
        self._base_url = config.base_url.rstrip("/")
        self._timeout = aiohttp.ClientTimeout(total=config.timeout_secs)
        self._session: aiohttp.ClientSession | None = None

    @property
    def model(self) -> str:
        return self._model

    def _get_session(self) -> aiohttp.ClientSession:
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(timeout=self._timeout)
        return self._session

    async def generate(self, prompt: str) -> str:
        """Return the generated narrative for *prompt*.

        Raises:
            SummarizerUnavailableError: on timeout, transport error,
                non-200 status or a malformed/empty response.
        """
        if not self._api_key:
            raise SummarizerUnavailableError("Gemini API key not configured")

        url = f"{self._base_url}/models/{self._model}:generateContent"
        payload: dict[str, Any] = {"contents": [{"parts": [{"text": prompt}]}]}

        try:
            session = self._get_session()
            async with session.post(
                url,
                params={"key": self._api_key},
                json=payload,
            ) as resp:
                if resp.status != 200:
                    body = await resp.text()
                    logger.warning(
                        "gemini_request_failed",
                        status=resp.status,
                        body=body[:200],
                    )
                    raise SummarizerUnavailableError(f"Gemini returned {resp.status}")
                data = await resp.json(content_type=None)
        except asyncio.TimeoutError as exc:
            raise SummarizerUnavailableError("Gemini request timed out") from exc
        except aiohttp.ClientError as exc:
            raise SummarizerUnavailableError(f"Gemini request failed: {exc}") from exc
        except ValueError as exc:
            raise SummarizerUnavailableError("Gemini returned invalid JSON") from exc

        return extract_narrative(data)

    async def close(self) -> None:
        if self._session and not self._session.closed:
            await self._session.close()
            self._session = None
