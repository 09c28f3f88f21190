"""Three-tier report generation: ai, fallback, empty."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Protocol

import structlog

from src.core.types import AiReport, Alert, EmptyReport, FallbackReport, Report
from src.summary.exceptions import SummarizerUnavailableError
from src.summary.fallback import render_empty, render_fallback
from src.summary.prompt import DEFAULT_BODY_CHAR_LIMIT, build_prompt

logger = structlog.get_logger(__name__)


class NarrativeGenerator(Protocol):
    async def generate(self, prompt: str) -> str: ...


class Summarizer:
    """Turns a window's alerts into a renderable Report.

    - No alerts: EmptyReport, no external call.
    - Generator succeeds: AiReport with its raw narrative.
    - Generator fails for any reason, or returns a blank narrative:
      FallbackReport built from statistics.
      The call is not retried.
    """

    def __init__(
        self,
        generator: NarrativeGenerator | None,
        body_char_limit: int = DEFAULT_BODY_CHAR_LIMIT,
    ) -> None:
        self._generator = generator
        self._body_char_limit = body_char_limit

    async def summarize(self, alerts: Sequence[Alert]) -> Report:
        if not alerts:
            logger.info("summary_empty")
            return EmptyReport(narrative=render_empty())

        if self._generator is None:
            logger.warning("summary_generator_not_configured", alerts=len(alerts))
            return FallbackReport(narrative=render_fallback(alerts))

        prompt = build_prompt(alerts, self._body_char_limit)
        try:
            narrative = await self._generator.generate(prompt)
        except SummarizerUnavailableError as exc:
            logger.warning("summary_fallback", reason=str(exc), alerts=len(alerts))
            return FallbackReport(narrative=render_fallback(alerts))
        except Exception:
            logger.exception("summary_generator_error", alerts=len(alerts))
            return FallbackReport(narrative=render_fallback(alerts))

        if not narrative or not narrative.strip():
            logger.warning("summary_fallback", reason="empty narrative", alerts=len(alerts))
            return FallbackReport(narrative=render_fallback(alerts))

        logger.info(
            "summary_generated",
            alerts=len(alerts),
            prompt_chars=len(prompt),
            narrative_chars=len(narrative),
        )
        return AiReport(narrative=narrative)
