"""Report generation — generative narrative with a statistical fallback."""

from src.summary.exceptions import SummarizerUnavailableError, SummaryError
from src.summary.fallback import AlertStats, compute_stats, render_empty, render_fallback
from src.summary.gemini import GeminiClient, extract_narrative
from src.summary.prompt import build_prompt, project_alert
from src.summary.summarizer import NarrativeGenerator, Summarizer

__all__ = [
    "AlertStats",
    "GeminiClient",
    "NarrativeGenerator",
    "Summarizer",
    "SummarizerUnavailableError",
    "SummaryError",
    "build_prompt",
    "compute_stats",
    "extract_narrative",
    "project_alert",
    "render_empty",
    "render_fallback",
]
