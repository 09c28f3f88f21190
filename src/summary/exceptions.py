"""Summarizer exceptions."""

from __future__ import annotations


class SummaryError(Exception):
    """Base exception for report generation errors."""


class SummarizerUnavailableError(SummaryError):
    """The generative summarizer could not produce a narrative."""
