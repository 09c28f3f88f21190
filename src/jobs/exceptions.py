"""Job orchestration exceptions."""

from __future__ import annotations


class JobError(Exception):
    """Base exception for job orchestration errors."""


class AlreadyRunningError(JobError):
    """A daily run is already in progress; the trigger was rejected."""
