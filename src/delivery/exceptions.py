"""Report delivery exceptions."""

from __future__ import annotations


class DeliveryError(Exception):
    """Base exception for outbound mail errors."""


class DeliveryFailedError(DeliveryError):
    """The report email could not be sent."""
