"""Alert classification — address/body normalization and keyword rules."""

from src.classify.classifier import classify, classify_all
from src.classify.rules import (
    SEVERITY_RULES,
    SOURCE_RULES,
    Rule,
    first_match,
    infer_severity,
    infer_source,
)
from src.classify.text import extract_text_body, html_to_text, normalize_address

__all__ = [
    "Rule",
    "SEVERITY_RULES",
    "SOURCE_RULES",
    "classify",
    "classify_all",
    "extract_text_body",
    "first_match",
    "html_to_text",
    "infer_severity",
    "infer_source",
    "normalize_address",
]
