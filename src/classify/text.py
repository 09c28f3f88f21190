"""Address and body normalization for raw alert emails."""

from __future__ import annotations

import re

from bs4 import BeautifulSoup, Comment

_ANGLE_RE = re.compile(r"<([^<>]+?)>")
_BARE_RE = re.compile(r"([^\s<>,;\"']+@[^\s<>,;\"']+)")
_WS_RE = re.compile(r"\s+")


def normalize_address(value: str | None) -> str:
    """Extract the bare address from ``Name <addr>`` or ``addr`` forms.

    Input with no recognizable address is returned unchanged. Never raises.

    >>> normalize_address("Ops <ops@example.com>")
    'ops@example.com'
    >>> normalize_address("ops@example.com")
    'ops@example.com'
    """
    if not value:
        return ""
    match = _ANGLE_RE.search(value) or _BARE_RE.search(value)
    if match is None:
        return value
    return match.group(1).strip()


def html_to_text(markup: str) -> str:
    """Visible text of an HTML body, whitespace collapsed.

    Script, style and head blocks and comments are dropped before the
    text is extracted.
    """
    if not markup:
        return ""
    soup = BeautifulSoup(markup, "html.parser")
    for tag in soup(["script", "style", "head"]):
        tag.decompose()
    for comment in soup.find_all(string=lambda node: isinstance(node, Comment)):
        comment.extract()
    return _WS_RE.sub(" ", soup.get_text(" ")).strip()


def extract_text_body(text: str | None, markup: str | None) -> str:
    """Prefer the plain-text part; fall back to stripped HTML; else empty."""
    if text:
        return text
    if markup:
        return html_to_text(markup)
    return ""
