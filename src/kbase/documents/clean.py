"""Normalize raw extracted text before chunking."""

from __future__ import annotations

import re

_HORIZONTAL_WS = re.compile(r"[ \t\f\v\u00a0]+")
_PAGE_ARTIFACT_LINES = [
    re.compile(r"(?m)^\s*\d+\s*$"),
    re.compile(r"(?m)^\s*Page \d+\s*$"),
    re.compile(r"(?m)^\s*Chapter \d+\s*$"),
]
_URL = re.compile(r"https?://\S+")
_EMAIL = re.compile(r"[\w.-]+@[\w.-]+\.\w+")
_CID = re.compile(r"\(cid:\d+\)")
_EXCESS_NEWLINES = re.compile(r"\n{3,}")
_SPACE_BEFORE_PUNCT = re.compile(r"[ \t]+([.,!?;:])")
_MISSING_SPACE_AFTER_PUNCT = re.compile(r"([.,!?;:])([A-Z])")


def clean_text(text: str) -> str:
    """Strip extraction artifacts while keeping paragraph breaks.

    Removes page numbers and ``Page N`` / ``Chapter N`` lines, URLs,
    e-mail addresses and ``(cid:N)`` glyph artifacts, collapses runs of
    horizontal whitespace, and tightens spacing around punctuation.
    """
    if not text or not text.strip():
        return ""

    text = text.replace("\r\n", "\n").replace("\r", "\n")
    text = _CID.sub("", text)
    text = _URL.sub("", text)
    text = _EMAIL.sub("", text)
    text = _HORIZONTAL_WS.sub(" ", text)

    for pattern in _PAGE_ARTIFACT_LINES:
        text = pattern.sub("", text)

    text = "\n".join(line.strip() for line in text.split("\n"))
    text = _EXCESS_NEWLINES.sub("\n\n", text)

    text = _SPACE_BEFORE_PUNCT.sub(r"\1", text)
    text = _MISSING_SPACE_AFTER_PUNCT.sub(r"\1 \2", text)

    return text.strip()
