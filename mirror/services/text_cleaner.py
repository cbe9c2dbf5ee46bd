"""HTML to plain text cleanup for feed content using BeautifulSoup4."""

from __future__ import annotations

import html
import re

from bs4 import BeautifulSoup

_CDATA_RE = re.compile(r"<!\[CDATA\[(.*?)\]\]>", re.DOTALL)

# Max description length in characters
MAX_DESCRIPTION_LENGTH = 300


def strip_cdata(text: str) -> str:
    return _CDATA_RE.sub(r"\1", text)


def escape_cdata(text: str) -> str:
    """Replace CDATA sections with their entity-escaped text.

    html.parser handling of CDATA differs across Python releases; escaped text
    parses the same everywhere and still decodes to the original markup.
    """
    return _CDATA_RE.sub(lambda m: html.escape(m.group(1), quote=False), text)


def clean_text(raw: str | None, max_length: int | None = None) -> str:
    """Strip CDATA wrappers and HTML, unescape entities, collapse whitespace.

    Returns empty string for empty/None input.
    """
    if not raw:
        return ""
    text = strip_cdata(raw)
    if "<" in text or "&" in text:
        text = BeautifulSoup(text, "html.parser").get_text(separator=" ", strip=True)
    text = re.sub(r"\s+", " ", text).strip()
    if max_length is not None and len(text) > max_length:
        text = text[:max_length]
    return text
