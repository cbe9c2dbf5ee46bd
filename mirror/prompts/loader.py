"""
Briefing prompt templates.

Templates are ``<name>.md`` files in this package with ``{{NAME}}``
placeholders. Rendering substitutes every placeholder in one pass and
refuses to return a prompt with any left unfilled.
"""

from __future__ import annotations

import logging
import re
from functools import lru_cache
from pathlib import Path

logger = logging.getLogger(__name__)

TEMPLATE_DIR = Path(__file__).parent
_PLACEHOLDER_RE = re.compile(r"\{\{([A-Z_][A-Z0-9_]*)\}\}")


def available_prompts() -> list[str]:
    return sorted(path.stem for path in TEMPLATE_DIR.glob("*.md"))


@lru_cache(maxsize=16)
def load_prompt(name: str) -> str:
    """Raw text of template *name* (no extension). Raises FileNotFoundError."""
    path = TEMPLATE_DIR / f"{name}.md"
    try:
        return path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise FileNotFoundError(
            f"No prompt template '{name}'. Available templates: {available_prompts()}"
        ) from None


def render_prompt(name: str, **values: object) -> str:
    """Fill template *name* with *values*.

    Raises ValueError listing any placeholder without a value. Values that
    match no placeholder are logged and ignored.
    """
    template = load_prompt(name)
    missing: set[str] = set()

    def substitute(match: re.Match[str]) -> str:
        key = match.group(1)
        if key not in values:
            missing.add(key)
            return match.group(0)
        return str(values[key])

    rendered = _PLACEHOLDER_RE.sub(substitute, template)
    if missing:
        raise ValueError(f"Prompt '{name}' is missing values for: {sorted(missing)}")
    unused = set(values) - set(_PLACEHOLDER_RE.findall(template))
    if unused:
        logger.warning("Prompt '%s' ignores values: %s", name, sorted(unused))
    return rendered.strip()
