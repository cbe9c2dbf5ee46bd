"""Tests for prompt template loader."""

import pytest

from mirror.prompts.loader import _PLACEHOLDER_RE, load_prompt, render_prompt

# ---------------------------------------------------------------------------
# Expected placeholders for each template
# ---------------------------------------------------------------------------

TEMPLATE_PLACEHOLDERS = {
    "briefing_system_v1": {
        "LENGTH",
        "TONE",
        "HUMOR",
        "TIME_OF_DAY_TONE",
        "ADDRESSING",
        "STRESS",
        "CELEBRATION",
        "CUSTOM_INSTRUCTIONS",
    },
    "briefing_user_v1": {"TIME_OF_DAY", "CONTEXT"},
}

ALL_TEMPLATES = list(TEMPLATE_PLACEHOLDERS.keys())


@pytest.mark.parametrize("template_name", ALL_TEMPLATES)
def test_load_prompt_success(template_name: str) -> None:
    """Each known template should load without error."""
    content = load_prompt(template_name)
    assert isinstance(content, str)
    assert len(content) > 0


@pytest.mark.parametrize("template_name", ALL_TEMPLATES)
def test_template_placeholders(template_name: str) -> None:
    content = load_prompt(template_name)
    assert set(_PLACEHOLDER_RE.findall(content)) == TEMPLATE_PLACEHOLDERS[template_name]


def test_load_prompt_missing_template() -> None:
    with pytest.raises(FileNotFoundError, match="Available templates"):
        load_prompt("does_not_exist_v1")


def test_render_prompt_fills_placeholders() -> None:
    rendered = render_prompt("briefing_user_v1", TIME_OF_DAY="morning", CONTEXT="It is sunny.")
    assert "morning briefing" in rendered
    assert rendered.endswith("It is sunny.")
    assert "{{" not in rendered


def test_render_prompt_missing_variable() -> None:
    with pytest.raises(ValueError, match="CONTEXT"):
        render_prompt("briefing_user_v1", TIME_OF_DAY="morning")


def test_render_prompt_leaves_braces_in_values() -> None:
    rendered = render_prompt(
        "briefing_user_v1", TIME_OF_DAY="evening", CONTEXT="{not a placeholder}"
    )
    assert "{not a placeholder}" in rendered
