"""
Prompt templates for the AI briefing.

Prompts live in versioned .md files next to this module so they can be
edited without code changes.
"""

from mirror.prompts.loader import load_prompt, render_prompt

__all__ = ["load_prompt", "render_prompt"]
