"""
Briefing writer interface.

The model only phrases the daily briefing. Everything it may mention is
gathered beforehand and handed over in the prompt; it never reads the store.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Any


class LLMProvider(ABC):
    """A chat model that turns a prompt into briefing text."""

    model: str

    @abstractmethod
    def complete(self, prompt: str, system_prompt: str | None = None, **options: Any) -> str:
        """Blocking call; return the stripped completion text."""

    async def acomplete(self, prompt: str, system_prompt: str | None = None, **options: Any) -> str:
        """Run :meth:`complete` in a worker thread so the event loop keeps serving."""
        return await asyncio.to_thread(self.complete, prompt, system_prompt, **options)
