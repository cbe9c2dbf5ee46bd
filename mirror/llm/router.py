"""
Provider lookup for the briefing writer.

One OpenRouter-backed provider is kept per (base_url, model) so repeated
summaries reuse the HTTP connection pool.
"""

from __future__ import annotations

import logging

from mirror.config import Settings, get_settings
from mirror.llm.openai_provider import OpenAIProvider
from mirror.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

_providers: dict[tuple[str, str], LLMProvider] = {}


def get_llm_provider(settings: Settings | None = None) -> LLMProvider:
    """Cached provider for the configured account.

    Raises ValueError when OPENROUTER_API_KEY is unset; callers fall back to
    the template summary.
    """
    settings = settings or get_settings()
    if not settings.openrouter_api_key:
        raise ValueError("OPENROUTER_API_KEY is required for AI summaries")

    key = (settings.openrouter_base_url, settings.openrouter_model)
    provider = _providers.get(key)
    if provider is None:
        provider = OpenAIProvider(
            api_key=settings.openrouter_api_key,
            model=settings.openrouter_model,
            base_url=settings.openrouter_base_url,
            timeout=settings.llm_timeout,
            max_retries=settings.llm_max_retries,
            # OpenRouter attribution
            default_headers={"HTTP-Referer": settings.site_url, "X-Title": settings.app_name},
        )
        _providers[key] = provider
        logger.info("LLM provider ready: %s via %s", key[1], key[0])
    return provider


def clear_provider_cache() -> None:
    _providers.clear()
