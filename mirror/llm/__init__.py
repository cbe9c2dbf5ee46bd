"""LLM provider abstraction. The LLM phrases text only, never orchestrates."""

from mirror.llm.openai_provider import OpenAIProvider
from mirror.llm.provider import LLMProvider
from mirror.llm.router import clear_provider_cache, get_llm_provider

__all__ = ["LLMProvider", "OpenAIProvider", "clear_provider_cache", "get_llm_provider"]
