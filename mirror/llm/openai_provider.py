"""
OpenRouter chat completions through the openai SDK.

OpenRouter speaks the OpenAI protocol, so the stock client works with a
different ``base_url``. The SDK's own retries are switched off; transient
failures (rate limit, timeout, dropped connection) are retried here with
exponential backoff so every attempt is logged.
"""

from __future__ import annotations

import logging
import time
from typing import Any

from openai import APIConnectionError, APIError, APITimeoutError, OpenAI, RateLimitError

from mirror.llm.provider import LLMProvider

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "anthropic/claude-3-haiku"
DEFAULT_TEMPERATURE = 0.7
INITIAL_BACKOFF = 1.0  # seconds
BACKOFF_MULTIPLIER = 2.0

TRANSIENT_ERRORS = (RateLimitError, APITimeoutError, APIConnectionError)

# Briefing behavior options forwarded as-is when set
SAMPLING_OPTIONS = ("max_tokens", "top_p", "presence_penalty")


def build_messages(prompt: str, system_prompt: str | None) -> list[dict[str, str]]:
    messages = [{"role": "system", "content": system_prompt}] if system_prompt else []
    messages.append({"role": "user", "content": prompt})
    return messages


class OpenAIProvider(LLMProvider):
    def __init__(
        self,
        api_key: str,
        model: str = DEFAULT_MODEL,
        base_url: str | None = None,
        timeout: float = 20.0,
        max_retries: int = 2,
        default_headers: dict[str, str] | None = None,
    ) -> None:
        self.model = model
        self.max_retries = max_retries
        self._client = OpenAI(
            api_key=api_key,
            base_url=base_url,
            timeout=timeout,
            max_retries=0,
            default_headers=default_headers,
        )

    def request_body(
        self, prompt: str, system_prompt: str | None, options: dict[str, Any]
    ) -> dict[str, Any]:
        """Arguments for ``chat.completions.create``.

        Options: model, temperature, max_tokens, top_p, presence_penalty and
        stop. An empty stop list is omitted.
        """
        body: dict[str, Any] = {
            "model": options.get("model") or self.model,
            "messages": build_messages(prompt, system_prompt),
            "temperature": options.get("temperature", DEFAULT_TEMPERATURE),
        }
        body.update({key: options[key] for key in SAMPLING_OPTIONS if options.get(key) is not None})
        if options.get("stop"):
            body["stop"] = list(options["stop"])
        return body

    def complete(self, prompt: str, system_prompt: str | None = None, **options: Any) -> str:
        body = self.request_body(prompt, system_prompt, options)
        failures = 0
        while True:
            try:
                return self._create(body)
            except TRANSIENT_ERRORS as exc:
                failures += 1
                if failures > self.max_retries:
                    logger.error("LLM %s on attempt %d, giving up", type(exc).__name__, failures)
                    raise
                delay = INITIAL_BACKOFF * BACKOFF_MULTIPLIER ** (failures - 1)
                logger.warning(
                    "LLM %s, retry %d/%d in %.1fs",
                    type(exc).__name__,
                    failures,
                    self.max_retries,
                    delay,
                )
                time.sleep(delay)
            except APIError as exc:
                logger.error("LLM request rejected: %s", exc)
                raise

    def _create(self, body: dict[str, Any]) -> str:
        started = time.monotonic()
        response = self._client.chat.completions.create(**body)
        usage = response.usage
        logger.info(
            "LLM briefing: model=%s prompt_tokens=%d completion_tokens=%d latency=%.2fs",
            body["model"],
            usage.prompt_tokens if usage else 0,
            usage.completion_tokens if usage else 0,
            time.monotonic() - started,
        )
        return (response.choices[0].message.content or "").strip()
