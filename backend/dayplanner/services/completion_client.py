"""Remote text-completion collaborator."""
from __future__ import annotations

import logging
from functools import lru_cache
from typing import Any, Optional

import openai

from dayplanner.core.config import settings
from dayplanner.domain.errors import ErrorKind, SchedulerError

logger = logging.getLogger(__name__)


class CompletionClient:
    """Base interface for completion providers."""

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        raise NotImplementedError


class OpenAICompletionClient(CompletionClient):
    """Chat-completions client for any OpenAI-compatible endpoint (Groq by default)."""

    def __init__(
        self,
        client: Any,
        *,
        model: str,
        temperature: float = 0.1,
        max_tokens: int = 1024,
    ) -> None:
        self._client = client
        self.model = model
        self.temperature = temperature
        self.max_tokens = max_tokens

    async def complete(self, system_prompt: str, user_prompt: str) -> str:
        try:
            completion = await self._client.chat.completions.create(
                model=self.model,
                temperature=self.temperature,
                max_tokens=self.max_tokens,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {"role": "user", "content": user_prompt},
                ],
            )
        except openai.APITimeoutError as exc:
            raise SchedulerError(ErrorKind.TIMEOUT, "The completion request timed out.") from exc
        except openai.APIConnectionError as exc:
            raise SchedulerError(ErrorKind.NETWORK, f"Network error while calling the completion API: {exc}") from exc
        except openai.APIStatusError as exc:
            logger.error("Completion API error %s: %s", exc.status_code, exc.message)
            raise SchedulerError(
                ErrorKind.API,
                f"Completion API call failed ({exc.status_code}): {exc.message}",
                code=exc.status_code,
            ) from exc

        content = completion.choices[0].message.content if completion.choices else None
        if not content or not content.strip():
            raise SchedulerError(ErrorKind.API, "The completion response was empty.")

        logger.debug("Completion response: %s", content)
        return content


@lru_cache
def get_completion_client() -> Optional[CompletionClient]:
    """Return the configured completion client, or None when no API key is set."""
    if not settings.llm_api_key:
        logger.warning("LLM_API_KEY missing; schedules will use the default scheduler.")
        return None

    client = openai.AsyncOpenAI(
        api_key=settings.llm_api_key,
        base_url=settings.llm_base_url,
        timeout=settings.llm_timeout_seconds,
        max_retries=0,
    )
    return OpenAICompletionClient(
        client,
        model=settings.llm_model,
        temperature=settings.llm_temperature,
        max_tokens=settings.llm_max_tokens,
    )
