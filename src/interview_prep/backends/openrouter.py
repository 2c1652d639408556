"""OpenRouter transport: chat completions via the OpenAI-compatible API.

Every attempt draws a key from the :class:`~interview_prep.keys.CredentialPool`,
and rate limits, server errors, malformed payloads and truncated output are
retried with exponential backoff.
"""

from __future__ import annotations

import asyncio
import logging
import random
from typing import Any, Awaitable, Callable

import httpx
from openai import APIConnectionError, APIStatusError, AsyncOpenAI
from tenacity import AsyncRetrying, RetryCallState, RetryError, retry_if_exception, stop_after_attempt

from interview_prep.config import OpenRouterConfig
from interview_prep.errors import TransportError
from interview_prep.keys import CredentialPool
from interview_prep.models import Conversation
from interview_prep.truncation import looks_truncated

logger = logging.getLogger(__name__)

OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"

TEMPERATURE = 0.3
TOP_P = 0.7
MAX_TOKENS = 8000

BACKOFF_BASE = 1.0
BACKOFF_JITTER = 1.0
BACKOFF_CAP = 10.0

# Bad or revoked keys: the next attempt rotates to a different credential.
_CREDENTIAL_STATUSES = (401, 403)

Sleep = Callable[[float], Awaitable[Any]]


class InvalidResponseError(Exception):
    """The endpoint answered 2xx but without ``choices[0].message.content``."""


class TruncatedResponseError(Exception):
    """The completion text looks cut off."""


def is_retryable(exc: BaseException) -> bool:
    if isinstance(exc, APIStatusError):
        status = exc.status_code
        return status == 429 or status >= 500 or status in _CREDENTIAL_STATUSES
    return isinstance(exc, (APIConnectionError, InvalidResponseError, TruncatedResponseError))


def backoff_delay(attempt_index: int, rng: random.Random | None = None) -> float:
    """Seconds to wait after failed attempt number *attempt_index* (0-based)."""
    jitter = (rng or random).uniform(0, BACKOFF_JITTER)
    return min(BACKOFF_BASE * 2**attempt_index + jitter, BACKOFF_CAP)


def extract_content(completion: Any) -> str:
    choices = getattr(completion, "choices", None)
    if not choices:
        raise InvalidResponseError("Invalid response format from API")
    message = getattr(choices[0], "message", None)
    content = getattr(message, "content", None)
    if not isinstance(content, str):
        raise InvalidResponseError("Invalid response format from API")
    return content


class OpenRouterClient:
    """Sends conversations to OpenRouter and returns the completion text."""

    def __init__(
        self,
        pool: CredentialPool,
        config: OpenRouterConfig | None = None,
        http_client: httpx.AsyncClient | None = None,
        sleep: Sleep = asyncio.sleep,
        rng: random.Random | None = None,
    ) -> None:
        self.pool = pool
        self.config = config or OpenRouterConfig()
        self._sleep = sleep
        self._rng = rng or random.Random()
        # Authorization is overridden per request with the rotated key.
        self._client = AsyncOpenAI(
            api_key=pool.credentials[0],
            base_url=OPENROUTER_BASE_URL,
            max_retries=0,
            timeout=self.config.timeout,
            http_client=http_client,
            default_headers={
                "HTTP-Referer": self.config.referer,
                "X-Title": self.config.title,
            },
        )

    @classmethod
    def from_config(cls, config: OpenRouterConfig, **kwargs: Any) -> OpenRouterClient:
        keys = config.api_keys
        if not keys:
            raise TransportError(
                "No OpenRouter API keys configured; set "
                + " or ".join(config.api_key_envs + ["OPENROUTER_API_KEYS"])
            )
        return cls(CredentialPool(keys), config, **kwargs)

    async def aclose(self) -> None:
        await self._client.close()

    async def __aenter__(self) -> OpenRouterClient:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    def _wait(self, retry_state: RetryCallState) -> float:
        return backoff_delay(retry_state.attempt_number - 1, self._rng)

    @staticmethod
    def _log_failure(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning("Attempt %d failed: %s", retry_state.attempt_number, exc)

    async def _attempt(self, messages: list[dict[str, str]]) -> str:
        api_key = self.pool.select_credential()
        completion = await self._client.chat.completions.create(
            model=self.config.model,
            messages=messages,  # type: ignore[arg-type]
            temperature=TEMPERATURE,
            max_tokens=MAX_TOKENS,
            top_p=TOP_P,
            stream=False,
            extra_headers={"Authorization": f"Bearer {api_key}"},
        )
        content = extract_content(completion)
        logger.debug("OpenRouter raw response: %s", content[:200])

        if looks_truncated(content):
            logger.warning("Response appears to be truncated, retrying...")
            raise TruncatedResponseError("Response was truncated")
        return content

    async def send(self, conversation: Conversation, max_retries: int | None = None) -> str:
        """
        Send *conversation* and return the raw completion text.

        Raises TransportError once *max_retries* attempts have failed, or
        immediately on a client error that retrying cannot fix.
        """
        attempts = self.config.max_retries if max_retries is None else max_retries
        if attempts < 1:
            raise ValueError("max_retries must be at least 1")
        messages = [m.to_dict() for m in conversation]

        try:
            async for attempt in AsyncRetrying(
                stop=stop_after_attempt(attempts),
                wait=self._wait,
                retry=retry_if_exception(is_retryable),
                after=self._log_failure,
                sleep=self._sleep,
            ):
                with attempt:
                    return await self._attempt(messages)
        except RetryError as exc:
            cause = exc.last_attempt.exception()
            raise TransportError(
                f"Failed to get response after {attempts} attempts: {cause}", cause
            ) from cause
        except APIStatusError as exc:
            logger.error("OpenRouter rejected the request (%d): %s", exc.status_code, exc)
            raise TransportError(
                f"API request failed with status {exc.status_code}: {exc.message}", exc
            ) from exc
        raise TransportError("All retry attempts failed")
