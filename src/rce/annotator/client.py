"""OpenRouter async HTTP client used to phrase council timelines."""

from __future__ import annotations

import asyncio
import concurrent.futures
import re
from collections.abc import Coroutine
from typing import Any

import httpx

from rce.annotator.config import DEFAULT_OPENROUTER_BASE_URL, AnnotatorCredentials


class OpenRouterError(Exception):
    """Base OpenRouter client error."""


class OpenRouterMissingAPIKeyError(OpenRouterError):
    """Raised when API key is not configured."""


class OpenRouterClient:
    """Async chat-completions client with short timeout and a single retry on timeout."""

    def __init__(
        self,
        *,
        api_key: str,
        model: str,
        base_url: str = DEFAULT_OPENROUTER_BASE_URL,
        timeout_s: float = 5.0,
        referer: str = "",
        title: str = "",
    ) -> None:
        self._api_key = api_key.strip()
        self._model = model.strip()
        self._base_url = base_url
        self._timeout_s = timeout_s
        self._referer = referer.strip()
        self._title = title.strip()

    @classmethod
    def from_credentials(cls, credentials: AnnotatorCredentials) -> OpenRouterClient:
        return cls(
            api_key=credentials.api_key,
            model=credentials.model,
            base_url=credentials.base_url,
            timeout_s=credentials.timeout_s,
            referer=credentials.referer,
            title=credentials.title,
        )

    @property
    def model(self) -> str:
        return self._model

    async def complete(self, messages: list[dict[str, str]], *, temperature: float = 0.3) -> str:
        """Return the first choice's text from the chat-completions endpoint."""
        if not self._api_key:
            raise OpenRouterMissingAPIKeyError("OPENROUTER_API_KEY is not configured")
        if not self._model:
            raise OpenRouterError("OPENROUTER_MODEL is not configured")

        payload = {"model": self._model, "messages": messages, "temperature": temperature}
        headers = {"Authorization": f"Bearer {self._api_key}"}
        if self._referer:
            headers["HTTP-Referer"] = self._referer
        if self._title:
            headers["X-Title"] = self._title

        for attempt in range(2):
            try:
                async with httpx.AsyncClient(timeout=httpx.Timeout(self._timeout_s)) as client:
                    response = await client.post(self._base_url, headers=headers, json=payload)
                response.raise_for_status()
                return _first_choice_text(response.json())
            except httpx.TimeoutException as exc:
                if attempt == 0:
                    await asyncio.sleep(0.1)
                    continue
                raise OpenRouterError("OpenRouter timeout after retry") from exc
            except httpx.HTTPStatusError as exc:
                excerpt = _extract_response_excerpt(exc.response.text, limit=500)
                raise OpenRouterError(
                    f"OpenRouter request failed (status={exc.response.status_code}, body={excerpt!r})"
                ) from exc
            except (httpx.HTTPError, ValueError) as exc:
                raise OpenRouterError(f"OpenRouter request failed: {exc}") from exc

        raise OpenRouterError("OpenRouter request failed unexpectedly")

    def complete_sync(self, messages: list[dict[str, str]], *, temperature: float = 0.3) -> str:
        """Blocking bridge for synchronous callers."""
        return _run_coro_sync(self.complete(messages, temperature=temperature))


def _first_choice_text(body: Any) -> str:
    choices = body.get("choices") if isinstance(body, dict) else None
    if not isinstance(choices, list) or not choices:
        raise OpenRouterError("OpenRouter response without choices")
    message = choices[0].get("message")
    if not isinstance(message, dict):
        raise OpenRouterError("OpenRouter response without message payload")
    content = message.get("content")
    if not isinstance(content, str) or not content.strip():
        raise OpenRouterError("OpenRouter returned empty content")
    return content.strip()


def _run_coro_sync(coro: Coroutine[Any, Any, str]) -> str:
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coro)

    with concurrent.futures.ThreadPoolExecutor(max_workers=1) as executor:
        return executor.submit(asyncio.run, coro).result()


def _extract_response_excerpt(raw_text: str, *, limit: int) -> str:
    """Collapse whitespace and keep a short excerpt for diagnostics."""
    compact = re.sub(r"\s+", " ", raw_text).strip()
    if not compact:
        return "<empty>"
    return compact[:limit]
