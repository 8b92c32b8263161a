"""OpenAI chat-completions client: text in, raw text out.

The client is constructed with an explicit `CompletionConfig` (model,
temperature, timeout, token limit, credential). It does NOT sanitize or
parse the response and does NOT retry: failures surface as
`CompletionFailure` carrying the stage name, and the orchestrator decides
what to do with them.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

import httpx

from ..config import env_bool, env_float, env_int, env_str
from ..errors import CompletionFailure

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# Constants: all read from environment with safe defaults
# ---------------------------------------------------------------------------
_OPENAI_API_URL = "https://api.openai.com/v1/chat/completions"
_DEFAULT_MODEL = "gpt-4.1"
_DEFAULT_TEMPERATURE = 0.3


@dataclass(frozen=True)
class CompletionConfig:
    api_key: str = ""
    model: str = _DEFAULT_MODEL
    temperature: float = _DEFAULT_TEMPERATURE
    timeout: float = 40.0
    max_tokens: int = 4000
    api_url: str = _OPENAI_API_URL
    json_mode: bool = True

    @classmethod
    def from_env(cls) -> "CompletionConfig":
        return cls(
            api_key=env_str("OPENAI_API_KEY"),
            model=env_str("OPENAI_MODEL", _DEFAULT_MODEL) or _DEFAULT_MODEL,
            temperature=env_float("OPENAI_TEMPERATURE", _DEFAULT_TEMPERATURE),
            timeout=env_float("OPENAI_REQUEST_TIMEOUT", 40.0),
            max_tokens=env_int("OPENAI_MAX_COMPLETION_TOKENS", 4000),
            api_url=env_str("OPENAI_API_URL", _OPENAI_API_URL) or _OPENAI_API_URL,
            json_mode=env_bool("OPENAI_JSON_MODE", True),
        )


def build_payload(
    *,
    config: CompletionConfig,
    messages: List[Dict[str, str]],
) -> Dict[str, Any]:
    """Build an OpenAI chat completions payload.

    Uses:
      - model, messages, max_tokens, temperature
      - response_format: json_object when json_mode is enabled
    """
    payload: Dict[str, Any] = {
        "model": config.model,
        "messages": messages,
        "max_tokens": config.max_tokens,
        "temperature": config.temperature,
    }
    if config.json_mode:
        payload["response_format"] = {"type": "json_object"}
    return payload


class OpenAICompletionClient:
    """Async chat-completion client bound to one `CompletionConfig`."""

    def __init__(
        self,
        config: CompletionConfig,
        http_client: Optional[httpx.AsyncClient] = None,
    ):
        self.config = config
        self._http_client = http_client

    async def complete(
        self,
        system_prompt: str,
        user_message: str,
        *,
        stage: str = "unknown",
    ) -> str:
        """Send (system, user) messages and return the raw completion text.

        Raises
        ------
        ValueError
            If either prompt is empty.
        CompletionFailure
            On missing credentials, transport errors, timeouts, non-200
            responses, or an empty/malformed response body.
        """
        if not system_prompt or not system_prompt.strip():
            raise ValueError("system_prompt must be non-empty")
        if not user_message or not user_message.strip():
            raise ValueError("user_message must be non-empty")

        if not self.config.api_key:
            logger.warning("[OPENAI] API key missing (OPENAI_API_KEY)")
            raise CompletionFailure(stage, "OPENAI_API_KEY environment variable not set")

        headers = {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }
        payload = build_payload(
            config=self.config,
            messages=[
                {"role": "system", "content": system_prompt},
                {"role": "user", "content": user_message},
            ],
        )

        logger.info("[OPENAI] stage=%s calling %s", stage, self.config.model)
        t0 = time.time()
        try:
            response = await self._post(headers, payload)
        except httpx.TimeoutException as exc:
            duration = time.time() - t0
            logger.error("[OPENAI] stage=%s timeout after %.1fs", stage, duration)
            raise CompletionFailure(stage, f"Request timed out after {duration:.1f}s") from exc
        except httpx.HTTPError as exc:
            logger.error("[OPENAI] stage=%s transport error: %s", stage, exc)
            raise CompletionFailure(stage, f"Transport error: {exc}") from exc

        duration = time.time() - t0
        logger.info("[OPENAI] stage=%s HTTP %s (%.1fs)", stage, response.status_code, duration)

        if response.status_code != 200:
            error_body = response.text[:400]
            logger.warning("[OPENAI] stage=%s error response: %s", stage, error_body)
            raise CompletionFailure(stage, f"HTTP {response.status_code}: {error_body}")

        try:
            data = response.json()
            raw_content = data["choices"][0]["message"]["content"] or ""
        except (ValueError, KeyError, IndexError, TypeError) as exc:
            raise CompletionFailure(stage, f"Malformed completion response: {exc}") from exc

        usage = data.get("usage")
        if usage:
            logger.debug(
                "[OPENAI] stage=%s tokens prompt=%s completion=%s total=%s",
                stage,
                usage.get("prompt_tokens", "?"),
                usage.get("completion_tokens", "?"),
                usage.get("total_tokens", "?"),
            )

        if not raw_content.strip():
            raise CompletionFailure(stage, "Empty completion content")

        logger.info("[OPENAI] stage=%s raw output length: %d chars", stage, len(raw_content))
        return raw_content

    async def _post(self, headers: Dict[str, str], payload: Dict[str, Any]) -> httpx.Response:
        if self._http_client is not None:
            return await self._http_client.post(
                self.config.api_url,
                headers=headers,
                json=payload,
                timeout=self.config.timeout,
            )
        async with httpx.AsyncClient(timeout=self.config.timeout) as client:
            return await client.post(self.config.api_url, headers=headers, json=payload)


def get_completion_client() -> OpenAICompletionClient:
    """FastAPI dependency; overridden in tests with a canned client."""
    return OpenAICompletionClient(CompletionConfig.from_env())
