"""LLM client — HTTP connection to a chat-completion backend with structured output.

The generator injects an LLM callable matching the protocol:

    async def __call__(self, prompt: str, schema: dict, schema_name: str) -> Any | None: ...

The implementation sends the prompt, constrains the reply to `schema`, and
returns the decoded JSON value, or None when the backend produced nothing
usable. Transport and protocol failures raise ProviderError.

Two implementations are provided:

    HttpLLM    — real HTTP client, supports Azure OpenAI and OpenAI-compatible
                 backends. Selected by provider_format.
    StaticLLM  — returns a fixed value. Useful for smoke-testing the HTTP
                 layer without a running model.

Production code constructs an HttpLLM from Settings (see storygen.config).
Tests use StubLLM (defined in conftest.py) instead.
"""

from __future__ import annotations

import json
import logging
from typing import Any, Literal, Protocol

import httpx

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Protocol: every LLM implementation must match this signature
# ---------------------------------------------------------------------------

class StructuredLLM(Protocol):
    async def __call__(self, prompt: str, schema: dict[str, Any], schema_name: str) -> Any | None: ...


# ---------------------------------------------------------------------------
# HttpLLM: connects to a real backend
# ---------------------------------------------------------------------------

ProviderFormat = Literal["azure", "openai"]


class HttpLLM:
    """Async HTTP client for chat-completion backends.

    Supported formats:
      "azure"   — POST /openai/deployments/{model}/chat/completions?api-version=...
                  Auth: "api-key" header.
      "openai"  — POST /v1/chat/completions  {"model": ..., ...}
                  Auth: Bearer token.

    Both receive {"messages": [...], "response_format": {"type": "json_schema", ...}}
    and answer {"choices": [{"message": {"content": "<json>"}}]}.

    Args:
        provider_url:    Base URL of the backend, e.g. "https://res.openai.azure.com".
        api_key:         API key, or empty string if not required.
        provider_format: Wire format to use. Defaults to "azure".
        model:           Deployment name (azure) or model identifier (openai).
        api_version:     Azure REST API version; ignored by the openai format.
        timeout:         HTTP timeout in seconds. Defaults to 120.
    """

    def __init__(
        self,
        provider_url: str,
        api_key: str = "",
        provider_format: ProviderFormat = "azure",
        model: str = "gpt-4o",
        api_version: str = "2024-08-01-preview",
        timeout: float = 120.0,
    ) -> None:
        self._base_url = provider_url.rstrip("/")
        self._api_key = api_key
        self._format = provider_format
        self._model = model
        self._api_version = api_version
        self._timeout = timeout

    def _headers(self) -> dict[str, str]:
        headers: dict[str, str] = {"Content-Type": "application/json"}
        if not self._api_key:
            return headers
        if self._format == "azure":
            headers["api-key"] = self._api_key
        else:
            headers["Authorization"] = f"Bearer {self._api_key}"
        return headers

    def _build_request(
        self, prompt: str, schema: dict[str, Any], schema_name: str
    ) -> tuple[str, dict[str, str], dict[str, Any]]:
        """Return (url, params, body) for the configured format."""
        body: dict[str, Any] = {
            "messages": [{"role": "user", "content": prompt}],
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": schema_name, "schema": schema, "strict": True},
            },
        }
        if self._format == "openai":
            if self._model:
                body["model"] = self._model
            return f"{self._base_url}/v1/chat/completions", {}, body

        # azure (default)
        url = f"{self._base_url}/openai/deployments/{self._model}/chat/completions"
        return url, {"api-version": self._api_version}, body

    def _parse_response(self, data: dict) -> Any | None:
        """Extract and decode the structured content from the response body."""
        choices = data.get("choices")
        if (
            not isinstance(choices, list)
            or not choices
            or not isinstance(choices[0], dict)
            or not isinstance(choices[0].get("message"), dict)
        ):
            raise ProviderError("Unexpected response format from chat-completion backend")

        message = choices[0]["message"]
        content = message.get("content")
        if not isinstance(content, str) or not content:
            if message.get("refusal"):
                logger.warning("llm refused: %s", message["refusal"])
            return None
        try:
            return json.loads(content)
        except json.JSONDecodeError:
            logger.warning("llm content is not valid JSON: %r", content[:200])
            return None

    async def __call__(self, prompt: str, schema: dict[str, Any], schema_name: str) -> Any | None:
        if not self._base_url:
            raise ProviderError("LLM endpoint is not configured")

        url, params, body = self._build_request(prompt, schema, schema_name)
        logger.debug("llm call url=%s schema=%s prompt_len=%d", url, schema_name, len(prompt))

        try:
            async with httpx.AsyncClient(timeout=self._timeout) as client:
                resp = await client.post(url, params=params, json=body, headers=self._headers())
                resp.raise_for_status()
        except httpx.ConnectError as e:
            raise ProviderError(f"Cannot connect to LLM backend at {self._base_url}") from e
        except httpx.HTTPStatusError as e:
            raise ProviderError(
                f"LLM backend returned HTTP {e.response.status_code}"
            ) from e
        except httpx.TimeoutException as e:
            raise ProviderError(f"LLM backend timed out after {self._timeout}s") from e
        except httpx.HTTPError as e:
            raise ProviderError(f"LLM backend request failed: {e}") from e

        try:
            data = resp.json()
        except ValueError as e:
            raise ProviderError("LLM backend returned a non-JSON response") from e
        if not isinstance(data, dict):
            raise ProviderError("Unexpected response format from chat-completion backend")

        value = self._parse_response(data)
        logger.debug("llm response schema=%s empty=%s", schema_name, value is None)
        return value


# ---------------------------------------------------------------------------
# StaticLLM: returns a fixed value; useful for smoke tests
# ---------------------------------------------------------------------------

class StaticLLM:
    """Returns the same value for every prompt. No network calls.

    Lets you verify that the HTTP layer, validation and response envelope
    work end-to-end without a running model.
    """

    def __init__(self, value: Any | None) -> None:
        self._value = value

    async def __call__(self, prompt: str, schema: dict[str, Any], schema_name: str) -> Any | None:
        logger.debug("StaticLLM schema=%s prompt_len=%d", schema_name, len(prompt))
        return self._value


# ---------------------------------------------------------------------------
# ProviderError: raised by HttpLLM for all connection and protocol failures
# ---------------------------------------------------------------------------

class ProviderError(RuntimeError):
    """Raised when the LLM backend cannot be reached or returns an error."""
