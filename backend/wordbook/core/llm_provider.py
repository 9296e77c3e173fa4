from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, Dict, List

import httpx

logger = logging.getLogger(__name__)


@dataclass
class LLMMessage:
    role: str
    content: str


@dataclass
class LLMResponse:
    content: str
    raw: Any | None = None


# ---------- Errors ----------


class LLMError(Exception):
    """Base class for anything that goes wrong talking to an LLM backend."""


class LLMUnavailableError(LLMError):
    """No credential was configured, so no backend can be called."""


class LLMProviderError(LLMError):
    def __init__(self, message: str, status_code: int | None = None):
        super().__init__(message)
        self.status_code = status_code


class LLMRateLimitError(LLMProviderError):
    def __init__(self, message: str, retry_after: str | None = None):
        super().__init__(message, status_code=429)
        self.retry_after = retry_after


def _raise_for_status(provider: str, resp: httpx.Response) -> None:
    if resp.status_code == 429:
        raise LLMRateLimitError(
            f"{provider} rate limit exceeded",
            retry_after=resp.headers.get("retry-after"),
        )
    if resp.status_code >= 400:
        raise LLMProviderError(
            f"{provider} returned HTTP {resp.status_code}: {resp.text[:200]}",
            status_code=resp.status_code,
        )


# ---------- Providers ----------


class LLMProvider(ABC):
    """Abstract base class for any LLM backend (local or remote)."""

    name: str = "base"
    available: bool = True

    def __init__(self, model: str = ""):
        self.model = model

    @abstractmethod
    async def chat(self, messages: List[LLMMessage]) -> LLMResponse:
        ...

    @abstractmethod
    async def list_models(self) -> List[str]:
        ...

    async def generate(self, prompt: str) -> LLMResponse:
        return await self.chat([LLMMessage(role="user", content=prompt)])

    async def aclose(self) -> None:
        return None


class UnavailableLLMProvider(LLMProvider):
    """Stands in when no API key is configured."""

    name = "none"
    available = False

    async def chat(self, messages: List[LLMMessage]) -> LLMResponse:
        raise LLMUnavailableError("No LLM API key configured")

    async def list_models(self) -> List[str]:
        raise LLMUnavailableError("No LLM API key configured")


class _HTTPProvider(LLMProvider):
    default_model = ""
    default_base_url = ""

    def __init__(
        self,
        api_key: str,
        model: str | None = None,
        base_url: str | None = None,
        timeout_sec: float = 60.0,
        client: httpx.AsyncClient | None = None,
    ):
        super().__init__(model or self.default_model)
        self.base_url = (base_url or self.default_base_url).rstrip("/")
        self._client = client or httpx.AsyncClient(timeout=timeout_sec)
        self._headers = self._auth_headers(api_key)

    def _auth_headers(self, api_key: str) -> Dict[str, str]:
        raise NotImplementedError

    async def _request(self, method: str, path: str, **kwargs: Any) -> Dict[str, Any]:
        try:
            resp = await self._client.request(
                method,
                f"{self.base_url}{path}",
                headers=self._headers,
                **kwargs,
            )
        except httpx.HTTPError as exc:
            raise LLMProviderError(f"{self.name} request failed ({type(exc).__name__}): {exc}") from exc

        _raise_for_status(self.name, resp)
        try:
            return resp.json()
        except ValueError as exc:
            raise LLMProviderError(f"{self.name} returned a non-JSON body") from exc

    async def aclose(self) -> None:
        await self._client.aclose()


class DeepSeekProvider(_HTTPProvider):
    """OpenAI-compatible chat completions endpoint."""

    name = "deepseek"
    default_model = "deepseek-chat"
    default_base_url = "https://api.deepseek.com"

    def _auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"}

    async def chat(self, messages: List[LLMMessage]) -> LLMResponse:
        data = await self._request(
            "POST",
            "/chat/completions",
            json={
                "model": self.model,
                "messages": [{"role": m.role, "content": m.content} for m in messages],
                "stream": False,
            },
        )
        try:
            content = data["choices"][0]["message"]["content"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMProviderError("deepseek response has no message content") from exc
        return LLMResponse(content=content or "", raw=data)

    async def list_models(self) -> List[str]:
        data = await self._request("GET", "/models")
        return [m["id"] for m in data.get("data", [])]


class GeminiProvider(_HTTPProvider):
    """Google Generative Language REST API."""

    name = "gemini"
    default_model = "gemini-2.5-flash-lite"
    default_base_url = "https://generativelanguage.googleapis.com"

    def _auth_headers(self, api_key: str) -> Dict[str, str]:
        return {"x-goog-api-key": api_key}

    async def chat(self, messages: List[LLMMessage]) -> LLMResponse:
        # Gemini only knows "user" and "model" turns
        contents = [
            {
                "role": "model" if m.role == "assistant" else "user",
                "parts": [{"text": m.content}],
            }
            for m in messages
        ]
        data = await self._request(
            "POST",
            f"/v1beta/models/{self.model}:generateContent",
            json={"contents": contents},
        )
        try:
            parts = data["candidates"][0]["content"]["parts"]
        except (KeyError, IndexError, TypeError) as exc:
            raise LLMProviderError("gemini response has no candidates") from exc
        content = "".join(p.get("text", "") for p in parts)
        return LLMResponse(content=content, raw=data)

    async def list_models(self) -> List[str]:
        data = await self._request("GET", "/v1beta/models")
        return [m["name"] for m in data.get("models", [])]


def build_provider(settings, client: httpx.AsyncClient | None = None) -> LLMProvider:
    """
    Pick a backend from settings. A missing key gives the unavailable
    sentinel instead of an error so the app can still start.
    """
    choice = settings.llm_provider
    if choice == "auto":
        if settings.deepseek_api_key:
            choice = "deepseek"
        elif settings.gemini_api_key:
            choice = "gemini"

    kwargs: Dict[str, Any] = {
        "model": settings.llm_model,
        "base_url": settings.llm_base_url,
        "timeout_sec": settings.llm_timeout_sec,
        "client": client,
    }
    if choice == "deepseek" and settings.deepseek_api_key:
        return DeepSeekProvider(settings.deepseek_api_key, **kwargs)
    if choice == "gemini" and settings.gemini_api_key:
        return GeminiProvider(settings.gemini_api_key, **kwargs)

    logger.warning("LLM provider %r has no API key configured", settings.llm_provider)
    return UnavailableLLMProvider()
