import os
from typing import Any, Optional, Protocol

import httpx

LLM_PROVIDER = "nebius"
LLM_BASE_URL = os.getenv("LLM_BASE_URL", "https://api.studio.nebius.com/v1/")
LLM_MODEL = os.getenv("LLM_MODEL", "microsoft/phi-4")
LLM_TIMEOUT_SECONDS = float(os.getenv("LLM_TIMEOUT_SECONDS", "60"))
LLM_CONNECT_TIMEOUT_SECONDS = float(os.getenv("LLM_CONNECT_TIMEOUT_SECONDS", "10"))
LLM_WRITE_TIMEOUT_SECONDS = float(os.getenv("LLM_WRITE_TIMEOUT_SECONDS", "30"))
LLM_POOL_TIMEOUT_SECONDS = float(os.getenv("LLM_POOL_TIMEOUT_SECONDS", "60"))

Message = dict[str, str]


def _http_timeout() -> httpx.Timeout:
    return httpx.Timeout(
        connect=LLM_CONNECT_TIMEOUT_SECONDS,
        read=LLM_TIMEOUT_SECONDS,
        write=LLM_WRITE_TIMEOUT_SECONDS,
        pool=LLM_POOL_TIMEOUT_SECONDS,
    )


def _api_key() -> str:
    return os.getenv("NEBIUS_API_KEY", "").strip()


def _completions_url() -> str:
    return LLM_BASE_URL.rstrip("/") + "/chat/completions"


class LLMRequestError(RuntimeError):
    def __init__(self, provider: str, model: str, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.provider = provider
        self.model = model
        self.status_code = status_code


def _chat_completion(payload: dict[str, Any], api_key: str) -> str:
    model = str(payload.get("model", ""))
    try:
        response = httpx.post(
            _completions_url(),
            headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"},
            json=payload,
            timeout=_http_timeout(),
        )
        response.raise_for_status()
    except httpx.TimeoutException as exc:
        raise LLMRequestError(
            provider=LLM_PROVIDER,
            model=model,
            message="Chat completion timed out while waiting for response.",
        ) from exc
    except httpx.HTTPStatusError as exc:
        status = exc.response.status_code if exc.response is not None else None
        detail = ""
        if exc.response is not None:
            detail = (exc.response.text or "").strip()[:220]
        raise LLMRequestError(
            provider=LLM_PROVIDER,
            model=model,
            status_code=status,
            message=f"Chat completion failed (status={status}): {detail or 'no response body'}",
        ) from exc
    except httpx.HTTPError as exc:
        raise LLMRequestError(
            provider=LLM_PROVIDER,
            model=model,
            message=f"Chat completion failed: {str(exc)[:220]}",
        ) from exc

    try:
        data = response.json()
        return str(data["choices"][0]["message"].get("content") or "")
    except (ValueError, KeyError, IndexError, TypeError, AttributeError) as exc:
        raise LLMRequestError(
            provider=LLM_PROVIDER,
            model=model,
            message="Chat completion returned an unexpected payload.",
        ) from exc


class LLMClient(Protocol):
    def complete(
        self,
        messages: list[Message],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> str:
        ...


class RealLLMClient:
    def __init__(self, model: Optional[str] = None):
        self.model = model or LLM_MODEL

    def complete(
        self,
        messages: list[Message],
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
        top_p: Optional[float] = None,
    ) -> str:
        api_key = _api_key()
        if not api_key:
            raise LLMRequestError(provider=LLM_PROVIDER, model=self.model, message="AI config missing")
        payload: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "temperature": temperature,
        }
        if max_tokens is not None:
            payload["max_tokens"] = max_tokens
        if top_p is not None:
            payload["top_p"] = top_p
        return _chat_completion(payload, api_key)


def get_llm_client() -> LLMClient:
    return RealLLMClient()
