"""Chat-completion client helpers shared by the tutor commands."""

from __future__ import annotations

import os
from typing import Any, Optional

from dotenv import load_dotenv
from openai import OpenAI, OpenAIError

__all__ = [
    "DEFAULT_API_KEY_ENV",
    "DEFAULT_BASE_URL",
    "ChatCompletionError",
    "chat_completion_content",
    "load_client",
]

DEFAULT_API_KEY_ENV = "OPENROUTER_API_KEY"
DEFAULT_BASE_URL = "https://openrouter.ai/api/v1"


class ChatCompletionError(RuntimeError):
    """Raised when the chat API fails or returns no usable content."""


def load_client(
    *,
    api_key_env: str = DEFAULT_API_KEY_ENV,
    base_url: Optional[str] = DEFAULT_BASE_URL,
) -> Any:
    """Initialize an OpenAI-compatible client from environment credentials."""
    load_dotenv()
    api_key = os.getenv(api_key_env)
    if not api_key:
        raise RuntimeError(
            f"{api_key_env} not found in environment. Set it or add to .env"
        )
    if base_url:
        return OpenAI(api_key=api_key, base_url=base_url)
    return OpenAI(api_key=api_key)


def chat_completion_content(
    client: Any,
    *,
    model: str,
    prompt: str,
    max_tokens: int,
    temperature: float = 0.7,
    top_p: Optional[float] = None,
) -> str:
    """Send a single-turn prompt and return the stripped reply text.

    API failures surface as :class:`ChatCompletionError` with the provider's
    message so callers can report them verbatim.
    """
    params: dict[str, Any] = {
        "model": model,
        "messages": [{"role": "user", "content": prompt}],
        "max_tokens": max_tokens,
        "temperature": temperature,
    }
    if top_p is not None:
        params["top_p"] = top_p
    try:
        resp = client.chat.completions.create(**params)
    except OpenAIError as exc:
        status = getattr(exc, "status_code", None)
        label = f"API Error ({status})" if status else "API Error"
        raise ChatCompletionError(f"{label}: {exc}") from exc

    choices = getattr(resp, "choices", None) or []
    content = choices[0].message.content if choices else None
    if not content or not content.strip():
        raise ChatCompletionError("No response from AI")
    return content.strip()
