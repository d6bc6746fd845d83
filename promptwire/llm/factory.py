from __future__ import annotations

from promptwire.config import BACKENDS, Settings

from .anthropic import AnthropicBackend
from .base import Backend
from .mock import MockBackend
from .ollama import OllamaBackend
from .openai import OpenAIBackend


def build_backend(settings: Settings, *, backend: str | None = None) -> Backend:
    """Build the backend named by `backend` (or `settings.backend`)."""
    name = (backend or settings.backend).strip().lower()
    if name == "mock":
        return MockBackend(default={"greeting": "Beep-boop! (mock backend)"})
    if name == "ollama":
        return OllamaBackend(base_url=settings.ollama_base_url, timeout_s=settings.timeout_s)
    if name == "anthropic":
        if not settings.anthropic_api_key:
            raise RuntimeError("ANTHROPIC_API_KEY is not set but the anthropic backend was selected")
        return AnthropicBackend(
            api_key=settings.anthropic_api_key,
            base_url=settings.anthropic_base_url,
            timeout_s=settings.timeout_s,
        )
    if name == "openai":
        if not settings.openai_api_key:
            raise RuntimeError("OPENAI_API_KEY is not set but the openai backend was selected")
        return OpenAIBackend(
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout_s=settings.timeout_s,
        )
    raise ValueError(f"unknown backend {name!r}; choose one of: {'|'.join(BACKENDS)}")
