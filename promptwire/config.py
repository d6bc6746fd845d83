from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv

BACKENDS = ("mock", "openai", "anthropic", "ollama")


@dataclass(frozen=True)
class Settings:
    backend: str

    openai_api_key: str | None
    openai_base_url: str

    anthropic_api_key: str | None
    anthropic_base_url: str

    ollama_base_url: str

    timeout_s: float
    log_dir: Path


def load_settings() -> Settings:
    # Allow users to keep secrets in a local `.env` (not committed).
    load_dotenv(override=False)

    def getenv(key: str, default: str | None = None) -> str | None:
        v = os.getenv(key)
        if v is None or v == "":
            return default
        return v

    backend = (getenv("PROMPTWIRE_BACKEND", "mock") or "mock").strip().lower()

    timeout_raw = getenv("PROMPTWIRE_TIMEOUT_S", "60") or "60"
    try:
        timeout_s = float(timeout_raw)
    except ValueError as exc:
        raise ValueError(f"PROMPTWIRE_TIMEOUT_S must be a number, got {timeout_raw!r}") from exc

    return Settings(
        backend=backend,
        openai_api_key=getenv("OPENAI_API_KEY"),
        openai_base_url=getenv("PROMPTWIRE_OPENAI_BASE_URL", "https://api.openai.com/v1") or "",
        anthropic_api_key=getenv("ANTHROPIC_API_KEY"),
        anthropic_base_url=getenv("PROMPTWIRE_ANTHROPIC_BASE_URL", "https://api.anthropic.com/v1") or "",
        ollama_base_url=getenv("PROMPTWIRE_OLLAMA_BASE_URL", "http://localhost:11434") or "",
        timeout_s=timeout_s,
        log_dir=Path(getenv("PROMPTWIRE_LOG_DIR", "logs") or "logs"),
    )
