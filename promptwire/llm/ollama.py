from __future__ import annotations

from typing import Any

import httpx

from ._http import malformed, post_json, unsupported_model
from .base import BackendResponse, Message, Usage
from .models import CustomModel, ModelId

PROVIDER = "ollama"


class OllamaBackend:
    """Local Ollama server. Only `CustomModel` names (e.g. "llama3.1:8b") are accepted."""

    def __init__(
        self,
        *,
        base_url: str = "http://localhost:11434",
        timeout_s: float = 120.0,
        temperature: float = 0.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.temperature = temperature
        self._http = httpx.AsyncClient(transport=transport, timeout=timeout_s)

    def resolve_model(self, model: ModelId) -> str:
        if isinstance(model, CustomModel):
            return model.name
        raise unsupported_model(model, provider=PROVIDER)

    async def dispatch(self, messages: list[Message], schema: dict[str, Any], model: str) -> BackendResponse:
        payload = {
            "model": model,
            "stream": False,
            "messages": [m.to_dict() for m in messages],
            "format": schema,
            "options": {"temperature": self.temperature},
        }
        data = await post_json(self._http, f"{self.base_url}/api/chat", payload, provider=PROVIDER)
        body = data if isinstance(data, dict) else {}
        # Ollama returns: {"message": {"role": "...", "content": "..."}, ...}
        msg = body.get("message")
        content = msg.get("content") if isinstance(msg, dict) else None
        if not isinstance(content, str) or not content.strip():
            raise malformed("empty message content", provider=PROVIDER)
        usage = Usage.from_payload(
            {"prompt_tokens": body.get("prompt_eval_count"), "completion_tokens": body.get("eval_count")}
        )
        return BackendResponse(content=content, usage=usage)

    async def aclose(self) -> None:
        await self._http.aclose()
