from __future__ import annotations

import json
from typing import Any

import httpx

from promptwire.utils.json_extract import extract_json_value

from ._http import malformed, post_json, unsupported_model
from .base import BackendResponse, Message, Role, Usage
from .models import AnthropicModel, CustomModel, ModelId

PROVIDER = "anthropic"

_SCHEMA_INSTRUCTION = (
    "Reply with a single JSON document that validates against this JSON Schema. "
    "No markdown, no prose.\n"
)


class AnthropicBackend:
    """Anthropic Messages API backend via raw HTTP."""

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.anthropic.com/v1",
        timeout_s: float = 60.0,
        max_tokens: int = 2048,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.max_tokens = max_tokens
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=timeout_s,
            headers={
                "x-api-key": api_key,
                "anthropic-version": "2023-06-01",
                "content-type": "application/json",
            },
        )

    def resolve_model(self, model: ModelId) -> str:
        if isinstance(model, CustomModel):
            return model.name
        if isinstance(model, AnthropicModel):
            return model.value
        raise unsupported_model(model, provider=PROVIDER)

    async def dispatch(self, messages: list[Message], schema: dict[str, Any], model: str) -> BackendResponse:
        # Anthropic "messages" API: separate system string; user/assistant messages list.
        system_parts = [m.content for m in messages if m.role == Role.SYSTEM]
        system_parts.append(_SCHEMA_INSTRUCTION + json.dumps(schema, ensure_ascii=False))
        payload = {
            "model": model,
            "max_tokens": self.max_tokens,
            "system": "\n\n".join(system_parts),
            "messages": [
                {"role": m.role.value, "content": m.content}
                for m in messages
                if m.role in (Role.USER, Role.ASSISTANT)
            ],
        }
        data = await post_json(self._http, f"{self.base_url}/messages", payload, provider=PROVIDER)
        body = data if isinstance(data, dict) else {}

        # Anthropic returns: content: [{type:"text", text:"..."}]
        blocks = body.get("content") or []
        if not isinstance(blocks, list):
            raise malformed("content is not a list of blocks", provider=PROVIDER)
        text = "".join(
            b["text"]
            for b in blocks
            if isinstance(b, dict) and b.get("type") == "text" and isinstance(b.get("text"), str)
        )
        if not text.strip():
            raise malformed(
                f"no text content (stop_reason={body.get('stop_reason')})",
                provider=PROVIDER,
            )
        try:
            value = extract_json_value(text)
        except ValueError as exc:
            raise malformed(str(exc), provider=PROVIDER) from exc
        return BackendResponse(content=value, usage=Usage.from_payload(body.get("usage")))

    async def aclose(self) -> None:
        await self._http.aclose()
