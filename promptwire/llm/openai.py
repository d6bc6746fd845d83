from __future__ import annotations

from typing import Any

import httpx

from ._http import malformed, post_json, unsupported_model
from .base import BackendResponse, Message, Usage
from .models import CustomModel, ModelId, OpenAIModel

PROVIDER = "openai"


class OpenAIBackend:
    """
    OpenAI-compatible Chat Completions backend via raw HTTP.
    Works with OpenAI or any OpenAI-compatible gateway if you point base_url accordingly.

    The schema travels as `response_format={"type": "json_schema", ...}`, so
    the model is constrained to reply with a matching JSON document.
    """

    def __init__(
        self,
        *,
        api_key: str,
        base_url: str = "https://api.openai.com/v1",
        timeout_s: float = 60.0,
        schema_name: str = "output",
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.schema_name = schema_name
        self._http = httpx.AsyncClient(
            transport=transport,
            timeout=timeout_s,
            headers={"Authorization": f"Bearer {api_key}"},
        )

    def resolve_model(self, model: ModelId) -> str:
        if isinstance(model, CustomModel):
            return model.name
        if isinstance(model, OpenAIModel):
            return model.value
        raise unsupported_model(model, provider=PROVIDER)

    async def dispatch(self, messages: list[Message], schema: dict[str, Any], model: str) -> BackendResponse:
        payload = {
            "model": model,
            "messages": [m.to_dict() for m in messages],
            "response_format": {
                "type": "json_schema",
                "json_schema": {"name": self.schema_name, "schema": schema, "strict": False},
            },
        }
        data = await post_json(self._http, f"{self.base_url}/chat/completions", payload, provider=PROVIDER)

        # OpenAI returns: choices[0].message.content
        choices = data.get("choices") if isinstance(data, dict) else None
        if not isinstance(choices, list) or not choices:
            raise malformed("response has no choices", provider=PROVIDER)
        choice = choices[0]
        msg = choice.get("message") if isinstance(choice, dict) else None
        if not isinstance(msg, dict):
            raise malformed("choice has no message object", provider=PROVIDER)
        if msg.get("refusal"):
            raise malformed(f"model refused: {msg['refusal']}", provider=PROVIDER)
        content = msg.get("content")
        if not isinstance(content, str) or not content.strip():
            reason = choice.get("finish_reason")
            raise malformed(f"empty message content (finish_reason={reason})", provider=PROVIDER)
        return BackendResponse(content=content, usage=Usage.from_payload(data.get("usage")))

    async def aclose(self) -> None:
        await self._http.aclose()
