from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable

from .base import Message
from .models import AnthropicModel, CustomModel, ModelId, OpenAIModel

_UNSET = object()


@dataclass(frozen=True)
class MockCall:
    messages: list[Message]
    schema: dict[str, Any]
    model: str


class MockBackend:
    """
    Deterministic backend: useful to verify control flow without a provider.

    Replays `responses` in order, one per dispatch. An item that is an
    exception instance is raised instead of returned. Once the script is
    used up, `default` is returned (or AssertionError if none was given).
    Every call is recorded in `calls`.
    """

    def __init__(self, responses: Iterable[Any] = (), *, default: Any = _UNSET) -> None:
        self._responses = list(responses)
        self._default = default
        self.calls: list[MockCall] = []

    def resolve_model(self, model: ModelId) -> str:
        if isinstance(model, CustomModel):
            return model.name
        if isinstance(model, (OpenAIModel, AnthropicModel)):
            return model.value
        raise TypeError(f"not a model identifier: {model!r}")

    async def dispatch(self, messages: list[Message], schema: dict[str, Any], model: str) -> Any:
        self.calls.append(MockCall(messages=list(messages), schema=schema, model=model))
        if self._responses:
            item = self._responses.pop(0)
        elif self._default is not _UNSET:
            item = self._default
        else:
            raise AssertionError(f"MockBackend has no scripted response for call #{len(self.calls)}")
        if isinstance(item, BaseException):
            raise item
        return item
