from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol, runtime_checkable

from .models import ModelId


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class Message:
    role: Role
    content: str
    name: str | None = None

    def __post_init__(self) -> None:
        # Accept plain strings ("user") but always store the enum.
        object.__setattr__(self, "role", Role(self.role))
        if not isinstance(self.content, str):
            raise TypeError(f"Message content must be str, got {type(self.content).__name__}")

    @classmethod
    def system(cls, content: str) -> Message:
        return cls(Role.SYSTEM, content)

    @classmethod
    def user(cls, content: str) -> Message:
        return cls(Role.USER, content)

    @classmethod
    def assistant(cls, content: str) -> Message:
        return cls(Role.ASSISTANT, content)

    def render(self) -> list[Message]:
        return [self]

    def to_dict(self) -> dict[str, str]:
        d = {"role": self.role.value, "content": self.content}
        if self.name is not None:
            d["name"] = self.name
        return d


@dataclass(frozen=True)
class Usage:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int

    @classmethod
    def from_payload(cls, usage: Any) -> Usage | None:
        """Read chat-style (prompt/completion) or responses-style (input/output) token counts."""
        if not isinstance(usage, dict):
            return None
        prompt = usage.get("prompt_tokens", usage.get("input_tokens"))
        completion = usage.get("completion_tokens", usage.get("output_tokens"))
        if not isinstance(prompt, int) or not isinstance(completion, int):
            return None
        total = usage.get("total_tokens")
        if not isinstance(total, int):
            total = prompt + completion
        return cls(prompt_tokens=prompt, completion_tokens=completion, total_tokens=total)


@dataclass(frozen=True)
class BackendResponse:
    """Raw provider output. `content` is a JSON string or an already decoded value."""

    content: Any
    usage: Usage | None = None


@runtime_checkable
class Backend(Protocol):
    """One provider round trip. Implementations must be safe to share between concurrent calls."""

    def resolve_model(self, model: ModelId) -> str:
        """Return the provider's concrete model name or raise BackendError(PROVIDER_REJECTED)."""
        raise NotImplementedError

    async def dispatch(
        self,
        messages: list[Message],
        schema: dict[str, Any],
        model: str,
    ) -> Any:
        """Return raw output (str, JSON value or BackendResponse); raise BackendError on failure."""
        raise NotImplementedError
