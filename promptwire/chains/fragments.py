from __future__ import annotations

from datetime import datetime, timezone
from typing import Callable, Protocol, runtime_checkable

from promptwire.llm.base import Message, Role

from .builder import PromptBuilder

Clock = Callable[[], datetime]


@runtime_checkable
class Fragment(Protocol):
    def render(self) -> list[Message]:
        """Return this fragment's messages, in order. Must not fail."""
        raise NotImplementedError


class StaticFragment:
    """Fixed text (role description, safety notice, instruction) under one role."""

    def __init__(self, text: str, role: Role | str = Role.SYSTEM) -> None:
        if not isinstance(text, str):
            raise TypeError(f"StaticFragment text must be str, got {type(text).__name__}")
        self.text = text
        self.role = Role(role)

    def render(self) -> list[Message]:
        return [Message(self.role, self.text)]

    def __repr__(self) -> str:
        return f"StaticFragment({self.text[:40]!r}, role={self.role.value})"


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CurrentDateFragment:
    """
    One system message giving the model the current date and time, so it
    can interpret expressions like "next week" or "in 3 days".

    `clock` must return a timezone-aware datetime; defaults to UTC now.
    """

    def __init__(self, clock: Clock | None = None) -> None:
        self.clock = clock or _utc_now

    def render(self) -> list[Message]:
        now = self.clock()
        tz = now.tzname() or "UTC"
        weekday = now.strftime("%A")
        text = (
            PromptBuilder()
            .key_value("Current ISO Timestamp", now.isoformat())
            .key_value("Current Date and Time", now.strftime("%Y-%m-%d %H:%M:%S"))
            .key_value("Current Weekday", weekday)
            .key_value("Timezone", tz)
            .line(
                "You are currently reasoning in the context of "
                f"{weekday}, {now:%Y-%m-%d}, {now:%H:%M:%S}, {tz}"
            )
            .blank()
            .line(
                "Use this information when interpreting natural language "
                "expressions like 'next week' or 'in 3 days'."
            )
            .finalize()
        )
        return [Message(Role.SYSTEM, text)]
