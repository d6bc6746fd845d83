from __future__ import annotations

from typing import Iterable

from promptwire.llm.base import Message

from .fragments import Fragment


class PromptChain:
    """
    Ordered list of fragments flattened into the final conversation.

        messages = (
            PromptChain()
            .append(StaticFragment("You are a helpful bot."))
            .append(CurrentDateFragment())
            .append(Message.user("Convert the text to uppercase."))
            .build()
        )

    Fragments render at `build()` time. A chain is itself a fragment, so
    chains can be nested.
    """

    def __init__(self, fragments: Iterable[Fragment] = ()) -> None:
        self._fragments: list[Fragment] = []
        self.extend(fragments)

    def append(self, fragment: Fragment) -> PromptChain:
        if isinstance(fragment, (str, bytes)) or not callable(getattr(fragment, "render", None)):
            raise TypeError(
                f"expected a fragment with render(), got {type(fragment).__name__}; "
                "wrap plain text in StaticFragment or Message"
            )
        self._fragments.append(fragment)
        return self

    def extend(self, fragments: Iterable[Fragment]) -> PromptChain:
        for f in fragments:
            self.append(f)
        return self

    def build(self) -> list[Message]:
        out: list[Message] = []
        for f in self._fragments:
            out.extend(f.render())
        return out

    def render(self) -> list[Message]:
        return self.build()

    def __len__(self) -> int:
        return len(self._fragments)
