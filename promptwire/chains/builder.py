from __future__ import annotations

from typing import Any


class PromptBuilder:
    """
    Fluent helper for markdown prompt text.

    Every method appends to an internal buffer and returns the builder;
    `finalize()` returns the text. No smart formatting: newlines are
    emitted exactly as requested.

        PromptBuilder().h1("Mission Briefing").blank().key_value("Priority", "High").finalize()
    """

    def __init__(self) -> None:
        self._parts: list[str] = []

    def h1(self, line: Any) -> PromptBuilder:
        return self.line(f"# {line}")

    def h2(self, line: Any) -> PromptBuilder:
        return self.line(f"## {line}")

    def line(self, line: Any) -> PromptBuilder:
        self._parts.append(f"{line}\n")
        return self

    def bold(self, line: Any) -> PromptBuilder:
        return self.line(f"**{line}**")

    def key_value(self, key: Any, value: Any) -> PromptBuilder:
        return self.line(f"**{key}**: {value}")

    def markdown_block(self, content: Any) -> PromptBuilder:
        return self._fenced("markdown", content)

    def json_block(self, content: Any) -> PromptBuilder:
        return self._fenced("json", content)

    def yaml_block(self, content: Any) -> PromptBuilder:
        return self._fenced("yaml", content)

    def blank(self) -> PromptBuilder:
        self._parts.append("\n")
        return self

    def delimiter(self) -> PromptBuilder:
        return self.line("---")

    def indent(self) -> PromptBuilder:
        self._parts.append("\t")
        return self

    def finalize(self) -> str:
        return "".join(self._parts)

    def _fenced(self, lang: str, content: Any) -> PromptBuilder:
        return self.line(f"```{lang}").line(content).line("```")
