from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union


class OpenAIModel(Enum):
    GPT_4O = "gpt-4o"
    GPT_4O_MINI = "gpt-4o-mini"
    O3 = "o3"
    O3_MINI = "o3-mini"
    O4_MINI = "o4-mini"
    GPT_5 = "gpt-5"
    GPT_5_MINI = "gpt-5-mini"
    GPT_5_NANO = "gpt-5-nano"
    GPT_5_1 = "gpt-5.1"
    GPT_5_2 = "gpt-5.2"


class AnthropicModel(Enum):
    CLAUDE_SONNET_4_5 = "claude-sonnet-4-5"
    CLAUDE_OPUS_4_1 = "claude-opus-4-1"
    CLAUDE_HAIKU_4_5 = "claude-haiku-4-5"


@dataclass(frozen=True)
class CustomModel:
    """Any provider model not covered by an enum (self-hosted, beta, ...)."""

    name: str

    def __post_init__(self) -> None:
        if not isinstance(self.name, str) or not self.name.strip():
            raise ValueError("CustomModel name must be a non-empty string")


ModelId = Union[OpenAIModel, AnthropicModel, CustomModel]

MODEL_TYPES = (OpenAIModel, AnthropicModel, CustomModel)


def describe_model(model: ModelId) -> str:
    if isinstance(model, CustomModel):
        return f"custom:{model.name}"
    return f"{type(model).__name__}.{model.name}"
