from __future__ import annotations

from typing import Any, ClassVar

from promptwire.llm.base import Message
from promptwire.llm.models import MODEL_TYPES, ModelId
from promptwire.schema.derive import check_describable, derive_schema


class PromptTemplate:
    """
    A conversation bound to an output type and a target model.

    Subclasses declare `output` and `model` as class attributes and
    implement `into_messages()`:

        class HelloPrompt(PromptTemplate):
            output = HelloResponse
            model = OpenAIModel.GPT_4O_MINI

            def into_messages(self) -> list[Message]:
                return PromptChain().append(StaticFragment("You are R2-D2.")).build()

    Both declarations are checked when the class is defined. Pass
    `abstract=True` in the class statement for intermediate bases that
    leave them to their own subclasses.
    """

    output: ClassVar[Any]
    model: ClassVar[ModelId]

    def __init_subclass__(cls, abstract: bool = False, **kwargs: Any) -> None:
        super().__init_subclass__(**kwargs)
        if abstract:
            return
        if "output" not in _declared(cls):
            raise TypeError(f"{cls.__name__} must declare an `output` type")
        if "model" not in _declared(cls):
            raise TypeError(f"{cls.__name__} must declare a `model`")
        if not isinstance(cls.model, MODEL_TYPES):
            raise TypeError(
                f"{cls.__name__}.model must be an OpenAIModel, AnthropicModel or CustomModel, "
                f"got {cls.model!r}"
            )
        check_describable(cls.output)

    def into_messages(self) -> list[Message]:
        raise NotImplementedError

    @classmethod
    def response_schema(cls) -> dict[str, Any]:
        return derive_schema(cls.output)


def _declared(cls: type) -> set[str]:
    names: set[str] = set()
    for base in cls.__mro__:
        if base is PromptTemplate or base is object:
            continue
        names.update(vars(base))
    return names
