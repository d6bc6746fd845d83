"""Shared pytest fixtures."""

import pytest
from pydantic import BaseModel

from promptwire.chains import PromptChain, StaticFragment
from promptwire.llm.base import Message, Role
from promptwire.llm.mock import MockBackend
from promptwire.llm.models import OpenAIModel
from promptwire.schema import StrictOutput
from promptwire.template import PromptTemplate


class Hello(BaseModel):
    greeting: str


class StrictHello(StrictOutput):
    greeting: str


class HelloPrompt(PromptTemplate):
    output = Hello
    model = OpenAIModel.GPT_4O_MINI

    def into_messages(self) -> list[Message]:
        return (
            PromptChain()
            .append(StaticFragment("You are R2-D2."))
            .append(StaticFragment("Say hello!", Role.USER))
            .build()
        )


class StrictHelloPrompt(HelloPrompt):
    output = StrictHello


class EmptyPrompt(PromptTemplate):
    output = Hello
    model = OpenAIModel.GPT_4O

    def into_messages(self) -> list[Message]:
        return PromptChain().build()


@pytest.fixture
def hello_prompt() -> HelloPrompt:
    return HelloPrompt()


@pytest.fixture
def strict_hello_prompt() -> StrictHelloPrompt:
    return StrictHelloPrompt()


@pytest.fixture
def empty_prompt() -> EmptyPrompt:
    return EmptyPrompt()


@pytest.fixture
def make_backend():
    """Build a MockBackend replaying the given responses."""

    def _make(*responses, **kwargs) -> MockBackend:
        return MockBackend(responses, **kwargs)

    return _make


@pytest.fixture(autouse=True)
def no_dotenv(mocker):
    """Keep a developer's local .env out of the tests."""
    mocker.patch("promptwire.config.load_dotenv", return_value=False)
