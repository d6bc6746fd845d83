from __future__ import annotations

import argparse
import asyncio
import logging
import sys

from rich.console import Console

from promptwire.chains import CurrentDateFragment, PromptChain, StaticFragment
from promptwire.config import BACKENDS, load_settings
from promptwire.errors import BackendError, PromptwireError, SchemaViolationError
from promptwire.llm import Client, build_backend
from promptwire.llm.base import Message, Role
from promptwire.llm.models import AnthropicModel, CustomModel, ModelId, OpenAIModel
from promptwire.schema import StrictOutput
from promptwire.template import PromptTemplate
from promptwire.utils.call_log import init_call_log

R2D2_SYSTEM = (
    "You are R2-D2, an astromech droid. You answer in short, cheerful sentences "
    "and you always reply with the JSON document you are asked for."
)

DEFAULT_MODELS: dict[str, ModelId] = {
    "mock": OpenAIModel.GPT_4O_MINI,
    "openai": OpenAIModel.GPT_4O_MINI,
    "anthropic": AnthropicModel.CLAUDE_HAIKU_4_5,
    "ollama": CustomModel("llama3.1"),
}


class Greeting(StrictOutput):
    greeting: str


class GreetingPrompt(PromptTemplate, abstract=True):
    output = Greeting

    def __init__(self, request: str) -> None:
        self.request = request

    def into_messages(self) -> list[Message]:
        return (
            PromptChain()
            .append(StaticFragment(R2D2_SYSTEM))
            .append(CurrentDateFragment())
            .append(StaticFragment(self.request, Role.USER))
            .build()
        )


def greeting_prompt_for(model: ModelId) -> type[GreetingPrompt]:
    # The model is fixed per contract class, so each target gets its own subclass.
    return type("GreetingPrompt", (GreetingPrompt,), {"model": model})


async def _run(args: argparse.Namespace, console: Console) -> int:
    settings = load_settings()
    backend_name = (args.backend or settings.backend).strip().lower()
    model = CustomModel(args.model) if args.model else DEFAULT_MODELS.get(backend_name, OpenAIModel.GPT_4O_MINI)

    try:
        backend = build_backend(settings, backend=backend_name)
    except (RuntimeError, ValueError) as exc:
        console.print(f"[bold red]config error[/bold red]: {exc}")
        return 1

    call_log = None
    if not args.no_log:
        call_log = init_call_log(settings.log_dir)

    prompt = greeting_prompt_for(model)(args.request)
    async with Client(backend, call_log=call_log) as client:
        try:
            completion = await client.execute(prompt)
        except BackendError as exc:
            console.print(f"[bold red]backend error[/bold red] ({exc.kind.value}): {exc}")
            return 2
        except SchemaViolationError as exc:
            console.print(f"[bold red]schema violation[/bold red]: {exc}")
            return 3
        except PromptwireError as exc:
            console.print(f"[bold red]error[/bold red]: {exc}")
            return 1

    console.rule("promptwire")
    console.print(f"[bold]backend[/bold]: {backend_name}")
    console.print(f"[bold]model[/bold]: {completion.model}")
    console.print(f"[bold]greeting[/bold]: {completion.output.greeting}")
    if completion.usage:
        u = completion.usage
        console.print(
            f"[bold]tokens[/bold]: prompt={u.prompt_tokens} completion={u.completion_tokens} total={u.total_tokens}"
        )
    if call_log is not None:
        console.print(f"[bold]call_log[/bold]: {call_log.jsonl_path}")
    return 0


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(prog="promptwire")
    parser.add_argument("request", nargs="?", default="Say hello!", help="user message sent after the system role")
    parser.add_argument("--backend", choices=BACKENDS, help="override PROMPTWIRE_BACKEND")
    parser.add_argument("--model", help="provider model name (sent as a custom model)")
    parser.add_argument("--no-log", action="store_true", help="do not write logs/calls_*.jsonl")
    parser.add_argument("-v", "--verbose", action="store_true", help="debug logging to stderr")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        stream=sys.stderr,
        format="%(levelname)s %(name)s: %(message)s",
    )
    return asyncio.run(_run(args, Console()))


if __name__ == "__main__":
    raise SystemExit(main())
