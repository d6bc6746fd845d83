from __future__ import annotations

import asyncio
import logging
import time
from dataclasses import dataclass
from typing import Any, Generic, TypeVar

import httpx

from promptwire.errors import BackendError, EmptyPromptError, PromptwireError
from promptwire.schema.derive import derive_schema, parse_output
from promptwire.template import PromptTemplate
from promptwire.utils.call_log import CallLogPaths, append_call

from ._http import network_error
from .base import Backend, BackendResponse, Message, Usage
from .models import describe_model

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class Completion(Generic[T]):
    output: T
    model: str
    usage: Usage | None = None


class Client:
    """
    Runs prompt templates against one backend.

    The client holds no conversation state: every call renders, dispatches
    and validates independently, so one client can serve concurrent calls.
    Exactly one backend round trip happens per call; retries, timeouts and
    fallbacks belong in a backend wrapper.
    """

    def __init__(self, backend: Backend, *, call_log: CallLogPaths | None = None) -> None:
        self._backend = backend
        self._call_log = call_log

    @property
    def backend(self) -> Backend:
        return self._backend

    async def chat_complete(self, prompt: PromptTemplate) -> Any:
        """Return the backend's answer as an instance of `prompt.output`."""
        completion = await self.execute(prompt)
        return completion.output

    async def execute(self, prompt: PromptTemplate) -> Completion[Any]:
        """Like `chat_complete`, but also report token usage and the concrete model name."""
        contract = type(prompt).__name__
        started = time.perf_counter()
        model_name: str | None = None
        n_messages = 0
        try:
            messages = list(prompt.into_messages())
            n_messages = len(messages)
            if not messages:
                raise EmptyPromptError(contract)
            schema = derive_schema(prompt.output)
            model_name = self._backend.resolve_model(prompt.model)
            logger.debug(
                "dispatching %s: %d messages to %s (%s)",
                contract,
                n_messages,
                model_name,
                describe_model(prompt.model),
            )
            raw = await self._dispatch(messages, schema, model_name)
            usage = None
            if isinstance(raw, BackendResponse):
                usage = raw.usage
                raw = raw.content
            output = parse_output(prompt.output, raw)
        except PromptwireError as exc:
            logger.warning("%s failed on %s: %s", contract, model_name or "<unresolved>", exc)
            await self._record(contract, model_name, n_messages, started, error=exc)
            raise

        await self._record(contract, model_name, n_messages, started, usage=usage)
        return Completion(output=output, model=model_name, usage=usage)

    def chat_complete_sync(self, prompt: PromptTemplate) -> Any:
        """
        Blocking wrapper for scripts without an event loop.

        Each call runs its own event loop; backends holding a pooled
        `httpx.AsyncClient` should be driven from one loop via `chat_complete`
        when making many calls.
        """
        return asyncio.run(self.chat_complete(prompt))

    async def aclose(self) -> None:
        close = getattr(self._backend, "aclose", None)
        if close is not None:
            await close()

    async def __aenter__(self) -> Client:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.aclose()

    async def _dispatch(self, messages: list[Message], schema: dict[str, Any], model: str) -> Any:
        try:
            return await self._backend.dispatch(messages, schema, model)
        except httpx.HTTPError as exc:
            # Backends should classify their own transport errors; this only
            # catches one that leaked.
            raise network_error(exc, provider=type(self._backend).__name__) from exc

    async def _record(
        self,
        contract: str,
        model: str | None,
        n_messages: int,
        started: float,
        *,
        usage: Usage | None = None,
        error: PromptwireError | None = None,
    ) -> None:
        if self._call_log is None:
            return
        record: dict[str, Any] = {
            "contract": contract,
            "model": model,
            "messages": n_messages,
            "outcome": "error" if error else "ok",
            "elapsed_ms": round((time.perf_counter() - started) * 1000, 1),
        }
        if error is not None:
            record["error"] = type(error).__name__
            if isinstance(error, BackendError):
                record["error_kind"] = error.kind.value
                record["status_code"] = error.status_code
        if usage is not None:
            record["usage"] = {
                "prompt_tokens": usage.prompt_tokens,
                "completion_tokens": usage.completion_tokens,
                "total_tokens": usage.total_tokens,
            }
        try:
            await asyncio.to_thread(append_call, self._call_log, record)
        except OSError:
            # A log write never replaces the call's own outcome.
            logger.exception("could not write call log %s", self._call_log.jsonl_path)
