"""Tests for the Client dispatch loop."""

import asyncio

import httpx
import pytest
from pydantic import BaseModel

from promptwire.errors import BackendError, EmptyPromptError, SchemaViolationError, TransportErrorKind
from promptwire.llm.base import BackendResponse, Message, Usage
from promptwire.llm.client import Client
from promptwire.llm.models import CustomModel, OpenAIModel
from promptwire.schema import derive_schema
from promptwire.template import PromptTemplate
from promptwire.utils.call_log import init_call_log, read_calls

from conftest import Hello, StrictHello


class EchoBackend:
    """Answers with the last user message after yielding to the event loop."""

    def __init__(self):
        self.calls = 0

    def resolve_model(self, model):
        return model.value

    async def dispatch(self, messages, schema, model):
        self.calls += 1
        await asyncio.sleep(0)
        return {"greeting": messages[-1].content}


class AskPrompt(PromptTemplate):
    output = Hello
    model = OpenAIModel.GPT_4O

    def __init__(self, text):
        self.text = text

    def into_messages(self):
        return [Message.user(self.text)]


class Tally(BaseModel):
    n: int
    ok: bool


class TallyPrompt(PromptTemplate):
    output = Tally
    model = CustomModel("counter")

    def into_messages(self):
        return [Message.user("Count the droids.")]


class TestChatComplete:
    @pytest.mark.asyncio
    async def test_returns_typed_output(self, make_backend, hello_prompt):
        backend = make_backend({"greeting": "Hello there!"})

        result = await Client(backend).chat_complete(hello_prompt)

        assert result == Hello(greeting="Hello there!")

    @pytest.mark.asyncio
    async def test_sends_rendered_messages_in_order(self, make_backend, hello_prompt):
        backend = make_backend({"greeting": "hi"})

        await Client(backend).chat_complete(hello_prompt)

        (call,) = backend.calls
        assert call.messages == [Message.system("You are R2-D2."), Message.user("Say hello!")]

    @pytest.mark.asyncio
    async def test_sends_schema_and_resolved_model(self, make_backend, hello_prompt):
        backend = make_backend({"greeting": "hi"})

        await Client(backend).chat_complete(hello_prompt)

        (call,) = backend.calls
        assert call.schema == derive_schema(Hello)
        assert call.model == "gpt-4o-mini"

    @pytest.mark.asyncio
    async def test_accepts_json_text(self, make_backend, hello_prompt):
        backend = make_backend('{"greeting": "Hello there!"}')

        assert await Client(backend).chat_complete(hello_prompt) == Hello(greeting="Hello there!")

    @pytest.mark.asyncio
    async def test_wrong_field_name_is_schema_violation(self, make_backend, hello_prompt):
        backend = make_backend({"greetings": "Hello there!"})

        with pytest.raises(SchemaViolationError) as ei:
            await Client(backend).chat_complete(hello_prompt)

        assert ei.value.missing_fields == ["greeting"]

    @pytest.mark.asyncio
    async def test_loose_types_are_rejected(self, make_backend):
        backend = make_backend({"n": "5", "ok": "yes"})

        with pytest.raises(SchemaViolationError) as ei:
            await Client(backend).chat_complete(TallyPrompt())

        assert sorted(m.path for m in ei.value.type_mismatches) == ["n", "ok"]

    @pytest.mark.asyncio
    async def test_strict_shape_names_unexpected_field(self, make_backend, strict_hello_prompt):
        backend = make_backend({"greetings": "Hello there!"})

        with pytest.raises(SchemaViolationError) as ei:
            await Client(backend).chat_complete(strict_hello_prompt)

        assert ei.value.missing_fields == ["greeting"]
        assert ei.value.unexpected_fields == ["greetings"]

    @pytest.mark.asyncio
    async def test_strict_shape_success(self, make_backend, strict_hello_prompt):
        backend = make_backend({"greeting": "Beep"})

        assert await Client(backend).chat_complete(strict_hello_prompt) == StrictHello(greeting="Beep")


class TestFailures:
    @pytest.mark.asyncio
    async def test_empty_prompt_never_reaches_backend(self, make_backend, empty_prompt):
        backend = make_backend({"greeting": "unused"})

        with pytest.raises(EmptyPromptError) as ei:
            await Client(backend).chat_complete(empty_prompt)

        assert ei.value.contract == "EmptyPrompt"
        assert backend.calls == []

    @pytest.mark.asyncio
    async def test_rate_limited_passes_through_unmodified(self, make_backend, hello_prompt):
        limited = BackendError(
            TransportErrorKind.RATE_LIMITED, "slow down", status_code=429, provider="openai"
        )
        backend = make_backend(limited, {"greeting": "never used"})

        with pytest.raises(BackendError) as ei:
            await Client(backend).chat_complete(hello_prompt)

        assert ei.value is limited
        assert ei.value.kind is TransportErrorKind.RATE_LIMITED
        assert ei.value.status_code == 429
        assert len(backend.calls) == 1

    @pytest.mark.asyncio
    @pytest.mark.parametrize("kind", list(TransportErrorKind))
    async def test_every_backend_kind_surfaces(self, make_backend, hello_prompt, kind):
        backend = make_backend(BackendError(kind, "boom"))

        with pytest.raises(BackendError) as ei:
            await Client(backend).chat_complete(hello_prompt)

        assert ei.value.kind is kind

    @pytest.mark.asyncio
    async def test_leaked_httpx_error_becomes_network_error(self, make_backend, hello_prompt):
        leaked = httpx.ConnectError("connection refused")
        backend = make_backend(leaked)

        with pytest.raises(BackendError) as ei:
            await Client(backend).chat_complete(hello_prompt)

        assert ei.value.kind is TransportErrorKind.NETWORK
        assert ei.value.__cause__ is leaked

    @pytest.mark.asyncio
    async def test_unsupported_model_stops_before_dispatch(self, mocker, hello_prompt):
        backend = mocker.Mock()
        backend.resolve_model.side_effect = BackendError(
            TransportErrorKind.PROVIDER_REJECTED, "no such model"
        )
        backend.dispatch = mocker.AsyncMock()

        with pytest.raises(BackendError):
            await Client(backend).chat_complete(hello_prompt)

        backend.dispatch.assert_not_called()

    @pytest.mark.asyncio
    async def test_unrelated_exceptions_propagate(self, make_backend, hello_prompt):
        backend = make_backend(KeyError("bug in backend"))

        with pytest.raises(KeyError):
            await Client(backend).chat_complete(hello_prompt)


class TestExecute:
    @pytest.mark.asyncio
    async def test_reports_usage_and_model(self, make_backend, hello_prompt):
        usage = Usage(prompt_tokens=12, completion_tokens=5, total_tokens=17)
        backend = make_backend(BackendResponse(content='{"greeting": "hi"}', usage=usage))

        completion = await Client(backend).execute(hello_prompt)

        assert completion.output == Hello(greeting="hi")
        assert completion.model == "gpt-4o-mini"
        assert completion.usage == usage

    @pytest.mark.asyncio
    async def test_usage_absent_for_bare_values(self, make_backend, hello_prompt):
        completion = await Client(make_backend({"greeting": "hi"})).execute(hello_prompt)

        assert completion.usage is None


class TestConcurrency:
    @pytest.mark.asyncio
    async def test_concurrent_calls_are_independent(self):
        backend = EchoBackend()
        client = Client(backend)

        results = await asyncio.gather(*(client.chat_complete(AskPrompt(f"hello {i}")) for i in range(5)))

        assert [r.greeting for r in results] == [f"hello {i}" for i in range(5)]
        assert backend.calls == 5


class TestLifecycle:
    @pytest.mark.asyncio
    async def test_context_manager_closes_backend(self, mocker):
        backend = mocker.Mock()
        backend.aclose = mocker.AsyncMock()

        async with Client(backend) as client:
            assert client.backend is backend

        backend.aclose.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_aclose_without_backend_support(self, make_backend):
        await Client(make_backend()).aclose()

    def test_chat_complete_sync(self, make_backend, hello_prompt):
        backend = make_backend({"greeting": "sync hi"})

        assert Client(backend).chat_complete_sync(hello_prompt) == Hello(greeting="sync hi")


class TestCallLog:
    @pytest.mark.asyncio
    async def test_records_success_and_failure(self, tmp_path, make_backend, hello_prompt):
        paths = init_call_log(tmp_path, "test-run")
        backend = make_backend(
            BackendResponse(content={"greeting": "hi"}, usage=Usage(3, 2, 5)),
            BackendError(TransportErrorKind.AUTH, "bad key", status_code=401),
        )
        client = Client(backend, call_log=paths)

        await client.chat_complete(hello_prompt)
        with pytest.raises(BackendError):
            await client.chat_complete(hello_prompt)

        ok, failed = read_calls(paths)
        assert ok["run_id"] == "test-run"
        assert ok["contract"] == "HelloPrompt"
        assert ok["model"] == "gpt-4o-mini"
        assert ok["messages"] == 2
        assert ok["outcome"] == "ok"
        assert ok["usage"] == {"prompt_tokens": 3, "completion_tokens": 2, "total_tokens": 5}
        assert failed["outcome"] == "error"
        assert failed["error"] == "BackendError"
        assert failed["error_kind"] == "auth"
        assert failed["status_code"] == 401

    @pytest.mark.asyncio
    async def test_message_contents_are_not_logged(self, tmp_path, make_backend, hello_prompt):
        paths = init_call_log(tmp_path, "privacy")

        await Client(make_backend({"greeting": "hi"}), call_log=paths).chat_complete(hello_prompt)

        assert "R2-D2" not in paths.jsonl_path.read_text(encoding="utf-8")

    @pytest.mark.asyncio
    async def test_schema_violation_logged(self, tmp_path, make_backend, hello_prompt):
        paths = init_call_log(tmp_path, "violations")

        with pytest.raises(SchemaViolationError):
            await Client(make_backend({}), call_log=paths).chat_complete(hello_prompt)

        (record,) = read_calls(paths)
        assert record["error"] == "SchemaViolationError"
        assert "error_kind" not in record

    @pytest.mark.asyncio
    async def test_log_failure_keeps_the_result(self, tmp_path, mocker, caplog, make_backend, hello_prompt):
        mocker.patch("promptwire.llm.client.append_call", side_effect=OSError("disk full"))
        client = Client(make_backend({"greeting": "hi"}), call_log=init_call_log(tmp_path, "full"))

        assert await client.chat_complete(hello_prompt) == Hello(greeting="hi")
        assert "could not write call log" in caplog.text

    @pytest.mark.asyncio
    async def test_log_failure_keeps_the_original_error(self, tmp_path, mocker, make_backend, hello_prompt):
        mocker.patch("promptwire.llm.client.append_call", side_effect=OSError("disk full"))
        limited = BackendError(TransportErrorKind.RATE_LIMITED, "slow down")
        client = Client(make_backend(limited), call_log=init_call_log(tmp_path, "full"))

        with pytest.raises(BackendError) as ei:
            await client.chat_complete(hello_prompt)

        assert ei.value is limited
