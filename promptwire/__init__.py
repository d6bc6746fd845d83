"""Typed, schema-validated prompts over pluggable LLM backends."""

from .errors import (
    BackendError,
    EmptyPromptError,
    FieldMismatch,
    PromptwireError,
    SchemaViolationError,
    TransportErrorKind,
)
from .llm import (
    AnthropicModel,
    Backend,
    BackendResponse,
    Client,
    Completion,
    CustomModel,
    Message,
    MockBackend,
    OpenAIModel,
    Role,
    Usage,
)
from .chains import CurrentDateFragment, Fragment, PromptBuilder, PromptChain, StaticFragment
from .schema import StrictOutput, ThinkResult, ThinkStatus, derive_schema, parse_output
from .template import PromptTemplate

__all__ = [
    "AnthropicModel",
    "Backend",
    "BackendError",
    "BackendResponse",
    "Client",
    "Completion",
    "CurrentDateFragment",
    "CustomModel",
    "EmptyPromptError",
    "FieldMismatch",
    "Fragment",
    "Message",
    "MockBackend",
    "OpenAIModel",
    "PromptBuilder",
    "PromptChain",
    "PromptTemplate",
    "PromptwireError",
    "Role",
    "SchemaViolationError",
    "StaticFragment",
    "StrictOutput",
    "ThinkResult",
    "ThinkStatus",
    "TransportErrorKind",
    "Usage",
    "derive_schema",
    "parse_output",
]
