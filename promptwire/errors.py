from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any


class TransportErrorKind(str, Enum):
    NETWORK = "network"
    AUTH = "auth"
    RATE_LIMITED = "rate_limited"
    PROVIDER_REJECTED = "provider_rejected"
    MALFORMED_RESPONSE = "malformed_response"


class PromptwireError(RuntimeError):
    """Base of every failure `Client.chat_complete` can raise."""


class EmptyPromptError(PromptwireError):
    """The contract rendered zero messages; nothing was sent."""

    def __init__(self, contract: str) -> None:
        self.contract = contract
        super().__init__(f"prompt {contract} rendered no messages")


class BackendError(PromptwireError):
    """
    Raised by a backend for anything that went wrong talking to the provider.

    The client never rewrites it: callers see the kind, detail and status
    exactly as the backend reported them.
    """

    def __init__(
        self,
        kind: TransportErrorKind,
        detail: str = "",
        *,
        status_code: int | None = None,
        provider: str | None = None,
    ) -> None:
        self.kind = kind
        self.detail = detail
        self.status_code = status_code
        self.provider = provider
        super().__init__(self._format())

    def _format(self) -> str:
        head = f"{self.provider or 'backend'} {self.kind.value}"
        if self.status_code is not None:
            head += f" (HTTP {self.status_code})"
        return f"{head}: {self.detail}" if self.detail else head


@dataclass(frozen=True)
class FieldMismatch:
    path: str  # dotted, "" for the document root
    message: str
    error_type: str


class SchemaViolationError(PromptwireError):
    """The backend answered, but the answer does not fit the declared output."""

    def __init__(
        self,
        *,
        output: str,
        missing_fields: list[str] | None = None,
        type_mismatches: list[FieldMismatch] | None = None,
        unexpected_fields: list[str] | None = None,
        raw: Any = None,
    ) -> None:
        self.output = output
        self.missing_fields = list(missing_fields or [])
        self.type_mismatches = list(type_mismatches or [])
        self.unexpected_fields = list(unexpected_fields or [])
        self.raw = raw
        super().__init__(self._format())

    def _format(self) -> str:
        parts: list[str] = []
        if self.missing_fields:
            parts.append("missing " + ", ".join(self.missing_fields))
        if self.type_mismatches:
            parts.append(
                "mismatched "
                + ", ".join(f"{m.path or '<root>'} ({m.message})" for m in self.type_mismatches)
            )
        if self.unexpected_fields:
            parts.append("unexpected " + ", ".join(self.unexpected_fields))
        return f"response does not match {self.output}: " + "; ".join(parts or ["invalid"])
