from __future__ import annotations

from enum import Enum
from typing import Generic, Optional, TypeVar

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class StrictOutput(BaseModel):
    """Output shape that rejects fields it does not declare."""

    model_config = ConfigDict(extra="forbid")


class ThinkStatus(str, Enum):
    SUCCEED = "succeed"
    ERROR = "error"


class ThinkResult(StrictOutput, Generic[T]):
    """Envelope that makes the model grade its own answer."""

    status: ThinkStatus = Field(description="Status of the request.")
    reasoning: str = Field(description="Reason about the status conclusion.")
    confidence: float = Field(ge=0.0, le=1.0, description="Confidence rating from 0.0 to 1.0.")
    # Required key, but the model may answer null when status is "error".
    data: Optional[T] = Field(description="Result data of the operation.")
