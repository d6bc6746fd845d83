from .base import Backend, BackendResponse, Message, Role, Usage
from .client import Client, Completion
from .factory import build_backend
from .mock import MockBackend
from .models import AnthropicModel, CustomModel, ModelId, OpenAIModel

__all__ = [
    "AnthropicModel",
    "Backend",
    "BackendResponse",
    "Client",
    "Completion",
    "CustomModel",
    "Message",
    "MockBackend",
    "ModelId",
    "OpenAIModel",
    "Role",
    "Usage",
    "build_backend",
]
