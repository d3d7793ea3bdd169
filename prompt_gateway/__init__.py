"""
Prompt Gateway - forwards a prompt to a chat-completion API.

A caller posts {"context", "message"}; the gateway sends them upstream as a
system + user conversation and relays a normalized result envelope.
"""

from .models import (
    Prompt,
    Message,
    CompletionRequest,
    CompletionResponse,
    Choice,
    Usage,
    ResultEnvelope,
    EmptyChoicesError,
)
from .client import UpstreamClient, Completed, Failed, SendResult
from .config import Settings, get_settings
from .server import create_app

__all__ = [
    # Data model
    "Prompt",
    "Message",
    "CompletionRequest",
    "CompletionResponse",
    "Choice",
    "Usage",
    "ResultEnvelope",
    "EmptyChoicesError",
    # Upstream client
    "UpstreamClient",
    "Completed",
    "Failed",
    "SendResult",
    # Config
    "Settings",
    "get_settings",
    # App factory
    "create_app",
]
