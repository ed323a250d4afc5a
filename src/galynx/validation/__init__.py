"""Validation models for API payloads

Pydantic models for everything the remote API sends back, plus the
helpers that turn validation failures into InvalidResponseError.
"""

from .attachments import (
    Attachment,
    AttachmentPresign,
    map_attachment_commit_response,
)
from .auth import AuthSession, TokenBundle, User
from .decoding import decode_list, decode_model
from .messaging import Channel, Message, MessageList, ThreadSummary

__all__ = [
    # Auth models
    "TokenBundle",
    "User",
    "AuthSession",
    # Messaging models
    "Channel",
    "Message",
    "MessageList",
    "ThreadSummary",
    # Attachment models
    "Attachment",
    "AttachmentPresign",
    "map_attachment_commit_response",
    # Helpers
    "decode_model",
    "decode_list",
]
