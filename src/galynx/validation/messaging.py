"""Pydantic models for channels, messages and threads"""

from pydantic import BaseModel, Field


class Channel(BaseModel):
    """Channel inside a workspace"""

    id: str
    workspace_id: str
    name: str
    is_private: bool
    created_by: str
    created_at: int


class Message(BaseModel):
    """Chat message; thread replies carry thread_root_id"""

    id: str
    workspace_id: str
    channel_id: str
    sender_id: str
    body_md: str
    thread_root_id: str | None = None
    created_at: int
    edited_at: int | None = None
    deleted_at: int | None = None


class MessageList(BaseModel):
    """Cursor-paginated page of messages"""

    items: list[Message] = Field(default_factory=list)
    next_cursor: str | None = None


class ThreadSummary(BaseModel):
    """Thread root plus reply statistics"""

    root_message: Message
    reply_count: int = Field(..., ge=0)
    last_reply_at: int | None = None
    participants: list[str] = Field(default_factory=list)
