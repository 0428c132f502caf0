"""Message models shared by sessions and the completion client."""

from enum import Enum

from pydantic import BaseModel, ConfigDict


class MessageRole(str, Enum):
    """Message sender role."""

    USER = "user"
    ASSISTANT = "assistant"
    SYSTEM = "system"


class Message(BaseModel):
    """A single chat message. Immutable once created."""

    model_config = ConfigDict(frozen=True)

    role: MessageRole
    content: str
