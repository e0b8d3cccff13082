"""Pydantic models for mirrored Slack entities.

These models bridge between the mirror database (SQLAlchemy Core) and the
graph builder. They are read-only snapshots of what the fetcher stored.
"""

from __future__ import annotations

from typing import Any, TypeVar

from pydantic import BaseModel, ConfigDict, Field


class Channel(BaseModel):
    """Slack conversation."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str
    type: str


class Member(BaseModel):
    """Slack workspace member.

    The email, not the id, is the identity key used for graph addresses.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: str
    name: str | None = None
    email: str


class Message(BaseModel):
    """Slack message.

    ``id`` is Slack's ``ts`` value, a numeric string of epoch seconds.
    """

    model_config = ConfigDict(from_attributes=True, frozen=True)

    channel_id: str
    id: str
    author_id: str
    text: str = ""
    is_thread: bool = False
    in_reply_to: str | None = None
    has_reactions: bool = False
    has_mentions: bool = False
    mentions: tuple[str, ...] = Field(default_factory=tuple)

    @property
    def is_thread_starter(self) -> bool:
        """Whether this message anchors a thread."""
        return self.is_thread and self.in_reply_to == self.id


class Reaction(BaseModel):
    """An emoji reaction added by a member to a message."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    channel_id: str
    message_id: str
    name: str
    reactor: str


# =============================================================================
# Conversion Helpers
# =============================================================================


def message_key(channel_id: str, message_id: str) -> str:
    """Key under which reactions and mentions reference a message.

    Message ids are only unique within a channel, so the key combines both.
    """
    return f"{channel_id}/{message_id}"


T = TypeVar("T", bound=BaseModel)


def row_to_model(row: Any, model_class: type[T]) -> T:
    """Convert SQLAlchemy row to Pydantic model.

    Args:
        row: SQLAlchemy row result.
        model_class: Target Pydantic model class.

    Returns:
        Instance of the model class.
    """
    return model_class.model_validate(row._mapping)
