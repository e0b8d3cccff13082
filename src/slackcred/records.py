"""Node and edge records for mirrored Slack entities.

Reactions carry no time of their own in the mirror, so reaction and
authorship records are stamped with the time of the message.
"""

from __future__ import annotations

import math
from html import escape

from slackcred.addresses import (
    adds_reaction_address,
    authors_message_address,
    member_address,
    mentions_address,
    message_address,
    reaction_address,
    reacts_to_address,
    replies_to_address,
)
from slackcred.graph import Edge, Node
from slackcred.logging import get_logger
from slackcred.models import Member, Message

log = get_logger("records")

MESSAGE_LENGTH = 30
MEMBER_ID_LENGTH = 20


def message_timestamp_ms(message: Message) -> float | None:
    """Milliseconds since epoch for a message, from its Slack ts id.

    Returns None when the id is not a finite number.
    """
    try:
        seconds = float(message.id)
    except ValueError:
        seconds = math.nan
    if not math.isfinite(seconds):
        log.warning(
            "message_id_not_numeric",
            channel_id=message.channel_id,
            message_id=message.id,
        )
        return None
    return seconds * 1000


# =============================================================================
# Nodes
# =============================================================================


def member_node(member: Member) -> Node:
    return Node(
        address=member_address(member),
        description=f"slack/#{escape(member.id[:MEMBER_ID_LENGTH])}",
        timestamp_ms=None,
    )


def message_node(message: Message, channel_name: str) -> Node:
    """Message node; the description shows a truncated, escaped excerpt."""
    partial = escape(message.text[:MESSAGE_LENGTH])
    return Node(
        address=message_address(message),
        description=f'#{escape(channel_name)} message ["{partial}..."]',
        timestamp_ms=message_timestamp_ms(message),
    )


def reaction_node(message: Message, reaction_name: str) -> Node:
    return Node(
        address=reaction_address(reaction_name, message),
        description=(
            f"Reacted `{escape(reaction_name)}` to message [{escape(message.id)}] "
            f"in channel {escape(message.channel_id)}"
        ),
        timestamp_ms=message_timestamp_ms(message),
    )


# =============================================================================
# Edges
# =============================================================================


def authors_message_edge(message: Message, author: Member) -> Edge:
    return Edge(
        address=authors_message_address(author, message),
        timestamp_ms=message_timestamp_ms(message),
        src=member_address(author),
        dst=message_address(message),
    )


def adds_reaction_edge(reaction_name: str, member: Member, message: Message) -> Edge:
    return Edge(
        address=adds_reaction_address(reaction_name, member, message),
        timestamp_ms=message_timestamp_ms(message),
        src=member_address(member),
        dst=reaction_address(reaction_name, message),
    )


def reacts_to_edge(reaction_name: str, message: Message) -> Edge:
    return Edge(
        address=reacts_to_address(reaction_name, message),
        timestamp_ms=message_timestamp_ms(message),
        src=reaction_address(reaction_name, message),
        dst=message_address(message),
    )


def mentions_edge(message: Message, member: Member) -> Edge:
    return Edge(
        address=mentions_address(message, member),
        timestamp_ms=message_timestamp_ms(message),
        src=message_address(message),
        dst=member_address(member),
    )


def replies_to_edge(starter: Message, reply: Message) -> Edge:
    """Thread starter -> reply, stamped with the starter's time."""
    return Edge(
        address=replies_to_address(starter, reply),
        timestamp_ms=message_timestamp_ms(starter),
        src=message_address(starter),
        dst=message_address(reply),
    )
