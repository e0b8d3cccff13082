"""Addresses of the nodes and edges built from mirrored Slack entities.

All functions are pure: equal inputs give equal addresses.
"""

from __future__ import annotations

from slackcred.declaration import (
    adds_reaction_edge_type,
    authors_message_edge_type,
    member_node_type,
    mentions_edge_type,
    message_node_type,
    reaction_node_type,
    reacts_to_edge_type,
    replies_to_edge_type,
)
from slackcred.graph import EdgeAddress, NodeAddress
from slackcred.models import Member, Message


# =============================================================================
# Nodes
# =============================================================================


def member_address(member: Member) -> NodeAddress:
    """Members are addressed by email so aliased accounts can be merged."""
    return member_node_type.prefix.append(member.email)


def message_address(message: Message) -> NodeAddress:
    return message_node_type.prefix.append(message.channel_id, message.id)


def reaction_address(reaction_name: str, message: Message) -> NodeAddress:
    # Author before message id, so reactions can be grouped by whose
    # message they landed on.
    return reaction_node_type.prefix.append(
        message.channel_id,
        reaction_name,
        message.author_id,
        message.id,
    )


# =============================================================================
# Edges
# =============================================================================


def authors_message_address(author: Member, message: Message) -> EdgeAddress:
    return authors_message_edge_type.prefix.append(
        author.id,
        message.channel_id,
        message.id,
    )


def adds_reaction_address(reaction_name: str, member: Member, message: Message) -> EdgeAddress:
    return adds_reaction_edge_type.prefix.append(
        member.id,
        reaction_name,
        message.channel_id,
        message.id,
    )


def reacts_to_address(reaction_name: str, message: Message) -> EdgeAddress:
    return reacts_to_edge_type.prefix.append(
        reaction_name,
        message.author_id,
        message.channel_id,
        message.id,
    )


def mentions_address(message: Message, member: Member) -> EdgeAddress:
    return mentions_edge_type.prefix.append(
        message.channel_id,
        message.author_id,
        message.id,
        member.id,
    )


def replies_to_address(starter: Message, reply: Message) -> EdgeAddress:
    return replies_to_edge_type.prefix.append(
        starter.channel_id,
        starter.author_id,
        starter.id,
        reply.channel_id,
        reply.author_id,
        reply.id,
    )
