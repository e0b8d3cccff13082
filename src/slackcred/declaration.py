"""Node and edge types produced from a Slack mirror.

Each type owns a distinct address prefix under ``sourcecred/slack``.
"""

from __future__ import annotations

from dataclasses import dataclass

from slackcred.graph import EdgeAddress, NodeAddress

PLUGIN_PREFIX = ("sourcecred", "slack")


@dataclass(frozen=True)
class NodeType:
    prefix: NodeAddress


@dataclass(frozen=True)
class EdgeType:
    prefix: EdgeAddress


def _node_type(kind: str) -> NodeType:
    return NodeType(prefix=NodeAddress.from_parts(*PLUGIN_PREFIX, kind))


def _edge_type(kind: str) -> EdgeType:
    return EdgeType(prefix=EdgeAddress.from_parts(*PLUGIN_PREFIX, kind))


member_node_type = _node_type("MEMBER")
message_node_type = _node_type("MESSAGE")
reaction_node_type = _node_type("REACTION")

# member -> message
authors_message_edge_type = _edge_type("AUTHORS_MESSAGE")
# member -> reaction
adds_reaction_edge_type = _edge_type("ADDS_REACTION")
# reaction -> message
reacts_to_edge_type = _edge_type("REACTS_TO")
# message -> member
mentions_edge_type = _edge_type("MENTIONS")
# thread starter -> reply
replies_to_edge_type = _edge_type("REPLIES_TO")

NODE_TYPES = (member_node_type, message_node_type, reaction_node_type)
EDGE_TYPES = (
    authors_message_edge_type,
    adds_reaction_edge_type,
    reacts_to_edge_type,
    mentions_edge_type,
    replies_to_edge_type,
)
