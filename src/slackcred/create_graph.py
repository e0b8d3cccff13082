"""Build a weighted contribution graph from a Slack mirror.

One pass over every channel and message. Only messages that connect to
something (a reaction, a mention, a thread reply) become nodes. References
to members the mirror doesn't know are skipped, not fatal: a partial
mirror still yields a consistent, smaller graph.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable

from slackcred.config import WeightConfig
from slackcred.graph import GraphSink, NodeAddress, WeightedGraph
from slackcred.logging import get_logger
from slackcred.mirror import MirrorRepository
from slackcred.models import Member
from slackcred.records import (
    adds_reaction_edge,
    authors_message_edge,
    member_node,
    mentions_edge,
    message_node,
    reaction_node,
    reacts_to_edge,
    replies_to_edge,
)
from slackcred.weights import reaction_weight

log = get_logger("create_graph")

WeightResolver = Callable[[WeightConfig, str, str, str, str], float]


def create_graph(
    repo: MirrorRepository,
    weights: WeightConfig,
    graph: GraphSink | None = None,
    resolver: WeightResolver = reaction_weight,
) -> GraphSink:
    """Add the nodes, edges and reaction weights of a mirror to a graph.

    Args:
        repo: Initialized mirror to read from.
        weights: Emoji and channel weights.
        graph: Container to fill. A new WeightedGraph if not given.
        resolver: Computes a reaction node's weight from
            (weights, reaction_name, reactor_id, author_id, channel_id).

    Returns:
        The filled graph.
    """
    if graph is None:
        graph = WeightedGraph()

    # Accounts sharing an email are one node; the first seen names it.
    by_email: dict[str, Member] = {}
    member_map: dict[str, Member] = {}
    for member in repo.members():
        member_map[member.id] = by_email.setdefault(member.email, member)

    reaction_weights: dict[NodeAddress, float] = {}
    skipped: Counter[str] = Counter()
    messages_seen = 0

    for channel in repo.channels():
        for message in repo.messages(channel.id):
            messages_seen += 1
            is_starter = message.is_thread_starter
            if not message.has_reactions and not message.has_mentions and not is_starter:
                continue

            has_edges = False

            for reaction in repo.reactions(message.channel_id, message.id):
                reactor = member_map.get(reaction.reactor)
                if reactor is None:
                    skipped["reactor"] += 1
                    log.debug(
                        "unknown_reactor",
                        channel_id=message.channel_id,
                        message_id=message.id,
                        reactor=reaction.reactor,
                    )
                    continue

                node = reaction_node(message, reaction.name)
                graph.add_node(node)
                weight = resolver(
                    weights,
                    reaction.name,
                    reaction.reactor,
                    message.author_id,
                    message.channel_id,
                )
                # Reactors of one emoji share a node; keep the highest weight.
                if weight > reaction_weights.get(node.address, float("-inf")):
                    reaction_weights[node.address] = weight
                    graph.set_node_weight(node.address, weight)
                graph.add_node(member_node(reactor))
                graph.add_edge(reacts_to_edge(reaction.name, message))
                graph.add_edge(adds_reaction_edge(reaction.name, reactor, message))
                has_edges = True

            for user_id in message.mentions:
                mentioned = member_map.get(user_id)
                if mentioned is None:
                    skipped["mention"] += 1
                    log.debug(
                        "unknown_mentioned_member",
                        channel_id=message.channel_id,
                        message_id=message.id,
                        user_id=user_id,
                    )
                    continue

                graph.add_node(member_node(mentioned))
                graph.add_edge(mentions_edge(message, mentioned))
                has_edges = True

            if is_starter:
                reply_ids = repo.thread(message.id, channel_id=message.channel_id)
                if reply_ids:
                    graph.add_node(message_node(message, channel.name))
                for reply_id in reply_ids:
                    reply = repo.message(reply_id, channel_id=message.channel_id)
                    if reply is None:
                        skipped["reply"] += 1
                        continue
                    graph.add_node(message_node(reply, channel.name))
                    graph.add_edge(replies_to_edge(message, reply))

            # Isolated messages would only bloat the graph.
            if not has_edges:
                continue

            author = member_map.get(message.author_id)
            if author is None:
                # Reaction and mention edges stay; only authorship is lost.
                skipped["author"] += 1
                log.debug(
                    "unknown_author",
                    channel_id=message.channel_id,
                    message_id=message.id,
                    author_id=message.author_id,
                )
                continue

            graph.add_node(member_node(author))
            graph.add_node(message_node(message, channel.name))
            graph.add_edge(authors_message_edge(message, author))

    log.info(
        "graph_created",
        members=len(member_map),
        messages=messages_seen,
        skipped_reactors=skipped["reactor"],
        skipped_mentions=skipped["mention"],
        skipped_authors=skipped["author"],
        skipped_replies=skipped["reply"],
    )
    return graph
