"""Weights for reaction nodes."""

from __future__ import annotations

from slackcred.config import WeightConfig


def reaction_weight(
    weights: WeightConfig,
    reaction_name: str,
    reactor_id: str,
    message_author_id: str,
    channel_id: str,
) -> float:
    """Weight of one reaction.

    The emoji weight times the weight of the channel the message is in.
    Reacting to one's own message earns nothing.

    Args:
        weights: Configured emoji and channel weights.
        reaction_name: Emoji name, e.g. "thumbsup".
        reactor_id: Member who added the reaction.
        message_author_id: Author of the reacted message.
        channel_id: Channel of the reacted message.

    Returns:
        Node weight.
    """
    if reactor_id == message_author_id:
        return 0.0

    emoji_weight = weights.emoji_weights.weight_for(reaction_name)
    channel_weight = weights.channel_weights.weight_for(channel_id)
    return emoji_weight * channel_weight
