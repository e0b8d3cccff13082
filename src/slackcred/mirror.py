"""Local mirror of a Slack workspace.

The mirror is a SQLite store written by the fetcher and read by the graph
builder. A store is stamped with a schema version the first time it is
opened and can afterwards only be reused by code expecting that version.
"""

from __future__ import annotations

import json
from collections import defaultdict
from collections.abc import Callable, Iterable
from typing import TypeVar

from sqlalchemy import delete, inspect, select
from sqlalchemy.dialects.sqlite import insert
from sqlalchemy.engine import Connection, Engine

from slackcred.database import (
    channels,
    content_tables,
    members,
    message_mentions,
    message_reactions,
    messages,
    meta,
)
from slackcred.logging import get_logger
from slackcred.models import Channel, Member, Message, Reaction, message_key, row_to_model

log = get_logger("mirror")

# Bump whenever the table layout in slackcred.database changes.
MIRROR_VERSION = "slack_mirror_v0"


class MirrorError(Exception):
    """Base class for mirror store failures."""


class IncompatibleMirrorError(MirrorError):
    """The store was initialized by a different schema version."""


class TransactionError(MirrorError):
    """A transaction was opened while another one was active."""


def mirror_config(version: str = MIRROR_VERSION) -> str:
    """Serialize the config stored in the ``meta`` row.

    Keys are sorted and whitespace-free so equal configs compare equal as text.
    """
    return json.dumps({"version": version}, sort_keys=True, separators=(",", ":"))


T = TypeVar("T")


def transaction(conn: Connection, unit_of_work: Callable[[Connection], T]) -> T:
    """Run unit_of_work inside BEGIN/COMMIT, rolling back if it raises.

    Args:
        conn: Connection with no transaction in progress.
        unit_of_work: Callable receiving the connection.

    Returns:
        Whatever unit_of_work returns.

    Raises:
        TransactionError: If conn is already in a transaction.
    """
    if conn.in_transaction():
        raise TransactionError("already in transaction")
    with conn.begin():
        return unit_of_work(conn)


def stored_version(engine: Engine) -> str | None:
    """Read the schema version a store was stamped with, if any.

    Does not initialize the store.
    """
    if not inspect(engine).has_table("meta"):
        return None

    with engine.connect() as conn:
        config = conn.execute(select(meta.c.config)).scalar()
    if config is None:
        return None
    return json.loads(config).get("version")


class MirrorRepository:
    """Read and write access to one mirror store.

    Opening a repository initializes the store (first use) or checks its
    version (reuse). The repository owns a single connection until closed.
    """

    def __init__(self, engine: Engine | None, version: str = MIRROR_VERSION) -> None:
        if engine is None:
            raise ValueError(f"engine: {engine!r}")
        self._engine = engine
        self._conn = engine.connect()
        self.version = version
        try:
            transaction(self._conn, self._initialize)
        except Exception:
            self._conn.close()
            raise

    def _initialize(self, conn: Connection) -> None:
        meta.create(conn, checkfirst=True)

        config = mirror_config(self.version)
        existing = conn.execute(select(meta.c.config)).scalar()
        if existing == config:
            log.debug("mirror_already_initialized", version=self.version)
            return
        if existing is not None:
            log.error("mirror_version_conflict", expected=config, found=existing)
            raise IncompatibleMirrorError(
                "Database already populated with incompatible server or version"
            )

        conn.execute(meta.insert().values(zero=0, config=config))
        for table in content_tables:
            table.create(conn)
        log.info("mirror_initialized", version=self.version)

    def close(self) -> None:
        """Release the connection."""
        self._conn.close()

    def __enter__(self) -> "MirrorRepository":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # -- Reads ---------------------------------------------------------------

    def _fetch(self, statement) -> list:
        # Reads run outside transaction(); end the implicit one SQLAlchemy opens.
        try:
            return self._conn.execute(statement).fetchall()
        finally:
            self._conn.rollback()

    def members(self) -> list[Member]:
        """List all mirrored members."""
        rows = self._fetch(
            select(
                members.c.user_id.label("id"),
                members.c.name,
                members.c.email,
            ).order_by(members.c.user_id)
        )
        return [row_to_model(row, Member) for row in rows]

    def channels(self) -> list[Channel]:
        """List all mirrored channels."""
        rows = self._fetch(
            select(
                channels.c.channel_id.label("id"),
                channels.c.name,
                channels.c.type,
            ).order_by(channels.c.channel_id)
        )
        return [row_to_model(row, Channel) for row in rows]

    def messages(self, channel_id: str) -> list[Message]:
        """List the messages of a channel, oldest first."""
        rows = self._fetch(
            select(messages)
            .where(messages.c.channel_id == channel_id)
            .order_by(messages.c.timestamp_ms)
        )

        prefix = f"{channel_id}/"
        reacted = {
            row.message_id
            for row in self._fetch(
                select(message_reactions.c.message_id)
                .where(message_reactions.c.message_id.startswith(prefix, autoescape=True))
                .distinct()
            )
        }
        mentions: dict[str, list[str]] = defaultdict(list)
        for row in self._fetch(
            select(message_mentions.c.message_id, message_mentions.c.mentioned_user_id)
            .where(message_mentions.c.message_id.startswith(prefix, autoescape=True))
            .order_by(message_mentions.c.mentioned_user_id)
        ):
            mentions[row.message_id].append(row.mentioned_user_id)

        result = []
        for row in rows:
            key = message_key(row.channel_id, row.timestamp_ms)
            result.append(_row_to_message(row, key in reacted, mentions.get(key, [])))
        return result

    def reactions(self, channel_id: str, message_id: str) -> list[Reaction]:
        """List the reactions on one message.

        Rows missing a reaction name or reactor cannot be attributed and are
        not returned.
        """
        rows = self._fetch(
            select(message_reactions.c.reaction_name, message_reactions.c.reactor)
            .where(message_reactions.c.message_id == message_key(channel_id, message_id))
            .where(message_reactions.c.reaction_name.is_not(None))
            .where(message_reactions.c.reactor.is_not(None))
            .order_by(message_reactions.c.reaction_name, message_reactions.c.reactor)
        )
        return [
            Reaction(
                channel_id=channel_id,
                message_id=message_id,
                name=row.reaction_name,
                reactor=row.reactor,
            )
            for row in rows
        ]

    def message(self, message_id: str, channel_id: str | None = None) -> Message | None:
        """Fetch a single message by id.

        Args:
            message_id: Slack ts of the message.
            channel_id: Restrict the lookup to one channel.

        Returns:
            The message, or None if it is not mirrored.
        """
        statement = select(messages).where(messages.c.timestamp_ms == message_id)
        if channel_id is not None:
            statement = statement.where(messages.c.channel_id == channel_id)
        rows = self._fetch(statement.order_by(messages.c.channel_id).limit(1))
        if not rows:
            return None

        row = rows[0]
        key = message_key(row.channel_id, row.timestamp_ms)
        has_reactions = bool(
            self._fetch(
                select(message_reactions.c.message_id)
                .where(message_reactions.c.message_id == key)
                .limit(1)
            )
        )
        mentions = [
            r.mentioned_user_id
            for r in self._fetch(
                select(message_mentions.c.mentioned_user_id)
                .where(message_mentions.c.message_id == key)
                .order_by(message_mentions.c.mentioned_user_id)
            )
        ]
        return _row_to_message(row, has_reactions, mentions)

    def thread(self, message_id: str, channel_id: str | None = None) -> list[str]:
        """List the ids of replies to a thread starter, oldest first."""
        statement = (
            select(messages.c.timestamp_ms)
            .where(messages.c.in_reply_to == message_id)
            .where(messages.c.timestamp_ms != message_id)
        )
        if channel_id is not None:
            statement = statement.where(messages.c.channel_id == channel_id)
        rows = self._fetch(statement.order_by(messages.c.timestamp_ms))
        return [row.timestamp_ms for row in rows]

    # -- Writes (fetcher side) -----------------------------------------------

    def add_channel(self, channel: Channel) -> None:
        """Insert or update a channel."""
        values = {"channel_id": channel.id, "name": channel.name, "type": channel.type}
        statement = insert(channels).values(**values)
        statement = statement.on_conflict_do_update(
            index_elements=[channels.c.channel_id],
            set_={"name": channel.name, "type": channel.type},
        )
        transaction(self._conn, lambda conn: conn.execute(statement))

    def add_member(self, member: Member) -> None:
        """Insert or update a member."""
        statement = insert(members).values(
            user_id=member.id, name=member.name, email=member.email
        )
        statement = statement.on_conflict_do_update(
            index_elements=[members.c.user_id],
            set_={"name": member.name, "email": member.email},
        )
        transaction(self._conn, lambda conn: conn.execute(statement))

    def add_message(
        self,
        message: Message,
        reactions: Iterable[tuple[str, str]] = (),
        mentions: Iterable[str] = (),
    ) -> None:
        """Insert or replace a message together with its reactions and mentions.

        Args:
            message: The message. Its has_* flags and mentions are ignored;
                they are derived from the stored rows on read.
            reactions: (reaction_name, reactor_id) pairs.
            mentions: Mentioned member ids.
        """
        key = message_key(message.channel_id, message.id)
        values = {
            "author_id": message.author_id,
            "message_body": message.text,
            "thread": message.is_thread,
            "in_reply_to": message.in_reply_to,
        }
        upsert = insert(messages).values(
            channel_id=message.channel_id, timestamp_ms=message.id, **values
        )
        upsert = upsert.on_conflict_do_update(
            index_elements=[messages.c.channel_id, messages.c.timestamp_ms],
            set_=values,
        )
        reaction_rows = [
            {"message_id": key, "reaction_name": name, "reactor": reactor}
            for name, reactor in reactions
        ]
        mention_rows = [
            {"message_id": key, "mentioned_user_id": user_id} for user_id in mentions
        ]

        def write(conn: Connection) -> None:
            conn.execute(upsert)
            conn.execute(delete(message_reactions).where(message_reactions.c.message_id == key))
            conn.execute(delete(message_mentions).where(message_mentions.c.message_id == key))
            if reaction_rows:
                conn.execute(message_reactions.insert(), reaction_rows)
            if mention_rows:
                conn.execute(message_mentions.insert(), mention_rows)

        transaction(self._conn, write)


def _row_to_message(row, has_reactions: bool, mentions: list[str]) -> Message:
    return Message(
        channel_id=row.channel_id,
        id=row.timestamp_ms,
        author_id=row.author_id,
        text=row.message_body or "",
        is_thread=bool(row.thread),
        in_reply_to=row.in_reply_to,
        has_reactions=has_reactions,
        has_mentions=bool(mentions),
        mentions=tuple(mentions),
    )
