"""Mirror database schema and connection management for slackcred.

Uses SQLAlchemy Core (not ORM) for explicit SQL control. The table layout
is versioned by ``slackcred.mirror.MIRROR_VERSION``: any change here must
bump that version.
"""

from pathlib import Path

from sqlalchemy import (
    Boolean,
    Column,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    PrimaryKeyConstraint,
    Table,
    Text,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine

from slackcred.config import Config

# Shared metadata for all tables
metadata = MetaData()


# =============================================================================
# Version Tracking
# =============================================================================

# Singleton table: the only row has zero=0, so the first config inserted
# is the one the store is locked into.
meta = Table(
    "meta",
    metadata,
    Column("zero", Integer, primary_key=True),
    Column("config", Text, nullable=False),
)


# =============================================================================
# Mirrored Entities
# =============================================================================

channels = Table(
    "channels",
    metadata,
    Column("channel_id", Text, primary_key=True),
    Column("name", Text, nullable=False),
    Column("type", Text, nullable=False),
)

members = Table(
    "members",
    metadata,
    Column("user_id", Text, primary_key=True),
    Column("name", Text, nullable=True),
    Column("email", Text, nullable=False),
)

messages = Table(
    "messages",
    metadata,
    Column("channel_id", Text, nullable=False),
    Column("timestamp_ms", Text, nullable=False),  # Slack ts, e.g. "1598887430.000200"
    Column("author_id", Text, ForeignKey("members.user_id"), nullable=False),
    Column("message_body", Text, nullable=True),
    Column("thread", Boolean, nullable=True),
    Column("in_reply_to", Text, nullable=True),
    PrimaryKeyConstraint("channel_id", "timestamp_ms", name="value_object"),
    Index("ix_messages_in_reply_to", "in_reply_to"),
)

message_reactions = Table(
    "message_reactions",
    metadata,
    Column("message_id", Text, nullable=False),  # "<channel_id>/<ts>"
    Column("reaction_name", Text, nullable=True),
    Column("reactor", Text, ForeignKey("members.user_id"), nullable=True),
    Index("ix_message_reactions_message", "message_id"),
)

message_mentions = Table(
    "message_mentions",
    metadata,
    Column("message_id", Text, nullable=False),  # "<channel_id>/<ts>"
    Column("mentioned_user_id", Text, nullable=False),
    Index("ix_message_mentions_message", "message_id"),
)

content_tables = (channels, members, messages, message_reactions, message_mentions)


# =============================================================================
# Helper Functions
# =============================================================================


def get_engine(config: Config) -> Engine:
    """Create SQLAlchemy engine for the mirror database.

    Args:
        config: Application configuration.

    Returns:
        SQLAlchemy Engine instance.
    """
    db_path = config.database_path

    # Ensure data directory exists
    db_path.parent.mkdir(parents=True, exist_ok=True)

    return create_sqlite_engine(db_path, echo=config.log_level == "DEBUG")


def create_sqlite_engine(db_path: Path | str, echo: bool = False) -> Engine:
    """Create a SQLite engine whose transactions also cover DDL.

    pysqlite does not emit BEGIN before CREATE TABLE, so schema changes would
    autocommit and escape rollback. Its implicit transaction handling is
    switched off and BEGIN is emitted explicitly instead.

    Args:
        db_path: Database file path, or ":memory:".
        echo: Echo SQL statements.

    Returns:
        SQLAlchemy Engine instance.
    """
    engine = create_engine(f"sqlite:///{db_path}", echo=echo)

    @event.listens_for(engine, "connect")
    def _disable_pysqlite_transactions(dbapi_connection, connection_record):
        dbapi_connection.isolation_level = None

    @event.listens_for(engine, "begin")
    def _emit_begin(conn):
        conn.exec_driver_sql("BEGIN")

    return engine
