"""Pytest configuration and shared fixtures."""

from pathlib import Path

import pytest
from click.testing import CliRunner

from slackcred.config import Config
from slackcred.database import get_engine
from slackcred.mirror import MirrorRepository
from slackcred.models import Channel, Member, Message


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def test_config(tmp_path: Path) -> Config:
    """Create a test configuration with temp database."""
    return Config(data_dir=tmp_path)


@pytest.fixture
def engine(test_config: Config):
    """Create a test engine on an empty mirror file."""
    eng = get_engine(test_config)
    yield eng
    eng.dispose()


@pytest.fixture
def repo(engine):
    """Open (and initialize) a mirror repository."""
    repository = MirrorRepository(engine)
    yield repository
    repository.close()


# =============================================================================
# Mirror content helpers
# =============================================================================


def make_member(user_id: str, name: str | None = None) -> Member:
    """Member whose email is derived from the id."""
    return Member(id=user_id, name=name, email=f"{user_id.lower()}@example.com")


def make_message(
    message_id: str,
    author_id: str = "A",
    channel_id: str = "C1",
    text: str = "hello",
    is_thread: bool = False,
    in_reply_to: str | None = None,
) -> Message:
    return Message(
        channel_id=channel_id,
        id=message_id,
        author_id=author_id,
        text=text,
        is_thread=is_thread,
        in_reply_to=in_reply_to,
    )


@pytest.fixture
def general(repo) -> Channel:
    """A channel C1 named general, with members A and B."""
    channel = Channel(id="C1", name="general", type="public_channel")
    repo.add_channel(channel)
    repo.add_member(make_member("A", "Alice"))
    repo.add_member(make_member("B", "Bob"))
    return channel
