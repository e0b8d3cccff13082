"""Command-line interface for slackcred."""

import json
from pathlib import Path

import click

from slackcred import __version__
from slackcred.config import Config, SlackConfig
from slackcred.logging import get_logger, setup_logging

log = get_logger("cli")


@click.group()
@click.option(
    "-c",
    "--config-file",
    type=click.Path(exists=False, path_type=Path),
    default=None,
    help="Path to configuration file.",
)
@click.option(
    "--log-level",
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR"], case_sensitive=False),
    default=None,
    help="Set logging level (overrides config).",
)
@click.option(
    "--log-json/--no-log-json",
    default=None,
    help="Output logs as JSON or human-readable format (overrides config).",
)
@click.pass_context
def cli(
    ctx: click.Context,
    config_file: Path | None,
    log_level: str | None,
    log_json: bool | None,
) -> None:
    """slackcred - contribution graphs from a Slack mirror.

    Reads a locally mirrored Slack workspace and builds a weighted graph of
    members, messages and reactions.
    """
    ctx.ensure_object(dict)

    config = Config.load_or_default(config_file)
    ctx.obj["config"] = config
    ctx.obj["config_file"] = config_file

    # CLI overrides config
    effective_log_level = log_level or config.log_level
    effective_log_json = log_json if log_json is not None else config.log_json

    setup_logging(json_output=effective_log_json, level=effective_log_level)


@cli.command()
def version() -> None:
    """Print version information."""
    click.echo(f"slackcred {__version__}")


@cli.command()
@click.option(
    "-o",
    "--output",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Write the graph JSON here instead of stdout.",
)
@click.option(
    "--slack-config",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Slack plugin config JSON (overrides the 'slack' config section).",
)
@click.pass_context
def graph(ctx: click.Context, output: Path | None, slack_config: Path | None) -> None:
    """Build the weighted graph from the mirror."""
    from slackcred.create_graph import create_graph
    from slackcred.database import get_engine
    from slackcred.mirror import MirrorError, MirrorRepository

    config: Config = ctx.obj["config"]

    try:
        slack = SlackConfig.load(slack_config) if slack_config else config.slack_config
    except ValueError as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)

    engine = get_engine(config)
    try:
        with MirrorRepository(engine) as repo:
            weighted_graph = create_graph(repo, slack.weights)
    except MirrorError as e:
        log.error("graph_failed", error=str(e))
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        engine.dispose()

    data = json.dumps(weighted_graph.to_json(), indent=2, sort_keys=True)
    if output is None:
        click.echo(data)
    else:
        output.write_text(data + "\n")
        log.info("graph_written", path=str(output), plugin=slack.name)


@cli.group()
def db() -> None:
    """Mirror database commands."""
    pass


@db.command(name="status")
@click.pass_context
def db_status(ctx: click.Context) -> None:
    """Show the mirror's schema version."""
    from slackcred.database import get_engine
    from slackcred.mirror import MIRROR_VERSION, stored_version

    config: Config = ctx.obj["config"]
    engine = get_engine(config)
    try:
        found = stored_version(engine)
    finally:
        engine.dispose()

    click.echo(f"Database: {config.database_path}")
    click.echo(f"Stored version: {found or 'uninitialized'}")
    click.echo(f"Expected version: {MIRROR_VERSION}")
    if found is not None and found != MIRROR_VERSION:
        click.echo("Mirror is incompatible with this version of slackcred")


@db.command(name="init")
@click.pass_context
def db_init(ctx: click.Context) -> None:
    """Initialize the mirror, or check an existing one."""
    from slackcred.database import get_engine
    from slackcred.mirror import MirrorError, MirrorRepository

    config: Config = ctx.obj["config"]
    engine = get_engine(config)
    try:
        with MirrorRepository(engine) as repo:
            click.echo(f"Mirror ready: {config.database_path} ({repo.version})")
    except MirrorError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    finally:
        engine.dispose()


@cli.group()
def config() -> None:
    """Configuration management commands."""
    pass


@config.command(name="check")
@click.option(
    "-c",
    "--config-file",
    type=click.Path(exists=True, path_type=Path),
    default="config.yaml",
    help="Path to configuration file.",
)
def config_check(config_file: Path) -> None:
    """Validate configuration file."""
    try:
        cfg = Config.load(config_file)
        click.echo(f"Configuration valid: {config_file}")
        click.echo(f"  Data directory: {cfg.data_dir}")
        click.echo(f"  Database path: {cfg.database_path}")
        click.echo(f"  Log level: {cfg.log_level}")

        weights = cfg.slack_config.weights
        click.echo(f"  Plugin name: {cfg.slack_config.name}")
        click.echo(
            f"  Emoji weights: default {weights.emoji_weights.default_weight}, "
            f"{len(weights.emoji_weights.weights)} overrides"
        )
        click.echo(
            f"  Channel weights: default {weights.channel_weights.default_weight}, "
            f"{len(weights.channel_weights.weights)} overrides"
        )

    except FileNotFoundError as e:
        click.echo(f"Error: {e}", err=True)
        raise SystemExit(1)
    except Exception as e:
        click.echo(f"Configuration error: {e}", err=True)
        raise SystemExit(1)
