"""CLI entrypoint for running slackcred as a module."""

from slackcred.cli import cli

if __name__ == "__main__":
    cli()
