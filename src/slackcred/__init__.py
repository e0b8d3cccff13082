"""slackcred - weighted contribution graphs from a mirrored Slack workspace."""

__version__ = "0.1.0"
