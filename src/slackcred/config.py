"""Configuration loading and validation for slackcred."""

from __future__ import annotations

import json
import os
from pathlib import Path

import yaml
from pydantic import BaseModel, ConfigDict, Field, field_validator


class WeightGroup(BaseModel):
    """A default weight plus per-key overrides.

    Keys are emoji names for reaction weights and channel ids for channel
    weights.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True, extra="forbid")

    default_weight: float = Field(1.0, alias="defaultWeight")
    weights: dict[str, float] = Field(default_factory=dict)

    def weight_for(self, key: str) -> float:
        """Return the override for key, or the default weight."""
        return self.weights.get(key, self.default_weight)


DEFAULT_WEIGHT_GROUP = WeightGroup(default_weight=1.0, weights={})


class WeightConfig(BaseModel):
    """Weights applied to reactions when building the graph."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    channel_weights: WeightGroup = Field(DEFAULT_WEIGHT_GROUP, alias="channelWeights")
    emoji_weights: WeightGroup = Field(DEFAULT_WEIGHT_GROUP, alias="emojiWeights")


class SlackConfigJson(BaseModel):
    """On-disk shape of the Slack plugin configuration."""

    model_config = ConfigDict(populate_by_name=True, extra="forbid")

    name: str
    reaction_weight_config: WeightGroup | None = Field(None, alias="reactionWeightConfig")
    channel_weight_config: WeightGroup | None = Field(None, alias="channelWeightConfig")


class SlackConfig(BaseModel):
    """Normalized Slack plugin configuration."""

    model_config = ConfigDict(frozen=True)

    name: str
    weights: WeightConfig = Field(default_factory=WeightConfig)

    @classmethod
    def from_json(cls, data: dict) -> "SlackConfig":
        """Validate the on-disk JSON shape and upgrade it."""
        return upgrade(SlackConfigJson.model_validate(data))

    @classmethod
    def load(cls, path: Path | str) -> "SlackConfig":
        """Load a Slack plugin configuration from a JSON file.

        Raises:
            FileNotFoundError: If the file doesn't exist.
            ValueError: If the file is not valid JSON or fails validation.
        """
        path = Path(path)
        if not path.exists():
            raise FileNotFoundError(f"Slack configuration not found: {path}")

        with open(path) as f:
            data = json.load(f)
        return cls.from_json(data)


def upgrade(json_config: SlackConfigJson) -> SlackConfig:
    """Fill in absent weight groups with the defaults."""
    return SlackConfig(
        name=json_config.name,
        weights=WeightConfig(
            channel_weights=json_config.channel_weight_config or DEFAULT_WEIGHT_GROUP,
            emoji_weights=json_config.reaction_weight_config or DEFAULT_WEIGHT_GROUP,
        ),
    )


class DatabaseConfig(BaseModel):
    """Mirror database configuration."""

    path: str = "slack_mirror.db"


class Config(BaseModel):
    """Root configuration for slackcred."""

    data_dir: Path = Path("./data")
    log_level: str = "INFO"
    log_json: bool = True

    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    slack: SlackConfigJson | None = None

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Validate log_level is valid."""
        allowed = {"DEBUG", "INFO", "WARNING", "ERROR"}
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(f"log_level must be one of: {allowed}")
        return v_upper

    @property
    def database_path(self) -> Path:
        """Get full path to the mirror database file."""
        return self.data_dir / self.database.path

    @property
    def slack_config(self) -> SlackConfig:
        """Get the upgraded Slack configuration, with defaults if unset."""
        if self.slack is None:
            return SlackConfig(name="slack")
        return upgrade(self.slack)

    @classmethod
    def load(cls, config_path: Path | str = Path("config.yaml")) -> "Config":
        """Load configuration from YAML file with env var overlay.

        Args:
            config_path: Path to YAML configuration file.

        Returns:
            Validated Config instance.

        Raises:
            FileNotFoundError: If config file doesn't exist.
            ValueError: If config is invalid.
        """
        config_path = Path(config_path)

        if not config_path.exists():
            raise FileNotFoundError(f"Configuration file not found: {config_path}")

        with open(config_path) as f:
            yaml_config = yaml.safe_load(f) or {}

        # Environment variable overrides
        if "SLACKCRED_DATA_DIR" in os.environ:
            yaml_config["data_dir"] = os.environ["SLACKCRED_DATA_DIR"]
        if "SLACKCRED_LOG_LEVEL" in os.environ:
            yaml_config["log_level"] = os.environ["SLACKCRED_LOG_LEVEL"]
        if "SLACKCRED_LOG_JSON" in os.environ:
            yaml_config["log_json"] = os.environ["SLACKCRED_LOG_JSON"].lower() == "true"

        return cls.model_validate(yaml_config)

    @classmethod
    def load_or_default(cls, config_path: Path | str | None = None) -> "Config":
        """Load configuration, falling back to defaults if file not found."""
        if config_path is None:
            for path in [Path("config.yaml"), Path("config.yml")]:
                if path.exists():
                    return cls.load(path)
            return cls()

        try:
            return cls.load(config_path)
        except FileNotFoundError:
            return cls()
