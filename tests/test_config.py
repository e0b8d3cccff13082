"""Tests for the configuration module."""

import json
from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from slackcred.config import (
    DEFAULT_WEIGHT_GROUP,
    Config,
    SlackConfig,
    SlackConfigJson,
    WeightConfig,
    WeightGroup,
    upgrade,
)


@pytest.fixture
def sample_config_yaml(tmp_path: Path) -> Path:
    """Create a sample config file for testing."""
    config = {
        "data_dir": str(tmp_path / "data"),
        "log_level": "debug",
        "log_json": False,
        "database": {"path": "test.db"},
        "slack": {
            "name": "workspace",
            "reactionWeightConfig": {"defaultWeight": 1, "weights": {"tada": 4}},
        },
    }
    config_path = tmp_path / "config.yaml"
    with open(config_path, "w") as f:
        yaml.dump(config, f)
    return config_path


class TestSlackConfig:
    """Tests for the Slack plugin config and its upgrade."""

    def test_upgrade_fills_defaults(self) -> None:
        """Both weight groups default to weight 1 with no overrides."""
        config = SlackConfig.from_json({"name": "workspace"})

        assert config.name == "workspace"
        assert config.weights.emoji_weights == DEFAULT_WEIGHT_GROUP
        assert config.weights.channel_weights == DEFAULT_WEIGHT_GROUP
        assert DEFAULT_WEIGHT_GROUP.default_weight == 1
        assert DEFAULT_WEIGHT_GROUP.weights == {}

    def test_upgrade_maps_groups(self) -> None:
        """reactionWeightConfig becomes emoji weights, channelWeightConfig channel weights."""
        config = SlackConfig.from_json(
            {
                "name": "workspace",
                "reactionWeightConfig": {"defaultWeight": 2, "weights": {"tada": 5}},
                "channelWeightConfig": {"defaultWeight": 0.5, "weights": {"C1": 3}},
            }
        )

        assert config.weights.emoji_weights == WeightGroup(default_weight=2, weights={"tada": 5})
        assert config.weights.channel_weights.default_weight == 0.5
        assert config.weights.channel_weights.weight_for("C1") == 3
        assert config.weights.channel_weights.weight_for("C2") == 0.5

    def test_upgrade_function(self) -> None:
        json_config = SlackConfigJson(name="workspace")
        assert upgrade(json_config) == SlackConfig(name="workspace", weights=WeightConfig())

    def test_unknown_keys_rejected(self) -> None:
        with pytest.raises(ValidationError):
            SlackConfig.from_json({"name": "workspace", "roleWeightConfig": {}})

    def test_name_required(self) -> None:
        with pytest.raises(ValidationError):
            SlackConfig.from_json({})

    def test_weights_must_be_numbers(self) -> None:
        with pytest.raises(ValidationError):
            SlackConfig.from_json(
                {"name": "w", "reactionWeightConfig": {"defaultWeight": "lots", "weights": {}}}
            )

    def test_load(self, tmp_path: Path) -> None:
        path = tmp_path / "slack.json"
        path.write_text(json.dumps({"name": "workspace"}))

        assert SlackConfig.load(path).name == "workspace"

    def test_load_not_found(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            SlackConfig.load(tmp_path / "missing.json")


class TestConfig:
    """Tests for the root configuration."""

    def test_defaults(self) -> None:
        config = Config()

        assert config.log_level == "INFO"
        assert config.log_json is True
        assert config.database_path == Path("./data") / "slack_mirror.db"
        assert config.slack_config == SlackConfig(name="slack")

    def test_load(self, sample_config_yaml: Path, tmp_path: Path) -> None:
        config = Config.load(sample_config_yaml)

        assert config.log_level == "DEBUG"
        assert config.log_json is False
        assert config.database_path == tmp_path / "data" / "test.db"
        assert config.slack_config.name == "workspace"
        assert config.slack_config.weights.emoji_weights.weight_for("tada") == 4
        assert config.slack_config.weights.channel_weights == DEFAULT_WEIGHT_GROUP

    def test_load_not_found(self) -> None:
        with pytest.raises(FileNotFoundError):
            Config.load(Path("/nonexistent/config.yaml"))

    def test_load_or_default_missing(self, tmp_path: Path) -> None:
        assert Config.load_or_default(tmp_path / "missing.yaml") == Config()

    def test_invalid_log_level(self) -> None:
        with pytest.raises(ValidationError):
            Config(log_level="LOUD")

    def test_env_overrides(self, sample_config_yaml: Path, tmp_path: Path, monkeypatch) -> None:
        monkeypatch.setenv("SLACKCRED_DATA_DIR", str(tmp_path / "elsewhere"))
        monkeypatch.setenv("SLACKCRED_LOG_LEVEL", "ERROR")
        monkeypatch.setenv("SLACKCRED_LOG_JSON", "true")

        config = Config.load(sample_config_yaml)

        assert config.data_dir == tmp_path / "elsewhere"
        assert config.log_level == "ERROR"
        assert config.log_json is True

    def test_empty_file(self, tmp_path: Path) -> None:
        path = tmp_path / "empty.yaml"
        path.write_text("")

        assert Config.load(path) == Config()
