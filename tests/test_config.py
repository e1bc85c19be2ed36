import asyncio

import pytest
import yaml

from sessionstellar.config import CONFIG_FILENAME, Config, find_config, load_config, yaml_weight_provider
from sessionstellar.parser import MAX_INPUT_BYTES


WEIGHTS_YAML = """
scoring_weights:
  skill_diversity: 0.1
  decision_depth: 0.1
  error_recovery_rate: 0.6
  compound_learning_signals: 0.1
  orchestration_mastery: 0.1
status_limit: 3
"""


def test_defaults():
    config = Config()
    assert config.scoring_weights is None
    assert config.max_input_bytes == MAX_INPUT_BYTES
    assert config.scores_dir == ".sessionstellar/scores"
    assert config.session_extensions == [".md", ".txt", ".jsonl"]


def test_load_config(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text(WEIGHTS_YAML)

    config = load_config(str(path))
    assert config.scoring_weights.error_recovery_rate == 0.6
    assert config.status_limit == 3


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        load_config(str(tmp_path / "nope.yaml"))


def test_empty_file(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("")
    with pytest.raises(ValueError, match="empty"):
        load_config(str(path))


def test_invalid_yaml(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("scoring_weights: [unclosed")
    with pytest.raises(yaml.YAMLError):
        load_config(str(path))


def test_invalid_structure(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("max_input_bytes: -1\n")
    with pytest.raises(ValueError, match="Invalid configuration structure"):
        load_config(str(path))


def test_negative_weight_rejected(tmp_path):
    path = tmp_path / CONFIG_FILENAME
    path.write_text("scoring_weights:\n  skill_diversity: -0.5\n")
    with pytest.raises(ValueError):
        load_config(str(path))


def test_find_config_without_file(tmp_path):
    assert find_config(str(tmp_path)) == Config()


def test_find_config_with_file(tmp_path):
    (tmp_path / CONFIG_FILENAME).write_text("timeout: 5\n")
    assert find_config(str(tmp_path)).timeout == 5


def test_yaml_weight_provider(tmp_path):
    path = tmp_path / "weights.yaml"
    path.write_text(WEIGHTS_YAML)

    weights = asyncio.run(yaml_weight_provider(str(path))())
    assert weights.error_recovery_rate == 0.6


def test_yaml_weight_provider_without_weights(tmp_path):
    path = tmp_path / "weights.yaml"
    path.write_text("timeout: 5\n")
    assert asyncio.run(yaml_weight_provider(str(path))()) is None
