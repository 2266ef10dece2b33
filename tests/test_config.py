"""
Tests for the engine configurations.
"""
import math

import pytest

from turn_search.beam.config import BeamConfig
from turn_search.mcts.config import MCTSConfig


def test_mcts_defaults():
    config = MCTSConfig()

    assert config.time_limit == 0.1
    assert config.exploration_weight == 1.41
    assert config.max_nodes == 300_000
    assert config.max_moves == 81
    assert config.reuse_tree
    assert config.max_rollout_depth is None
    assert config.seed is None


@pytest.mark.parametrize("params", [
    {"time_limit": 0},
    {"max_moves": 0},
    {"max_nodes": 81},
    {"exploration_weight": -1.0},
    {"exploration_weight": math.inf},
    {"max_rollout_depth": 0},
])
def test_mcts_rejects_invalid_values(params):
    with pytest.raises(ValueError):
        MCTSConfig(**params)


def test_mcts_presets():
    assert MCTSConfig.default() == MCTSConfig()
    assert MCTSConfig.fast().time_limit < MCTSConfig().time_limit < MCTSConfig.deep().time_limit
    assert MCTSConfig.deep().max_nodes > MCTSConfig().max_nodes


def test_mcts_dict_round_trip():
    config = MCTSConfig(time_limit=0.5, seed=3, max_rollout_depth=20)

    assert MCTSConfig.from_dict(config.to_dict()) == config
    assert MCTSConfig.from_dict({"seed": 9, "unknown": True}).seed == 9
    assert str(config).startswith("MCTSConfig(time_limit=0.5")


def test_beam_defaults():
    config = BeamConfig()

    assert config.time_limit == 0.049
    assert config.beam_width == 1000
    assert config.depth_decay == 0.99
    assert config.max_nodes == 300_000
    assert BeamConfig.greedy().beam_width == 1


@pytest.mark.parametrize("params", [
    {"time_limit": -1},
    {"beam_width": 0},
    {"depth_decay": 1.0},
    {"depth_decay": 0.0},
    {"max_nodes": 1},
])
def test_beam_rejects_invalid_values(params):
    with pytest.raises(ValueError):
        BeamConfig(**params)


def test_beam_from_dict_ignores_unknown_keys():
    config = BeamConfig.from_dict({"beam_width": 7, "seed": 1})

    assert config.beam_width == 7
    assert config.to_dict()["beam_width"] == 7
    assert "seed" not in config.to_dict()
