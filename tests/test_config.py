from pathlib import Path

import pytest

from hmc_operator.config import HMCConfig, RuntimeOptions, hmc_config_from_mapping, load_hmc_config

CONFIG_DIR = Path(__file__).resolve().parents[1] / "configs"


def test_shipped_config_loads():
    config = load_hmc_config(CONFIG_DIR / "hmc_gaussian.yaml")
    assert config.preconditioning == "dense"
    assert config.instability == "reject"
    assert config.seed == 1234
    assert config.runtime.num_steps == 10
    assert config.runtime.preconditioning_update_frequency == 100


def test_yaml_round_trip(tmp_path: Path):
    path = tmp_path / "hmc.yaml"
    path.write_text(
        "preconditioning: Diagonal\n"
        "draw_variance: 2.5\n"
        "runtime:\n"
        "  step_size: 0.05\n"
        "  num_steps: 4\n"
        "logging:\n"
        "  level: DEBUG\n",
        encoding="utf-8",
    )
    config = load_hmc_config(path)
    assert config.preconditioning == "diagonal"
    assert config.draw_variance == 2.5
    assert config.runtime.step_size == 0.05
    assert config.runtime.random_step_fraction == 0.0
    assert config.instability is None
    assert config.seed is None
    assert config.logging.level == "DEBUG"


def test_empty_yaml_gives_defaults(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")
    assert load_hmc_config(path) == HMCConfig()


@pytest.mark.parametrize(
    "kwargs",
    [
        {"step_size": 0.0},
        {"num_steps": 0},
        {"random_step_fraction": -0.1},
        {"preconditioning_update_frequency": -1},
        {"target_acceptance": 1.0},
    ],
)
def test_runtime_validation(kwargs):
    with pytest.raises(ValueError):
        RuntimeOptions(**kwargs)


def test_config_validation():
    with pytest.raises(ValueError):
        HMCConfig(preconditioning="full")
    with pytest.raises(ValueError):
        hmc_config_from_mapping({"draw_variance": -1.0})
