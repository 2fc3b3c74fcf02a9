"""Configuration utilities for the :mod:`hmc_operator` proposal step."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Mapping, Optional

import yaml

PRECONDITIONING_KINDS = ("none", "diagonal", "dense")


@dataclass
class RuntimeOptions:
    """Static tunables of one HMC step; ``step_size`` is coerced between proposals."""

    step_size: float = 0.1
    num_steps: int = 10
    random_step_fraction: float = 0.0
    preconditioning_update_frequency: int = 0
    target_acceptance: float = 0.8

    def __post_init__(self) -> None:
        if not self.step_size > 0.0:
            raise ValueError("step_size must be strictly positive")
        if self.num_steps < 1:
            raise ValueError("num_steps must be at least 1")
        if self.random_step_fraction < 0.0:
            raise ValueError("random_step_fraction must be non-negative")
        if self.preconditioning_update_frequency < 0:
            raise ValueError("preconditioning_update_frequency must be non-negative")
        if not 0.0 < self.target_acceptance < 1.0:
            raise ValueError("target_acceptance must lie in (0, 1)")


@dataclass
class LoggingConfig:
    """Logging verbosity and formatting options."""

    level: str = "INFO"
    rich_tracebacks: bool = True


@dataclass
class HMCConfig:
    """Everything needed to assemble an :class:`~hmc_operator.samplers.hmc_step.HMCStep`."""

    runtime: RuntimeOptions = field(default_factory=RuntimeOptions)
    draw_variance: float = 1.0
    preconditioning: str = "none"
    instability: Optional[str] = None
    diagnostics: bool = False
    seed: Optional[int] = None
    logging: LoggingConfig = field(default_factory=LoggingConfig)

    def __post_init__(self) -> None:
        self.preconditioning = str(self.preconditioning).lower()
        if self.preconditioning not in PRECONDITIONING_KINDS:
            raise ValueError(
                f"Unknown preconditioning {self.preconditioning!r}; expected one of {PRECONDITIONING_KINDS}"
            )
        if not self.draw_variance > 0.0:
            raise ValueError("draw_variance must be strictly positive")


def load_yaml(path: Path) -> Mapping[str, Any]:
    """Load a YAML document and return a mapping."""

    with Path(path).open("r", encoding="utf-8") as handle:
        return yaml.safe_load(handle) or {}


def hmc_config_from_mapping(raw: Mapping[str, Any]) -> HMCConfig:
    """Build :class:`HMCConfig` from a plain mapping (e.g. parsed YAML)."""

    runtime = raw.get("runtime", {}) or {}
    logging_cfg = raw.get("logging", {}) or {}
    seed = raw.get("seed")
    instability = raw.get("instability")

    return HMCConfig(
        runtime=RuntimeOptions(
            step_size=float(runtime.get("step_size", 0.1)),
            num_steps=int(runtime.get("num_steps", 10)),
            random_step_fraction=float(runtime.get("random_step_fraction", 0.0)),
            preconditioning_update_frequency=int(runtime.get("preconditioning_update_frequency", 0)),
            target_acceptance=float(runtime.get("target_acceptance", 0.8)),
        ),
        draw_variance=float(raw.get("draw_variance", 1.0)),
        preconditioning=str(raw.get("preconditioning", "none")),
        instability=None if instability is None else str(instability),
        diagnostics=bool(raw.get("diagnostics", False)),
        seed=None if seed is None else int(seed),
        logging=LoggingConfig(
            level=str(logging_cfg.get("level", "INFO")),
            rich_tracebacks=bool(logging_cfg.get("rich_tracebacks", True)),
        ),
    )


def load_hmc_config(path: Path) -> HMCConfig:
    """Load :class:`HMCConfig` from ``path``."""

    return hmc_config_from_mapping(load_yaml(path))


__all__ = [
    "PRECONDITIONING_KINDS",
    "RuntimeOptions",
    "LoggingConfig",
    "HMCConfig",
    "load_yaml",
    "hmc_config_from_mapping",
    "load_hmc_config",
]
