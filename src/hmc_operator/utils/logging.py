"""Logging helpers for consistent instrumentation."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict

from rich.console import Console
from rich.logging import RichHandler


QUIET_LOGGERS = ("jax", "absl")


def setup_logging(level: str = "INFO", rich_tracebacks: bool = True) -> None:
    """Send log records to stderr through rich.

    Chain output goes to stdout, so records are kept off it. JAX compilation
    chatter stays at WARNING even when the package runs at DEBUG.
    """

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    handler = RichHandler(console=Console(stderr=True), rich_tracebacks=rich_tracebacks, show_path=False)
    logging.basicConfig(level=numeric_level, format="%(message)s", datefmt="[%X]", handlers=[handler])
    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.WARNING))


@dataclass
class WorkUnitLogger:
    """Track proposals, gradient evaluations, instabilities, and mass updates."""

    proposals: int = 0
    gradient_evals: int = 0
    instabilities: int = 0
    preconditioning_updates: int = 0
    extras: Dict[str, int] = field(default_factory=dict)

    def incr(self, **kwargs: int) -> None:
        for key, value in kwargs.items():
            if hasattr(self, key) and key != "extras":
                setattr(self, key, getattr(self, key) + int(value))
            else:
                self.extras[key] = self.extras.get(key, 0) + int(value)

    def as_dict(self) -> Dict[str, int]:
        out = {
            "proposals": self.proposals,
            "gradient_evals": self.gradient_evals,
            "instabilities": self.instabilities,
            "preconditioning_updates": self.preconditioning_updates,
        }
        out.update(self.extras)
        return out


__all__ = ["QUIET_LOGGERS", "setup_logging", "WorkUnitLogger"]
