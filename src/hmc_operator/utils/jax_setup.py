"""JAX configuration used by the log-density adapters."""

from __future__ import annotations

import os

os.environ.setdefault("JAX_USE_PJRT_C_API_ON_CPU", "0")

import jax

jax.config.update("jax_platform_name", "cpu")
jax.config.update("jax_enable_x64", True)


__all__ = ["jax"]
