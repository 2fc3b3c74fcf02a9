"""Hamiltonian Monte Carlo proposal step.

One call to :meth:`HMCStep.propose_step` draws a momentum, simulates the
leapfrog trajectory against the shared parameter, and returns the log
Hastings ratio ``initial - final`` where each energy is the kinetic term
``½ pᵀ M⁻¹ p`` plus the transform's log-Jacobian. The potential-energy
difference is left to the caller, which evaluates the posterior at the
proposed parameter as for any other Metropolis-Hastings move.
"""

from __future__ import annotations

import logging
import math
from typing import Optional

import numpy as np

from ..config import HMCConfig, RuntimeOptions
from ..errors import DimensionMismatchError, NumericInstabilityError
from ..math.transforms import IdentityTransform, Transform
from ..models.parameter import Parameter
from ..typing import Array, GradientProvider
from ..utils.linalg import quadratic_form
from ..utils.logging import WorkUnitLogger
from ..utils.rng import MultivariateNormalSampler, RandomSource
from .instability import InstabilityPolicy
from .leapfrog import LeapfrogEngine, TransformedLeapfrogEngine
from .mass import (
    DenseHessianPreconditioner,
    DiagonalHessianPreconditioner,
    MassPreconditioner,
    StaticMassPreconditioner,
)

logger = logging.getLogger(__name__)

STEP_SIZE_LOG_INTERVAL = 5


class HMCStep:
    """Metropolis-corrected Hamiltonian proposal over a single parameter block."""

    operator_name = "Vanilla HMC operator"

    def __init__(
        self,
        gradient_provider: GradientProvider,
        engine: LeapfrogEngine,
        preconditioner: MassPreconditioner,
        options: RuntimeOptions,
        rng: RandomSource,
        diagnostics: bool = False,
    ) -> None:
        if gradient_provider.dimension != engine.dimension:
            raise DimensionMismatchError(
                f"gradient provider has dimension {gradient_provider.dimension}, "
                f"parameter has dimension {engine.dimension}"
            )
        if preconditioner.dimension != engine.dimension:
            raise DimensionMismatchError("preconditioner dimension does not match the parameter")
        self.gradient_provider = gradient_provider
        self.engine = engine
        self.preconditioner = preconditioner
        self.options = options
        self.rng = rng
        self.diagnostics = diagnostics
        self.proposal_count = 0
        self.work = WorkUnitLogger()
        self._momentum_distribution = self._build_momentum_distribution()

    # ------------------------------------------------------------------
    # Coercion interface
    # ------------------------------------------------------------------
    @property
    def step_size(self) -> float:
        return self.options.step_size

    @property
    def target_acceptance(self) -> float:
        return self.options.target_acceptance

    def get_log_step_size(self) -> float:
        return math.log(self.options.step_size)

    def set_log_step_size(self, value: float) -> None:
        self.options.step_size = math.exp(value)

    # ------------------------------------------------------------------
    # Preconditioning
    # ------------------------------------------------------------------
    def _build_momentum_distribution(self) -> MultivariateNormalSampler:
        # Precision M⁻¹, i.e. covariance M, so exp(-K) is the momentum density.
        mean = np.zeros(self.engine.dimension, dtype=np.float64)
        return MultivariateNormalSampler(mean, covariance=self.preconditioner.mass)

    def should_update_preconditioning(self) -> bool:
        frequency = self.options.preconditioning_update_frequency
        return frequency > 0 and self.proposal_count % frequency == 0

    def update_preconditioning(self) -> None:
        self.preconditioner.update()
        self._momentum_distribution = self._build_momentum_distribution()
        self.work.incr(preconditioning_updates=1)

    # ------------------------------------------------------------------
    # Proposal
    # ------------------------------------------------------------------
    def draw_momentum(self) -> Array:
        return self._momentum_distribution.draw(self.rng)

    def number_of_steps(self) -> int:
        count = self.options.num_steps
        fraction = self.options.random_step_fraction
        if fraction > 0.0:
            draw = count * (1.0 + fraction * (self.rng.uniform() - 0.5))
            count = max(1, math.floor(draw + 0.5))
        return count

    def energy(self, momentum: Array) -> float:
        """Kinetic energy plus the parameter log-Jacobian."""

        return quadratic_form(momentum, self.preconditioner.mass_inverse) + self.engine.parameter_log_jacobian()

    def _update_momentum(self, position: Array, momentum: Array, scaled_step: float) -> None:
        gradient = self.gradient_provider.gradient_log_density()
        self.work.incr(gradient_evals=1)
        self.engine.update_momentum(position, momentum, gradient, scaled_step)

    def integrate_trajectory(self, position: Array, momentum: Array, num_steps: int) -> None:
        """Run ``num_steps`` leapfrog steps, updating ``position`` and ``momentum`` in place."""

        step_size = self.options.step_size
        mass_inverse = self.preconditioner.mass_inverse

        self._update_momentum(position, momentum, step_size / 2.0)
        for i in range(num_steps):
            self.engine.update_position(position, momentum, mass_inverse, step_size)
            if i < num_steps - 1:
                self._update_momentum(position, momentum, step_size)
        self._update_momentum(position, momentum, step_size / 2.0)

    def _leapfrog(self) -> float:
        position = self.engine.initial_position()
        momentum = self.draw_momentum()

        initial_energy = self.energy(momentum)
        num_steps = self.number_of_steps()
        self.integrate_trajectory(position, momentum, num_steps)
        final_energy = self.energy(momentum)

        return initial_energy - final_energy

    def propose_step(self) -> float:
        """Move the parameter along one trajectory and return the log Hastings ratio.

        Returns ``-inf`` when the instability policy flags a non-finite
        momentum; the parameter is then left wherever the trajectory stopped
        and the caller's rejection restores it.
        """

        if self.diagnostics and self.proposal_count % STEP_SIZE_LOG_INTERVAL == 0:
            logger.debug("HMC step size: %g", self.options.step_size)

        try:
            if self.should_update_preconditioning():
                self.update_preconditioning()
            ratio = self._leapfrog()
        except NumericInstabilityError as exc:
            self.work.incr(instabilities=1)
            logger.debug("HMC proposal rejected: %s", exc)
            ratio = -math.inf
        finally:
            self.proposal_count += 1
            self.work.incr(proposals=1)
        return ratio

    def __repr__(self) -> str:
        return (
            f"HMCStep(dimension={self.engine.dimension}, step_size={self.options.step_size:g}, "
            f"num_steps={self.options.num_steps}, preconditioner={type(self.preconditioner).__name__})"
        )


def build_hmc_step(
    gradient_provider: GradientProvider,
    parameter: Parameter,
    config: HMCConfig,
    transform: Optional[Transform] = None,
    rng: Optional[RandomSource] = None,
) -> HMCStep:
    """Assemble an :class:`HMCStep`, choosing engine and preconditioner variants from ``config``."""

    if config.instability is None:
        policy = InstabilityPolicy.default(config.diagnostics)
    else:
        policy = InstabilityPolicy.from_name(config.instability)

    if transform is None:
        engine: LeapfrogEngine = LeapfrogEngine(parameter, policy)
    else:
        engine = TransformedLeapfrogEngine(parameter, transform, policy)

    preconditioner: MassPreconditioner
    if config.preconditioning == "none":
        preconditioner = StaticMassPreconditioner(parameter.dimension, config.draw_variance)
    elif config.preconditioning == "diagonal":
        preconditioner = DiagonalHessianPreconditioner(gradient_provider, config.draw_variance, transform)
    else:
        preconditioner = DenseHessianPreconditioner(
            gradient_provider, transform or IdentityTransform(), config.draw_variance
        )

    if config.preconditioning != "none" and config.runtime.preconditioning_update_frequency == 0:
        logger.warning(
            "%s preconditioning requested with update frequency 0; the metric will stay at its initial value",
            config.preconditioning,
        )

    return HMCStep(
        gradient_provider,
        engine,
        preconditioner,
        config.runtime,
        rng if rng is not None else RandomSource(config.seed),
        diagnostics=config.diagnostics,
    )


__all__ = ["HMCStep", "build_hmc_step", "STEP_SIZE_LOG_INTERVAL"]
