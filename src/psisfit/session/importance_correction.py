"""
importance_correction.py
------------------------

ImportanceCorrection orchestrates the approximate-posterior correction
pipeline.

Responsibilities
----------------
1. Find the posterior mode and curvature (MAPOptimizer).
2. Build the Gaussian proposal (LaplaceApproximation).
3. Draw from the proposal and form importance ratios (SampleSet).
4. Pareto-smooth the ratios (ParetoSmoothedImportanceSampler).
5. Resample with the smoothed weights, optionally jittering the result.

Each stage returns an immutable value consumed by the next; run() collects
them in a CorrectionResult. Nothing is cached on the session between runs.
"""

from __future__ import annotations

from dataclasses import dataclass, field

import jax.numpy as jnp
import jax.random as jr

from psisfit.importance.psis import ParetoSmoothedImportanceSampler, PSISConfig, PSISResult
from psisfit.importance.resample import ResampleResult, jitter, resample
from psisfit.importance.sample_set import SampleSet
from psisfit.inference.laplace import LaplaceApproximation
from psisfit.inference.map_optimizer import MAPOptimizer
from psisfit.model.logistic import ld50
from psisfit.posterior.laplace import LaplacePosterior
from psisfit.posterior.mode import Mode


@dataclass(frozen=True)
class CorrectionConfig:
    """
    Configuration of the correction pipeline.

    Attributes
    ----------
    initial_guess : tuple of float, default=(0.0, 0.0)
        Optimizer starting point.
    optimizer_steps : int, default=200
        Optimizer step budget.
    optimizer_tol : float, default=1e-6
        Gradient-norm convergence tolerance.
    n_draws : int, default=1000
        Proposal draws.
    n_resample : int, default=1000
        Size of the resampled posterior sample.
    psis : PSISConfig
        Pareto smoothing constants.
    jitter_spacing : tuple of float | None, default=None
        If set, resampled draws get uniform jitter of +- half this spacing.
    """

    initial_guess: tuple[float, float] = (0.0, 0.0)
    optimizer_steps: int = 200
    optimizer_tol: float = 1e-6
    n_draws: int = 1000
    n_resample: int = 1000
    psis: PSISConfig = field(default_factory=PSISConfig)
    jitter_spacing: tuple[float, float] | None = None

    def __post_init__(self):
        if self.n_draws <= 0:
            raise ValueError(f"n_draws must be positive, got {self.n_draws}")
        if self.n_resample <= 0:
            raise ValueError(f"n_resample must be positive, got {self.n_resample}")
        if len(self.initial_guess) != 2:
            raise ValueError(
                f"initial_guess must have length 2, got {len(self.initial_guess)}"
            )


@dataclass(frozen=True, eq=False)
class CorrectionResult:
    """
    Everything produced by one ImportanceCorrection.run().

    Attributes
    ----------
    mode : Mode
    proposal : LaplacePosterior
    sample_set : SampleSet
    psis : PSISResult
        Weights, k-hat and warnings. Check psis.warnings before trusting
        anything derived from the weights.
    resampled : ResampleResult
    draws : jnp.ndarray
        Resampled draws, jittered if configured.
    """

    mode: Mode
    proposal: LaplacePosterior
    sample_set: SampleSet
    psis: PSISResult
    resampled: ResampleResult
    draws: jnp.ndarray

    @property
    def pareto_k(self) -> float:
        return self.psis.pareto_k

    @property
    def weights(self) -> jnp.ndarray:
        return self.psis.weights

    def ld50(self, *, positive_slope_only: bool = False) -> jnp.ndarray:
        return ld50(self.draws, positive_slope_only=positive_slope_only)


class ImportanceCorrection:
    """
    High-level pipeline: Laplace approximation corrected by PSIS.

    Parameters
    ----------
    model : BinomialLogitModel
        Model instance.
    config : CorrectionConfig, optional
    optimizer : MAPOptimizer, optional
        Mode finder. Default: MAPOptimizer built from the config.

    Examples
    --------
    >>> import jax.random as jr
    >>> from psisfit import BinomialLogitModel, ImportanceCorrection, bioassay
    >>> result = ImportanceCorrection(BinomialLogitModel()).run(bioassay(), key=jr.PRNGKey(0))
    >>> result.pareto_k
    """

    def __init__(self, model, config: CorrectionConfig | None = None, optimizer=None):
        self.model = model
        self.config = config or CorrectionConfig()
        self.optimizer = optimizer or MAPOptimizer(
            steps=self.config.optimizer_steps, tol=self.config.optimizer_tol
        )
        self.laplace = LaplaceApproximation(self.optimizer)
        self.sampler = ParetoSmoothedImportanceSampler(self.config.psis)

    # ------------------------------------------------------------------
    # FITTING INTERFACE
    # ------------------------------------------------------------------
    def fit_mode(self, data) -> Mode:
        """Find the mode. Raises FitFailure."""
        return self.optimizer.fit(
            self.model, data, init_params=jnp.asarray(self.config.initial_guess)
        )

    def run(self, data, *, key) -> CorrectionResult:
        """
        Run the full pipeline.

        Parameters
        ----------
        data : BinomialData
        key : jax.random.PRNGKey

        Returns
        -------
        CorrectionResult

        Raises
        ------
        FitFailure
            Mode finding failed (NonConvergence / SingularCurvature).
        InvalidCovariance
            The mode's covariance is not positive definite.
        WeightComputationError, DegenerateWeights
            Weights are numerically broken.
        """
        k_draw, k_resample, k_jitter = jr.split(key, 3)

        mode = self.fit_mode(data)
        proposal = self.laplace.from_map(mode)
        sample_set = SampleSet.from_proposal(
            self.model, data, proposal, self.config.n_draws, key=k_draw
        )
        psis = self.sampler.smooth(sample_set, stacklevel=3)
        resampled = resample(
            sample_set, psis.weights, self.config.n_resample, key=k_resample
        )
        draws = resampled.draws
        if self.config.jitter_spacing is not None:
            draws = jitter(draws, self.config.jitter_spacing, key=k_jitter)

        return CorrectionResult(
            mode=mode,
            proposal=proposal,
            sample_set=sample_set,
            psis=psis,
            resampled=resampled,
            draws=draws,
        )
