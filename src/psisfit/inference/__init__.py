"""
inference
=========

Inference engines for binomial regression posteriors.

This subpackage provides the strategies for fitting the posterior mode and
building the Gaussian proposal.

- MAPOptimizer : mode finding with Optax optimizers + Hessian at the mode.
- LaplaceApproximation : Gaussian approximation N(mode, H^-1).

Failures are typed: NonConvergence and SingularCurvature (both FitFailure)
from the optimizer, InvalidCovariance from the approximation.
"""

from psisfit.errors import (
    FitFailure,
    InvalidCovariance,
    NonConvergence,
    SingularCurvature,
)

from .base import ModeFinder
from .laplace import LaplaceApproximation
from .map_optimizer import MAPOptimizer

__all__ = [
    "ModeFinder",
    "MAPOptimizer",
    "LaplaceApproximation",
    "FitFailure",
    "NonConvergence",
    "SingularCurvature",
    "InvalidCovariance",
]
