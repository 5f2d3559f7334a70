"""
posterior
=========

Posterior representations and diagnostics.

This subpackage provides:
- Mode: posterior mode + Hessian / covariance (output of MAPOptimizer)
- LaplacePosterior: Gaussian approximation N(mode, H^-1), the proposal for
  importance sampling
- GridPosterior: brute-force grid reference
- diagnostics: effective sample size and Monte Carlo standard error of
  importance-weighted estimates
"""

from .base_posterior import BasePosterior
from .diagnostics import effective_sample_size, monte_carlo_se
from .grid import GridPosterior
from .laplace import LaplacePosterior
from .mode import Mode

__all__ = [
    "BasePosterior",
    "Mode",
    "LaplacePosterior",
    "GridPosterior",
    "effective_sample_size",
    "monte_carlo_se",
]
