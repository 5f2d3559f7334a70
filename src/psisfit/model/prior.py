"""
prior.py
--------

Prior distributions over the (alpha, beta) parameters of a binomial
regression.

Implements:
- FlatPrior: improper uniform prior (log_prob = 0), the bioassay default
- GaussianPrior: independent normal prior on alpha and beta

Connections
-----------
- BinomialLogitModel adds Prior.log_prob(params) to the log likelihood to
  form the unnormalized log posterior.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp


@dataclass(frozen=True)
class FlatPrior:
    """Improper uniform prior on R^2."""

    def log_prob(self, params: jnp.ndarray) -> jnp.ndarray:
        return jnp.zeros((), dtype=jnp.result_type(params, 0.0))


@dataclass(frozen=True)
class GaussianPrior:
    """
    Independent Gaussian prior on (alpha, beta).

    Parameters
    ----------
    mean : tuple of float, default=(0.0, 0.0)
        Prior means of alpha and beta.
    scale : tuple of float, default=(2.0, 10.0)
        Prior standard deviations of alpha and beta.
    """

    mean: tuple[float, float] = (0.0, 0.0)
    scale: tuple[float, float] = (2.0, 10.0)

    def __post_init__(self):
        if len(self.mean) != 2 or len(self.scale) != 2:
            raise ValueError("mean and scale must both have length 2")
        if any(s <= 0 for s in self.scale):
            raise ValueError(f"scale must be positive, got {self.scale}")

    def log_prob(self, params: jnp.ndarray) -> jnp.ndarray:
        """
        Compute log prior density (up to a constant)

            log p(theta) = -0.5 * sum(((theta - mean) / scale)^2)
        """
        z = (params - jnp.asarray(self.mean)) / jnp.asarray(self.scale)
        return -0.5 * jnp.sum(z**2)
