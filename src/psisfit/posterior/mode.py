"""
mode.py
-------

Result of mode finding: the posterior mode and the curvature there.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp

from psisfit.utils.math import is_symmetric_positive_definite


@dataclass(frozen=True, eq=False)
class Mode:
    """
    Posterior mode with curvature.

    Attributes
    ----------
    params : jnp.ndarray, shape (2,)
        Maximizer of the log posterior, (alpha, beta).
    hessian : jnp.ndarray, shape (2, 2)
        Hessian of the negative log posterior at `params`.
    covariance : jnp.ndarray, shape (2, 2)
        Inverse Hessian.
    log_density : float
        Unnormalized log posterior at `params`.
    n_steps : int
        Optimizer steps taken.

    Notes
    -----
    A Mode whose covariance is not positive definite is not a valid Laplace
    approximation; LaplacePosterior refuses it with InvalidCovariance.
    """

    params: jnp.ndarray
    hessian: jnp.ndarray
    covariance: jnp.ndarray
    log_density: float
    n_steps: int = 0

    @property
    def is_positive_definite(self) -> bool:
        return is_symmetric_positive_definite(self.covariance)

    @property
    def std(self) -> jnp.ndarray:
        """Marginal standard deviations from the Laplace covariance."""
        return jnp.sqrt(jnp.diag(self.covariance))

    def MAP_params(self) -> jnp.ndarray:
        return self.params
