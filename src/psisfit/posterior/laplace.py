"""
laplace.py
----------

Gaussian (Laplace / normal) approximation to the posterior.

    q(theta) = N(theta | mu, Sigma),  mu = mode,  Sigma = H^-1 at the mode

The covariance is validated and factorized once, at construction:
Sigma = L L^T. Log densities use the stable form

    log q(theta) = -0.5 * (d log(2 pi) + log det Sigma + |L^-1 (theta - mu)|^2)

with log det Sigma = 2 sum(log diag L), and samples are mu + z L^T with
z ~ N(0, I).
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
import jax.random as jr

from psisfit.errors import InvalidCovariance
from psisfit.posterior.base_posterior import BasePosterior
from psisfit.utils.math import is_symmetric_positive_definite, mahalanobis_distance


class LaplacePosterior(BasePosterior):
    """
    Multivariate normal approximation N(mean, cov).

    Parameters
    ----------
    mean : array, shape (D,)
    cov : array, shape (D, D)
        Must be symmetric positive definite.

    Raises
    ------
    InvalidCovariance
        If cov is not symmetric positive definite.
    """

    def __init__(self, mean, cov):
        mean = jnp.asarray(mean, dtype=jnp.float64)
        cov = jnp.asarray(cov, dtype=jnp.float64)
        if mean.ndim != 1 or cov.shape != (mean.shape[0], mean.shape[0]):
            raise InvalidCovariance(
                f"covariance shape {cov.shape} does not match mean shape {mean.shape}"
            )
        if not is_symmetric_positive_definite(cov):
            raise InvalidCovariance("covariance must be symmetric positive definite")
        self._mean = mean
        self._cov = cov
        self._chol = jnp.linalg.cholesky(cov)
        self._log_det = 2.0 * jnp.sum(jnp.log(jnp.diag(self._chol)))

    @classmethod
    def from_mode(cls, mode) -> LaplacePosterior:
        """Build N(mode.params, mode.covariance)."""
        return cls(mode.params, mode.covariance)

    @property
    def mean(self) -> jnp.ndarray:
        return self._mean

    @property
    def cov(self) -> jnp.ndarray:
        return self._cov

    @property
    def dim(self) -> int:
        return int(self._mean.shape[0])

    def MAP_params(self) -> jnp.ndarray:
        return self._mean

    def log_prob(self, theta: jnp.ndarray) -> jnp.ndarray:
        """Log density at a single point theta, shape (D,)."""
        theta = jnp.asarray(theta)
        maha = mahalanobis_distance(theta, self._mean, self._chol)
        return -0.5 * (self.dim * jnp.log(2 * jnp.pi) + self._log_det + maha)

    def log_prob_batch(self, thetas: jnp.ndarray) -> jnp.ndarray:
        """Log density at each row of thetas, shape (S, D) -> (S,)."""
        return jax.vmap(self.log_prob)(jnp.atleast_2d(jnp.asarray(thetas)))

    def prob(self, theta: jnp.ndarray) -> jnp.ndarray:
        return jnp.exp(self.log_prob(theta))

    def sample(self, n: int = 1, *, key) -> jnp.ndarray:
        """
        Draw n i.i.d. samples.

        Returns
        -------
        jnp.ndarray, shape (n, D)
        """
        z = jr.normal(key, shape=(n, self.dim), dtype=self._mean.dtype)
        return self._mean + z @ self._chol.T

    def diagnostics(self) -> dict:
        return {
            "mean": self._mean,
            "std": jnp.sqrt(jnp.diag(self._cov)),
            "log_det_cov": float(self._log_det),
        }
