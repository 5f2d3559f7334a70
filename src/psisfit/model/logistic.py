"""
logistic.py
-----------

Binomial regression with a logit link.

    y_i | alpha, beta ~ Binomial(n_i, logit^-1(alpha + beta * x_i))

The unnormalized log posterior is

    log p(alpha, beta | y) = sum_i [ y_i * z_i - n_i * log(1 + exp(z_i)) ]
                             + log p(alpha, beta),   z_i = alpha + beta * x_i

log(1 + exp(z)) is evaluated as logaddexp(0, z), which stays finite for any
z (for large z it returns z itself instead of overflowing to inf).

Connections
-----------
- MAPOptimizer minimizes -log_density to find the posterior mode.
- SampleSet evaluates log_density_batch at proposal draws to form
  importance ratios.
- GridPosterior evaluates log_density_batch on a parameter grid.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

from psisfit.data.dataset import BinomialData
from psisfit.model.prior import FlatPrior

PARAM_NAMES = ("alpha", "beta")


class BinomialLogitModel:
    """
    Two-parameter (intercept, slope) binomial-logit model.

    Parameters
    ----------
    prior : FlatPrior | GaussianPrior, optional
        Prior on (alpha, beta). Default: flat.

    Notes
    -----
    All methods are pure functions of (params, data) and can be traced by
    jax.grad / jax.hessian / jax.vmap.
    """

    param_names = PARAM_NAMES
    n_params = 2

    def __init__(self, prior=None):
        self.prior = prior if prior is not None else FlatPrior()

    def init_params(self) -> jnp.ndarray:
        """Default optimizer starting point (origin)."""
        return jnp.zeros(self.n_params)

    def log_likelihood(self, params: jnp.ndarray, data: BinomialData) -> jnp.ndarray:
        """
        Binomial log likelihood (without the constant binomial coefficients).

        Parameters
        ----------
        params : jnp.ndarray, shape (2,)
            (alpha, beta).
        data : BinomialData
            Observed trials.

        Returns
        -------
        jnp.ndarray
            Scalar log likelihood.
        """
        x, n, y = data.as_jax()
        z = params[0] + params[1] * x
        return jnp.sum(y * z - n * jnp.logaddexp(0.0, z))

    def log_density(self, params: jnp.ndarray, data: BinomialData) -> jnp.ndarray:
        """Unnormalized log posterior: log likelihood + log prior."""
        params = jnp.asarray(params)
        return self.log_likelihood(params, data) + self.prior.log_prob(params)

    def evaluate(self, data: BinomialData, theta) -> float:
        """Return the unnormalized log posterior at theta as a Python float."""
        return float(self.log_density(jnp.asarray(theta, dtype=jnp.float64), data))

    def log_density_batch(self, thetas: jnp.ndarray, data: BinomialData) -> jnp.ndarray:
        """
        Evaluate the log posterior for a batch of parameter vectors.

        Parameters
        ----------
        thetas : jnp.ndarray, shape (S, 2)

        Returns
        -------
        jnp.ndarray, shape (S,)
        """
        thetas = jnp.atleast_2d(jnp.asarray(thetas))
        return jax.vmap(lambda t: self.log_density(t, data))(thetas)


def ld50(draws: jnp.ndarray, *, positive_slope_only: bool = False) -> jnp.ndarray:
    """
    Dose at which the probability of death is 50%: LD50 = -alpha / beta.

    Parameters
    ----------
    draws : jnp.ndarray, shape (S, 2)
        Posterior draws of (alpha, beta).
    positive_slope_only : bool, default=False
        Keep only draws with beta > 0. LD50 is only meaningful for a
        positive slope; a normal approximation puts some mass on beta < 0.

    Returns
    -------
    jnp.ndarray
        LD50 values, shape (S,) or fewer when filtering.
    """
    draws = jnp.atleast_2d(jnp.asarray(draws))
    if positive_slope_only:
        draws = draws[draws[:, 1] > 0]
    return -draws[:, 0] / draws[:, 1]


def prob_positive_slope(draws: jnp.ndarray, weights: jnp.ndarray | None = None) -> float:
    """
    Posterior probability that beta > 0, optionally importance weighted.
    """
    draws = jnp.atleast_2d(jnp.asarray(draws))
    positive = (draws[:, 1] > 0).astype(jnp.float64)
    if weights is None:
        return float(jnp.mean(positive))
    weights = jnp.asarray(weights)
    return float(jnp.sum(weights * positive) / jnp.sum(weights))
