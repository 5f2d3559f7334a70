"""
diagnostics.py
--------------

Posterior diagnostics.

Provides functions to check quality of importance-weighted posterior
approximations.

- effective_sample_size : Kish effective sample size of a weight vector.
- monte_carlo_se : standard error of a self-normalized weighted mean.
"""

from __future__ import annotations

import jax.numpy as jnp


def effective_sample_size(weights: jnp.ndarray) -> float:
    """
    Estimate the effective sample size (ESS) of an importance-weighted sample:
    the number of independent, equally weighted draws the weighted sample is
    worth.

    Parameters
    ----------
    weights : jnp.ndarray
        Non-negative importance weights, shape (n_samples,). Need not be
        normalized.

    Returns
    -------
    float
        ESS = 1 / sum(w_i^2) for weights normalized to sum to one. Equals
        n_samples for uniform weights and 1 when a single draw carries all
        the mass.
    """
    w = jnp.asarray(weights)
    w = w / jnp.sum(w)
    return float(1.0 / jnp.sum(w**2))


def monte_carlo_se(values: jnp.ndarray, weights: jnp.ndarray) -> float:
    """
    Approximate Monte Carlo standard error of the self-normalized importance
    sampling estimate of E[values].

    Notes
    -----
    Uses the delta-method variance sum(w_i^2 (f_i - mu)^2) for normalized w.
    """
    w = jnp.asarray(weights)
    w = w / jnp.sum(w)
    f = jnp.asarray(values)
    mu = jnp.sum(w * f)
    return float(jnp.sqrt(jnp.sum(w**2 * (f - mu) ** 2)))
