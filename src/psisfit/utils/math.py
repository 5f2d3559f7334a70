"""
math.py
-------

Math utilities for psisfit.

Includes:
- is_symmetric_positive_definite : validity check for covariance matrices.
- mahalanobis_distance : squared distance used by the Gaussian log density.
- weighted_quantile : quantiles of importance-weighted draws.

All functions use JAX (jax.numpy) for compatibility with autodiff.

Examples
--------
>>> import jax.numpy as jnp
>>> from psisfit.utils import math
>>> bool(math.is_symmetric_positive_definite(jnp.eye(2)))
True
"""

from __future__ import annotations

import jax.numpy as jnp
from jax.scipy.linalg import solve_triangular


def is_symmetric_positive_definite(matrix: jnp.ndarray, rtol: float = 1e-8) -> bool:
    """
    Check that a square matrix is symmetric and positive definite.

    Parameters
    ----------
    matrix : jnp.ndarray, shape (D, D)
    rtol : float, default=1e-8
        Relative tolerance for the symmetry check.

    Returns
    -------
    bool

    Notes
    -----
    jnp.linalg.cholesky does not raise on failure; it returns NaNs. A finite
    factor with a strictly positive diagonal certifies positive definiteness.
    """
    matrix = jnp.asarray(matrix)
    if matrix.ndim != 2 or matrix.shape[0] != matrix.shape[1]:
        return False
    if not bool(jnp.all(jnp.isfinite(matrix))):
        return False
    scale = jnp.max(jnp.abs(matrix))
    if not bool(jnp.allclose(matrix, matrix.T, rtol=0.0, atol=rtol * scale)):
        return False
    chol = jnp.linalg.cholesky(matrix)
    return bool(jnp.all(jnp.isfinite(chol)) and jnp.all(jnp.diag(chol) > 0))


def mahalanobis_distance(x: jnp.ndarray, mean: jnp.ndarray, chol: jnp.ndarray) -> jnp.ndarray:
    """
    Compute squared Mahalanobis distance between x and mean.

    Parameters
    ----------
    x : jnp.ndarray
        Data vector, shape (D,).
    mean : jnp.ndarray
        Mean vector, shape (D,).
    chol : jnp.ndarray
        Lower Cholesky factor L of the covariance (Sigma = L L^T), shape (D, D).

    Returns
    -------
    jnp.ndarray
        Scalar squared Mahalanobis distance.

    Notes
    -----
    - Formula: d^2 = (x - mean)^T Sigma^{-1} (x - mean) = |L^{-1} (x - mean)|^2
    - Solving against L avoids forming Sigma^{-1}.
    """
    z = solve_triangular(chol, x - mean, lower=True)
    return jnp.dot(z, z)


def weighted_quantile(
    values: jnp.ndarray, weights: jnp.ndarray | None, q
) -> jnp.ndarray:
    """
    Quantiles of a weighted sample.

    Parameters
    ----------
    values : jnp.ndarray, shape (S,)
    weights : jnp.ndarray, shape (S,) or None
        Non-negative weights (need not be normalized). None means equal
        weights.
    q : float or array of float in [0, 1]

    Returns
    -------
    jnp.ndarray
        Quantile(s), same shape as q.

    Notes
    -----
    Uses the inverse of the weighted empirical CDF with midpoint plotting
    positions, interpolated linearly.
    """
    values = jnp.asarray(values)
    if weights is None:
        weights = jnp.ones_like(values)
    weights = jnp.asarray(weights)
    order = jnp.argsort(values)
    v = values[order]
    w = weights[order]
    cdf = (jnp.cumsum(w) - 0.5 * w) / jnp.sum(w)
    return jnp.interp(jnp.asarray(q), cdf, v)
