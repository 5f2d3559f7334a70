"""
resample.py
-----------

Sampling-importance-resampling: turn weighted draws into an equally
weighted sample.

- resample_indices : categorical draws with replacement, P(i) proportional to w_i.
- resample : the same, applied to a SampleSet.
- jitter : uniform noise of +- half a spacing per coordinate, used to smooth
  out draws that come from a grid or repeat the same proposal point
  (BDA3, p. 76).
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp
import jax.random as jr

from psisfit.errors import DegenerateWeights


@dataclass(frozen=True, eq=False)
class ResampleResult:
    """
    Attributes
    ----------
    indices : jnp.ndarray, shape (count,)
        Indices into the originating SampleSet.
    draws : jnp.ndarray, shape (count, D)
        The selected draws.
    """

    indices: jnp.ndarray
    draws: jnp.ndarray

    def __len__(self) -> int:
        return int(self.indices.shape[0])


def _validate_weights(weights) -> jnp.ndarray:
    w = jnp.asarray(weights, dtype=jnp.float64)
    if w.ndim != 1 or w.shape[0] == 0:
        raise DegenerateWeights(f"weights must be a non-empty 1-D array, got shape {w.shape}")
    if not bool(jnp.all(jnp.isfinite(w))):
        raise DegenerateWeights("weights contain NaN or infinite values")
    if bool(jnp.any(w < 0)):
        raise DegenerateWeights("weights must be non-negative")
    total = float(jnp.sum(w))
    if not total > 0.0 or not jnp.isfinite(total):
        raise DegenerateWeights(f"weights sum to {total}; nothing to resample")
    return w / total


def resample_indices(weights, count: int = 1000, *, key) -> jnp.ndarray:
    """
    Draw `count` indices with replacement, P(i) proportional to weights[i].

    Parameters
    ----------
    weights : array, shape (N,)
        Non-negative weights; need not be normalized.
    count : int, default=1000
    key : jax.random.PRNGKey

    Returns
    -------
    jnp.ndarray, shape (count,)

    Raises
    ------
    DegenerateWeights
        If the weights are negative, non-finite, or sum to zero.
    """
    if count < 0:
        raise ValueError(f"count must be non-negative, got {count}")
    p = _validate_weights(weights)
    return jr.choice(key, p.shape[0], shape=(count,), replace=True, p=p)


def resample(sample_set, weights, count: int = 1000, *, key) -> ResampleResult:
    """
    Resample the draws of a SampleSet according to weights.

    Parameters
    ----------
    sample_set : SampleSet
    weights : array, shape (N,)
        Typically PSISResult.weights.
    count : int, default=1000
    key : jax.random.PRNGKey
    """
    if len(weights) != len(sample_set):
        raise ValueError(
            f"got {len(weights)} weights for {len(sample_set)} draws"
        )
    indices = resample_indices(weights, count, key=key)
    return ResampleResult(indices=indices, draws=sample_set.draws[indices])


def jitter(draws: jnp.ndarray, spacing, *, key) -> jnp.ndarray:
    """
    Add independent uniform noise on [-spacing/2, spacing/2] to each coordinate.

    Parameters
    ----------
    draws : jnp.ndarray, shape (S, D)
    spacing : float or array of shape (D,)
        Full width of the jitter interval per coordinate.
    key : jax.random.PRNGKey
    """
    draws = jnp.atleast_2d(jnp.asarray(draws))
    spacing = jnp.broadcast_to(jnp.asarray(spacing, dtype=draws.dtype), draws.shape[1:])
    u = jr.uniform(key, draws.shape, dtype=draws.dtype, minval=-0.5, maxval=0.5)
    return draws + u * spacing
