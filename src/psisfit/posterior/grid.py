"""
grid.py
-------

Brute-force grid approximation of a two-parameter posterior.

The posterior is evaluated on the Cartesian product of two linearly spaced
grids and normalized over the grid points:

    P(alpha_i, beta_j) = exp(lp_ij - max lp) / sum exp(lp - max lp)

This is only feasible in low dimension and is used as a reference against
which the Laplace + PSIS pipeline can be checked.

MVP implementation:
- Grid ranges default to the bioassay ranges, alpha in [-4, 8] and
  beta in [-10, 40], 100 points each.
- Sampling draws grid cells proportionally to P and jitters each draw
  uniformly within its cell.
"""

from __future__ import annotations

import jax.numpy as jnp
import jax.random as jr

from psisfit.importance.resample import jitter, resample_indices
from psisfit.posterior.base_posterior import BasePosterior


class GridPosterior(BasePosterior):
    """
    Posterior tabulated on a 2-D grid.

    Parameters
    ----------
    model : BinomialLogitModel
    data : BinomialData
    alpha_range : tuple of float, default=(-4.0, 8.0)
    beta_range : tuple of float, default=(-10.0, 40.0)
    num : int or tuple of int, default=100
        Points per axis.

    Attributes
    ----------
    points : jnp.ndarray, shape (num_alpha * num_beta, 2)
        Grid points, alpha-major: beta varies fastest.
    log_density : jnp.ndarray, shape (num_alpha * num_beta,)
        Unnormalized log posterior at each point.
    probs : jnp.ndarray
        Normalized probabilities at each point.
    """

    def __init__(
        self,
        model,
        data,
        alpha_range: tuple[float, float] = (-4.0, 8.0),
        beta_range: tuple[float, float] = (-10.0, 40.0),
        num: int | tuple[int, int] = 100,
    ):
        num_a, num_b = (num, num) if isinstance(num, int) else num
        if num_a < 2 or num_b < 2:
            raise ValueError(f"need at least 2 grid points per axis, got {(num_a, num_b)}")
        self.alpha = jnp.linspace(alpha_range[0], alpha_range[1], num_a)
        self.beta = jnp.linspace(beta_range[0], beta_range[1], num_b)

        cA = jnp.repeat(self.alpha, num_b)
        cB = jnp.tile(self.beta, num_a)
        self.points = jnp.stack([cA, cB], axis=1)
        self.log_density = model.log_density_batch(self.points, data)

        unnorm = jnp.exp(self.log_density - jnp.max(self.log_density))
        self.probs = unnorm / jnp.sum(unnorm)

    @property
    def spacing(self) -> jnp.ndarray:
        """Grid step along (alpha, beta)."""
        return jnp.array([self.alpha[1] - self.alpha[0], self.beta[1] - self.beta[0]])

    @property
    def shape(self) -> tuple[int, int]:
        return (int(self.alpha.shape[0]), int(self.beta.shape[0]))

    def MAP_params(self) -> jnp.ndarray:
        return self.points[jnp.argmax(self.log_density)]

    def prob_table(self) -> jnp.ndarray:
        """Normalized probabilities reshaped to (num_alpha, num_beta)."""
        return self.probs.reshape(self.shape)

    def log_prob(self, theta: jnp.ndarray) -> jnp.ndarray:
        """
        Log probability mass of the grid cell nearest to theta.
        """
        theta = jnp.asarray(theta)
        i = jnp.argmin(jnp.abs(self.alpha - theta[0]))
        j = jnp.argmin(jnp.abs(self.beta - theta[1]))
        return jnp.log(self.probs[i * self.shape[1] + j])

    def sample(self, n: int = 1, *, key, jitter_draws: bool = True) -> jnp.ndarray:
        """
        Draw n points proportionally to the grid probabilities.

        Parameters
        ----------
        n : int
        key : jax.random.PRNGKey
        jitter_draws : bool, default=True
            Add uniform noise of half a grid step in each direction.
        """
        k_idx, k_jit = jr.split(key)
        idx = resample_indices(self.probs, n, key=k_idx)
        draws = self.points[idx]
        if jitter_draws:
            draws = jitter(draws, self.spacing, key=k_jit)
        return draws
