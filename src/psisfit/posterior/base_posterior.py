"""
base_posterior.py
-----------------

Abstract base class for posterior representations in psisfit.

Defines the common interface for all posterior types:

- LaplacePosterior : Gaussian approximation around the mode
- GridPosterior    : discretized posterior on a parameter grid

Why this matters
----------------
Different approximations yield very different posterior objects
(Gaussian, grid table). A common interface ensures that downstream code
(importance sampling, summaries, the correction workflow) can interact with
them uniformly without having to worry about how they were computed.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

import jax.numpy as jnp


class BasePosterior(ABC):
    """
    Abstract base class for posterior wrappers.

    Notes
    -----
    - Each concrete posterior must inherit from this class.
    - All must provide MAP_params, sample and log_prob.
    """

    # ------------------------------------------------------------------
    # ACCESSORS: expose internal information
    # ------------------------------------------------------------------
    @abstractmethod
    def MAP_params(self) -> jnp.ndarray:
        """
        Return a representative point estimate of parameters.

        Notes
        -----
        - LaplacePosterior : return Gaussian mean (the mode).
        - GridPosterior : return the highest-density grid point.
        """
        ...

    @abstractmethod
    def sample(self, n: int = 1, *, key) -> jnp.ndarray:
        """
        Draw parameter samples from the posterior.

        Parameters
        ----------
        n : int, default=1
            Number of samples.
        key : jax.random.PRNGKey
            Random key.

        Returns
        -------
        jnp.ndarray, shape (n, 2)
            Parameter draws.
        """
        ...

    @abstractmethod
    def log_prob(self, theta: jnp.ndarray) -> jnp.ndarray:
        """
        Evaluate the log density of this approximation at theta.
        """
        ...
