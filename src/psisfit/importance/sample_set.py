"""
sample_set.py
-------------

Draws from a proposal together with their target and proposal log
densities.

The raw log importance ratio of draw i is

    r_i = log p(theta_i | y) - log q(theta_i)

where p is the unnormalized posterior and q the proposal. A SampleSet is
created once per batch of draws and never modified; smoothing produces new
weights (see psis.py), it does not touch the draws.
"""

from __future__ import annotations

from dataclasses import dataclass

import jax.numpy as jnp


@dataclass(frozen=True, eq=False)
class SampleSet:
    """
    Proposal draws with parallel log-density arrays.

    Attributes
    ----------
    draws : jnp.ndarray, shape (N, D)
    target_log_density : jnp.ndarray, shape (N,)
    proposal_log_density : jnp.ndarray, shape (N,)
    """

    draws: jnp.ndarray
    target_log_density: jnp.ndarray
    proposal_log_density: jnp.ndarray

    def __post_init__(self):
        draws = jnp.atleast_2d(jnp.asarray(self.draws))
        target = jnp.asarray(self.target_log_density).reshape(-1)
        proposal = jnp.asarray(self.proposal_log_density).reshape(-1)
        n = draws.shape[0]
        if target.shape[0] != n or proposal.shape[0] != n:
            raise ValueError(
                f"expected {n} target and proposal log densities, got "
                f"{target.shape[0]} and {proposal.shape[0]}"
            )
        # frozen dataclass: normalize shapes through object.__setattr__
        object.__setattr__(self, "draws", draws)
        object.__setattr__(self, "target_log_density", target)
        object.__setattr__(self, "proposal_log_density", proposal)

    def __len__(self) -> int:
        return int(self.draws.shape[0])

    @property
    def log_ratios(self) -> jnp.ndarray:
        """Raw log importance ratios, target - proposal."""
        return self.target_log_density - self.proposal_log_density

    @classmethod
    def from_proposal(cls, model, data, proposal, n: int, *, key) -> SampleSet:
        """
        Draw n samples from `proposal` and evaluate both log densities.

        Parameters
        ----------
        model : BinomialLogitModel
            Supplies the target, model.log_density_batch(thetas, data).
        data : BinomialData
        proposal : LaplacePosterior
            Supplies sample(n, key=...) and log_prob_batch(thetas).
        n : int
            Number of draws.
        key : jax.random.PRNGKey
        """
        if n <= 0:
            raise ValueError(f"n must be positive, got {n}")
        draws = proposal.sample(n, key=key)
        return cls(
            draws=draws,
            target_log_density=model.log_density_batch(draws, data),
            proposal_log_density=proposal.log_prob_batch(draws),
        )
