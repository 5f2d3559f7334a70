"""
laplace.py
----------

Laplace approximation to posterior.


Approximates posterior with a Gaussian:
    N(mean = MAP, covariance = H^-1 at MAP)

Provides posterior.sample() cheaply; the draws serve as the proposal for
Pareto-smoothed importance sampling.
"""

from __future__ import annotations

from psisfit.inference.map_optimizer import MAPOptimizer
from psisfit.posterior.laplace import LaplacePosterior
from psisfit.posterior.mode import Mode


class LaplaceApproximation:
    """
    Laplace approximation around MAP estimate.

    Parameters
    ----------
    optimizer : MAPOptimizer, optional
        Mode finder used by fit(). Default: MAPOptimizer().

    Methods
    -------
    from_map(mode) -> LaplacePosterior
        Construct a Gaussian approximation centered at the mode.
    fit(model, data, init_params=None) -> LaplacePosterior
        Find the mode, then construct the approximation.
    """

    def __init__(self, optimizer: MAPOptimizer | None = None):
        self.optimizer = optimizer or MAPOptimizer()

    def from_map(self, mode: Mode) -> LaplacePosterior:
        """
        Return posterior approximation from the mode.

        Raises
        ------
        InvalidCovariance
            If the inverse Hessian is not positive definite (the mode is a
            saddle point or the curvature estimate is broken).
        """
        return LaplacePosterior.from_mode(mode)

    def fit(self, model, data, init_params=None) -> LaplacePosterior:
        return self.from_map(self.optimizer.fit(model, data, init_params=init_params))
