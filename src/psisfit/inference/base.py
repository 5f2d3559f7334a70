"""
base.py
-------

Abstract base class for mode finders.

A mode finder maximizes a model's unnormalized log posterior and reports
the curvature there. Its only output is a Mode; anything built from the
mode (the Gaussian proposal, importance weights) lives downstream.

Contract
--------
- fit() returns a Mode whose covariance is the inverse of the negative
  Hessian at the reported parameters.
- Failure is never silent: fit() raises NonConvergence when the step
  budget runs out and SingularCurvature when the Hessian cannot be
  inverted. Both subclass FitFailure.
"""

from __future__ import annotations

from abc import ABC, abstractmethod

from psisfit.posterior.mode import Mode


class ModeFinder(ABC):
    """
    Abstract interface for mode finders.

    Methods
    -------
    fit(model, data, init_params=None) -> Mode
        Locate the posterior mode and its curvature.
    """

    @abstractmethod
    def fit(self, model, data, init_params=None) -> Mode:
        """
        Parameters
        ----------
        model : BinomialLogitModel
            Anything providing log_density(params, data) and init_params().
        data : BinomialData
        init_params : array, optional
            Starting point; defaults to model.init_params().

        Raises
        ------
        FitFailure
        """
        ...
