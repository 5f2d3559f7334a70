"""
errors.py
---------

Typed numerical failures raised across psisfit.

- FitFailure (NonConvergence, SingularCurvature): mode finding failed. This
  is recoverable: the caller may retry with another starting point or other
  optimizer settings. Nothing is retried internally.
- InvalidCovariance: a Gaussian approximation cannot be built.
- DegenerateWeights: resampling from weights that carry no mass.
- WeightComputationError: importance weights came out NaN or all zero.

Advisory importance-sampling diagnostics are not errors; see
psisfit.importance.psis.PSISDiagnosticWarning.
"""

from __future__ import annotations


class FitFailure(RuntimeError):
    """Mode finding failed. `reason` names the failure mode."""

    reason = "fit_failure"


class NonConvergence(FitFailure):
    """
    Optimizer exhausted its step budget before reaching its tolerance.

    Attributes
    ----------
    steps : int
        Steps taken.
    grad_norm : float
        Gradient L2 norm at the last iterate.
    params : array
        Last iterate.
    """

    reason = "non_convergence"

    def __init__(self, steps: int, grad_norm: float, tol: float, params=None):
        super().__init__(
            f"optimizer did not converge in {steps} steps "
            f"(gradient norm {grad_norm:.3e} > tol {tol:.1e})"
        )
        self.steps = steps
        self.grad_norm = grad_norm
        self.tol = tol
        self.params = params


class SingularCurvature(FitFailure):
    """
    Hessian of the negative log density at the optimum is not invertible.

    Attributes
    ----------
    determinant : float
    threshold : float
        Determinant magnitude at or below which the Hessian counts as singular.
    hessian : array
    """

    reason = "singular_curvature"

    def __init__(self, determinant: float, threshold: float, hessian=None):
        super().__init__(
            f"Hessian is singular: |det| = {abs(determinant):.3e} <= {threshold:.3e}"
        )
        self.determinant = determinant
        self.threshold = threshold
        self.hessian = hessian


class InvalidCovariance(ValueError):
    """Covariance matrix is not symmetric positive definite."""


class DegenerateWeights(ValueError):
    """Weights are negative, non-finite, or sum to zero; nothing to resample."""


class WeightComputationError(FloatingPointError):
    """Normalized importance weights are NaN, infinite or all zero."""
