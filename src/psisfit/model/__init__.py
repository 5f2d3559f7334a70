"""
psisfit.model
=============

Model-layer API: everything model-related in one place.

Includes
--------
- BinomialLogitModel (log density of the binomial-logit regression)
- Priors (FlatPrior, GaussianPrior)
- Derived quantities (ld50, prob_positive_slope)

All functions/classes use JAX arrays (jax.numpy as jnp) for autodiff
and optimization with Optax.

Typical usage
-------------
    from psisfit.model import BinomialLogitModel, FlatPrior
"""

from .logistic import PARAM_NAMES, BinomialLogitModel, ld50, prob_positive_slope
from .prior import FlatPrior, GaussianPrior

__all__ = [
    "BinomialLogitModel",
    "PARAM_NAMES",
    "FlatPrior",
    "GaussianPrior",
    "ld50",
    "prob_positive_slope",
]
