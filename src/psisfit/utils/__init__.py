"""
utils
=====

Shared utility functions and helpers for psisfit.

This subpackage provides:
- diagnostics : weighted parameter summaries and PSIS reports.
- math : covariance checks, Mahalanobis distance, weighted quantiles.
"""

from .diagnostics import parameter_summary, print_parameter_summary, print_psis_summary
from .math import is_symmetric_positive_definite, mahalanobis_distance, weighted_quantile

__all__ = [
    # diagnostics
    "parameter_summary",
    "print_parameter_summary",
    "print_psis_summary",
    # math
    "is_symmetric_positive_definite",
    "mahalanobis_distance",
    "weighted_quantile",
]
