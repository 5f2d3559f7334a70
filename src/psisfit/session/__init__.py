"""
session
=======

Pipeline orchestration.

This subpackage provides:
- ImportanceCorrection : a high-level controller that chains mode finding,
  the Laplace approximation, Pareto-smoothed importance sampling and
  resampling.
- CorrectionConfig : its configuration.
- CorrectionResult : the immutable output of one run.
"""

from .importance_correction import CorrectionConfig, CorrectionResult, ImportanceCorrection

__all__ = ["ImportanceCorrection", "CorrectionConfig", "CorrectionResult"]
