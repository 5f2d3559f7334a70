"""
importance
==========

Importance reweighting of proposal draws.

This subpackage provides:
- SampleSet : draws with target / proposal log densities and raw log ratios.
- psis_smooth / ParetoSmoothedImportanceSampler : Pareto-smoothed
  importance weights plus the k-hat reliability diagnostic.
- resample / resample_indices / jitter : sampling-importance-resampling.

Data flow
---------
    LaplacePosterior --sample--> SampleSet --psis_smooth--> PSISResult
        --resample--> ResampleResult (--jitter--> continuous draws)
"""

from .psis import (
    ParetoSmoothedImportanceSampler,
    PSISConfig,
    PSISDiagnosticWarning,
    PSISResult,
    PSISWarningKind,
    TailFit,
    gpd_quantile,
    gpdfit,
    pareto_k_label,
    psis_smooth,
    tail_length,
)
from .resample import ResampleResult, jitter, resample, resample_indices
from .sample_set import SampleSet

__all__ = [
    "SampleSet",
    "PSISConfig",
    "PSISResult",
    "PSISWarningKind",
    "PSISDiagnosticWarning",
    "TailFit",
    "ParetoSmoothedImportanceSampler",
    "psis_smooth",
    "gpdfit",
    "gpd_quantile",
    "tail_length",
    "pareto_k_label",
    "ResampleResult",
    "resample",
    "resample_indices",
    "jitter",
]
