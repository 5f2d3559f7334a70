"""
diagnostics.py
--------------

Summaries of (weighted) posterior draws and of importance-sampling
diagnostics.

Provides tools for:
- Parameter posterior summaries (mean, std, quantiles), optionally weighted
- Human-readable reports of parameter summaries and PSIS diagnostics

Examples
--------
>>> from psisfit.utils.diagnostics import parameter_summary
>>> summary = parameter_summary(sample_set.draws, psis_result.weights)
>>> print(
...     f"beta: {summary['beta']['mean']:.3f} "
...     f"± {summary['beta']['std']:.3f}"
... )
"""

from __future__ import annotations

import jax.numpy as jnp

from psisfit.importance.psis import pareto_k_label
from psisfit.model.logistic import PARAM_NAMES
from psisfit.utils.math import weighted_quantile


def parameter_summary(
    draws: jnp.ndarray,
    weights: jnp.ndarray | None = None,
    *,
    names: tuple[str, ...] = PARAM_NAMES,
    quantiles: tuple[float, ...] = (0.025, 0.25, 0.5, 0.75, 0.975),
) -> dict[str, dict]:
    """
    Compute summary statistics for each parameter.

    Parameters
    ----------
    draws : jnp.ndarray, shape (S, D)
        Posterior draws.
    weights : jnp.ndarray, shape (S,), optional
        Importance weights. None means equally weighted draws.
    names : tuple of str, default=("alpha", "beta")
        One name per column of draws.
    quantiles : tuple of floats, default=(0.025, 0.25, 0.5, 0.75, 0.975)
        Quantiles to compute

    Returns
    -------
    summary : dict[str, dict]
        Dictionary with keys for each parameter, values are dicts with:
        - "mean": Weighted mean
        - "std": Weighted standard deviation
        - "quantiles": Dict mapping quantile to value
    """
    draws = jnp.atleast_2d(jnp.asarray(draws))
    if draws.shape[1] != len(names):
        raise ValueError(f"got {draws.shape[1]} columns for {len(names)} names")
    if weights is None:
        w = jnp.full(draws.shape[0], 1.0 / draws.shape[0])
    else:
        w = jnp.asarray(weights)
        w = w / jnp.sum(w)

    summary = {}
    for col, name in enumerate(names):
        values = draws[:, col]
        mean = jnp.sum(w * values)
        std = jnp.sqrt(jnp.sum(w * (values - mean) ** 2))
        summary[name] = {
            "mean": float(mean),
            "std": float(std),
            "quantiles": {
                q: float(weighted_quantile(values, w, q)) for q in quantiles
            },
        }
    return summary


def print_parameter_summary(
    draws: jnp.ndarray,
    weights: jnp.ndarray | None = None,
    *,
    names: tuple[str, ...] = PARAM_NAMES,
) -> None:
    """
    Print a human-readable parameter summary.

    Examples
    --------
    >>> print_parameter_summary(draws)
    Parameter Summary (1000 draws):

    alpha:
      Mean: 1.274 ± 1.066
      95% CI: [-0.558, 3.598]
    """
    summary = parameter_summary(draws, weights, names=names)
    n = jnp.atleast_2d(jnp.asarray(draws)).shape[0]

    print(f"Parameter Summary ({n} draws):\n")
    for param_name, stats in summary.items():
        print(f"{param_name}:")
        print(f"  Mean: {stats['mean']:.3f} ± {stats['std']:.3f}")
        print(
            f"  95% CI: [{stats['quantiles'][0.025]:.3f}, "
            f"{stats['quantiles'][0.975]:.3f}]"
        )


def print_psis_summary(result) -> None:
    """
    Print k-hat, its category, the effective sample size and any flags of a
    PSISResult.
    """
    n = int(result.weights.shape[0])
    k = result.pareto_k
    print(f"PSIS diagnostics ({n} draws, tail length {result.tail_length}):")
    print(f"  Pareto k-hat: {k:.3f} ({pareto_k_label(k)})")
    print(f"  ESS: {result.ess:.1f}")
    if result.warnings:
        print("  Warnings: " + ", ".join(kind.value for kind in result.warnings))
