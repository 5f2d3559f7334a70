"""
test_diagnostics.py
-------------------

Tests for diagnostics utilities (effective sample size, weighted parameter
summaries, printed reports).
"""

import math

import jax.numpy as jnp
import jax.random as jr
import pytest

from psisfit.importance import PSISConfig, psis_smooth
from psisfit.posterior import effective_sample_size, monte_carlo_se
from psisfit.utils import (
    parameter_summary,
    print_parameter_summary,
    print_psis_summary,
    weighted_quantile,
)

QUIET = PSISConfig(emit_warnings=False)


def test_ess_uniform_weights():
    assert effective_sample_size(jnp.ones(250)) == pytest.approx(250.0)


def test_ess_single_draw():
    w = jnp.zeros(100).at[7].set(1.0)
    assert effective_sample_size(w) == pytest.approx(1.0)


def test_monte_carlo_se_uniform_weights():
    values = jnp.array([1.0, 3.0])
    # sum w^2 (f - mu)^2 = 2 * 0.25 * 1
    assert monte_carlo_se(values, jnp.ones(2)) == pytest.approx(math.sqrt(0.5))


def test_weighted_quantile():
    values = jnp.array([4.0, 0.0, 3.0, 1.0, 2.0])
    assert float(weighted_quantile(values, None, 0.5)) == pytest.approx(2.0)
    # cdf at the two points: 0.125, 0.625
    q = weighted_quantile(jnp.array([0.0, 2.0]), jnp.array([1.0, 3.0]), 0.5)
    assert float(q) == pytest.approx(1.5)


def test_parameter_summary_weighted():
    draws = jnp.array([[0.0, 0.0], [2.0, 4.0]])
    summary = parameter_summary(draws, jnp.array([1.0, 3.0]))

    assert set(summary) == {"alpha", "beta"}
    assert summary["alpha"]["mean"] == pytest.approx(1.5)
    assert summary["alpha"]["std"] == pytest.approx(math.sqrt(0.75))
    assert summary["beta"]["mean"] == pytest.approx(3.0)
    assert summary["alpha"]["quantiles"][0.5] == pytest.approx(1.5)


def test_parameter_summary_unweighted_matches_numpy():
    draws = jr.normal(jr.PRNGKey(0), (500, 2))
    summary = parameter_summary(draws, quantiles=(0.5,))
    assert summary["alpha"]["mean"] == pytest.approx(float(jnp.mean(draws[:, 0])))
    assert summary["beta"]["std"] == pytest.approx(float(jnp.std(draws[:, 1])))


def test_parameter_summary_name_mismatch():
    with pytest.raises(ValueError):
        parameter_summary(jnp.zeros((5, 3)))


def test_print_parameter_summary(capsys):
    draws = jnp.array([[0.0, 1.0], [1.0, 2.0], [2.0, 3.0]])
    print_parameter_summary(draws)
    out = capsys.readouterr().out
    assert "Parameter Summary (3 draws)" in out
    assert "alpha:" in out
    assert "Mean: 2.000" in out
    assert "95% CI:" in out


def test_print_psis_summary(capsys):
    result = psis_smooth(jr.normal(jr.PRNGKey(1), (1000,)), QUIET)
    print_psis_summary(result)
    out = capsys.readouterr().out
    assert "1000 draws, tail length 95" in out
    assert "Pareto k-hat:" in out
    assert "ESS:" in out
    assert "Warnings" not in out


def test_print_psis_summary_with_flags(capsys):
    result = psis_smooth(jnp.linspace(-1.0, 1.0, 10), QUIET)
    print_psis_summary(result)
    out = capsys.readouterr().out
    assert "not estimated" in out
    assert "Warnings: tail_too_small" in out
