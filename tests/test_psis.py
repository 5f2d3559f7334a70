"""
test_psis.py
------------

Tests for Pareto-smoothed importance sampling: weight normalization, bulk
preservation, tail-shape estimation and the reliability flags.
"""

import math
import warnings

import jax.numpy as jnp
import jax.random as jr
import pytest

from psisfit.errors import WeightComputationError
from psisfit.importance import (
    ParetoSmoothedImportanceSampler,
    PSISConfig,
    PSISDiagnosticWarning,
    PSISWarningKind,
    SampleSet,
    gpd_quantile,
    gpdfit,
    pareto_k_label,
    psis_smooth,
    tail_length,
)
from psisfit.posterior import LaplacePosterior

QUIET = PSISConfig(emit_warnings=False)


def _gaussian_sample_set(target_var, proposal_var, n, key):
    """Draws from N(0, proposal_var I) weighted towards N(0, target_var I)."""
    target = LaplacePosterior(jnp.zeros(2), target_var * jnp.eye(2))
    proposal = LaplacePosterior(jnp.zeros(2), proposal_var * jnp.eye(2))
    draws = proposal.sample(n, key=key)
    return SampleSet(
        draws=draws,
        target_log_density=target.log_prob_batch(draws),
        proposal_log_density=proposal.log_prob_batch(draws),
    )


def _pareto_log_ratios(k, n, key):
    # w = u^(-k) has a Pareto tail with shape k
    u = jr.uniform(key, (n,), minval=1e-12, maxval=1.0)
    return -k * jnp.log(u)


@pytest.mark.parametrize(
    "n, expected",
    [(1000, 95), (100, 20), (21, 5), (10, 2), (10000, 300)],
)
def test_tail_length(n, expected):
    assert tail_length(n) == expected


def test_tail_length_uses_config():
    assert tail_length(1000, PSISConfig(tail_fraction=0.05)) == 50
    assert tail_length(1000, PSISConfig(tail_sqrt_multiplier=1.0)) == 32


class TestWeights:
    @pytest.fixture
    def result(self):
        log_ratios = jr.normal(jr.PRNGKey(0), (1000,))
        return psis_smooth(log_ratios, QUIET)

    def test_weights_normalized_and_non_negative(self, result):
        assert float(jnp.sum(result.weights)) == pytest.approx(1.0, abs=1e-12)
        assert bool(jnp.all(result.weights >= 0))

    def test_bulk_is_untouched(self, result):
        assert result.tail_length == 95
        bulk = jnp.ones(1000, dtype=bool).at[result.tail_indices].set(False)
        assert int(jnp.sum(bulk)) == 905
        assert jnp.array_equal(result.log_weights[bulk], result.log_ratios[bulk])

    def test_tail_is_the_largest_ratios_in_rank_order(self, result):
        tail = result.log_ratios[result.tail_indices]
        bulk_max = jnp.max(jnp.delete(result.log_ratios, result.tail_indices))
        assert bool(jnp.all(tail >= bulk_max))
        smoothed = result.log_weights[result.tail_indices]
        assert bool(jnp.all(jnp.diff(smoothed) >= 0))

    def test_light_tail_is_reliable(self, result):
        # log-normal ratios have all moments
        assert result.pareto_k < 0.7
        assert result.is_reliable
        assert result.warnings == ()

    def test_ess_bounded_by_sample_size(self, result):
        assert 1.0 <= result.ess <= 1000.0

    def test_shift_invariance(self, result):
        shifted = psis_smooth(result.log_ratios + 123.0, QUIET)
        assert shifted.pareto_k == pytest.approx(result.pareto_k)
        assert jnp.allclose(shifted.weights, result.weights, atol=1e-12)


class TestTiedRatios:
    def test_all_tied_ratios(self):
        result = psis_smooth(jnp.full(1000, -3.5), QUIET)
        assert result.pareto_k == 0.0
        assert jnp.allclose(result.weights, 1.0 / 1000, atol=1e-9)
        assert result.warnings == ()

    def test_proposal_identical_to_target(self):
        proposal = LaplacePosterior(jnp.array([1.0, -1.0]), jnp.array([[1.0, 0.3], [0.3, 2.0]]))
        draws = proposal.sample(1000, key=jr.PRNGKey(5))
        lp = proposal.log_prob_batch(draws)
        sample_set = SampleSet(draws=draws, target_log_density=lp, proposal_log_density=lp)
        result = ParetoSmoothedImportanceSampler(QUIET).smooth(sample_set)
        assert result.pareto_k <= 0.0
        assert jnp.allclose(result.weights, 1.0 / 1000, atol=1e-9)

    def test_tail_partly_tied_with_cutoff(self):
        # 45 of the 95 tail ratios tie with the cutoff; the rest are bounded
        u = jr.uniform(jr.PRNGKey(7), (50,))
        log_ratios = jnp.concatenate([jnp.zeros(950), 0.1 * u])
        result = psis_smooth(log_ratios, QUIET)
        assert math.isfinite(result.pareto_k)
        assert result.pareto_k < 0.7
        assert result.warnings == ()
        assert float(jnp.sum(result.weights)) == pytest.approx(1.0)


class TestMismatchedProposal:
    def test_overdispersed_proposal_detected(self):
        # proposal variance is 100x the target variance
        sample_set = _gaussian_sample_set(1.0, 100.0, 1000, jr.PRNGKey(11))
        result = psis_smooth(sample_set.log_ratios, QUIET)
        assert result.pareto_k > 0.5

    def test_underdispersed_proposal_detected(self):
        # target variance is 100x the proposal variance: ratios ~ Pareto(k ~ 1)
        sample_set = _gaussian_sample_set(100.0, 1.0, 1000, jr.PRNGKey(12))
        result = psis_smooth(sample_set.log_ratios, QUIET)
        assert result.pareto_k > 0.5

    def test_well_matched_proposal_is_reliable(self):
        sample_set = _gaussian_sample_set(1.0, 1.5, 4000, jr.PRNGKey(13))
        result = psis_smooth(sample_set.log_ratios, QUIET)
        assert result.pareto_k < 0.5


class TestFlags:
    def test_heavy_tail_flagged_unreliable(self):
        log_ratios = _pareto_log_ratios(1.5, 10000, jr.PRNGKey(21))
        result = psis_smooth(log_ratios, QUIET)
        assert PSISWarningKind.UNRELIABLE_ESTIMATE in result.warnings
        assert not result.is_reliable
        # weights are still returned
        assert float(jnp.sum(result.weights)) == pytest.approx(1.0)

    def test_thresholds_are_configurable(self):
        log_ratios = _pareto_log_ratios(1.5, 10000, jr.PRNGKey(21))
        config = PSISConfig(k_warn=0.3, k_unusable=0.5, emit_warnings=False)
        result = psis_smooth(log_ratios, config)
        assert result.warnings == (
            PSISWarningKind.UNRELIABLE_ESTIMATE,
            PSISWarningKind.UNUSABLE_ESTIMATE,
        )

    def test_flags_are_emitted_as_warnings(self):
        log_ratios = _pareto_log_ratios(1.5, 10000, jr.PRNGKey(21))
        config = PSISConfig(k_warn=0.3, k_unusable=0.5)
        with pytest.warns(PSISDiagnosticWarning, match="k-hat"):
            psis_smooth(log_ratios, config)

    def test_tail_too_small(self):
        log_ratios = jnp.array([0.1, -0.3, 2.0, 0.5, -1.0, 0.0, 0.7, 1.1, -0.2, 0.4])
        with pytest.warns(PSISDiagnosticWarning, match="raw importance ratios"):
            result = psis_smooth(log_ratios)
        assert result.warnings == (PSISWarningKind.TAIL_TOO_SMALL,)
        assert result.tail_fit is None
        assert math.isnan(result.pareto_k)
        assert jnp.array_equal(result.log_weights, result.log_ratios)
        expected = jnp.exp(log_ratios) / jnp.sum(jnp.exp(log_ratios))
        assert jnp.allclose(result.weights, expected)

    def test_warnings_point_at_calling_code(self):
        log_ratios = jnp.linspace(0.0, 1.0, 10)
        with pytest.warns(PSISDiagnosticWarning) as record:
            psis_smooth(log_ratios)
        assert all(w.filename == __file__ for w in record if w.category is PSISDiagnosticWarning)

        sample_set = SampleSet(
            draws=jnp.zeros((10, 2)),
            target_log_density=log_ratios,
            proposal_log_density=jnp.zeros(10),
        )
        with pytest.warns(PSISDiagnosticWarning) as record:
            ParetoSmoothedImportanceSampler().smooth(sample_set)
        assert all(w.filename == __file__ for w in record if w.category is PSISDiagnosticWarning)

    def test_no_warnings_when_reliable(self):
        log_ratios = 0.5 * jr.normal(jr.PRNGKey(1), (1000,))
        with warnings.catch_warnings():
            warnings.simplefilter("error", PSISDiagnosticWarning)
            psis_smooth(log_ratios)


class TestFatalErrors:
    def test_nan_ratio(self):
        with pytest.raises(WeightComputationError):
            psis_smooth(jnp.array([0.0, jnp.nan, 1.0] * 10), QUIET)

    def test_all_minus_inf(self):
        with pytest.raises(WeightComputationError):
            psis_smooth(jnp.full(100, -jnp.inf), QUIET)

    def test_empty(self):
        with pytest.raises(ValueError):
            psis_smooth(jnp.zeros(0), QUIET)


class TestGPDFit:
    @pytest.mark.parametrize("k", [0.0, 0.5])
    def test_recovers_shape_from_exact_quantiles(self, k):
        m = 1000
        p = (jnp.arange(1, m + 1) - 0.5) / m
        x = gpd_quantile(p, k, 2.0)
        fit = gpdfit(x, weak_prior=False)
        assert fit.k == pytest.approx(k, abs=0.1)
        assert fit.sigma == pytest.approx(2.0, rel=0.2)

    def test_exceedances_tied_at_zero_are_ignored(self):
        p = (jnp.arange(1, 201) - 0.5) / 200
        x = gpd_quantile(p, 0.5, 2.0)
        with_ties = gpdfit(jnp.concatenate([jnp.zeros(80), x]))
        without = gpdfit(x)
        assert with_ties.k == pytest.approx(without.k)
        assert with_ties.sigma == pytest.approx(without.sigma)

    def test_zero_exceedances(self):
        fit = gpdfit(jnp.zeros(20))
        assert fit.k == 0.0
        assert fit.sigma == 0.0

    def test_weak_prior_shrinks_towards_half(self):
        p = (jnp.arange(1, 51) - 0.5) / 50
        x = gpd_quantile(p, 0.0, 1.0)
        raw = gpdfit(x, weak_prior=False)
        shrunk = gpdfit(x)
        assert shrunk.k == pytest.approx((raw.k * 50 + 5) / 60)

    def test_quantile_exponential_limit(self):
        p = jnp.array([0.1, 0.5, 0.9])
        assert jnp.allclose(gpd_quantile(p, 0.0, 1.0), -jnp.log1p(-p))
        assert jnp.allclose(gpd_quantile(p, 1e-9, 1.0), -jnp.log1p(-p), atol=1e-6)


def test_pareto_k_labels():
    assert pareto_k_label(0.2) == "good"
    assert pareto_k_label(0.6) == "ok"
    assert pareto_k_label(0.8) == "bad"
    assert pareto_k_label(1.3) == "very bad"
    assert pareto_k_label(float("nan")) == "not estimated"


@pytest.mark.parametrize(
    "kwargs",
    [
        {"tail_fraction": 0.0},
        {"tail_sqrt_multiplier": -1.0},
        {"min_tail_length": 1},
        {"k_warn": 1.0, "k_unusable": 0.7},
    ],
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        PSISConfig(**kwargs)
