"""
test_session.py
---------------

End-to-end tests of the importance-corrected Laplace pipeline on the
bioassay data.
"""

import jax.numpy as jnp
import jax.random as jr
import pytest

from psisfit.data import BinomialData, bioassay
from psisfit.errors import SingularCurvature
from psisfit.importance import PSISConfig, PSISDiagnosticWarning
from psisfit.model import BinomialLogitModel
from psisfit.posterior import GridPosterior, effective_sample_size
from psisfit.session import CorrectionConfig, ImportanceCorrection

QUIET = PSISConfig(emit_warnings=False)


@pytest.fixture(scope="module")
def result():
    config = CorrectionConfig(n_draws=4000, psis=QUIET)
    return ImportanceCorrection(BinomialLogitModel(), config).run(
        bioassay(), key=jr.PRNGKey(2024)
    )


def test_pipeline_shapes(result):
    assert len(result.sample_set) == 4000
    assert result.weights.shape == (4000,)
    assert float(jnp.sum(result.weights)) == pytest.approx(1.0)
    assert result.draws.shape == (1000, 2)
    assert len(result.resampled) == 1000


def test_pareto_k_estimated(result):
    assert jnp.isfinite(result.pareto_k)
    assert result.pareto_k == result.psis.pareto_k


def test_proposal_centred_on_mode(result):
    assert jnp.allclose(result.proposal.mean, result.mode.params)
    alpha, beta = (float(v) for v in result.mode.params)
    assert 0.8 <= alpha <= 1.3
    assert 7.0 <= beta <= 11.0


def test_resampled_draws_come_from_proposal(result):
    expected = result.sample_set.draws[result.resampled.indices]
    assert jnp.array_equal(result.draws, expected)


def test_ld50_near_zero(result):
    values = result.ld50(positive_slope_only=True)
    assert values.shape[0] > 900
    assert abs(float(jnp.median(values))) < 0.3


def test_agrees_with_grid_reference(result, model, bioassay_data):
    grid = GridPosterior(model, bioassay_data)
    grid_mean = jnp.sum(grid.probs[:, None] * grid.points, axis=0)
    psis_mean = jnp.sum(result.weights[:, None] * result.sample_set.draws, axis=0)
    assert abs(float(psis_mean[0] - grid_mean[0])) < 0.5
    assert abs(float(psis_mean[1] - grid_mean[1])) < 2.0


def test_ess_within_bounds(result):
    assert 1.0 <= effective_sample_size(result.weights) <= 4000.0


def test_jitter_configured(model, bioassay_data):
    config = CorrectionConfig(n_draws=500, n_resample=200, psis=QUIET, jitter_spacing=(0.1, 0.1))
    out = ImportanceCorrection(model, config).run(bioassay_data, key=jr.PRNGKey(3))
    delta = out.draws - out.resampled.draws
    assert out.draws.shape == (200, 2)
    assert bool(jnp.all(jnp.abs(delta) <= 0.05 + 1e-12))
    assert not jnp.array_equal(out.draws, out.resampled.draws)


def test_same_key_same_result(model, bioassay_data):
    config = CorrectionConfig(n_draws=200, n_resample=50, psis=QUIET)
    session = ImportanceCorrection(model, config)
    a = session.run(bioassay_data, key=jr.PRNGKey(9))
    b = session.run(bioassay_data, key=jr.PRNGKey(9))
    assert jnp.array_equal(a.draws, b.draws)


def test_fit_failure_propagates(model):
    data = BinomialData(x=[0.0, 0.0], n=[5, 5], y=[2, 3])
    with pytest.raises(SingularCurvature):
        ImportanceCorrection(model).run(data, key=jr.PRNGKey(0))


def test_flags_from_run_point_at_calling_code(model, bioassay_data):
    # 10 draws leave a tail too short to fit
    config = CorrectionConfig(n_draws=10, n_resample=5)
    with pytest.warns(PSISDiagnosticWarning) as record:
        ImportanceCorrection(model, config).run(bioassay_data, key=jr.PRNGKey(4))
    assert all(w.filename == __file__ for w in record if w.category is PSISDiagnosticWarning)


@pytest.mark.parametrize(
    "kwargs",
    [{"n_draws": 0}, {"n_resample": -5}, {"initial_guess": (0.0, 0.0, 0.0)}],
)
def test_invalid_config(kwargs):
    with pytest.raises(ValueError):
        CorrectionConfig(**kwargs)
