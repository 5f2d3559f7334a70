"""
psisfit
=======

Laplace approximations corrected by Pareto-smoothed importance sampling.

This package approximates the posterior of a two-parameter binomial-logit
regression (the bioassay model of BDA3, ch. 3 and 10) with a Gaussian
centered at the posterior mode, then corrects that approximation by
importance sampling with Pareto-smoothed weights. The Pareto shape estimate
k-hat certifies whether the correction can be trusted.

----------------------------------------------------------------------
Workflow
----------------------------------------------------------------------

Core design
-----------
1. BinomialLogitModel (model/logistic.py):
   - Unnormalized log posterior, numerically stable for any (alpha, beta).

2. MAPOptimizer (inference/map_optimizer.py):
   - Optax L-BFGS on the negative log posterior, Hessian via jax.hessian.
   - Returns a Mode or raises NonConvergence / SingularCurvature.

3. LaplacePosterior (posterior/laplace.py):
   - N(mode, H^-1) proposal: log density and sampling.
   - Raises InvalidCovariance for a non positive definite covariance.

4. psis_smooth (importance/psis.py):
   - Generalized Pareto fit to the largest importance ratios, smoothed
     weights, k-hat diagnostic and reliability flags.

5. resample / jitter (importance/resample.py):
   - Sampling-importance-resampling to an equally weighted sample.

6. GridPosterior (posterior/grid.py):
   - Brute-force grid reference for checking the pipeline.

Unified import style
--------------------
Top-level:
  from psisfit import BinomialLogitModel, MAPOptimizer, LaplacePosterior
  from psisfit import psis_smooth, resample, ImportanceCorrection

Subpackages:
  from psisfit.data import BinomialData, bioassay
  from psisfit.model import BinomialLogitModel, FlatPrior, GaussianPrior, ld50
  from psisfit.inference import MAPOptimizer, LaplaceApproximation
  from psisfit.posterior import Mode, LaplacePosterior, GridPosterior
  from psisfit.importance import SampleSet, psis_smooth, PSISConfig, resample
  from psisfit.session import ImportanceCorrection, CorrectionConfig
  from psisfit.utils import parameter_summary, print_psis_summary

Data flow
---------
    mode = MAPOptimizer().fit(model, data)
    proposal = LaplaceApproximation().from_map(mode)
    sample_set = SampleSet.from_proposal(model, data, proposal, 1000, key=k1)
    result = psis_smooth(sample_set.log_ratios)
    resampled = resample(sample_set, result.weights, 1000, key=k2)

Numerics
--------
Importing psisfit switches JAX to double precision (jax_enable_x64).

----------------------------------------------------------------------
"""

import jax

jax.config.update("jax_enable_x64", True)

# Re-export subpackages for unified import style (e.g., psisfit.model, psisfit.inference)
from . import data as data  # noqa: E402
from . import importance as importance  # noqa: E402
from . import inference as inference  # noqa: E402
from . import model as model  # noqa: E402
from . import posterior as posterior  # noqa: E402
from . import session as session  # noqa: E402
from . import utils as utils  # noqa: E402
from .data.dataset import BinomialData, bioassay  # noqa: E402
from .errors import (  # noqa: E402
    DegenerateWeights,
    FitFailure,
    InvalidCovariance,
    NonConvergence,
    SingularCurvature,
    WeightComputationError,
)
from .importance.psis import (  # noqa: E402
    ParetoSmoothedImportanceSampler,
    PSISConfig,
    PSISDiagnosticWarning,
    PSISResult,
    PSISWarningKind,
    psis_smooth,
)
from .importance.resample import jitter, resample, resample_indices  # noqa: E402
from .importance.sample_set import SampleSet  # noqa: E402

# Inference
from .inference.laplace import LaplaceApproximation  # noqa: E402
from .inference.map_optimizer import MAPOptimizer  # noqa: E402
from .model.logistic import BinomialLogitModel, ld50  # noqa: E402
from .model.prior import FlatPrior, GaussianPrior  # noqa: E402

# Posterior
from .posterior.grid import GridPosterior  # noqa: E402
from .posterior.laplace import LaplacePosterior  # noqa: E402
from .posterior.mode import Mode  # noqa: E402

# Pipeline orchestration
from .session.importance_correction import (  # noqa: E402
    CorrectionConfig,
    CorrectionResult,
    ImportanceCorrection,
)

__all__ = [
    # Core model
    "BinomialLogitModel",
    "FlatPrior",
    "GaussianPrior",
    "ld50",
    # Inference
    "MAPOptimizer",
    "LaplaceApproximation",
    # Posterior
    "Mode",
    "LaplacePosterior",
    "GridPosterior",
    # Importance sampling
    "SampleSet",
    "PSISConfig",
    "PSISResult",
    "PSISWarningKind",
    "PSISDiagnosticWarning",
    "ParetoSmoothedImportanceSampler",
    "psis_smooth",
    "resample",
    "resample_indices",
    "jitter",
    # Session orchestration
    "ImportanceCorrection",
    "CorrectionConfig",
    "CorrectionResult",
    # Data handling
    "BinomialData",
    "bioassay",
    # Errors
    "FitFailure",
    "NonConvergence",
    "SingularCurvature",
    "InvalidCovariance",
    "DegenerateWeights",
    "WeightComputationError",
    # Subpackages
    "data",
    "model",
    "inference",
    "posterior",
    "importance",
    "session",
    "utils",
]
