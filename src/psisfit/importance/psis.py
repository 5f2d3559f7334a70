"""
psis.py
-------

Pareto-smoothed importance sampling (PSIS).

Raw importance ratios p(theta)/q(theta) have unbounded variance whenever the
proposal q has lighter tails than the target p. PSIS fits a generalized
Pareto distribution (GPD) to the M largest ratios and replaces them with the
GPD's quantiles at the plotting positions (i - 0.5)/M, i = 1..M. The rest of
the ratios (the bulk) are left exactly as they were.

The fitted shape parameter k-hat is the reliability diagnostic:

- k < 0.5         : the importance-sampling estimate has finite variance
- 0.5 <= k < 0.7  : variance infinite in theory, still usable in practice
- 0.7 <= k < 1    : unreliable, flagged UNRELIABLE_ESTIMATE
- k >= 1          : the ratios have no finite mean, flagged UNUSABLE_ESTIMATE

Flags are never fatal: the weights are always returned, together with the
flags, and each flag is also emitted as a PSISDiagnosticWarning.

References
----------
[1] Vehtari, Simpson, Gelman, Yao & Gabry (2024). Pareto smoothed importance
    sampling. JMLR 25(72).
[2] Zhang & Stephens (2009). A new and efficient estimation method for the
    generalized Pareto distribution. Technometrics 51(3).

Examples
--------
>>> from psisfit.importance import psis_smooth
>>> result = psis_smooth(sample_set.log_ratios)
>>> result.pareto_k, result.weights.sum()
"""

from __future__ import annotations

import math
import warnings
from dataclasses import dataclass, field
from enum import Enum

import jax.numpy as jnp
from jax.scipy.special import logsumexp

from psisfit.errors import WeightComputationError


class PSISDiagnosticWarning(UserWarning):
    """Importance weights were computed but may not be trustworthy."""


class PSISWarningKind(str, Enum):
    TAIL_TOO_SMALL = "tail_too_small"
    UNRELIABLE_ESTIMATE = "unreliable_estimate"
    UNUSABLE_ESTIMATE = "unusable_estimate"


@dataclass(frozen=True)
class PSISConfig:
    """
    Tuning constants for Pareto smoothing.

    Attributes
    ----------
    tail_fraction : float, default=0.2
        Tail length is at most ceil(tail_fraction * N) ...
    tail_sqrt_multiplier : float, default=3.0
        ... and at most ceil(tail_sqrt_multiplier * sqrt(N)).
    min_tail_length : int, default=5
        Shorter tails are not fitted (TAIL_TOO_SMALL).
    k_warn : float, default=0.7
        k-hat at or above this flags UNRELIABLE_ESTIMATE.
    k_unusable : float, default=1.0
        k-hat at or above this also flags UNUSABLE_ESTIMATE.
    min_grid_points : int, default=30
        Base size of the Zhang-Stephens theta grid.
    weak_prior : bool, default=True
        Shrink k-hat towards 0.5 with a weakly informative prior worth 10
        observations.
    emit_warnings : bool, default=True
        Also report flags through warnings.warn.
    """

    tail_fraction: float = 0.2
    tail_sqrt_multiplier: float = 3.0
    min_tail_length: int = 5
    k_warn: float = 0.7
    k_unusable: float = 1.0
    min_grid_points: int = 30
    weak_prior: bool = True
    emit_warnings: bool = True

    def __post_init__(self):
        if not 0 < self.tail_fraction <= 1:
            raise ValueError(f"tail_fraction must be in (0, 1], got {self.tail_fraction}")
        if self.tail_sqrt_multiplier <= 0:
            raise ValueError(
                f"tail_sqrt_multiplier must be positive, got {self.tail_sqrt_multiplier}"
            )
        if self.min_tail_length < 2:
            raise ValueError(f"min_tail_length must be >= 2, got {self.min_tail_length}")
        if self.k_unusable < self.k_warn:
            raise ValueError(
                f"k_unusable ({self.k_unusable}) must be >= k_warn ({self.k_warn})"
            )
        if self.min_grid_points < 1:
            raise ValueError(f"min_grid_points must be positive, got {self.min_grid_points}")


@dataclass(frozen=True)
class TailFit:
    """Generalized Pareto fit to the tail exceedances: shape k, scale sigma."""

    k: float
    sigma: float


@dataclass(frozen=True, eq=False)
class PSISResult:
    """
    Output of Pareto smoothing.

    Attributes
    ----------
    log_ratios : jnp.ndarray, shape (N,)
        Raw log importance ratios.
    log_weights : jnp.ndarray, shape (N,)
        Smoothed, unnormalized log weights. Entries outside `tail_indices`
        equal `log_ratios` exactly.
    weights : jnp.ndarray, shape (N,)
        Self-normalized weights, non-negative and summing to one.
    tail_fit : TailFit | None
        None when no tail was fitted (TAIL_TOO_SMALL).
    tail_indices : jnp.ndarray
        Indices of the smoothed tail, in ascending order of raw ratio.
    warnings : tuple of PSISWarningKind
    """

    log_ratios: jnp.ndarray
    log_weights: jnp.ndarray
    weights: jnp.ndarray
    tail_fit: TailFit | None
    tail_indices: jnp.ndarray
    warnings: tuple[PSISWarningKind, ...] = field(default=())

    @property
    def pareto_k(self) -> float:
        """k-hat; nan when no tail was fitted."""
        return self.tail_fit.k if self.tail_fit is not None else float("nan")

    @property
    def tail_length(self) -> int:
        return int(self.tail_indices.shape[0])

    @property
    def is_reliable(self) -> bool:
        return not self.warnings

    @property
    def ess(self) -> float:
        from psisfit.posterior.diagnostics import effective_sample_size

        return effective_sample_size(self.weights)


def tail_length(n: int, config: PSISConfig | None = None) -> int:
    """M = min(ceil(tail_fraction * n), ceil(tail_sqrt_multiplier * sqrt(n)))."""
    config = config or PSISConfig()
    return int(
        min(
            math.ceil(config.tail_fraction * n),
            math.ceil(config.tail_sqrt_multiplier * math.sqrt(n)),
        )
    )


def gpd_quantile(p, k: float, sigma: float) -> jnp.ndarray:
    """
    Quantile function of the generalized Pareto distribution (location 0).

        Q(p) = sigma * ((1 - p)^(-k) - 1) / k,   k != 0
        Q(p) = -sigma * log(1 - p),              k == 0
    """
    p = jnp.asarray(p)
    if abs(k) < 1e-12:
        return -sigma * jnp.log1p(-p)
    return sigma * jnp.expm1(-k * jnp.log1p(-p)) / k


def _profile_loglik(theta: jnp.ndarray, x: jnp.ndarray) -> jnp.ndarray:
    # Zhang-Stephens profile log likelihood per observation, for each theta
    a = -theta
    k = jnp.mean(jnp.log1p(a[:, None] * x[None, :]), axis=1)
    return jnp.log(a / k) - k - 1


def gpdfit(
    x, *, min_grid_points: int = 30, weak_prior: bool = True
) -> TailFit:
    """
    Estimate the GPD shape and scale of non-negative exceedances x.

    Parameters
    ----------
    x : array, shape (M,)
        Exceedances over the tail threshold.
    min_grid_points : int, default=30
        The theta grid has min_grid_points + floor(sqrt(M)) points.
    weak_prior : bool, default=True
        Apply the weakly informative adjustment k <- (M k + 5) / (M + 10).

    Returns
    -------
    TailFit
        k = inf (and sigma = nan) if the fit breaks down numerically.
        All-zero exceedances give k = 0, sigma = 0.
        Exceedances of exactly zero (ratios tied with the threshold) are
        not part of the fit, and M counts only the positive ones.

    Notes
    -----
    Empirical Bayes estimate of Zhang & Stephens (2009): the profile
    likelihood is evaluated over a fixed grid of theta = -k / sigma values
    and theta is estimated by its posterior mean over that grid.
    """
    x = jnp.sort(jnp.asarray(x, dtype=jnp.float64).reshape(-1))
    n = int(x.shape[0])
    if n == 0:
        raise ValueError("gpdfit needs at least one exceedance")
    if float(x[-1]) <= 0.0:
        return TailFit(k=0.0, sigma=0.0)
    x = x[x > 0.0]
    n = int(x.shape[0])

    prior = 3.0
    m = min_grid_points + int(math.floor(math.sqrt(n)))
    jj = jnp.arange(1, m + 1, dtype=jnp.float64)
    xstar = x[int(math.floor(n / 4 + 0.5)) - 1]  # first quartile
    theta = 1.0 / x[-1] + (1.0 - jnp.sqrt(m / (jj - 0.5))) / prior / xstar

    l_theta = n * _profile_loglik(theta, x)
    l_theta = jnp.where(jnp.isnan(l_theta), -jnp.inf, l_theta)
    w_theta = jnp.exp(l_theta - logsumexp(l_theta))
    theta_hat = jnp.sum(theta * w_theta)

    k = float(jnp.mean(jnp.log1p(-theta_hat * x)))
    sigma = float(-k / theta_hat)
    if not (math.isfinite(k) and math.isfinite(sigma)):
        return TailFit(k=float("inf"), sigma=float("nan"))
    if weak_prior:
        k = (k * n + 0.5 * 10) / (n + 10)
    return TailFit(k=k, sigma=sigma)


def pareto_k_label(k: float, config: PSISConfig | None = None) -> str:
    """Human-readable category of a k-hat value."""
    config = config or PSISConfig()
    if math.isnan(k):
        return "not estimated"
    if k < 0.5:
        return "good"
    if k < config.k_warn:
        return "ok"
    if k < config.k_unusable:
        return "bad"
    return "very bad"


_MESSAGES = {
    PSISWarningKind.TAIL_TOO_SMALL: (
        "Only {n} draws: tail of {m} is shorter than {min_m}; "
        "raw importance ratios are used without Pareto smoothing."
    ),
    PSISWarningKind.UNRELIABLE_ESTIMATE: (
        "Pareto k-hat = {k:.2f} >= {k_warn}: importance sampling estimates "
        "are unreliable."
    ),
    PSISWarningKind.UNUSABLE_ESTIMATE: (
        "Pareto k-hat = {k:.2f} >= {k_unusable}: importance ratios have no "
        "finite mean; estimates are unusable."
    ),
}


def psis_smooth(
    log_ratios, config: PSISConfig | None = None, *, stacklevel: int = 2
) -> PSISResult:
    """
    Pareto-smooth raw log importance ratios and self-normalize.

    Parameters
    ----------
    log_ratios : array, shape (N,)
        Raw log importance ratios log p(theta_i) - log q(theta_i).
    config : PSISConfig, optional
    stacklevel : int, default=2
        Passed to warnings.warn; wrappers raise it so that flags point at
        user code.

    Returns
    -------
    PSISResult

    Raises
    ------
    WeightComputationError
        If the ratios contain NaN or the normalized weights are not finite
        (e.g. every ratio is -inf).

    Notes
    -----
    1. M = tail_length(N). If M < min_tail_length there is no tail to fit;
       raw ratios are used and TAIL_TOO_SMALL is flagged.
    2. The ratios are shifted by their maximum and sorted; the tail is the
       M largest, the cutoff the largest value below the tail.
    3. A tail of tied values is left as is and reported with k = 0.
    4. Otherwise the GPD is fitted to exp(tail) - exp(cutoff) and the tail is
       replaced, in rank order, by log(Q((i - 0.5)/M) + exp(cutoff)).
    5. No truncation is applied.
    """
    config = config or PSISConfig()
    lw = jnp.asarray(log_ratios, dtype=jnp.float64).reshape(-1)
    n = int(lw.shape[0])
    if n == 0:
        raise ValueError("log_ratios is empty")
    if bool(jnp.any(jnp.isnan(lw))):
        raise WeightComputationError("log importance ratios contain NaN")
    if not math.isfinite(float(jnp.max(lw))):
        raise WeightComputationError(
            f"largest log importance ratio is {float(jnp.max(lw))}; weights are undefined"
        )

    m = tail_length(n, config)
    flags: list[PSISWarningKind] = []
    tail_fit: TailFit | None = None
    tail_ids = jnp.zeros((0,), dtype=jnp.int32)
    smoothed = lw

    if m < config.min_tail_length or m >= n:
        flags.append(PSISWarningKind.TAIL_TOO_SMALL)
    else:
        lw_max = jnp.max(lw)
        shifted = lw - lw_max
        order = jnp.argsort(shifted)
        tail_ids = order[n - m :]
        tail = shifted[tail_ids]
        cutoff = shifted[order[n - m - 1]]

        if float(tail[-1] - tail[0]) <= jnp.finfo(jnp.float64).eps:
            tail_fit = TailFit(k=0.0, sigma=0.0)
        else:
            exp_cutoff = jnp.exp(cutoff)
            tail_fit = gpdfit(
                jnp.exp(tail) - exp_cutoff,
                min_grid_points=config.min_grid_points,
                weak_prior=config.weak_prior,
            )
            if math.isfinite(tail_fit.k):
                p = (jnp.arange(1, m + 1, dtype=jnp.float64) - 0.5) / m
                qq = gpd_quantile(p, tail_fit.k, tail_fit.sigma) + exp_cutoff
                smoothed_tail = jnp.log(qq) + lw_max
                if bool(jnp.all(jnp.isfinite(smoothed_tail))):
                    smoothed = lw.at[tail_ids].set(smoothed_tail)
                else:
                    tail_fit = TailFit(k=float("inf"), sigma=tail_fit.sigma)

        if tail_fit.k >= config.k_warn:
            flags.append(PSISWarningKind.UNRELIABLE_ESTIMATE)
        if tail_fit.k >= config.k_unusable:
            flags.append(PSISWarningKind.UNUSABLE_ESTIMATE)

    weights = jnp.exp(smoothed - logsumexp(smoothed))
    if not bool(jnp.all(jnp.isfinite(weights))) or float(jnp.sum(weights)) <= 0.0:
        raise WeightComputationError(
            "normalized importance weights are not finite or sum to zero"
        )

    if config.emit_warnings:
        k_val = tail_fit.k if tail_fit is not None else float("nan")
        for kind in flags:
            warnings.warn(
                _MESSAGES[kind].format(
                    n=n,
                    m=m,
                    min_m=config.min_tail_length,
                    k=k_val,
                    k_warn=config.k_warn,
                    k_unusable=config.k_unusable,
                ),
                PSISDiagnosticWarning,
                stacklevel=stacklevel,
            )

    return PSISResult(
        log_ratios=lw,
        log_weights=smoothed,
        weights=weights,
        tail_fit=tail_fit,
        tail_indices=tail_ids,
        warnings=tuple(flags),
    )


class ParetoSmoothedImportanceSampler:
    """
    Reweights proposal draws towards the target with PSIS.

    Parameters
    ----------
    config : PSISConfig, optional

    Examples
    --------
    >>> sampler = ParetoSmoothedImportanceSampler()
    >>> result = sampler.smooth(sample_set)
    >>> result.pareto_k, result.warnings
    """

    def __init__(self, config: PSISConfig | None = None):
        self.config = config or PSISConfig()

    def smooth(self, sample_set, *, stacklevel: int = 2) -> PSISResult:
        """Smooth the raw log ratios of a SampleSet."""
        return psis_smooth(
            sample_set.log_ratios, self.config, stacklevel=stacklevel + 1
        )
