"""
map_optimizer.py
----------------

MAP (Maximum A Posteriori) optimizer using Optax.

- Minimizes the negative log posterior with an Optax optimizer.
- Defaults to L-BFGS with a zoom line search, but any Optax optimizer can
  be passed in.
- Stops as soon as the gradient norm drops below `tol`; running out of
  steps first is a NonConvergence failure.
- Evaluates the Hessian of the negative log posterior at the optimum with
  jax.hessian; a (numerically) singular Hessian is a SingularCurvature
  failure.

Connections
-----------
- Calls model.log_density(params, data) as the objective.
- Returns a Mode (location + curvature) consumed by LaplaceApproximation.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
import optax

from psisfit.errors import NonConvergence, SingularCurvature
from psisfit.inference.base import ModeFinder
from psisfit.posterior.mode import Mode


class MAPOptimizer(ModeFinder):
    """
    MAP (Maximum A Posteriori) optimizer.

    Parameters
    ----------
    steps : int, default=200
        Maximum number of optimization steps.
    tol : float, default=1e-6
        Convergence tolerance on the L2 norm of the gradient.
    optimizer : optax.GradientTransformation, optional
        Optax optimizer to use. Default: L-BFGS.

    Notes
    -----
    - Loss function = negative log posterior.
    - Gradients and Hessian computed with jax.
    - No retries are attempted on failure; call fit() again with another
      init_params or other settings.
    """

    def __init__(
        self,
        steps: int = 200,
        tol: float = 1e-6,
        optimizer: optax.GradientTransformation | None = None,
        *,
        singular_tol: float = 1e-12,
        track_history: bool = False,
        log_every: int = 10,
    ):
        """Create a MAP optimizer.

        Parameters
        ----------
        steps : int
            Maximum number of optimization steps.
        tol : float
            Gradient-norm convergence tolerance.
        optimizer : optax.GradientTransformation | None
            Optax optimizer to use.
        singular_tol : float, optional
            The Hessian H counts as singular when
            |det H| <= singular_tol * max|H_ij| ** dim.
        track_history : bool, optional
            When True, record loss history during fitting for plotting.
        log_every : int, optional
            Record every N steps (also records the last step).
        """
        if steps <= 0:
            raise ValueError(f"steps must be positive, got {steps}")
        if tol <= 0:
            raise ValueError(f"tol must be positive, got {tol}")
        self.steps = steps
        self.tol = tol
        self.singular_tol = singular_tol
        self.optimizer = optax.with_extra_args_support(optimizer or optax.lbfgs())
        self.track_history = track_history
        self.log_every = max(1, int(log_every))
        # Exposed after fit() when tracking is enabled
        self.loss_steps: list[int] = []
        self.loss_history: list[float] = []

    def fit(self, model, data, init_params=None) -> Mode:
        """
        Find the posterior mode and the curvature there.

        Parameters
        ----------
        model : BinomialLogitModel
            Model instance.
        data : BinomialData
            Observed trials.
        init_params : array, optional
            Starting point. Defaults to model.init_params() (the origin).

        Returns
        -------
        Mode
            Mode location, Hessian of -log posterior and its inverse.

        Raises
        ------
        NonConvergence
            Gradient norm still above tol after `steps` steps.
        SingularCurvature
            Hessian at the optimum is not invertible.
        """

        def loss_fn(params):
            return -model.log_density(params, data)

        if init_params is None:
            init_params = model.init_params()
        params = jnp.asarray(init_params, dtype=jnp.float64)
        opt_state = self.optimizer.init(params)
        value_and_grad = jax.value_and_grad(loss_fn)

        @jax.jit
        def step(params, opt_state):
            loss, grads = value_and_grad(params)
            updates, opt_state = self.optimizer.update(
                grads, opt_state, params, value=loss, grad=grads, value_fn=loss_fn
            )
            new_params = optax.apply_updates(params, updates)
            return new_params, opt_state, loss, jnp.linalg.norm(grads)

        # clear any previous history
        if self.track_history:
            self.loss_steps.clear()
            self.loss_history.clear()

        converged = False
        n_steps = 0
        grad_norm = float("inf")
        for i in range(self.steps):
            new_params, opt_state, loss, grad_norm = step(params, opt_state)
            grad_norm = float(grad_norm)
            if self.track_history and (
                (i % self.log_every == 0) or (i == self.steps - 1)
            ):
                self.loss_steps.append(i)
                self.loss_history.append(float(loss))
            # grad_norm belongs to `params`, not to `new_params`
            if grad_norm < self.tol:
                converged = True
                break
            if not jnp.all(jnp.isfinite(new_params)):
                break
            params = new_params
            n_steps = i + 1

        if not converged:
            raise NonConvergence(n_steps, grad_norm, self.tol, params=params)

        hessian = jax.hessian(loss_fn)(params)
        hessian = 0.5 * (hessian + hessian.T)
        det = float(jnp.linalg.det(hessian))
        scale = float(jnp.max(jnp.abs(hessian)))
        threshold = self.singular_tol * scale ** hessian.shape[0]
        if not jnp.isfinite(det) or abs(det) <= threshold:
            raise SingularCurvature(det, threshold, hessian=hessian)

        covariance = jnp.linalg.inv(hessian)
        covariance = 0.5 * (covariance + covariance.T)
        return Mode(
            params=params,
            hessian=hessian,
            covariance=covariance,
            log_density=float(-loss_fn(params)),
            n_steps=n_steps,
        )

    # Optional helper
    def get_history(self) -> tuple[list[int], list[float]]:
        """Return (steps, losses) recorded during the last fit when tracking was enabled."""
        return self.loss_steps, self.loss_history
