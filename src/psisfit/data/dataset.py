"""
dataset.py
-----------

Core data container for psisfit.

defines:
- BinomialData: container for binomial dose-response trials
- bioassay: the four-group bioassay experiment (BDA3, p. 86)

Notes
-----
- Data is stored as read-only NumPy arrays; a BinomialData instance is
  immutable once constructed and can be shared between every stage of a fit.
- Use numpy for I/O and analysis.
- Convert to jax.numpy (jnp) arrays only when passing into the model or
  inference engines (see `as_jax`).
"""

from __future__ import annotations

from collections.abc import Iterable
from typing import Any

import jax.numpy as jnp
import numpy as np


class BinomialData:
    """
    Container for binomial trials.

    Each trial i consists of a covariate x_i (e.g. log dose), a number of
    subjects n_i and a number of successes y_i (e.g. deaths) with
    0 <= y_i <= n_i.

    Attributes
    ----------
    x : np.ndarray, shape (T,)
        Covariates (float).
    n : np.ndarray, shape (T,)
        Trial counts (int, >= 0).
    y : np.ndarray, shape (T,)
        Success counts (int, 0 <= y <= n).
    """

    __slots__ = ("_x", "_n", "_y")

    def __init__(self, x: Any, n: Any, y: Any) -> None:
        x_arr = np.asarray(x, dtype=np.float64)
        n_raw = np.asarray(n)
        y_raw = np.asarray(y)

        if x_arr.ndim != 1 or n_raw.ndim != 1 or y_raw.ndim != 1:
            raise ValueError("x, n and y must be 1-D sequences")
        if not (x_arr.shape == n_raw.shape == y_raw.shape):
            raise ValueError(
                f"x, n and y must have the same length, got "
                f"{x_arr.shape[0]}, {n_raw.shape[0]}, {y_raw.shape[0]}"
            )
        if not np.all(np.isfinite(x_arr)):
            raise ValueError("covariates x must be finite")
        if not (_is_integral(n_raw) and _is_integral(y_raw)):
            raise ValueError("trial counts n and successes y must be integers")

        n_arr = n_raw.astype(np.int64)
        y_arr = y_raw.astype(np.int64)
        if np.any(n_arr < 0):
            raise ValueError("trial counts n must be >= 0")
        if np.any(y_arr < 0) or np.any(y_arr > n_arr):
            raise ValueError("successes y must satisfy 0 <= y <= n")

        for arr in (x_arr, n_arr, y_arr):
            arr.setflags(write=False)
        self._x = x_arr
        self._n = n_arr
        self._y = y_arr

    @property
    def x(self) -> np.ndarray:
        return self._x

    @property
    def n(self) -> np.ndarray:
        return self._n

    @property
    def y(self) -> np.ndarray:
        return self._y

    def __len__(self) -> int:
        """Return number of trials."""
        return int(self._x.shape[0])

    def __repr__(self) -> str:
        return f"BinomialData(x={self._x.tolist()}, n={self._n.tolist()}, y={self._y.tolist()})"

    @property
    def trials(self) -> list[tuple[float, int, int]]:
        """
        Return list of (x, n, y) tuples.

        Returns
        -------
        list[tuple]
            Each element is (covariate, trials, successes)
        """
        return [
            (float(xi), int(ni), int(yi))
            for xi, ni, yi in zip(self._x, self._n, self._y)
        ]

    def to_numpy(self) -> tuple[np.ndarray, np.ndarray, np.ndarray]:
        """
        Return x, n, y as (read-only) numpy arrays.
        """
        return self._x, self._n, self._y

    def as_jax(self) -> tuple[jnp.ndarray, jnp.ndarray, jnp.ndarray]:
        """
        Return x, n, y as float jax arrays, ready for the log density.
        """
        return (
            jnp.asarray(self._x),
            jnp.asarray(self._n, dtype=jnp.float64),
            jnp.asarray(self._y, dtype=jnp.float64),
        )

    @classmethod
    def from_arrays(cls, x: Any, n: Any, y: Any) -> BinomialData:
        """
        Construct BinomialData from parallel arrays.

        Examples
        --------
        >>> data = BinomialData.from_arrays([-0.86, 0.73], [5, 5], [0, 5])
        >>> len(data)
        2
        """
        return cls(x, n, y)

    @classmethod
    def from_trials(cls, trials: Iterable[tuple[float, int, int]]) -> BinomialData:
        """
        Construct BinomialData from an iterable of (x, n, y) tuples.
        """
        rows = list(trials)
        if not rows:
            return cls([], [], [])
        x, n, y = zip(*rows)
        return cls(x, n, y)


def bioassay() -> BinomialData:
    """
    Bioassay experiment from Racine et al. (1986), BDA3 p. 86.

    Four dose groups of five animals each; x is log dose (g/ml),
    y the number of deaths.
    """
    return BinomialData(
        x=[-0.86, -0.30, -0.05, 0.73],
        n=[5, 5, 5, 5],
        y=[0, 1, 3, 5],
    )


def _is_integral(arr: np.ndarray) -> bool:
    if arr.size == 0 or np.issubdtype(arr.dtype, np.integer):
        return True
    if not np.issubdtype(arr.dtype, np.floating):
        return False
    return bool(np.all(np.isfinite(arr)) and np.all(arr == np.round(arr)))
