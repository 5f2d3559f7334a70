"""
Central pytest configuration for this project.

This file is automatically discovered by pytest and is intended for:

- **Fixtures**: reusable objects or setup logic shared across multiple test files.
- **Pytest hooks**: project-wide customizations of pytest behavior (e.g., modifying CLI options, adding markers).

Notes
-----
- Contributors should
  install the package in editable mode (`pip install -e .`) so that imports are resolved
  consistently in local dev and CI environments.
- Keep this file focused on test setup. Do not add application logic here.
"""

import jax.random as jr
import pytest

from psisfit.data import bioassay
from psisfit.inference import MAPOptimizer
from psisfit.model import BinomialLogitModel


@pytest.fixture
def bioassay_data():
    """The four-group bioassay experiment."""
    return bioassay()


@pytest.fixture
def model():
    """Binomial-logit model with a flat prior."""
    return BinomialLogitModel()


@pytest.fixture(scope="session")
def bioassay_mode():
    """Mode of the bioassay posterior, fitted once per test session."""
    return MAPOptimizer().fit(BinomialLogitModel(), bioassay())


@pytest.fixture
def key():
    return jr.PRNGKey(0)
