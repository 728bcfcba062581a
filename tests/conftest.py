"""
Shared pytest configuration and fixtures for formula-jax tests.

This module provides common test fixtures, utilities, and configuration
used across the test suite.
"""

import pytest
import numpy as np

from formula_jax.config.settings import FormulaJaxConfig, reset_default_config
from formula_jax.formulas import FormulaParser, default_namespace
from formula_jax.utils import logging as logging_utils


ENV_VARS = [
    "FORMULA_JAX_LOG_LEVEL",
    "FORMULA_JAX_BACKEND",
    "FORMULA_JAX_IMPLICIT_INTERCEPT",
]


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch, tmp_path):
    """Give every test a fresh global configuration and an empty home directory."""
    for var in ENV_VARS:
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setenv("HOME", str(tmp_path))
    reset_default_config()

    yield

    reset_default_config()
    for logger in logging_utils._loggers.values():
        logger._configured = False


@pytest.fixture
def numpy_config():
    """Configuration using the NumPy backend."""
    return FormulaJaxConfig(parsing={"backend": "numpy"})


@pytest.fixture
def numpy_namespace():
    """Default function namespace backed by NumPy."""
    return default_namespace("numpy")


@pytest.fixture
def parser(numpy_config):
    """Formula parser using the NumPy backend."""
    return FormulaParser(config=numpy_config)


@pytest.fixture
def sample_environment():
    """Synthetic data columns keyed by variable name."""
    rng = np.random.default_rng(42)
    n = 20
    return {
        "y": rng.normal(0.0, 1.0, n),
        "a": rng.uniform(1.0, 2.0, n),
        "b": rng.uniform(1.0, 2.0, n),
        "c": rng.uniform(1.0, 2.0, n),
    }


# Markers for different test types
def pytest_configure(config):
    """Configure pytest markers."""
    config.addinivalue_line(
        "markers", "unit: mark test as a unit test (fast)"
    )
    config.addinivalue_line(
        "markers", "integration: mark test as an integration test (medium speed)"
    )
