"""
Test configuration and fixtures for mlserial tests.

Provides small deterministic regression / classification tables and a
working directory for tests that write files.
"""

import numpy as np
import pytest


@pytest.fixture
def random_seed():
    """Fixed random seed for reproducible tests."""
    return 42


@pytest.fixture
def regression_data(random_seed):
    """40 rows, 3 numeric features, noisy linear target."""
    rng = np.random.default_rng(random_seed)
    X = rng.normal(size=(40, 3))
    y = X @ np.array([1.5, -2.0, 0.5]) + 0.1 * rng.normal(size=40)
    return X, y


@pytest.fixture
def classification_data(random_seed):
    """40 rows, 2 numeric features, two well separated classes."""
    rng = np.random.default_rng(random_seed)
    X = np.vstack([rng.normal(-2.0, 1.0, size=(20, 2)), rng.normal(2.0, 1.0, size=(20, 2))])
    y = np.array([0] * 20 + [1] * 20)
    return X, y


@pytest.fixture
def workdir(tmp_path, monkeypatch):
    """Run the test inside a fresh temporary directory."""
    monkeypatch.chdir(tmp_path)
    return tmp_path
