"""
pytest configuration and shared fixtures.
"""

import pytest
import numpy as np


@pytest.fixture
def rng():
    """Seeded random number generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def simple_regression_data(rng):
    """Regression dataset with an intercept column and small noise."""
    n = 100
    X = np.column_stack([np.ones(n), rng.standard_normal((n, 2))])
    beta_true = np.array([1.0, -2.0, 0.5])
    y = X @ beta_true + rng.standard_normal(n) * 0.1
    return X, y, beta_true


@pytest.fixture
def collinear_data(rng):
    """Dataset with perfect collinearity (should fail)."""
    n = 100
    x1 = rng.standard_normal(n)
    x2 = rng.standard_normal(n)
    x3 = x1 + x2  # Perfect collinearity
    X = np.column_stack([np.ones(n), x1, x2, x3])
    y = rng.standard_normal(n)
    return X, y


@pytest.fixture
def hand_records():
    """
    Five points small enough to check by hand.

    y = 2.2 + 0.6 x; RSS = 2.4, TSS = 6, R² = 0.6, F = 4.5 on (1, 3) df.
    """
    xs = [1.0, 2.0, 3.0, 4.0, 5.0]
    ys = [2.0, 4.0, 5.0, 4.0, 5.0]
    return [{'x': x, 'y': y} for x, y in zip(xs, ys)]


@pytest.fixture
def noiseless_records(rng):
    """Records with y = 1 + 2 a - 3 b exactly."""
    n = 30
    a = rng.standard_normal(n)
    b = rng.standard_normal(n)
    y = 1.0 + 2.0 * a - 3.0 * b
    return [{'y': yi, 'a': ai, 'b': bi} for yi, ai, bi in zip(y, a, b)]
