"""
Solver dispatch for regression.

This module provides estimate() for prepared designs, the array entry
point fit(), and backend selection.
"""

import logging
from typing import Literal
from numpy.typing import ArrayLike

from pyols.core.exceptions import InsufficientDataError
from pyols.core.protocols import Backend
from pyols.regression.design import DesignMatrix
from pyols.regression.solution import OLSParams, RegressionResult
from pyols.regression.backends.cpu import CPUQRBackend, CPUCholeskyBackend

logger = logging.getLogger(__name__)

# Type alias for solution method selection
MethodChoice = Literal['qr', 'normal']


def estimate(
    design: DesignMatrix,
    *,
    method: MethodChoice = 'qr',
) -> RegressionResult:
    """
    Estimate an OLS model for a prepared design.

    Args:
        design: Response vector and design matrix
        method: How the least-squares system is solved:
            - 'qr': Householder QR of X (default, most stable)
            - 'normal': Cholesky of X'X

    Returns:
        RegressionResult with coefficients, inference and fit statistics

    Raises:
        InsufficientDataError: If there are no residual degrees of freedom
        SingularDesignMatrixError: If the columns of X are collinear
        ValueError: If method is unknown
    """
    backend_impl = _get_backend(method)

    if design.df_resid <= 0:
        raise InsufficientDataError(
            f"Not enough observations to estimate the model: {design.n} observations "
            f"for {design.p} design columns (need more observations than columns)",
            n_observations=design.n,
            n_columns=design.p,
        )

    logger.debug(
        "Fitting %s on n=%d k=%d with backend %s",
        design.response_name, design.n, design.p, backend_impl.name,
    )
    result = backend_impl.solve(design)
    if result.timing is not None:
        logger.debug("Fit finished in %.6fs", result.timing['total_seconds'])

    return RegressionResult(_result=result, _design=design)


def fit(
    X: ArrayLike,
    y: ArrayLike,
    *,
    exog_names: list[str] | tuple[str, ...] | None = None,
    response_name: str = 'y',
    has_intercept: bool | None = None,
    method: MethodChoice = 'qr',
) -> RegressionResult:
    """
    Fit a linear regression model from arrays.

    Solves the ordinary least squares problem:
        min_β ||y - Xβ||²

    X is used as given: add a column of ones for an intercept.

    Args:
        X: Design matrix (n x k). Can be any array-like.
        y: Response vector (n,). Can be any array-like.
        exog_names: Column names for reporting
        response_name: Response name for reporting
        has_intercept: Whether X holds an intercept column; None detects
            a column of ones
        method: 'qr' or 'normal', see estimate()

    Returns:
        RegressionResult

    Raises:
        ValidationError: If inputs are invalid
        DimensionError: If X and y have inconsistent dimensions
        InsufficientDataError: If n <= k
        SingularDesignMatrixError: If X is rank-deficient

    Example:
        >>> import numpy as np
        >>> from pyols.regression import fit
        >>>
        >>> X = np.column_stack([np.ones(100), np.random.randn(100, 2)])
        >>> y = X @ [1, 2, 3] + np.random.randn(100) * 0.1
        >>>
        >>> result = fit(X, y)
        >>> print(result.coefficients)
        >>> print(result.summary())
    """
    design = DesignMatrix.from_arrays(
        X, y,
        exog_names=exog_names,
        response_name=response_name,
        has_intercept=has_intercept,
    )
    return estimate(design, method=method)


def _get_backend(method: MethodChoice) -> Backend[DesignMatrix, OLSParams]:
    """
    Instantiate the backend for a solution method.

    Raises:
        ValueError: If unknown method specified
    """
    if method == 'qr':
        return CPUQRBackend()
    elif method == 'normal':
        return CPUCholeskyBackend()
    else:
        raise ValueError(f"Unknown method: {method!r}")
