"""
CPU backends for ordinary least squares.

CPUQRBackend is the reference: Householder QR via LAPACK, never forming
X'X. CPUCholeskyBackend solves the normal equations instead; it is faster
for tall designs but squares the condition number, so it refuses designs
whose numerical rank is short before factoring.
"""

import logging
import warnings
from typing import Any
import numpy as np

from pyols.core.result import Result
from pyols.core.compute.timing import Timer
from pyols.core.compute.linalg.qr import qr_cpu, qr_solve_cpu, qr_inverse_gram
from pyols.core.compute.linalg.cholesky import cholesky_cpu
from pyols.core.compute.tolerances import CONDITION_WARNING_THRESHOLD, ILL_CONDITIONED_THRESHOLD
from pyols.core.exceptions import NotPositiveDefiniteError, SingularDesignMatrixError
from pyols.regression.design import DesignMatrix
from pyols.regression.solution import OLSParams
from pyols.regression._inference import ols_statistics

logger = logging.getLogger(__name__)


class CPUQRBackend:
    """
    CPU backend using QR decomposition.

    Implements the Backend protocol for DesignMatrix -> OLSParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_qr'

    def solve(self, design: DesignMatrix) -> Result[OLSParams]:
        """
        Solve OLS via QR decomposition.

        Algorithm:
            1. Compute QR decomposition: X = QR
            2. Solve: β = R⁻¹ Q'y
            3. (X'X)⁻¹ = R⁻¹ R⁻ᵀ
            4. Derive residuals, sums of squares and test statistics

        Args:
            design: Design with df_resid > 0

        Returns:
            Result containing OLSParams

        Raises:
            SingularDesignMatrixError: If X is rank-deficient
        """
        timer = Timer()
        timer.start()

        with timer.section('qr_decomposition'):
            qr_result = qr_cpu(design.X, mode='reduced')

        if qr_result.rank < design.p:
            dependent = qr_result.dependent_columns()
            column = design.exog_names[int(dependent[0])] if len(dependent) else None
            raise _singular(design, qr_result.rank, column)

        with timer.section('solve'):
            coefficients = qr_solve_cpu(qr_result, design.y)
            xtx_inv = qr_inverse_gram(qr_result)

        with timer.section('statistics'):
            params = ols_statistics(design, coefficients, xtx_inv, qr_result.rank)

        with timer.section('conditioning'):
            condition_number = float(np.linalg.cond(design.X))
            fit_warnings = _conditioning_warnings(condition_number)

        timer.stop()

        info: dict[str, Any] = {
            'method': 'qr',
            'rank': qr_result.rank,
            'condition_number': condition_number,
            'ill_conditioned': condition_number > ILL_CONDITIONED_THRESHOLD,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=fit_warnings,
        )


class CPUCholeskyBackend:
    """
    CPU backend solving the normal equations (X'X)β = X'y by Cholesky.

    Implements the Backend protocol for DesignMatrix -> OLSParams.
    """

    @property
    def name(self) -> str:
        return 'cpu_cholesky'

    def solve(self, design: DesignMatrix) -> Result[OLSParams]:
        """
        Solve OLS via the normal equations.

        Raises:
            SingularDesignMatrixError: If X is rank-deficient or X'X is not
                numerically positive definite
        """
        timer = Timer()
        timer.start()

        X = design.X
        with timer.section('rank_check'):
            singular_values = np.linalg.svd(X, compute_uv=False)
            tol = singular_values.max() * max(X.shape) * np.finfo(X.dtype).eps
            rank = int(np.sum(singular_values > tol))

        if rank < design.p:
            raise _singular(design, rank, _first_dependent_column(design))

        with timer.section('cholesky'):
            try:
                chol = cholesky_cpu(design.XtX(), matrix_name="X'X")
            except NotPositiveDefiniteError as e:
                raise _singular(design, rank, _first_dependent_column(design)) from e

        with timer.section('solve'):
            coefficients = chol.solve(design.Xty())
            xtx_inv = chol.inverse()

        with timer.section('statistics'):
            params = ols_statistics(design, coefficients, xtx_inv, rank)

        condition_number = float(singular_values.max() / singular_values.min())
        fit_warnings = _conditioning_warnings(condition_number)

        timer.stop()

        info: dict[str, Any] = {
            'method': 'normal',
            'rank': rank,
            'condition_number': condition_number,
            'ill_conditioned': condition_number > ILL_CONDITIONED_THRESHOLD,
        }

        return Result(
            params=params,
            info=info,
            timing=timer.result(),
            backend_name=self.name,
            warnings=fit_warnings,
        )


def _conditioning_warnings(condition_number: float) -> tuple[str, ...]:
    if condition_number <= CONDITION_WARNING_THRESHOLD:
        return ()
    message = (
        f"Design matrix is ill-conditioned (condition number {condition_number:.3e}); "
        f"coefficients may be numerically unreliable"
    )
    warnings.warn(message, RuntimeWarning, stacklevel=4)
    logger.warning(message)
    return (message,)


def _first_dependent_column(design: DesignMatrix) -> str | None:
    """First column whose addition does not raise the rank of X."""
    qr_result = qr_cpu(design.X, mode='reduced')
    dependent = qr_result.dependent_columns()
    if len(dependent) == 0:
        return None
    return design.exog_names[int(dependent[0])]


def _singular(
    design: DesignMatrix,
    rank: int,
    column: str | None,
) -> SingularDesignMatrixError:
    detail = f"; column '{column}' is a linear combination of earlier columns" if column else ""
    return SingularDesignMatrixError(
        f"Design matrix is singular: rank={rank}, expected={design.p}{detail}. "
        f"This indicates perfect multicollinearity.",
        column_name=column,
        rank=rank,
        expected_rank=design.p,
    )
