"""
QR decomposition kernels.

Least squares via Householder QR (LAPACK through NumPy/SciPy). Used by the
reference regression backend.
"""

from dataclasses import dataclass
from typing import Literal, Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import solve_triangular

from pyols.core.exceptions import SingularMatrixError


@dataclass(frozen=True)
class QRResult:
    """
    Result of QR decomposition.

    Attributes:
        Q: Orthogonal matrix (n x k where k = min(n, p) for reduced mode)
        R: Upper triangular matrix (k x p)
        rank: Numerical rank determined from R diagonal
        tol: Threshold below which |R[j, j]| counts as zero
    """
    Q: NDArray[np.floating[Any]]
    R: NDArray[np.floating[Any]]
    rank: int
    tol: float

    def dependent_columns(self) -> NDArray[np.intp]:
        """
        Indices of columns numerically dependent on the columns before them.

        Without pivoting, a (near) zero R[j, j] means column j lies in the
        span of columns 0..j-1. Columns beyond the row count of R are
        dependent by construction.
        """
        p = self.R.shape[1]
        diag_R = np.abs(np.diag(self.R))
        dependent = [j for j, d in enumerate(diag_R) if d <= self.tol]
        dependent.extend(range(len(diag_R), p))
        return np.asarray(dependent, dtype=np.intp)


def qr_cpu(
    X: NDArray[np.floating[Any]],
    mode: Literal['reduced', 'complete'] = 'reduced'
) -> QRResult:
    """
    QR decomposition using LAPACK (via NumPy).

    Computes X = QR where Q is orthogonal and R is upper triangular.

    Args:
        X: Matrix to decompose (n x p)
        mode: 'reduced' for economy QR (Q is n x k, R is k x p where k = min(n,p))
              'complete' for full QR (Q is n x n, R is n x p)

    Returns:
        QRResult with Q, R, numerical rank and the rank tolerance
    """
    Q, R = np.linalg.qr(X, mode=mode)

    # Determine numerical rank from R diagonal
    diag_R = np.abs(np.diag(R))
    if len(diag_R) > 0 and diag_R.max() > 0:
        # Tolerance based on matrix size and machine epsilon
        tol = float(max(X.shape) * np.finfo(X.dtype).eps * diag_R.max())
        rank = int(np.sum(diag_R > tol))
    else:
        tol = 0.0
        rank = 0

    return QRResult(Q=Q, R=R, rank=rank, tol=tol)


def qr_solve_cpu(
    qr_result: QRResult,
    y: NDArray[np.floating[Any]],
) -> NDArray[np.floating[Any]]:
    """
    Solve least squares from a QR decomposition of X.

    The solution is computed as:
        X = QR
        β = R⁻¹ Q'y

    Args:
        qr_result: Reduced QR of the design matrix (n x p, n >= p)
        y: Response vector (n,)

    Returns:
        Coefficient vector β (p,)

    Raises:
        SingularMatrixError: If X is rank-deficient
    """
    p = qr_result.R.shape[1]
    _check_full_rank(qr_result, p)

    # Compute Q'y first, then solve the triangular system by back substitution
    Qty = qr_result.Q.T @ y
    return solve_triangular(qr_result.R[:p, :p], Qty[:p], lower=False)


def qr_inverse_gram(qr_result: QRResult) -> NDArray[np.floating[Any]]:
    """
    Compute (X'X)⁻¹ from a QR decomposition of X.

    Since X'X = R'R, (X'X)⁻¹ = R⁻¹ R⁻ᵀ. Working from R avoids forming X'X,
    whose condition number is the square of X's.

    Raises:
        SingularMatrixError: If X is rank-deficient
    """
    p = qr_result.R.shape[1]
    _check_full_rank(qr_result, p)

    R_inv = solve_triangular(qr_result.R[:p, :p], np.eye(p), lower=False)
    return R_inv @ R_inv.T


def _check_full_rank(qr_result: QRResult, p: int) -> None:
    if qr_result.rank < p:
        raise SingularMatrixError(
            f"Design matrix is rank-deficient: rank={qr_result.rank}, expected={p}. "
            f"This indicates perfect multicollinearity.",
            matrix_name='X',
            rank=qr_result.rank,
            expected_rank=p
        )
