"""
Cholesky kernels for the normal equations.

Solves (X'X)β = X'y through the Cholesky factor of X'X. Cheaper than QR
but squares the condition number of X, so callers are expected to
check the rank of X first.
"""

from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy.linalg import cho_factor, cho_solve, LinAlgError

from pyols.core.exceptions import NotPositiveDefiniteError


@dataclass(frozen=True)
class CholeskyResult:
    """
    Cholesky factor of a symmetric positive definite matrix.

    Attributes:
        factor: Packed factor as returned by scipy.linalg.cho_factor
        lower: Whether the factor is stored in the lower triangle
    """
    factor: NDArray[np.floating[Any]]
    lower: bool

    def solve(self, b: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
        """Solve A x = b for the factored A."""
        return cho_solve((self.factor, self.lower), b)

    def inverse(self) -> NDArray[np.floating[Any]]:
        """A⁻¹ for the factored A."""
        return self.solve(np.eye(self.factor.shape[0]))


def cholesky_cpu(
    A: NDArray[np.floating[Any]],
    matrix_name: str = "X'X",
) -> CholeskyResult:
    """
    Cholesky factorization using LAPACK (via SciPy).

    Args:
        A: Symmetric positive definite matrix (p x p)
        matrix_name: Name used in the error message

    Returns:
        CholeskyResult

    Raises:
        NotPositiveDefiniteError: If A is not numerically positive definite
    """
    try:
        factor, lower = cho_factor(A, lower=True, check_finite=False)
    except LinAlgError as e:
        min_eig = float(np.linalg.eigvalsh(A).min())
        raise NotPositiveDefiniteError(
            f"{matrix_name} is not positive definite (min eigenvalue {min_eig:.3e}): {e}",
            matrix_name=matrix_name,
            min_eigenvalue=min_eig,
        ) from e
    return CholeskyResult(factor=factor, lower=lower)
