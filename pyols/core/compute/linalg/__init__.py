"""
Linear algebra kernels for pyols.

All functions follow these conventions:
    - NumPy/SciPy (LAPACK under the hood), float64 throughout
    - Each decomposition returns a structured result dataclass
    - Errors are raised immediately with clear messages

Submodules:
    qr: QR decomposition and least-squares solve
    cholesky: Cholesky factorization for the normal equations
"""

from pyols.core.compute.linalg.qr import (
    QRResult,
    qr_cpu,
    qr_solve_cpu,
    qr_inverse_gram,
)
from pyols.core.compute.linalg.cholesky import (
    CholeskyResult,
    cholesky_cpu,
)

__all__ = [
    # QR decomposition
    "QRResult",
    "qr_cpu",
    "qr_solve_cpu",
    "qr_inverse_gram",
    # Cholesky
    "CholeskyResult",
    "cholesky_cpu",
]
