"""
Regression backends.

Available backends:
    CPUQRBackend: CPU reference implementation using QR decomposition
    CPUCholeskyBackend: CPU normal-equation solver using Cholesky
"""

from pyols.regression.backends.cpu import CPUQRBackend, CPUCholeskyBackend

__all__ = [
    "CPUQRBackend",
    "CPUCholeskyBackend",
]
