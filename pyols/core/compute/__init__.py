"""
Shared compute infrastructure for pyols.

This module provides timing utilities, tolerance tiers and linear algebra
kernels shared by the regression backends.

IMPORTANT: This is NOT where domain-specific backends live. Those go in
regression/backends/. This module contains shared NUMERIC infrastructure.

Submodules:
    timing: Execution timing utilities
    tolerances: Numerical tolerance tiers and thresholds
    linalg: Linear algebra kernels (QR, Cholesky)
"""

from pyols.core.compute.timing import Timer

__all__ = [
    # Timing
    "Timer",
]
