"""
Core infrastructure for pyols.

This module provides shared abstractions and utilities used by the
regression package.

Key components:
    protocols: NumericRecord, Backend protocols
    datasource: DataSource container and record field access
    result: Generic Result[P] envelope
    exceptions: Exception hierarchy
    validation: Input validators
    compute: Timing, tolerances, linear algebra kernels
"""

from pyols.core.protocols import NumericRecord, Backend
from pyols.core.result import Result
from pyols.core.datasource import DataSource, field_reader
from pyols.core.exceptions import (
    PyOLSError,
    ValidationError,
    DimensionError,
    FormulaError,
    FieldNotFoundError,
    InsufficientDataError,
    NumericalError,
    SingularMatrixError,
    NotPositiveDefiniteError,
    SingularDesignMatrixError,
)

__all__ = [
    # Protocols
    "NumericRecord",
    "Backend",
    # Data access
    "DataSource",
    "field_reader",
    # Result
    "Result",
    # Exceptions
    "PyOLSError",
    "ValidationError",
    "DimensionError",
    "FormulaError",
    "FieldNotFoundError",
    "InsufficientDataError",
    "NumericalError",
    "SingularMatrixError",
    "NotPositiveDefiniteError",
    "SingularDesignMatrixError",
]
