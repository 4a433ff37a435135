"""
pyols: formula-driven ordinary least squares for Python.

Fit a linear model from a formula and a collection of records, and
print a statsmodels-style regression table.

Example:
    >>> from pyols import ols
    >>> result = ols("Lottery ~ Literacy + LogPopulation", records)
    >>> print(result.summary())

Submodules:
    regression: Formula parsing, design matrices, OLS estimation, summaries
    core: Exceptions, validation, data sources, numerical kernels
"""

__version__ = "0.1.0"

from pyols import regression
from pyols.regression import (
    OLS,
    ols,
    fit,
    estimate,
    parse_formula,
    build_design,
    DesignMatrix,
    ParsedFormula,
    RegressionResult,
    SummaryOptions,
)
from pyols.core import (
    DataSource,
    NumericRecord,
    PyOLSError,
    ValidationError,
    FormulaError,
    FieldNotFoundError,
    InsufficientDataError,
    SingularDesignMatrixError,
)

__all__ = [
    "__version__",
    "regression",
    "OLS",
    "ols",
    "fit",
    "estimate",
    "parse_formula",
    "build_design",
    "DesignMatrix",
    "ParsedFormula",
    "RegressionResult",
    "SummaryOptions",
    "DataSource",
    "NumericRecord",
    "PyOLSError",
    "ValidationError",
    "FormulaError",
    "FieldNotFoundError",
    "InsufficientDataError",
    "SingularDesignMatrixError",
]
