"""
Ordinary least squares regression.

Public API:
    OLS(formula, data).fit() -> RegressionResult
    ols(formula, data) -> RegressionResult
    fit(X, y, ...) -> RegressionResult
    estimate(design, ...) -> RegressionResult

The formula path handles:
    - Formula parsing ("Y ~ X1 + X2 - 1")
    - Design construction from records, DataSource or DataFrame
    - Backend selection
    - Result wrapping

Example:
    >>> from pyols.regression import OLS
    >>> result = OLS("y ~ x", records).fit()
    >>> print(result.coefs)
    >>> print(result.summary())
"""

from pyols.regression.formula import FormulaParser, ParsedFormula, parse_formula
from pyols.regression.design import DesignMatrix, build_design, build_exog
from pyols.regression.solution import OLSParams, RegressionResult
from pyols.regression.summary import SummaryOptions, render_summary
from pyols.regression.solvers import estimate, fit
from pyols.regression.model import OLS, ols

__all__ = [
    "OLS",
    "ols",
    "fit",
    "estimate",
    "FormulaParser",
    "ParsedFormula",
    "parse_formula",
    "DesignMatrix",
    "build_design",
    "build_exog",
    "OLSParams",
    "RegressionResult",
    "SummaryOptions",
    "render_summary",
]
