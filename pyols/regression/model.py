"""
Formula-driven OLS models.

    >>> model = OLS("Lottery ~ Literacy + LogPopulation", records)
    >>> result = model.fit()
    >>> print(result.summary())

The model parses its formula and materializes the design matrix when it
is constructed, so formula and field errors surface before any fitting,
and the observations are read exactly once.
"""

import logging
from typing import Any

from pyols.regression.design import DesignMatrix, build_design
from pyols.regression.formula import ParsedFormula, parse_formula
from pyols.regression.solution import RegressionResult
from pyols.regression.solvers import MethodChoice, estimate, _get_backend

logger = logging.getLogger(__name__)


class OLS:
    """
    Ordinary least squares model specified by a formula.

    Args:
        formula: Text such as ``"Y ~ X1 + X2"``; append ``- 1`` to drop
            the intercept
        data: Records (mappings, objects with attributes, or
            NumericRecord implementations), a DataSource, a pandas
            DataFrame, or a mapping of column name to values
        method: 'qr' (default) or 'normal'

    Raises:
        FormulaError: If the formula cannot be parsed
        FieldNotFoundError: If a formula variable is missing from the data
        ValidationError: If a referenced field is not finite numeric
    """

    def __init__(self, formula: str, data: Any, *, method: MethodChoice = 'qr'):
        _get_backend(method)
        self._parsed = parse_formula(formula)
        self._design = build_design(self._parsed, data)
        self._method = method
        logger.debug("Created OLS model %s (n=%d)", self._parsed, self._design.n)

    @property
    def formula(self) -> str:
        return self._parsed.text

    @property
    def parsed_formula(self) -> ParsedFormula:
        return self._parsed

    @property
    def design(self) -> DesignMatrix:
        return self._design

    @property
    def method(self) -> MethodChoice:
        return self._method

    @property
    def df_model(self) -> int:
        return self._design.df_model

    @property
    def df_resid(self) -> int:
        return self._design.df_resid

    @property
    def endog_names(self) -> str:
        return self._design.response_name

    @property
    def exog_names(self) -> tuple[str, ...]:
        return self._design.exog_names

    @property
    def k_constant(self) -> int:
        return self._design.k_constant

    @property
    def nobs(self) -> int:
        return self._design.n

    def fit(self) -> RegressionResult:
        """
        Estimate the model.

        Each call returns an equal, independent result; the model itself
        is not modified.

        Raises:
            InsufficientDataError: If there are no more observations than
                design columns
            SingularDesignMatrixError: If the predictors are collinear
        """
        return estimate(self._design, method=self._method)

    def __repr__(self) -> str:
        return f"OLS({self.formula!r}, nobs={self.nobs})"


def ols(formula: str, data: Any, *, method: MethodChoice = 'qr') -> RegressionResult:
    """
    Build and fit an OLS model in one call.

    Equivalent to ``OLS(formula, data, method=method).fit()``.
    """
    return OLS(formula, data, method=method).fit()
