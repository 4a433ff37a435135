"""
Regression solution types.

Contains the parameter payload and user-facing solution wrapper.
"""

from __future__ import annotations

from dataclasses import dataclass, fields, replace
from typing import Any, TYPE_CHECKING
import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pyols.core.result import Result
from pyols.core.exceptions import DimensionError
from pyols.core.validation import check_array, check_finite, check_2d, check_probability

if TYPE_CHECKING:
    from pyols.regression.design import DesignMatrix
    from pyols.regression.summary import SummaryOptions


@dataclass(frozen=True, eq=False)
class OLSParams:
    """
    Parameter payload for ordinary least squares.

    This is the immutable data computed by backends. Every statistic is
    derived once at fit time; arrays are read-only. Two payloads are equal
    when every field matches exactly, NaN matching NaN.
    """
    coefficients: NDArray[np.floating[Any]]
    standard_errors: NDArray[np.floating[Any]]
    t_statistics: NDArray[np.floating[Any]]
    p_values: NDArray[np.floating[Any]]
    covariance: NDArray[np.floating[Any]]
    residuals: NDArray[np.floating[Any]]
    fitted_values: NDArray[np.floating[Any]]
    rss: float
    ess: float
    tss: float
    r_squared: float
    adjusted_r_squared: float
    f_statistic: float
    f_pvalue: float
    mse_model: float
    mse_resid: float
    mse_total: float
    df_model: int
    df_resid: int
    nobs: int
    rank: int

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, OLSParams):
            return NotImplemented
        return all(
            np.array_equal(getattr(self, f.name), getattr(other, f.name), equal_nan=True)
            for f in fields(self)
        )


@dataclass(frozen=True, eq=False)
class RegressionResult:
    """
    User-facing OLS results.

    Wraps the backend Result together with the design it was fitted on.
    Nothing is recomputed on access; per-coefficient statistics are also
    available keyed by column name (``coefs``, ``bse``, ``tvalues``,
    ``pvalues``). Results compare equal when their designs and fitted
    statistics match; timing and provenance are ignored.
    """
    _result: Result[OLSParams]
    _design: 'DesignMatrix'

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, RegressionResult):
            return NotImplemented
        return self._design == other._design and self._result == other._result

    @property
    def params(self) -> OLSParams:
        return self._result.params

    @property
    def design(self) -> 'DesignMatrix':
        return self._design

    # === Coefficients and inference ===

    @property
    def coefficients(self) -> NDArray[np.floating[Any]]:
        return self._result.params.coefficients

    @property
    def standard_errors(self) -> NDArray[np.floating[Any]]:
        """Standard errors, sqrt(diag(σ̂² (X'X)⁻¹))."""
        return self._result.params.standard_errors

    @property
    def t_statistics(self) -> NDArray[np.floating[Any]]:
        return self._result.params.t_statistics

    @property
    def p_values(self) -> NDArray[np.floating[Any]]:
        """Two-sided p-values of the t-statistics."""
        return self._result.params.p_values

    @property
    def covariance(self) -> NDArray[np.floating[Any]]:
        """Coefficient covariance matrix σ̂² (X'X)⁻¹."""
        return self._result.params.covariance

    @property
    def coefs(self) -> dict[str, float]:
        return self._by_name(self.coefficients)

    @property
    def bse(self) -> dict[str, float]:
        return self._by_name(self.standard_errors)

    @property
    def tvalues(self) -> dict[str, float]:
        return self._by_name(self.t_statistics)

    @property
    def pvalues(self) -> dict[str, float]:
        return self._by_name(self.p_values)

    def _by_name(self, values: NDArray[np.floating[Any]]) -> dict[str, float]:
        return {name: float(v) for name, v in zip(self.exog_names, values)}

    # === Fit quality ===

    @property
    def residuals(self) -> NDArray[np.floating[Any]]:
        return self._result.params.residuals

    @property
    def fitted_values(self) -> NDArray[np.floating[Any]]:
        return self._result.params.fitted_values

    @property
    def rss(self) -> float:
        """Residual sum of squares."""
        return self._result.params.rss

    @property
    def ess(self) -> float:
        """Explained sum of squares, TSS - RSS."""
        return self._result.params.ess

    @property
    def tss(self) -> float:
        """Total sum of squares; centered when the model has an intercept."""
        return self._result.params.tss

    @property
    def r_squared(self) -> float:
        return self._result.params.r_squared

    @property
    def adjusted_r_squared(self) -> float:
        return self._result.params.adjusted_r_squared

    @property
    def f_statistic(self) -> float:
        """Overall F-statistic; NaN when the model has no non-intercept columns."""
        return self._result.params.f_statistic

    @property
    def f_pvalue(self) -> float:
        return self._result.params.f_pvalue

    @property
    def mse_model(self) -> float:
        return self._result.params.mse_model

    @property
    def mse_resid(self) -> float:
        return self._result.params.mse_resid

    @property
    def mse_total(self) -> float:
        return self._result.params.mse_total

    @property
    def residual_std_error(self) -> float:
        """Residual standard error, sqrt(RSS / df_resid)."""
        return float(np.sqrt(self.mse_resid))

    # === Dimensions and names ===

    @property
    def df_model(self) -> int:
        return self._result.params.df_model

    @property
    def df_resid(self) -> int:
        return self._result.params.df_resid

    @property
    def nobs(self) -> int:
        return self._result.params.nobs

    @property
    def rank(self) -> int:
        return self._result.params.rank

    @property
    def exog_names(self) -> tuple[str, ...]:
        return self._design.exog_names

    @property
    def endog_names(self) -> str:
        return self._design.response_name

    # === Result metadata ===

    @property
    def info(self) -> dict[str, Any]:
        return self._result.info

    @property
    def timing(self) -> dict[str, float] | None:
        return self._result.timing

    @property
    def backend_name(self) -> str:
        return self._result.backend_name

    @property
    def warnings(self) -> tuple[str, ...]:
        return self._result.warnings

    # === Derived outputs ===

    def conf_int(self, alpha: float = 0.05) -> NDArray[np.floating[Any]]:
        """
        Two-sided confidence intervals for the coefficients.

        Args:
            alpha: Significance level; the interval covers 1 - alpha

        Returns:
            Array (k, 2) of [lower, upper] bounds, one row per coefficient
        """
        check_probability(alpha, 'alpha')
        t_crit = stats.t.ppf(1.0 - alpha / 2.0, self.df_resid)
        margin = t_crit * self.standard_errors
        return np.column_stack([
            self.coefficients - margin,
            self.coefficients + margin,
        ])

    def predict(self, observations: Any) -> NDArray[np.floating[Any]]:
        """
        Evaluate the fitted model on new observations.

        Args:
            observations: Records, DataSource or DataFrame holding the
                predictor fields (formula-built models only), or an
                (m, k) array laid out like the design matrix

        Returns:
            Predicted values (m,)

        Raises:
            FieldNotFoundError: If a predictor field is missing
            DimensionError: If an array has the wrong number of columns
        """
        formula = self._design.formula
        if isinstance(observations, np.ndarray) or formula is None:
            X = check_array(observations, 'X')
            if X.ndim == 1:
                X = X.reshape(1, -1) if self._design.p > 1 else X.reshape(-1, 1)
            check_2d(X, 'X')
            check_finite(X, 'X')
            if X.shape[1] != self._design.p:
                raise DimensionError(
                    f"X: expected {self._design.p} columns, got {X.shape[1]}"
                )
        else:
            from pyols.regression.design import build_exog
            X = build_exog(formula, observations)
        return X @ self.coefficients

    def summary(self, options: 'SummaryOptions | None' = None, **overrides: Any) -> str:
        """
        Render the fixed-width regression report.

        Args:
            options: SummaryOptions; defaults apply when omitted
            **overrides: Individual SummaryOptions fields, applied on top
                of ``options``

        Example:
            >>> print(result.summary(compact=True, significance_level=0.1))
        """
        from pyols.regression.summary import SummaryOptions, render_summary

        if options is None:
            options = SummaryOptions()
        if overrides:
            options = replace(options, **overrides)
        return render_summary(self, options)

    def __repr__(self) -> str:
        return (
            f"RegressionResult(nobs={self.nobs}, df_model={self.df_model}, "
            f"df_resid={self.df_resid}, r_squared={self.r_squared:.4f})"
        )
