"""
Regression design.

DesignMatrix holds the response vector y and the predictor matrix X that a
formula selects from a set of observations. It knows it is building a
regression; the observations don't.

Observations can be row-oriented (an iterable of records) or
column-oriented (a DataSource, a pandas DataFrame, or a mapping of column
name to values). Either way each field is located once and the data are
materialized to float64 arrays at construction; the design never goes
back to the observations afterwards.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any
import numpy as np
from numpy.typing import ArrayLike, NDArray

from pyols.core.datasource import DataSource, field_reader, is_dataframe
from pyols.core.exceptions import DimensionError, FieldNotFoundError, ValidationError
from pyols.core.validation import (
    check_array,
    check_finite,
    check_1d,
    check_2d,
    check_consistent_length,
)
from pyols.regression.formula import INTERCEPT_NAME, ParsedFormula

logger = logging.getLogger(__name__)


@dataclass(frozen=True, eq=False)
class DesignMatrix:
    """
    Response vector and design matrix for one regression.

    Immutable after construction; the arrays are read-only. When the
    model has an intercept it is column 0 of X and equals 1.0 in every row.

    Construction:
        build_design(parse_formula("y ~ a + b"), records)   # from observations
        DesignMatrix.from_arrays(X, y)                       # direct from arrays
    """
    _X: NDArray[np.floating[Any]]
    _y: NDArray[np.floating[Any]]
    _exog_names: tuple[str, ...]
    _response_name: str
    _has_intercept: bool
    _formula: ParsedFormula | None = None

    @classmethod
    def from_arrays(
        cls,
        X: ArrayLike,
        y: ArrayLike,
        *,
        exog_names: list[str] | tuple[str, ...] | None = None,
        response_name: str = 'y',
        has_intercept: bool | None = None,
    ) -> DesignMatrix:
        """
        Build a design directly from arrays.

        Args:
            X: Design matrix (n x k), including any constant column
            y: Response vector (n,)
            exog_names: Column names; defaults to 'Intercept' for a column
                of ones and x1, x2, ... for the others
            response_name: Name of the response
            has_intercept: Whether X contains an intercept column. None
                detects a column of ones.

        Raises:
            ValidationError: If inputs are not finite numeric arrays, or
                has_intercept=True but no column of ones exists
            DimensionError: If shapes are inconsistent
        """
        X_arr = check_array(X, 'X')
        y_arr = check_array(y, 'y')
        if X_arr.ndim == 1:
            X_arr = X_arr.reshape(-1, 1)
        if y_arr.ndim == 2 and y_arr.shape[1] == 1:
            y_arr = y_arr.ravel()

        check_2d(X_arr, 'X')
        check_1d(y_arr, 'y')
        check_consistent_length(X_arr, y_arr, names=('X', 'y'))

        ones = np.flatnonzero(np.all(X_arr == 1.0, axis=0)) if X_arr.shape[0] else np.array([], dtype=int)
        if has_intercept is None:
            has_intercept = len(ones) > 0
        elif has_intercept and len(ones) == 0:
            raise ValidationError(
                "X: has_intercept=True but no column is constant 1.0"
            )

        p = X_arr.shape[1]
        if exog_names is None:
            names = []
            const_col = int(ones[0]) if has_intercept else -1
            counter = 0
            for j in range(p):
                if j == const_col:
                    names.append(INTERCEPT_NAME)
                else:
                    counter += 1
                    names.append(f"x{counter}")
            exog_names = tuple(names)
        else:
            exog_names = tuple(str(name) for name in exog_names)
            if len(exog_names) != p:
                raise DimensionError(
                    f"exog_names: expected {p} names for {p} columns, got {len(exog_names)}"
                )

        return cls._build(
            X_arr, y_arr,
            exog_names=exog_names,
            response_name=response_name,
            has_intercept=bool(has_intercept),
            formula=None,
        )

    @classmethod
    def _build(
        cls,
        X: NDArray,
        y: NDArray,
        *,
        exog_names: tuple[str, ...],
        response_name: str,
        has_intercept: bool,
        formula: ParsedFormula | None,
    ) -> DesignMatrix:
        """Internal builder with validation."""
        check_finite(X, 'X')
        check_finite(y, 'y')
        if X.shape[1] == 0:
            raise DimensionError(
                "Design has no columns: the model needs at least one predictor "
                "or an intercept"
            )

        X = np.array(X, dtype=np.float64, order='C')
        y = np.array(y, dtype=np.float64)
        X.setflags(write=False)
        y.setflags(write=False)

        logger.debug(
            "Built design: response=%s n=%d k=%d intercept=%s",
            response_name, X.shape[0], X.shape[1], has_intercept,
        )
        return cls(
            _X=X,
            _y=y,
            _exog_names=exog_names,
            _response_name=response_name,
            _has_intercept=has_intercept,
            _formula=formula,
        )

    # === Properties ===

    @property
    def X(self) -> NDArray[np.floating[Any]]:
        """Design matrix (n x k)."""
        return self._X

    @property
    def y(self) -> NDArray[np.floating[Any]]:
        """Response vector (n,)."""
        return self._y

    @property
    def n(self) -> int:
        """Number of observations."""
        return self._X.shape[0]

    @property
    def p(self) -> int:
        """Number of design columns, intercept included."""
        return self._X.shape[1]

    @property
    def exog_names(self) -> tuple[str, ...]:
        return self._exog_names

    @property
    def response_name(self) -> str:
        return self._response_name

    @property
    def has_intercept(self) -> bool:
        return self._has_intercept

    @property
    def k_constant(self) -> int:
        return 1 if self._has_intercept else 0

    @property
    def df_model(self) -> int:
        """Model degrees of freedom: columns excluding the intercept."""
        return self.p - self.k_constant

    @property
    def df_resid(self) -> int:
        """Residual degrees of freedom: observations minus columns."""
        return self.n - self.p

    @property
    def formula(self) -> ParsedFormula | None:
        """Formula the design was built from, None for array designs."""
        return self._formula

    def XtX(self) -> NDArray[np.floating[Any]]:
        """Compute X'X."""
        return self._X.T @ self._X

    def Xty(self) -> NDArray[np.floating[Any]]:
        """Compute X'y."""
        return self._X.T @ self._y

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, DesignMatrix):
            return NotImplemented
        return (
            self._exog_names == other._exog_names
            and self._response_name == other._response_name
            and self._has_intercept == other._has_intercept
            and self._formula == other._formula
            and np.array_equal(self._X, other._X)
            and np.array_equal(self._y, other._y)
        )

    def __repr__(self) -> str:
        return (
            f"DesignMatrix(n={self.n}, k={self.p}, response={self._response_name!r}, "
            f"exog_names={self._exog_names!r})"
        )


def build_design(formula: ParsedFormula, observations: Any) -> DesignMatrix:
    """
    Materialize the design a formula selects from observations.

    Args:
        formula: Parsed formula
        observations: Iterable of records, DataSource, pandas DataFrame, or
            mapping of column name to values. An iterable is consumed once.

    Returns:
        DesignMatrix with the intercept (if any) in column 0

    Raises:
        FieldNotFoundError: If the response or a predictor is not a field
            of the observations
        ValidationError: If a referenced field holds non-numeric or
            non-finite values
        DimensionError: If the formula selects no columns at all
    """
    columns, n = _read_fields(formula, formula.fields, observations)
    y = columns[formula.response]
    X = _assemble(formula, columns, n)
    return DesignMatrix._build(
        X, y,
        exog_names=formula.exog_names,
        response_name=formula.response,
        has_intercept=formula.has_intercept,
        formula=formula,
    )


def build_exog(formula: ParsedFormula, observations: Any) -> NDArray[np.floating[Any]]:
    """
    Build only the predictor matrix (no response field needed).

    Used for prediction on new observations; columns follow
    ``formula.exog_names``.
    """
    columns, n = _read_fields(formula, formula.predictors, observations)
    X = _assemble(formula, columns, n)
    for name in formula.predictors:
        check_finite(columns[name], f"field '{name}'")
    return X


def _assemble(
    formula: ParsedFormula,
    columns: dict[str, NDArray],
    n: int,
) -> NDArray[np.floating[Any]]:
    parts = [columns[name] for name in formula.predictors]
    if formula.has_intercept:
        parts.insert(0, np.ones(n, dtype=np.float64))
    if not parts:
        return np.empty((n, 0), dtype=np.float64)
    return np.column_stack(parts)


def _read_fields(
    formula: ParsedFormula,
    names: tuple[str, ...],
    observations: Any,
) -> tuple[dict[str, NDArray], int]:
    """Locate each named field once and return float64 columns plus row count."""
    if isinstance(observations, (str, bytes)):
        raise ValidationError(
            f"observations: expected records or columns, got {type(observations).__name__}"
        )
    if is_dataframe(observations):
        observations = DataSource.from_dataframe(observations)
    elif isinstance(observations, Mapping):
        observations = DataSource.from_columns(observations)

    if isinstance(observations, DataSource):
        return _read_columns(formula, names, observations)
    if not isinstance(observations, Iterable):
        raise ValidationError(
            f"observations: expected an iterable of records, got {type(observations).__name__}"
        )
    return _read_records(formula, names, list(observations))


def _read_columns(
    formula: ParsedFormula,
    names: tuple[str, ...],
    source: DataSource,
) -> tuple[dict[str, NDArray], int]:
    columns: dict[str, NDArray] = {}
    for name in names:
        try:
            raw = source[name]
        except KeyError as e:
            raise _field_not_found(formula, name) from e
        columns[name] = _to_column(raw, name)
    return columns, source.n_observations


def _read_records(
    formula: ParsedFormula,
    names: tuple[str, ...],
    records: list[Any],
) -> tuple[dict[str, NDArray], int]:
    n = len(records)
    if n == 0:
        return {name: np.empty(0, dtype=np.float64) for name in names}, 0

    # One accessor per distinct field, resolved against the first record
    readers = {}
    for name in names:
        try:
            readers[name] = field_reader(records[0], name)
        except (KeyError, AttributeError, FieldNotFoundError) as e:
            raise _field_not_found(formula, name) from e

    values: dict[str, list[Any]] = {name: [] for name in names}
    # A record shaped differently from the first one fails with TypeError
    for i, record in enumerate(records):
        for name, read in readers.items():
            try:
                values[name].append(read(record))
            except (KeyError, AttributeError, TypeError, FieldNotFoundError) as e:
                raise _field_not_found(formula, name, row=i) from e

    return {name: _to_column(vals, name) for name, vals in values.items()}, n


def _to_column(raw: Any, name: str) -> NDArray[np.floating[Any]]:
    column = check_array(raw, f"field '{name}'")
    check_1d(column, f"field '{name}'")
    return column


def _field_not_found(
    formula: ParsedFormula,
    name: str,
    row: int | None = None,
) -> FieldNotFoundError:
    text = formula.text or formula.to_formula()
    message = (
        f"Your data does not have a field named {name}. "
        f"Check spelling in your formula: {text}"
    )
    if row is not None:
        message += f" (missing from observation {row})"
    return FieldNotFoundError(message, field_name=name, formula=text, row=row)
