"""
Fixed-width text report for a fitted OLS model.

The layout follows the familiar statsmodels ``OLS Regression Results``
table: a header block pairing model facts (left) with fit statistics
(right), then one row per coefficient with its standard error, t-statistic,
p-value and confidence interval.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import datetime
from typing import TYPE_CHECKING
from scipy import stats

from pyols.core.exceptions import DimensionError
from pyols.core.validation import check_probability

if TYPE_CHECKING:
    from pyols.regression.solution import RegressionResult

_COLUMN_SEPARATOR = '    '


@dataclass(frozen=True)
class SummaryOptions:
    """
    Options for render_summary.

    Attributes:
        response_label: Name shown for the dependent variable; defaults to
            the response name of the model
        predictor_labels: One label per coefficient, replacing the column
            names in the coefficient table
        title: Centered heading; None or '' omits it
        significance_level: Alpha of the two-sided confidence intervals
        compact: Omit the Method, Date, Time and Df rows
        borders: Draw the '=' borders and the '-' rule
        timestamp: Moment shown in the Date and Time rows; defaults to now
    """
    response_label: str | None = None
    predictor_labels: Sequence[str] | None = None
    title: str | None = "OLS Regression Results"
    significance_level: float = 0.05
    compact: bool = False
    borders: bool = True
    timestamp: datetime | None = None

    def __post_init__(self) -> None:
        check_probability(self.significance_level, 'significance_level')


def render_summary(
    result: 'RegressionResult',
    options: SummaryOptions | None = None,
) -> str:
    """
    Render the regression report as a single string.

    Args:
        result: Fitted model
        options: Rendering options; defaults when omitted

    Returns:
        Lines joined by newlines, no trailing newline

    Raises:
        DimensionError: If predictor_labels does not match the number of
            coefficients
    """
    if options is None:
        options = SummaryOptions()

    response_label = options.response_label or result.endog_names
    if options.predictor_labels is None:
        labels = list(result.exog_names)
    else:
        labels = [str(label) for label in options.predictor_labels]
        if len(labels) != len(result.coefficients):
            raise DimensionError(
                f"predictor_labels: expected {len(result.coefficients)} labels, "
                f"got {len(labels)}"
            )

    timestamp = options.timestamp or datetime.now()

    top_left = [['Dep. Variable:', response_label], ['Model:', 'OLS']]
    if not options.compact:
        top_left += [
            ['Method:', 'Least Squares'],
            ['Date:', timestamp.strftime('%Y-%m-%d')],
            ['Time:', timestamp.strftime('%H:%M:%S')],
        ]
    top_left.append(['No. Observations:', str(result.nobs)])
    if not options.compact:
        top_left += [
            ['Df Residuals:', str(result.df_resid)],
            ['Df Model:', str(result.df_model)],
        ]
    top_left.append(['Covariance Type:', 'nonrobust'])

    top_right = [
        ['R-squared:', '%8.3f' % result.r_squared],
        ['Adj. R-squared:', '%8.3f' % result.adjusted_r_squared],
        ['F-statistic:', '%8.4f' % result.f_statistic],
        ['Prob (F-statistic):', '%6.3g' % result.f_pvalue],
    ]

    left_lines = _pad_width(top_left)
    right_lines = _pad_width(top_right)
    top = _pad_width([
        [left, right_lines[i] if i < len(right_lines) else '']
        for i, left in enumerate(left_lines)
    ])

    alpha = options.significance_level
    t_crit = stats.t.ppf(1.0 - alpha / 2.0, result.df_resid)
    params_rows = [['', 'coef', 'std err', 't', 'P>|t|', f'[{alpha / 2}', f'{1 - alpha / 2}]']]
    for label, coef, se, t, p in zip(
        labels,
        result.coefficients,
        result.standard_errors,
        result.t_statistics,
        result.p_values,
    ):
        params_rows.append([
            label,
            _forg(coef, 4),
            _forg(se, 3),
            _forg(t, 3),
            '%6.3g' % p,
            _forg(coef - t_crit * se, 3),
            _forg(coef + t_crit * se, 3),
        ])
    table_params = _pad_width(params_rows)

    border = '=' * len(table_params[0])
    lines = []
    if options.title:
        lines.append(options.title.center(len(border)).rstrip())
    if options.borders:
        lines += [border, *top, '-' * len(border), *table_params, border]
    else:
        lines += [*top, *table_params]
    return '\n'.join(lines)


def _forg(x: float, prec: int) -> str:
    """Fixed notation in a 9 (prec=3) or 10 (prec=4) wide field, g for extremes."""
    if prec == 3:
        fmt_f, fmt_g = '%9.3f', '%9.3g'
    elif prec == 4:
        fmt_f, fmt_g = '%10.4f', '%10.4g'
    else:
        raise ValueError(f"prec must be 3 or 4, got {prec}")
    if abs(x) >= 1e4 or abs(x) < 1e-4:
        return fmt_g % x
    return fmt_f % x


def _pad_width(rows: list[list[str]]) -> list[str]:
    """
    Align rows into columns.

    Each column is padded to its widest cell; the first column is left
    aligned, the rest right aligned.
    """
    n_cols = len(rows[0])
    widths = [max(len(row[i]) for row in rows) for i in range(n_cols)]
    return [
        _COLUMN_SEPARATOR.join(
            cell.ljust(widths[i]) if i == 0 else cell.rjust(widths[i])
            for i, cell in enumerate(row)
        )
        for row in rows
    ]
