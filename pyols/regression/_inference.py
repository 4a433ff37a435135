"""
Classical OLS inference shared by the regression backends.

Backends differ only in how they obtain β and (X'X)⁻¹; everything derived
from those two (residuals, sums of squares, standard errors, t and F
tests, R²) is computed here so both paths agree to rounding.
"""

from typing import Any
import numpy as np
from numpy.typing import NDArray
from scipy import stats

from pyols.regression.design import DesignMatrix
from pyols.regression.solution import OLSParams


def ols_statistics(
    design: DesignMatrix,
    coefficients: NDArray[np.floating[Any]],
    xtx_inv: NDArray[np.floating[Any]],
    rank: int,
) -> OLSParams:
    """
    Derive the full set of OLS statistics from a solved system.

    Args:
        design: Design the system was solved for (df_resid > 0)
        coefficients: β (k,)
        xtx_inv: (X'X)⁻¹ (k x k)
        rank: Numerical rank of X

    Returns:
        OLSParams with read-only arrays
    """
    X, y = design.X, design.y
    n = design.n
    df_model = design.df_model
    df_resid = design.df_resid

    fitted_values = X @ coefficients
    residuals = y - fitted_values

    rss = float(residuals @ residuals)
    if design.has_intercept:
        centered = y - np.mean(y)
        tss = float(centered @ centered)
    else:
        tss = float(y @ y)
    ess = tss - rss

    sigma_sq = rss / df_resid
    covariance = sigma_sq * xtx_inv
    # Guard tiny negative diagonals from rounding in (X'X)⁻¹
    standard_errors = np.sqrt(np.clip(np.diag(covariance), 0.0, None))

    with np.errstate(divide='ignore', invalid='ignore'):
        t_statistics = coefficients / standard_errors
    p_values = 2.0 * stats.t.sf(np.abs(t_statistics), df_resid)

    if tss == 0.0:
        r_squared = 1.0 if rss == 0.0 else 0.0
    else:
        r_squared = 1.0 - rss / tss
    adjusted_r_squared = 1.0 - (n - 1) / df_resid * (1.0 - r_squared)

    mse_resid = rss / df_resid
    mse_total = tss / (df_model + df_resid)
    if df_model > 0:
        mse_model = ess / df_model
        with np.errstate(divide='ignore', invalid='ignore'):
            f_statistic = float(np.float64(mse_model) / np.float64(mse_resid))
        f_pvalue = float(stats.f.sf(f_statistic, df_model, df_resid))
    else:
        mse_model = float('nan')
        f_statistic = float('nan')
        f_pvalue = float('nan')

    arrays = (
        coefficients, standard_errors, t_statistics, p_values,
        covariance, residuals, fitted_values,
    )
    coefficients, standard_errors, t_statistics, p_values, covariance, residuals, fitted_values = (
        _frozen(a) for a in arrays
    )

    return OLSParams(
        coefficients=coefficients,
        standard_errors=standard_errors,
        t_statistics=t_statistics,
        p_values=p_values,
        covariance=covariance,
        residuals=residuals,
        fitted_values=fitted_values,
        rss=rss,
        ess=ess,
        tss=tss,
        r_squared=float(r_squared),
        adjusted_r_squared=float(adjusted_r_squared),
        f_statistic=f_statistic,
        f_pvalue=f_pvalue,
        mse_model=float(mse_model),
        mse_resid=float(mse_resid),
        mse_total=float(mse_total),
        df_model=df_model,
        df_resid=df_resid,
        nobs=n,
        rank=rank,
    )


def _frozen(array: NDArray[np.floating[Any]]) -> NDArray[np.floating[Any]]:
    out = np.array(array, dtype=np.float64)
    out.setflags(write=False)
    return out
