"""
Tests for OLS estimation.

Tests the complete pipeline: design construction, backend selection,
and result properties.
"""

import warnings

import numpy as np
import pytest
from scipy import stats

from pyols.core.compute.tolerances import CPU_FP64, select_tolerance
from pyols.core.protocols import Backend
from pyols.core.exceptions import (
    InsufficientDataError,
    NumericalError,
    SingularDesignMatrixError,
    ValidationError,
)
from pyols.regression import DesignMatrix, RegressionResult, build_design, estimate, fit, parse_formula
from pyols.regression._inference import ols_statistics
from pyols.regression.solvers import _get_backend


def _fit_records(formula, records, **kwargs):
    return estimate(build_design(parse_formula(formula), records), **kwargs)


class TestHandComputed:
    """y = [2, 4, 5, 4, 5] on x = [1, 2, 3, 4, 5]."""

    @pytest.fixture
    def result(self, hand_records):
        return _fit_records("y ~ x", hand_records)

    def test_coefficients(self, result):
        np.testing.assert_allclose(result.coefficients, [2.2, 0.6], rtol=1e-12)
        assert result.coefs == {"Intercept": pytest.approx(2.2), "x": pytest.approx(0.6)}

    def test_fitted_and_residuals(self, result):
        np.testing.assert_allclose(result.fitted_values, [2.8, 3.4, 4.0, 4.6, 5.2], rtol=1e-12)
        np.testing.assert_allclose(result.residuals, [-0.8, 0.6, 1.0, -0.6, -0.2], atol=1e-12)

    def test_sums_of_squares(self, result):
        assert result.rss == pytest.approx(2.4)
        assert result.tss == pytest.approx(6.0)
        assert result.ess == pytest.approx(3.6)

    def test_r_squared(self, result):
        assert result.r_squared == pytest.approx(0.6)
        assert result.adjusted_r_squared == pytest.approx(1 - 4 / 3 * 0.4)

    def test_degrees_of_freedom(self, result):
        assert result.df_model == 1
        assert result.df_resid == 3
        assert result.nobs == 5
        assert result.rank == 2

    def test_standard_errors(self, result):
        np.testing.assert_allclose(result.standard_errors, [np.sqrt(0.88), np.sqrt(0.08)], rtol=1e-10)
        assert result.residual_std_error == pytest.approx(np.sqrt(0.8))

    def test_t_statistics(self, result):
        np.testing.assert_allclose(result.t_statistics, [2.345208, 2.121320], rtol=1e-6)
        assert result.tvalues["x"] == pytest.approx(2.121320, rel=1e-6)

    def test_p_values(self, result):
        assert result.pvalues["x"] == pytest.approx(0.124027, rel=1e-5)
        assert result.pvalues["x"] == pytest.approx(2 * stats.t.sf(np.sqrt(4.5), 3), rel=1e-12)

    def test_f_statistic(self, result):
        assert result.f_statistic == pytest.approx(4.5)
        # One predictor: F = t², same p-value
        assert result.f_pvalue == pytest.approx(result.pvalues["x"])

    def test_mean_squared_errors(self, result):
        assert result.mse_model == pytest.approx(3.6)
        assert result.mse_resid == pytest.approx(0.8)
        assert result.mse_total == pytest.approx(6.0 / 4)

    def test_covariance(self, result):
        cov = result.covariance
        assert cov.shape == (2, 2)
        np.testing.assert_allclose(np.sqrt(np.diag(cov)), result.standard_errors)
        np.testing.assert_allclose(cov, cov.T)

    def test_conf_int(self, result):
        ci = result.conf_int()
        np.testing.assert_allclose(ci[1], [-0.300132, 1.500132], rtol=1e-5)
        half_width = stats.t.ppf(0.975, 3) * np.sqrt([0.88, 0.08])
        np.testing.assert_allclose(ci[:, 1] - ci[:, 0], 2 * half_width, rtol=1e-10)
        np.testing.assert_allclose(ci.mean(axis=1), [2.2, 0.6], rtol=1e-12)

    def test_conf_int_narrows_with_alpha(self, result):
        wide = result.conf_int(0.01)
        narrow = result.conf_int(0.2)
        assert np.all(wide[:, 1] - wide[:, 0] > narrow[:, 1] - narrow[:, 0])

    def test_conf_int_rejects_bad_alpha(self, result):
        with pytest.raises(ValidationError):
            result.conf_int(1.5)

    def test_names(self, result):
        assert result.exog_names == ("Intercept", "x")
        assert result.endog_names == "y"


class TestRecovery:

    def test_noiseless_exact(self, noiseless_records):
        result = _fit_records("y ~ a + b", noiseless_records)
        np.testing.assert_allclose(result.coefficients, [1.0, 2.0, -3.0], atol=1e-10)
        assert result.rss == pytest.approx(0.0, abs=1e-18)
        assert result.r_squared == pytest.approx(1.0)

    def test_close_to_truth(self, simple_regression_data):
        X, y, beta_true = simple_regression_data
        result = fit(X, y)
        np.testing.assert_allclose(result.coefficients, beta_true, atol=0.1)

    def test_residuals_sum_to_zero_with_intercept(self, simple_regression_data):
        X, y, _ = simple_regression_data
        assert abs(fit(X, y).residuals.sum()) < 1e-10

    def test_residuals_orthogonal_to_columns(self, simple_regression_data):
        X, y, _ = simple_regression_data
        result = fit(X, y)
        np.testing.assert_allclose(X.T @ result.residuals, 0.0, atol=1e-10)

    def test_column_order_invariance(self, noiseless_records):
        ab = _fit_records("y ~ a + b", noiseless_records)
        ba = _fit_records("y ~ b + a", noiseless_records)
        assert ab.coefs == pytest.approx(ba.coefs)
        assert ab.bse == pytest.approx(ba.bse)
        assert ab.r_squared == pytest.approx(ba.r_squared)


class TestNoIntercept:

    def test_uncentered_tss(self, hand_records):
        result = _fit_records("y ~ x - 1", hand_records)
        ys = np.array([2.0, 4.0, 5.0, 4.0, 5.0])
        assert result.tss == pytest.approx(float(ys @ ys))
        assert result.df_model == 1
        assert result.df_resid == 4
        assert result.exog_names == ("x",)

    def test_slope_through_origin(self, hand_records):
        result = _fit_records("y ~ x - 1", hand_records)
        xs = np.arange(1.0, 6.0)
        ys = np.array([2.0, 4.0, 5.0, 4.0, 5.0])
        assert result.coefficients[0] == pytest.approx(xs @ ys / (xs @ xs))


class TestInterceptOnly:

    def test_mean_model(self, hand_records):
        result = _fit_records("y ~", hand_records)
        assert result.coefficients[0] == pytest.approx(4.0)
        assert result.df_model == 0
        assert result.r_squared == pytest.approx(0.0)
        assert np.isnan(result.f_statistic)
        assert np.isnan(result.f_pvalue)


class TestDegenerate:

    def test_constant_response_fit(self):
        records = [{"y": 3.0, "x": float(i)} for i in range(5)]
        result = _fit_records("y ~ x", records)
        assert result.tss == 0.0
        assert result.coefs["Intercept"] == pytest.approx(3.0)
        assert result.coefs["x"] == pytest.approx(0.0, abs=1e-12)

    def test_zero_tss_r_squared(self):
        design = build_design(
            parse_formula("y ~ x"),
            [{"y": 3.0, "x": float(i)} for i in range(5)],
        )
        xtx_inv = np.linalg.inv(design.XtX())
        exact = ols_statistics(design, np.array([3.0, 0.0]), xtx_inv, rank=2)
        assert exact.rss == 0.0
        assert exact.r_squared == 1.0
        off = ols_statistics(design, np.array([3.0, 0.1]), xtx_inv, rank=2)
        assert off.r_squared == 0.0

    def test_identical_columns(self, hand_records):
        records = [dict(r, z=r["x"]) for r in hand_records]
        with pytest.raises(SingularDesignMatrixError) as exc_info:
            _fit_records("y ~ x + z", records)
        assert exc_info.value.column_name == "z"
        assert exc_info.value.rank == 2
        assert exc_info.value.expected_rank == 3

    def test_collinear_arrays(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(NumericalError):
            fit(X, y)

    def test_collinear_normal_method(self, collinear_data):
        X, y = collinear_data
        with pytest.raises(SingularDesignMatrixError):
            fit(X, y, method="normal")

    def test_insufficient_data(self, hand_records):
        with pytest.raises(InsufficientDataError) as exc_info:
            _fit_records("y ~ x", hand_records[:2])
        assert exc_info.value.n_observations == 2
        assert exc_info.value.n_columns == 2

    def test_empty_observations(self):
        with pytest.raises(InsufficientDataError):
            _fit_records("y ~ x", [])

    def test_more_columns_than_rows_is_insufficient_not_singular(self, rng):
        X = rng.standard_normal((3, 5))
        with pytest.raises(InsufficientDataError):
            fit(X, rng.standard_normal(3))

    def test_ill_conditioned_warning(self, rng):
        n = 50
        x = rng.standard_normal(n)
        X = np.column_stack([np.ones(n), x, x + 1e-11 * rng.standard_normal(n)])
        y = x + rng.standard_normal(n)
        with pytest.warns(RuntimeWarning, match="ill-conditioned"):
            result = fit(X, y)
        assert any("ill-conditioned" in w for w in result.warnings)
        assert result.info["condition_number"] > 1e10


class TestMethods:

    def test_normal_matches_qr(self, simple_regression_data):
        X, y, _ = simple_regression_data
        qr = fit(X, y, method="qr")
        normal = fit(X, y, method="normal")
        tol = select_tolerance(qr.info["ill_conditioned"])
        np.testing.assert_allclose(normal.coefficients, qr.coefficients, rtol=tol.rtol, atol=tol.atol)
        np.testing.assert_allclose(normal.standard_errors, qr.standard_errors, rtol=tol.rtol, atol=tol.atol)
        assert normal.r_squared == pytest.approx(qr.r_squared, rel=1e-10)

    def test_backend_names(self, simple_regression_data):
        X, y, _ = simple_regression_data
        assert fit(X, y).backend_name == "cpu_qr"
        assert fit(X, y, method="normal").backend_name == "cpu_cholesky"

    def test_info(self, simple_regression_data):
        X, y, _ = simple_regression_data
        result = fit(X, y)
        assert result.info["method"] == "qr"
        assert result.info["rank"] == 3
        assert result.info["condition_number"] < 1e4
        assert result.info["ill_conditioned"] is False

    def test_timing(self, simple_regression_data):
        X, y, _ = simple_regression_data
        timing = fit(X, y).timing
        assert timing["total_seconds"] >= 0.0
        assert "qr_decomposition" in timing

    @pytest.mark.parametrize("method", ["qr", "normal"])
    def test_backends_satisfy_protocol(self, method):
        backend = _get_backend(method)
        assert isinstance(backend, Backend)
        assert backend.name.startswith("cpu_")

    def test_unknown_method(self, simple_regression_data):
        X, y, _ = simple_regression_data
        with pytest.raises(ValueError, match="Unknown method"):
            fit(X, y, method="svd")

    def test_well_conditioned_no_warnings(self, simple_regression_data):
        X, y, _ = simple_regression_data
        with warnings.catch_warnings():
            warnings.simplefilter("error")
            result = fit(X, y)
        assert result.warnings == ()


class TestResultObject:

    def test_type(self, simple_regression_data):
        X, y, _ = simple_regression_data
        assert isinstance(fit(X, y), RegressionResult)

    def test_arrays_read_only(self, simple_regression_data):
        X, y, _ = simple_regression_data
        result = fit(X, y)
        for arr in (result.coefficients, result.standard_errors, result.residuals, result.covariance):
            with pytest.raises(ValueError):
                arr[0] = 0.0

    def test_p_values_in_unit_interval(self, simple_regression_data):
        X, y, _ = simple_regression_data
        pv = fit(X, y).p_values
        assert np.all((pv >= 0.0) & (pv <= 1.0))

    def test_refit_equal(self, simple_regression_data):
        X, y, _ = simple_regression_data
        design = DesignMatrix.from_arrays(X, y)
        a = estimate(design)
        b = estimate(design)
        np.testing.assert_allclose(a.coefficients, b.coefficients, rtol=CPU_FP64.rtol)

    def test_predict_arrays(self, simple_regression_data):
        X, y, _ = simple_regression_data
        result = fit(X, y)
        np.testing.assert_allclose(result.predict(X), result.fitted_values)

    def test_repr(self, simple_regression_data):
        X, y, _ = simple_regression_data
        assert repr(fit(X, y)).startswith("RegressionResult(nobs=100")
