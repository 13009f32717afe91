"""Tests for the lasso helpers."""

import numpy as np
import pandas as pd
import pytest

from utils.ml_helpers import (
    fit_lasso_cv,
    lasso_path_frame,
    ols_coefficients,
    prepare_regression_data,
    regression_metrics,
)


@pytest.fixture
def sparse_data():
    """y depends on x0 and x1 only."""
    rng = np.random.RandomState(0)
    X = pd.DataFrame(rng.normal(size=(300, 5)), columns=[f"x{j}" for j in range(5)])
    y = 3.0 * X["x0"] - 2.0 * X["x1"] + rng.normal(scale=0.1, size=300)
    return X, pd.Series(y, name="y")


class TestPrepareRegressionData:
    def test_split_sizes_and_scaling(self, sparse_data):
        X, y = sparse_data
        df = X.assign(y=y)
        X_train, X_test, y_train, y_test, scaler = prepare_regression_data(
            df, list(X.columns), "y", test_size=0.2, scale=True, seed=1,
        )
        assert len(X_train) == 240 and len(X_test) == 60
        assert len(y_train) == 240
        assert np.allclose(X_train.mean(), 0.0, atol=1e-12)
        assert scaler is not None

    def test_drops_missing_rows(self, sparse_data):
        X, y = sparse_data
        df = X.assign(y=y)
        df.loc[:9, "x0"] = np.nan
        X_train, X_test, _, _, scaler = prepare_regression_data(df, list(X.columns), "y", scale=False)
        assert len(X_train) + len(X_test) == 290
        assert scaler is None


class TestRegressionMetrics:
    def test_perfect_prediction(self):
        m = regression_metrics([1.0, 2.0, 3.0], [1.0, 2.0, 3.0])
        assert m["mse"] == 0.0
        assert m["rmse"] == 0.0
        assert m["r2"] == 1.0

    def test_known_errors(self):
        m = regression_metrics([0.0, 0.0], [1.0, -3.0])
        assert m["mse"] == pytest.approx(5.0)
        assert m["mae"] == pytest.approx(2.0)
        assert m["rmse"] == pytest.approx(np.sqrt(5.0))


class TestLasso:
    def test_ols_recovers_coefficients(self, sparse_data):
        X, y = sparse_data
        coef = ols_coefficients(X, y)
        assert coef["x0"] == pytest.approx(3.0, abs=0.05)
        assert coef["x1"] == pytest.approx(-2.0, abs=0.05)

    def test_path_frame_shape(self, sparse_data):
        X, y = sparse_data
        alphas = [0.001, 0.1, 100.0]
        path = lasso_path_frame(X, y, alphas)
        assert len(path) == len(alphas) * X.shape[1]
        assert set(path["feature"]) == set(X.columns)
        # a huge penalty zeroes everything
        assert (path.loc[path["alpha"] == 100.0, "coef"].abs() < 1e-10).all()

    def test_path_without_column_names(self, sparse_data):
        X, y = sparse_data
        path = lasso_path_frame(X.to_numpy(), y.to_numpy(), [0.01])
        assert path["feature"].tolist() == ["x0", "x1", "x2", "x3", "x4"]

    def test_cv_keeps_informative_features(self, sparse_data):
        X, y = sparse_data
        alphas = np.logspace(-3, 0, 20)
        fit = fit_lasso_cv(X, y, cv=5, seed=0, alphas=alphas)
        assert {"x0", "x1"} <= set(fit.selected_features)
        assert fit.coef["x0"] == pytest.approx(3.0, abs=0.2)
        assert fit.coef["x1"] == pytest.approx(-2.0, abs=0.2)
        assert len(fit.cv_curve) == len(alphas)
        assert fit.cv_curve["alpha"].is_monotonic_increasing
        assert np.isclose(alphas, fit.alpha).any()

    def test_selected_and_dropped_partition_features(self, sparse_data):
        X, y = sparse_data
        fit = fit_lasso_cv(X, y, cv=3, seed=0, alphas=[0.5])
        assert sorted(fit.selected_features + fit.dropped_features) == sorted(X.columns)
        assert "x2" in fit.dropped_features

    def test_single_alpha_gives_one_row_curve(self, sparse_data):
        X, y = sparse_data
        fit = fit_lasso_cv(X, y, cv=4, seed=0, alphas=[0.1])
        assert fit.alpha == pytest.approx(0.1)
        assert len(fit.cv_curve) == 1
        assert fit.cv_curve.loc[0, "mse_mean"] > 0
        assert fit.cv_curve.loc[0, "mse_std"] >= 0
