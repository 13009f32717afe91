"""Regression helpers for the lasso chapter: data prep, metrics, paths, CV."""
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from sklearn.linear_model import Lasso, LassoCV, LinearRegression
from sklearn.metrics import mean_squared_error, r2_score, mean_absolute_error
from sklearn.model_selection import KFold, train_test_split
from sklearn.preprocessing import StandardScaler

log = logging.getLogger(__name__)

ZERO_TOL = 1e-10


@dataclass
class LassoFit:
    """Cross-validated lasso: the chosen alpha and what it kept."""

    alpha: float
    coef: pd.Series
    intercept: float
    cv_curve: pd.DataFrame  # alpha, mse_mean, mse_std

    @property
    def selected_features(self):
        return [name for name, c in self.coef.items() if abs(c) > ZERO_TOL]

    @property
    def dropped_features(self):
        return [name for name, c in self.coef.items() if abs(c) <= ZERO_TOL]


def prepare_regression_data(df, features, target, test_size=0.2, scale=True, seed=42):
    """Split into train/test and optionally standardize using train statistics only."""
    clean = df[features + [target]].dropna()
    if len(clean) < len(df):
        log.info("Dropped %d row(s) with missing values before the split", len(df) - len(clean))
    X = clean[features]
    y = clean[target]

    X_train, X_test, y_train, y_test = train_test_split(
        X, y, test_size=test_size, random_state=seed
    )

    scaler = None
    if scale:
        scaler = StandardScaler()
        X_train = pd.DataFrame(scaler.fit_transform(X_train), columns=features, index=X_train.index)
        X_test = pd.DataFrame(scaler.transform(X_test), columns=features, index=X_test.index)

    return X_train, X_test, y_train, y_test, scaler


def regression_metrics(y_true, y_pred):
    """Compute regression metrics."""
    mse = mean_squared_error(y_true, y_pred)
    return {
        "mse": mse,
        "rmse": np.sqrt(mse),
        "mae": mean_absolute_error(y_true, y_pred),
        "r2": r2_score(y_true, y_pred),
    }


def _feature_names(X):
    if hasattr(X, "columns"):
        return list(X.columns)
    return [f"x{j}" for j in range(np.asarray(X).shape[1])]


def ols_coefficients(X, y):
    """Unpenalized baseline coefficients, indexed by feature name."""
    model = LinearRegression().fit(X, y)
    return pd.Series(model.coef_, index=_feature_names(X), name="ols")


def lasso_path_frame(X, y, alphas, max_iter=10000):
    """Refit lasso at each alpha; long frame of (alpha, feature, coef)."""
    names = _feature_names(X)
    rows = []
    for a in alphas:
        model = Lasso(alpha=a, max_iter=max_iter).fit(X, y)
        for name, c in zip(names, model.coef_):
            rows.append({"alpha": float(a), "feature": name, "coef": float(c)})
    return pd.DataFrame(rows, columns=["alpha", "feature", "coef"])


def fit_lasso_cv(X, y, cv=5, seed=42, alphas=None, max_iter=10000):
    """Choose alpha by k-fold cross-validated MSE and refit on all of X."""
    folds = KFold(n_splits=cv, shuffle=True, random_state=seed)
    extra = {} if alphas is None else {"alphas": alphas}
    model = LassoCV(cv=folds, max_iter=max_iter, random_state=seed, **extra)
    model.fit(X, y)

    # mse_path_ is (n_alphas, n_folds), but collapses to (n_folds,) for a single alpha
    mse = np.reshape(model.mse_path_, (len(model.alphas_), -1))
    cv_curve = pd.DataFrame({
        "alpha": model.alphas_,
        "mse_mean": mse.mean(axis=1),
        "mse_std": mse.std(axis=1),
    }).sort_values("alpha").reset_index(drop=True)

    fit = LassoFit(
        alpha=float(model.alpha_),
        coef=pd.Series(model.coef_, index=_feature_names(X), name="lasso"),
        intercept=float(model.intercept_),
        cv_curve=cv_curve,
    )
    log.info("LassoCV picked alpha=%.5f; kept %d of %d feature(s)",
             fit.alpha, len(fit.selected_features), len(fit.coef))
    return fit
