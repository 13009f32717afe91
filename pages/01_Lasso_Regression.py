"""Chapter 1: Lasso Regression -- L1 penalty, coefficient paths, choosing alpha by cross-validation."""
import streamlit as st
import numpy as np
import pandas as pd
import plotly.graph_objects as go
from sklearn.linear_model import Lasso

from utils.config import DEFAULT_THEME
from utils.constants import LASSO_FEATURES, LASSO_TARGET, LISTING_LABELS
from utils.data_loader import get_settings, load_listings
from utils.ml_helpers import (
    prepare_regression_data, regression_metrics, ols_coefficients, lasso_path_frame, fit_lasso_cv,
)
from utils.plotting import apply_common_layout, coefficient_path_chart, cv_curve_chart
from utils.ui_components import (
    chapter_header, concept_box, formula_box, insight_box, warning_box,
    code_example, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
st.set_page_config(page_title="Ch 1: Lasso Regression", layout="wide")
settings = get_settings()
listings = load_listings(seed=settings.seed)
theme = DEFAULT_THEME

chapter_header(1, "Which listing features actually move the price?")

# ---------------------------------------------------------------------------
# 1. Theory
# ---------------------------------------------------------------------------
concept_box(
    "Lasso: Regression That Is Allowed to Say 'This Feature Does Not Matter'",
    "Ordinary least squares will happily hand every feature a coefficient, no matter how "
    "useless that feature is. The lasso adds a tax on the <b>absolute size</b> of the "
    "coefficients. Pay the tax only if the feature earns its keep; otherwise its coefficient "
    "is pushed all the way to <b>exactly zero</b> and the feature drops out of the model. "
    "Feature selection, for free, as a side effect of fitting.",
)

formula_box(
    "Lasso objective",
    r"\min_\beta \frac{1}{2n}\sum_i (y_i - X_i \beta)^2 + \alpha \sum_{j=1}^{p} |\beta_j|",
    "alpha = 0 is plain OLS. As alpha grows, more coefficients hit zero. At a large enough "
    "alpha everything is zero and the model predicts the mean price for every listing.",
)

warning_box(
    "Standardize first. The penalty treats every coefficient the same, so a feature measured "
    "in big units (days per year) would be penalized differently from one in small units "
    "(reviews per month) purely because of its units."
)

st.divider()

# ---------------------------------------------------------------------------
# 2. Data
# ---------------------------------------------------------------------------
st.subheader("Predicting Log Price from Listing Features")
data = listings[LASSO_FEATURES + [LASSO_TARGET]].dropna().copy()
# prices are heavily right-skewed
data["log_price"] = np.log(data[LASSO_TARGET])

test_size = st.slider("Test fraction", 0.1, 0.5, 0.2, 0.05, key="lasso_test")
X_train, X_test, y_train, y_test, scaler = prepare_regression_data(
    data, LASSO_FEATURES, "log_price", test_size=test_size, scale=True, seed=settings.seed,
)
st.caption(f"{len(X_train):,} training rows, {len(X_test):,} test rows, {len(LASSO_FEATURES)} features.")

# ---------------------------------------------------------------------------
# 3. Coefficient paths
# ---------------------------------------------------------------------------
st.subheader("Watch the Coefficients Die One by One")
alphas = np.logspace(-4, 0, 60)
path = lasso_path_frame(X_train, y_train, alphas)

alpha_exp = st.slider(
    "Alpha (log10)", min_value=-4.0, max_value=0.0, value=-2.0, step=0.1,
    format="10^%.1f", key="lasso_alpha",
)
alpha = 10 ** alpha_exp
st.plotly_chart(coefficient_path_chart(path, selected_alpha=alpha, theme=theme), use_container_width=True)

model = Lasso(alpha=alpha, max_iter=10000).fit(X_train, y_train)
ols = ols_coefficients(X_train, y_train)
test_m = regression_metrics(y_test, model.predict(X_test))

met1, met2, met3 = st.columns(3)
met1.metric("Test R-squared", f"{test_m['r2']:.4f}")
met2.metric("Test RMSE (log $)", f"{test_m['rmse']:.3f}")
met3.metric("Features kept", f"{int(np.sum(np.abs(model.coef_) > 1e-10))} / {len(LASSO_FEATURES)}")

coef_table = pd.DataFrame({
    "Feature": [LISTING_LABELS.get(f, f) for f in LASSO_FEATURES],
    "OLS": ols.round(4).to_numpy(),
    "Lasso": np.round(model.coef_, 4),
    "Zeroed Out": np.abs(model.coef_) < 1e-10,
})
st.dataframe(coef_table, use_container_width=True, hide_index=True)

fig_bar = go.Figure()
labels = coef_table["Feature"]
fig_bar.add_trace(go.Bar(x=labels, y=coef_table["OLS"], name="OLS", marker_color="#264653", opacity=0.7))
fig_bar.add_trace(go.Bar(x=labels, y=coef_table["Lasso"], name="Lasso", marker_color="#E63946", opacity=0.7))
fig_bar.add_hline(y=0, line_color="gray")
apply_common_layout(fig_bar, title=f"OLS vs Lasso Coefficients (alpha={alpha:.4f})", theme=theme)
st.plotly_chart(fig_bar, use_container_width=True)

st.divider()

# ---------------------------------------------------------------------------
# 4. Cross-validation
# ---------------------------------------------------------------------------
st.subheader("Let Cross-Validation Pick Alpha")
n_folds = st.slider("Folds", 3, 10, 5, key="lasso_folds")
cv_fit = fit_lasso_cv(X_train, y_train, cv=n_folds, seed=settings.seed, alphas=alphas)
st.plotly_chart(cv_curve_chart(cv_fit.cv_curve, best_alpha=cv_fit.alpha, theme=theme), use_container_width=True)

cv_test = regression_metrics(y_test, X_test.to_numpy() @ cv_fit.coef.to_numpy() + cv_fit.intercept)
c1, c2 = st.columns(2)
c1.metric("CV-chosen alpha", f"{cv_fit.alpha:.5f}")
c2.metric("Test R-squared at that alpha", f"{cv_test['r2']:.4f}")

if cv_fit.dropped_features:
    insight_box(
        "Cross-validation decided these features are not worth their penalty: "
        + ", ".join(LISTING_LABELS.get(f, f) for f in cv_fit.dropped_features)
        + ". Nobody told it which ones to drop."
    )
else:
    insight_box(
        "At the cross-validated alpha every feature survives. The penalty still shrinks them, "
        "but none of them is useless enough to be zeroed out."
    )

st.divider()

code_example("""
import numpy as np
from sklearn.linear_model import LassoCV
from sklearn.model_selection import KFold
from sklearn.preprocessing import StandardScaler

X = StandardScaler().fit_transform(df[features])
y = np.log(df["price"])

model = LassoCV(cv=KFold(5, shuffle=True, random_state=42), max_iter=10000).fit(X, y)
print("alpha:", model.alpha_)
print("kept:", [f for f, c in zip(features, model.coef_) if abs(c) > 1e-10])
""")

quiz(
    "Why does the lasso set some coefficients exactly to zero while ridge does not?",
    [
        "The lasso uses a bigger alpha",
        "The absolute-value penalty has a corner at zero",
        "The lasso removes correlated rows",
        "Ridge refuses to converge",
    ],
    correct_idx=1,
    explanation="The L1 penalty is not differentiable at zero, and that corner is where the "
                "optimum lands for any feature whose contribution is smaller than alpha.",
    key="ch1_quiz1",
)

takeaways([
    "The lasso trades a little bias for a sparser, more stable model.",
    "Always standardize before penalizing.",
    "Choose alpha by cross-validation, then check the chosen model on held-out data.",
])

navigation(1)
