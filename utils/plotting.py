"""Plotly chart builders. Every builder takes the ``PlotTheme`` it should use."""
import math

import plotly.express as px
import plotly.graph_objects as go

from utils.config import DEFAULT_THEME
from utils.constants import (
    SUBJECT_COL, TIME_COL, VALUE_COL, CLUSTER_COL, TRAJECTORY_LABELS, LISTING_LABELS,
)


def apply_common_layout(fig, title=None, height=None, theme=DEFAULT_THEME):
    """Apply the theme's layout settings to a Plotly figure."""
    top, bottom, left, right = theme.margin
    fig.update_layout(
        template=theme.template,
        height=height or theme.height,
        title=title,
        title_x=theme.title_x,
        margin=dict(t=top, b=bottom, l=left, r=right),
    )
    return fig


def trajectory_chart(annotated, theme=DEFAULT_THEME, fits=None, title="Trajectories by cluster",
                     subject_col=SUBJECT_COL, time_col=TIME_COL, value_col=VALUE_COL, labels=None):
    """One line per subject, colored by cluster; optional dashed fitted trend per subject."""
    lab = {**TRAJECTORY_LABELS, **(labels or {})}
    fig = go.Figure()
    shown = set()
    fit_by_subject = {f.subject_id: f for f in (fits or [])}

    for subject_id, series in annotated.sort_values(time_col).groupby(subject_col, sort=False):
        cluster_id = int(series[CLUSTER_COL].iloc[0])
        color = theme.cluster_color(cluster_id)
        fig.add_trace(go.Scatter(
            x=series[time_col], y=series[value_col],
            mode="lines+markers",
            name=f"Cluster {cluster_id}",
            legendgroup=str(cluster_id),
            showlegend=cluster_id not in shown,
            line=dict(color=color, width=theme.line_width),
            marker=dict(color=color, size=theme.marker_size),
            opacity=theme.opacity,
            hovertext=f"{subject_id}",
        ))
        shown.add(cluster_id)

        fit = fit_by_subject.get(subject_id)
        if fit is not None:
            t = series[time_col].agg(["min", "max"]).to_numpy()
            fig.add_trace(go.Scatter(
                x=t, y=fit.predict(t), mode="lines",
                legendgroup=str(cluster_id), showlegend=False,
                line=dict(color=color, width=theme.line_width, dash="dash"),
                hoverinfo="skip",
            ))

    apply_common_layout(fig, title=title, theme=theme)
    fig.update_xaxes(title_text=lab.get(time_col, time_col))
    fig.update_yaxes(title_text=lab.get(value_col, value_col))
    return fig


def feature_scatter(features, assignments, centroids=None, theme=DEFAULT_THEME,
                    x="intercept", y="slope", title="Subjects in (intercept, slope) space"):
    """Scatter of per-subject features colored by cluster, with centroids marked."""
    plot_df = features.reset_index()
    plot_df[CLUSTER_COL] = assignments.reindex(features.index).astype(int).astype(str).to_numpy()
    order = sorted(plot_df[CLUSTER_COL].unique(), key=int)
    fig = px.scatter(
        plot_df, x=x, y=y, color=CLUSTER_COL,
        hover_name=plot_df.columns[0],
        color_discrete_map=theme.cluster_color_map(order),
        category_orders={CLUSTER_COL: order},
        labels={**TRAJECTORY_LABELS, **LISTING_LABELS},
    )
    fig.update_traces(marker=dict(size=theme.marker_size * 2))
    if centroids is not None:
        fig.add_trace(go.Scatter(
            x=centroids[x], y=centroids[y], mode="markers", name="Centroids",
            marker=dict(color="black", size=15, symbol="x", line=dict(width=2)),
        ))
    return apply_common_layout(fig, title=title, theme=theme)


def coefficient_path_chart(path_df, selected_alpha=None, theme=DEFAULT_THEME, labels=None,
                           title="Lasso: Coefficient Paths"):
    """Coefficient vs alpha (log x) for each feature."""
    lab = {**LISTING_LABELS, **(labels or {})}
    fig = go.Figure()
    for j, (feature, part) in enumerate(path_df.groupby("feature", sort=False)):
        fig.add_trace(go.Scatter(
            x=part["alpha"], y=part["coef"], mode="lines",
            name=lab.get(feature, feature),
            line=dict(color=theme.cluster_colors[j % len(theme.cluster_colors)], width=2),
        ))
    fig.add_hline(y=0, line_dash="dash", line_color="gray", line_width=0.5)
    if selected_alpha is not None:
        # shapes on a log axis take log10 coordinates
        fig.add_vline(x=math.log10(selected_alpha), line_dash="dot", line_color="#F4A261",
                      annotation_text=f"alpha = {selected_alpha:.4g}")
    apply_common_layout(fig, title=title, theme=theme)
    fig.update_xaxes(title_text="Alpha (log scale)", type="log")
    fig.update_yaxes(title_text="Coefficient (standardized)")
    return fig


def cv_curve_chart(cv_curve, best_alpha=None, theme=DEFAULT_THEME, title="Cross-validated MSE vs alpha"):
    """Mean CV error with a one-standard-deviation band."""
    fig = go.Figure()
    upper = cv_curve["mse_mean"] + cv_curve["mse_std"]
    lower = cv_curve["mse_mean"] - cv_curve["mse_std"]
    fig.add_trace(go.Scatter(
        x=list(cv_curve["alpha"]) + list(cv_curve["alpha"][::-1]),
        y=list(upper) + list(lower[::-1]),
        fill="toself", fillcolor="rgba(42,157,143,0.2)", line=dict(width=0),
        name="+/- 1 std", hoverinfo="skip",
    ))
    fig.add_trace(go.Scatter(
        x=cv_curve["alpha"], y=cv_curve["mse_mean"], mode="lines",
        name="Mean CV MSE", line=dict(color="#2A9D8F", width=2),
    ))
    if best_alpha is not None:
        fig.add_vline(x=math.log10(best_alpha), line_dash="dash", line_color="#E63946",
                      annotation_text=f"best alpha = {best_alpha:.4g}")
    apply_common_layout(fig, title=title, theme=theme)
    fig.update_xaxes(title_text="Alpha (log scale)", type="log")
    fig.update_yaxes(title_text="Mean squared error")
    return fig


def elbow_chart(elbow_df, chosen_k=None, theme=DEFAULT_THEME, title="Elbow Plot: Inertia vs K"):
    fig = go.Figure()
    fig.add_trace(go.Scatter(
        x=elbow_df["k"], y=elbow_df["inertia"], mode="lines+markers", name="Inertia",
        line=dict(color="#2E86C1", width=3), marker=dict(size=10),
    ))
    if chosen_k is not None:
        fig.add_vline(x=chosen_k, line_dash="dash", line_color="gray", annotation_text=f"K={chosen_k}")
    apply_common_layout(fig, title=title, height=400, theme=theme)
    fig.update_layout(xaxis_title="Number of Clusters (K)", yaxis_title="Inertia")
    return fig


def listings_location_chart(listings, theme=DEFAULT_THEME, title="Where the listings are"):
    """Longitude/latitude scatter colored by room type."""
    fig = px.scatter(
        listings, x="longitude", y="latitude", color="room_type",
        color_discrete_map=theme.room_type_color_map(),
        hover_name="name" if "name" in listings else None,
        hover_data=["price", "neighbourhood_group"],
        labels=LISTING_LABELS, opacity=theme.opacity,
    )
    fig.update_traces(marker=dict(size=4))
    fig.update_yaxes(scaleanchor="x", scaleratio=1.3)
    return apply_common_layout(fig, title=title, theme=theme)


def price_histogram(listings, theme=DEFAULT_THEME, nbins=60, log_x=False, title="Nightly price distribution"):
    fig = px.histogram(
        listings, x="price", color="room_type", nbins=nbins, log_x=log_x,
        color_discrete_map=theme.room_type_color_map(),
        labels=LISTING_LABELS, barmode="overlay", opacity=theme.opacity,
    )
    return apply_common_layout(fig, title=title, theme=theme)


def room_type_price_chart(price_table, theme=DEFAULT_THEME, title="Median price by room type"):
    """Bar of median price with interquartile error bars, from ``listings.price_by_room_type``."""
    table = price_table.reset_index()
    colors = theme.room_type_color_map()
    fig = go.Figure(go.Bar(
        x=table["room_type"], y=table["median_price"],
        marker_color=[colors.get(r, "#8D99AE") for r in table["room_type"]],
        error_y=dict(
            type="data", symmetric=False,
            array=table["q75_price"] - table["median_price"],
            arrayminus=table["median_price"] - table["q25_price"],
        ),
        text=table["listings"], texttemplate="n=%{text}", textposition="outside",
    ))
    apply_common_layout(fig, title=title, theme=theme)
    fig.update_yaxes(title_text=LISTING_LABELS["price"])
    return fig
