"""Tests for the chart builders."""

import pandas as pd

from utils.config import PlotTheme
from utils.listings import price_by_room_type
from utils.plotting import (
    apply_common_layout,
    coefficient_path_chart,
    cv_curve_chart,
    elbow_chart,
    feature_scatter,
    listings_location_chart,
    price_histogram,
    room_type_price_chart,
    trajectory_chart,
)
from utils.trajectories import cluster_trajectories
import plotly.graph_objects as go


class TestLayout:
    def test_theme_is_applied(self):
        theme = PlotTheme(template="simple_white", height=321)
        fig = apply_common_layout(go.Figure(), title="t", theme=theme)
        assert fig.layout.height == 321
        assert fig.layout.title.text == "t"

    def test_explicit_height_wins(self):
        fig = apply_common_layout(go.Figure(), height=200)
        assert fig.layout.height == 200


class TestTrajectoryCharts:
    def test_one_trace_per_subject(self, noisy_obs):
        result = cluster_trajectories(noisy_obs, k=2, seed=0)
        fig = trajectory_chart(result.annotated)
        assert len(fig.data) == 3
        # one legend entry per cluster present
        legend = [t.name for t in fig.data if t.showlegend]
        assert sorted(legend) == sorted({f"Cluster {c}" for c in result.assignments})

    def test_fitted_lines_added(self, noisy_obs):
        result = cluster_trajectories(noisy_obs, k=1, seed=0)
        fig = trajectory_chart(result.annotated, fits=result.fits)
        assert len(fig.data) == 6

    def test_colors_follow_theme(self, two_subject_obs):
        theme = PlotTheme(cluster_colors=("#000000",))
        result = cluster_trajectories(two_subject_obs, k=1, seed=0)
        fig = trajectory_chart(result.annotated, theme=theme)
        assert all(t.line.color == "#000000" for t in fig.data)

    def test_feature_scatter_marks_centroids(self, simulated_obs):
        result = cluster_trajectories(simulated_obs, k=2, seed=0)
        fig = feature_scatter(result.features, result.assignments, result.clusters.centroids)
        assert fig.data[-1].name == "Centroids"
        assert len(fig.data[-1].x) == 2


class TestModelCharts:
    def test_coefficient_path_one_trace_per_feature(self):
        path = pd.DataFrame({
            "alpha": [0.1, 1.0, 0.1, 1.0],
            "feature": ["a", "a", "b", "b"],
            "coef": [1.0, 0.0, -1.0, 0.0],
        })
        fig = coefficient_path_chart(path, selected_alpha=0.1)
        assert len(fig.data) == 2
        assert fig.layout.xaxis.type == "log"

    def test_cv_curve_has_band_and_mean(self):
        cv = pd.DataFrame({"alpha": [0.01, 0.1, 1.0], "mse_mean": [1.0, 0.8, 1.5], "mse_std": [0.1, 0.1, 0.2]})
        fig = cv_curve_chart(cv, best_alpha=0.1)
        assert len(fig.data) == 2
        assert len(fig.data[0].x) == 6

    def test_elbow_chart(self):
        fig = elbow_chart(pd.DataFrame({"k": [1, 2, 3], "inertia": [10.0, 4.0, 3.0]}), chosen_k=2)
        assert list(fig.data[0].y) == [10.0, 4.0, 3.0]


class TestListingCharts:
    def test_charts_build(self, listings):
        assert len(listings_location_chart(listings).data) >= 1
        assert len(price_histogram(listings, log_x=True).data) >= 1
        table = price_by_room_type(listings)
        fig = room_type_price_chart(table)
        assert list(fig.data[0].x) == table.index.tolist()
