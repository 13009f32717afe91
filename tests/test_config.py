"""Tests for settings, plot theme, and logging setup."""

import logging

import pytest

from utils.config import DEFAULT_THEME, PlotTheme, Settings, setup_logging


class TestSettings:
    def test_defaults(self):
        settings = Settings.from_env({})
        assert settings.default_k == 2
        assert settings.seed == 42
        assert settings.log_level == "INFO"
        assert settings.listings_path.endswith("listings.csv")

    def test_env_overrides(self):
        settings = Settings.from_env({
            "LAB_LISTINGS_PATH": "/tmp/l.csv",
            "LAB_DEFAULT_K": "4",
            "LAB_SEED": "7",
            "LAB_LOG_LEVEL": "debug",
        })
        assert settings.listings_path == "/tmp/l.csv"
        assert settings.default_k == 4
        assert settings.seed == 7
        assert settings.log_level == "DEBUG"

    def test_non_integer_rejected(self):
        with pytest.raises(ValueError, match="integers"):
            Settings.from_env({"LAB_SEED": "abc"})

    def test_k_below_one_rejected(self):
        with pytest.raises(ValueError, match=">= 1"):
            Settings.from_env({"LAB_DEFAULT_K": "0"})


class TestPlotTheme:
    def test_cluster_colors_cycle(self):
        theme = PlotTheme(cluster_colors=("red", "blue"))
        assert theme.cluster_color(1) == "red"
        assert theme.cluster_color(2) == "blue"
        assert theme.cluster_color(3) == "red"

    def test_cluster_color_map_keys_are_strings(self):
        assert set(DEFAULT_THEME.cluster_color_map([1, 2])) == {"1", "2"}

    def test_theme_is_hashable_and_immutable(self):
        hash(DEFAULT_THEME)
        with pytest.raises(AttributeError):
            DEFAULT_THEME.height = 10


class TestSetupLogging:
    def test_repeated_calls_do_not_stack_handlers(self):
        root = setup_logging("INFO")
        setup_logging("DEBUG")
        ours = [h for h in root.handlers if getattr(h, "_lab_handler", False)]
        assert len(ours) == 1
        assert root.level == logging.DEBUG
        for h in ours:
            root.removeHandler(h)
