"""Runtime settings, plot theme, and logging setup.

Nothing here mutates process-wide state except ``setup_logging``, which
the entry point calls once.
"""
import logging
import os
import sys
from dataclasses import dataclass

from utils.constants import CLUSTER_COLORS, ROOM_TYPE_COLORS

PROJECT_ROOT = os.path.dirname(os.path.dirname(os.path.abspath(__file__)))
DATA_DIR = os.path.join(PROJECT_ROOT, "data")

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"


@dataclass(frozen=True)
class PlotTheme:
    """Visual settings handed to every chart builder in ``utils.plotting``."""

    template: str = "plotly_white"
    height: int = 500
    title_x: float = 0.5
    margin: tuple = (60, 40, 60, 40)  # top, bottom, left, right
    cluster_colors: tuple = tuple(CLUSTER_COLORS)
    room_type_colors: tuple = tuple(ROOM_TYPE_COLORS.items())
    line_width: float = 1.5
    marker_size: int = 6
    opacity: float = 0.7

    def cluster_color(self, cluster_id):
        """Color for a 1-based cluster id, cycling through the palette."""
        return self.cluster_colors[(int(cluster_id) - 1) % len(self.cluster_colors)]

    def cluster_color_map(self, cluster_ids):
        """Map of ``str(cluster_id) -> color`` for plotly express."""
        return {str(c): self.cluster_color(c) for c in cluster_ids}

    def room_type_color_map(self):
        return dict(self.room_type_colors)


DEFAULT_THEME = PlotTheme()


@dataclass(frozen=True)
class Settings:
    """Where data lives and what the analyses default to."""

    listings_path: str = os.path.join(DATA_DIR, "listings.csv")
    trajectories_path: str = os.path.join(DATA_DIR, "trajectories.csv")
    default_k: int = 2
    seed: int = 42
    log_level: str = "INFO"

    @classmethod
    def from_env(cls, environ=None):
        """Build settings from ``LAB_*`` environment variables."""
        env = os.environ if environ is None else environ
        defaults = cls()
        try:
            default_k = int(env.get("LAB_DEFAULT_K", defaults.default_k))
            seed = int(env.get("LAB_SEED", defaults.seed))
        except ValueError as exc:
            raise ValueError(f"LAB_DEFAULT_K and LAB_SEED must be integers: {exc}") from exc
        if default_k < 1:
            raise ValueError(f"LAB_DEFAULT_K must be >= 1, got {default_k}")
        return cls(
            listings_path=env.get("LAB_LISTINGS_PATH", defaults.listings_path),
            trajectories_path=env.get("LAB_TRAJECTORIES_PATH", defaults.trajectories_path),
            default_k=default_k,
            seed=seed,
            log_level=env.get("LAB_LOG_LEVEL", defaults.log_level).upper(),
        )


def setup_logging(level="INFO"):
    """Configure the root logger for console output; safe to call more than once."""
    root = logging.getLogger()
    root.setLevel(level)
    # Streamlit re-runs the entry script on every interaction
    for handler in list(root.handlers):
        if getattr(handler, "_lab_handler", False):
            root.removeHandler(handler)
    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT))
    handler._lab_handler = True
    root.addHandler(handler)
    return root
