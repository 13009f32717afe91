"""Cached data loading and sidebar controls."""
import logging
import os

import pandas as pd
import streamlit as st

from utils.config import Settings, setup_logging
from utils.constants import SUBJECT_COL, TIME_COL, VALUE_COL
from utils.errors import InvalidObservationsError
from utils.listings import FilterState, clean_listings, simulate_listings
from utils.trajectories import simulate_trajectories

log = logging.getLogger(__name__)


@st.cache_resource
def get_settings():
    """Settings for this process; also configures logging the first time."""
    settings = Settings.from_env()
    setup_logging(settings.log_level)
    return settings


@st.cache_data
def load_listings(path=None, seed=42):
    """Cleaned listings from ``path``; simulated listings if the file does not exist."""
    path = path or get_settings().listings_path
    if not os.path.exists(path):
        log.warning("No listings file at %s; using simulated listings", path)
        return clean_listings(simulate_listings(seed=seed))
    raw = pd.read_csv(path, low_memory=False)
    log.info("Loaded %d raw listing(s) from %s", len(raw), path)
    return clean_listings(raw)


@st.cache_data
def load_trajectories(path=None, seed=42):
    """Long-format (subject_id, time_index, value) observations."""
    path = path or get_settings().trajectories_path
    if not os.path.exists(path):
        log.warning("No trajectories file at %s; using simulated trajectories", path)
        return simulate_trajectories(seed=seed)
    df = pd.read_csv(path)
    missing = [c for c in (SUBJECT_COL, TIME_COL, VALUE_COL) if c not in df.columns]
    if missing:
        raise InvalidObservationsError(f"{path} is missing column(s): {missing}")
    log.info("Loaded %d observation(s) for %d subject(s) from %s",
             len(df), df[SUBJECT_COL].nunique(), path)
    return df


def sidebar_listing_filters(listings):
    """Render the listing filter widgets; return the resulting ``FilterState``."""
    full = FilterState.default_for(listings)
    st.sidebar.header("Filters")
    groups = st.sidebar.multiselect(
        "Borough", full.neighbourhood_groups,
        default=list(full.neighbourhood_groups), key="listing_groups",
    )
    rooms = st.sidebar.multiselect(
        "Room type", full.room_types,
        default=list(full.room_types), key="listing_rooms",
    )
    lo, hi = full.price_range
    price_cap = float(listings["price"].quantile(0.99))
    price_range = (lo, hi)
    if hi > lo:
        price_range = st.sidebar.slider(
            "Nightly price ($)", min_value=lo, max_value=hi,
            value=(lo, max(lo, min(hi, price_cap))), step=1.0, key="listing_price",
        )
    max_nights = full.max_minimum_nights or 1
    if max_nights > 1:
        max_nights = st.sidebar.slider(
            "Maximum minimum-nights", 1, max_nights, value=max_nights, key="listing_nights",
        )
    min_reviews = st.sidebar.number_input(
        "At least this many reviews", min_value=0, value=0, step=1, key="listing_reviews",
    )
    return FilterState(
        neighbourhood_groups=tuple(groups),
        room_types=tuple(rooms),
        price_range=(float(price_range[0]), float(price_range[1])),
        max_minimum_nights=int(max_nights),
        min_reviews=int(min_reviews),
    )


def sidebar_trajectory_controls(n_subjects, default_k=2, default_seed=42):
    """Render clustering controls; return ``(k, standardize, seed)``."""
    st.sidebar.header("Clustering")
    k = 1
    if n_subjects > 1:
        k = st.sidebar.slider("Number of clusters (k)", 1, min(8, n_subjects),
                              min(default_k, n_subjects), key="traj_k")
    standardize = st.sidebar.checkbox("Standardize intercept and slope", value=True, key="traj_std")
    seed = st.sidebar.number_input("Random seed", min_value=0, value=default_seed, step=1, key="traj_seed")
    return int(k), bool(standardize), int(seed)
