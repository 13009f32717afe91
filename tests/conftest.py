"""Shared fixtures for the analysis tests."""

import pandas as pd
import pytest

from utils.listings import clean_listings, simulate_listings
from utils.trajectories import simulate_trajectories


@pytest.fixture
def two_subject_obs() -> pd.DataFrame:
    """A rises from 1 to 3, B falls from 10 to 8."""
    return pd.DataFrame({
        "subject_id": ["A", "A", "B", "B"],
        "time_index": [0, 1, 0, 1],
        "value": [1.0, 3.0, 10.0, 8.0],
    })


@pytest.fixture
def noisy_obs() -> pd.DataFrame:
    """Three subjects with five uneven, noisy points each."""
    return pd.DataFrame({
        "subject_id": ["s1"] * 5 + ["s2"] * 5 + ["s3"] * 5,
        "time_index": [0, 1, 2, 4, 7] * 3,
        "value": [
            2.0, 2.9, 4.2, 6.1, 9.0,
            5.0, 4.1, 3.3, 1.2, -1.9,
            0.5, 0.4, 0.6, 0.5, 0.7,
        ],
    })


@pytest.fixture
def simulated_obs() -> pd.DataFrame:
    return simulate_trajectories(n_subjects=20, n_times=10, n_groups=2, seed=7)


@pytest.fixture
def listings() -> pd.DataFrame:
    return clean_listings(simulate_listings(n=400, seed=3))
