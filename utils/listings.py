"""Short-term rental listings: cleaning, filter state, and the dashboard's derived view.

The dashboard never reads widget state from inside these functions. Every
interaction builds a ``FilterState`` and calls ``on_filters_changed``, which
returns a fresh ``ListingsView``.
"""
import dataclasses
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd

from utils.constants import (
    LISTING_COLUMNS, LISTING_NUMERIC_COLS, NEIGHBOURHOOD_GROUPS, ROOM_TYPES,
)

log = logging.getLogger(__name__)

REQUIRED_COLUMNS = ["neighbourhood_group", "room_type", "price", "latitude", "longitude"]


def parse_price(values):
    """Turn strings like ``"$1,234.00"`` into floats; blanks become NaN."""
    s = pd.Series(values)
    if pd.api.types.is_numeric_dtype(s):
        return s.astype(float)
    cleaned = s.astype(str).str.replace(r"[$,\s]", "", regex=True)
    return pd.to_numeric(cleaned, errors="coerce").astype(float)


def clean_listings(raw):
    """Normalize a raw listings export to the columns the dashboard uses."""
    missing = [c for c in REQUIRED_COLUMNS if c not in raw.columns]
    if missing:
        raise ValueError(f"listings data is missing column(s): {missing}")

    df = raw[[c for c in LISTING_COLUMNS if c in raw.columns]].copy()
    df["price"] = parse_price(df["price"]).to_numpy()
    for col in LISTING_NUMERIC_COLS:
        if col in df.columns and col != "price":
            df[col] = pd.to_numeric(df[col], errors="coerce")
    if "reviews_per_month" in df.columns:
        # no reviews yet rather than unknown
        df["reviews_per_month"] = df["reviews_per_month"].fillna(0.0)

    before = len(df)
    df = df.dropna(subset=REQUIRED_COLUMNS)
    df = df[df["price"] > 0].reset_index(drop=True)
    if len(df) < before:
        log.info("Dropped %d listing(s) without a usable price or location", before - len(df))
    return df


@dataclass(frozen=True)
class FilterState:
    """Everything the dashboard's sidebar controls.

    ``None`` for a collection means "no restriction".
    """

    neighbourhood_groups: tuple = None
    room_types: tuple = None
    price_range: tuple = (0.0, float("inf"))
    max_minimum_nights: int = None
    min_reviews: int = 0

    @classmethod
    def default_for(cls, listings):
        """State that keeps every listing."""
        nights = listings["minimum_nights"].dropna() if "minimum_nights" in listings else pd.Series(dtype=float)
        return cls(
            neighbourhood_groups=tuple(sorted(listings["neighbourhood_group"].unique())),
            room_types=tuple(sorted(listings["room_type"].unique())),
            price_range=(float(listings["price"].min()), float(listings["price"].max())),
            max_minimum_nights=int(nights.max()) if len(nights) else None,
            min_reviews=0,
        )

    def replace(self, **changes):
        return dataclasses.replace(self, **changes)


def apply_filters(listings, state):
    """Rows of ``listings`` that pass every active filter (a copy)."""
    lo, hi = state.price_range
    if lo > hi:
        raise ValueError(f"price range is inverted: {state.price_range}")

    mask = listings["price"].between(lo, hi)
    if state.neighbourhood_groups is not None:
        mask &= listings["neighbourhood_group"].isin(state.neighbourhood_groups)
    if state.room_types is not None:
        mask &= listings["room_type"].isin(state.room_types)
    if state.max_minimum_nights is not None and "minimum_nights" in listings:
        # a listing with no stated minimum is not excluded by a cap
        nights = listings["minimum_nights"]
        mask &= nights.le(state.max_minimum_nights) | nights.isna()
    if state.min_reviews and "number_of_reviews" in listings:
        mask &= listings["number_of_reviews"] >= state.min_reviews
    return listings[mask].copy()


@dataclass
class ListingsSummary:
    count: int
    median_price: float
    mean_price: float
    mean_availability: float
    entire_home_share: float


@dataclass
class ListingsView:
    """What the dashboard renders for one filter state."""

    state: FilterState
    listings: pd.DataFrame
    summary: ListingsSummary
    price_by_room_type: pd.DataFrame

    @property
    def is_empty(self):
        return self.summary.count == 0


def summarize_view(listings):
    """Headline numbers for a (possibly empty) set of listings."""
    n = len(listings)
    if n == 0:
        return ListingsSummary(0, float("nan"), float("nan"), float("nan"), float("nan"))
    availability = listings["availability_365"].mean() if "availability_365" in listings else float("nan")
    return ListingsSummary(
        count=n,
        median_price=float(listings["price"].median()),
        mean_price=float(listings["price"].mean()),
        mean_availability=float(availability),
        entire_home_share=float((listings["room_type"] == "Entire home/apt").mean()),
    )


def price_by_room_type(listings):
    """Listing count and price quartiles per room type."""
    grouped = listings.groupby("room_type")["price"]
    table = pd.DataFrame({
        "listings": grouped.size(),
        "median_price": grouped.median(),
        "q25_price": grouped.quantile(0.25),
        "q75_price": grouped.quantile(0.75),
    })
    return table.sort_values("listings", ascending=False)


def on_filters_changed(listings, state):
    """Recompute the dashboard view for a new filter state."""
    filtered = apply_filters(listings, state)
    log.debug("Filter state %s kept %d of %d listing(s)", state, len(filtered), len(listings))
    return ListingsView(
        state=state,
        listings=filtered,
        summary=summarize_view(filtered),
        price_by_room_type=price_by_room_type(filtered),
    )


def clustering_sample(listings, features, n=3000, seed=42):
    """Up to ``n`` random listings with every clustering feature present."""
    complete = listings.dropna(subset=list(features))
    if len(complete) < len(listings):
        log.info("Skipping %d listing(s) with missing %s", len(listings) - len(complete), list(features))
    return complete.sample(min(n, len(complete)), random_state=seed)


def simulate_listings(n=1500, seed=42):
    """Synthetic listings with plausible borough, room-type and price structure."""
    rng = np.random.RandomState(seed)
    groups = list(NEIGHBOURHOOD_GROUPS)
    group_p = np.array([0.42, 0.38, 0.13, 0.05, 0.02])
    room_types = ROOM_TYPES
    room_p = np.array([0.52, 0.44, 0.02, 0.02])
    base_price = {"Manhattan": 210, "Brooklyn": 140, "Queens": 100, "Bronx": 85, "Staten Island": 95}
    room_factor = {"Entire home/apt": 1.0, "Private room": 0.45, "Shared room": 0.3, "Hotel room": 1.3}

    group = rng.choice(groups, size=n, p=group_p)
    room = rng.choice(room_types, size=n, p=room_p)
    centre = np.array([NEIGHBOURHOOD_GROUPS[g] for g in group])
    price = np.array([base_price[g] * room_factor[r] for g, r in zip(group, room)])
    price = np.round(price * rng.lognormal(0, 0.45, size=n))
    reviews = rng.negative_binomial(1, 0.04, size=n)
    months_listed = rng.uniform(1, 60, size=n)

    df = pd.DataFrame({
        "id": np.arange(1, n + 1),
        "name": [f"{r} in {g}" for g, r in zip(group, room)],
        "neighbourhood_group": group,
        "neighbourhood": group,
        "latitude": centre[:, 0] + rng.normal(0, 0.025, size=n),
        "longitude": centre[:, 1] + rng.normal(0, 0.025, size=n),
        "room_type": room,
        "price": np.maximum(price, 10.0),
        "minimum_nights": rng.choice([1, 2, 3, 5, 7, 30], size=n, p=[0.3, 0.25, 0.2, 0.1, 0.05, 0.1]),
        "number_of_reviews": reviews,
        "reviews_per_month": np.round(reviews / months_listed, 2),
        "availability_365": rng.randint(0, 366, size=n),
    })
    return df
