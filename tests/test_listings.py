"""Tests for listings cleaning, filtering, and the dashboard view."""

import numpy as np
import pandas as pd
import pytest

from utils.listings import (
    FilterState,
    apply_filters,
    clean_listings,
    clustering_sample,
    on_filters_changed,
    parse_price,
    price_by_room_type,
    simulate_listings,
    summarize_view,
)


def _raw_rows():
    return pd.DataFrame({
        "id": [1, 2, 3, 4],
        "name": ["a", "b", "c", "d"],
        "neighbourhood_group": ["Brooklyn", "Manhattan", "Queens", "Bronx"],
        "latitude": [40.68, 40.78, 40.72, None],
        "longitude": [-73.94, -73.97, -73.79, -73.86],
        "room_type": ["Private room", "Entire home/apt", "Private room", "Private room"],
        "price": ["$1,200.00", "$85.00", "", "$60.00"],
        "minimum_nights": ["2", "30", "1", "3"],
        "number_of_reviews": [10, 0, 3, 7],
        "reviews_per_month": [0.5, None, 0.1, 0.2],
        "availability_365": [100, 365, 0, 20],
        "host_name": ["x", "y", "z", "w"],
    })


class TestParsePrice:
    def test_currency_strings(self):
        parsed = parse_price(["$1,234.00", "$85.00", "", None])
        assert parsed.iloc[0] == 1234.0
        assert parsed.iloc[1] == 85.0
        assert parsed.iloc[2:].isna().all()

    def test_numeric_passthrough(self):
        parsed = parse_price(pd.Series([10, 20]))
        assert parsed.dtype == float
        assert parsed.tolist() == [10.0, 20.0]


class TestCleanListings:
    def test_drops_unusable_rows(self):
        cleaned = clean_listings(_raw_rows())
        # row 3 has no price, row 4 has no latitude
        assert cleaned["id"].tolist() == [1, 2]
        assert cleaned["price"].tolist() == [1200.0, 85.0]

    def test_coerces_numeric_and_fills_reviews(self):
        cleaned = clean_listings(_raw_rows())
        assert cleaned["minimum_nights"].tolist() == [2, 30]
        assert cleaned.loc[cleaned["id"] == 2, "reviews_per_month"].item() == 0.0

    def test_keeps_only_known_columns(self):
        assert "host_name" not in clean_listings(_raw_rows()).columns

    def test_missing_required_column_raises(self):
        with pytest.raises(ValueError, match="room_type"):
            clean_listings(_raw_rows().drop(columns=["room_type"]))

    def test_non_positive_price_dropped(self):
        raw = _raw_rows()
        raw.loc[0, "price"] = "$0.00"
        assert 1 not in clean_listings(raw)["id"].tolist()


class TestFilters:
    def test_default_state_keeps_everything(self, listings):
        state = FilterState.default_for(listings)
        assert len(apply_filters(listings, state)) == len(listings)

    def test_default_state_keeps_unknown_minimum_nights(self):
        raw = simulate_listings(n=50, seed=1).astype({"minimum_nights": float})
        raw.loc[0, "minimum_nights"] = np.nan
        cleaned = clean_listings(raw)
        assert cleaned["minimum_nights"].isna().sum() == 1
        state = FilterState.default_for(cleaned)
        assert len(apply_filters(cleaned, state)) == len(cleaned)

    def test_nights_cap_keeps_unknown_minimum_nights(self):
        cleaned = clean_listings(simulate_listings(n=50, seed=1).assign(minimum_nights=np.nan))
        state = FilterState.default_for(cleaned).replace(max_minimum_nights=1)
        assert len(apply_filters(cleaned, state)) == len(cleaned)

    def test_room_type_filter(self, listings):
        state = FilterState.default_for(listings).replace(room_types=("Private room",))
        filtered = apply_filters(listings, state)
        assert len(filtered) > 0
        assert (filtered["room_type"] == "Private room").all()

    def test_narrower_price_never_adds_rows(self, listings):
        full = FilterState.default_for(listings)
        lo, hi = full.price_range
        counts = [
            len(apply_filters(listings, full.replace(price_range=(lo, cap))))
            for cap in np.linspace(hi, lo, 6)
        ]
        assert counts == sorted(counts, reverse=True)

    def test_min_reviews_and_nights(self, listings):
        state = FilterState(min_reviews=5, max_minimum_nights=3)
        filtered = apply_filters(listings, state)
        assert (filtered["number_of_reviews"] >= 5).all()
        assert (filtered["minimum_nights"] <= 3).all()

    def test_empty_selection_gives_no_rows(self, listings):
        state = FilterState(neighbourhood_groups=())
        assert apply_filters(listings, state).empty

    def test_inverted_price_range_raises(self, listings):
        with pytest.raises(ValueError, match="inverted"):
            apply_filters(listings, FilterState(price_range=(500.0, 100.0)))

    def test_does_not_modify_input(self, listings):
        before = listings.copy()
        apply_filters(listings, FilterState(room_types=("Shared room",)))
        pd.testing.assert_frame_equal(listings, before)


class TestListingsView:
    def test_view_matches_filtered_rows(self, listings):
        state = FilterState(neighbourhood_groups=("Manhattan", "Brooklyn"))
        view = on_filters_changed(listings, state)
        assert view.state is state
        assert view.summary.count == len(view.listings)
        assert set(view.listings["neighbourhood_group"]) <= {"Manhattan", "Brooklyn"}
        assert view.price_by_room_type["listings"].sum() == view.summary.count

    def test_same_state_same_view(self, listings):
        state = FilterState(price_range=(50.0, 300.0))
        first = on_filters_changed(listings, state)
        second = on_filters_changed(listings, state)
        pd.testing.assert_frame_equal(first.listings, second.listings)
        assert first.summary == second.summary

    def test_empty_view(self, listings):
        view = on_filters_changed(listings, FilterState(room_types=()))
        assert view.is_empty
        assert np.isnan(view.summary.median_price)
        assert view.price_by_room_type.empty

    def test_summary_numbers(self):
        df = pd.DataFrame({
            "price": [100.0, 200.0, 300.0, 400.0],
            "room_type": ["Entire home/apt", "Private room", "Entire home/apt", "Private room"],
            "availability_365": [0, 100, 200, 300],
        })
        s = summarize_view(df)
        assert s.count == 4
        assert s.median_price == 250.0
        assert s.mean_availability == 150.0
        assert s.entire_home_share == 0.5

    def test_price_by_room_type_sorted_by_count(self):
        df = pd.DataFrame({
            "price": [10.0, 20.0, 30.0],
            "room_type": ["Shared room", "Private room", "Private room"],
        })
        table = price_by_room_type(df)
        assert table.index.tolist() == ["Private room", "Shared room"]
        assert table.loc["Private room", "median_price"] == 25.0


class TestSimulateListings:
    def test_reproducible_and_clean(self):
        first = simulate_listings(n=50, seed=9)
        pd.testing.assert_frame_equal(first, simulate_listings(n=50, seed=9))
        assert len(clean_listings(first)) == 50


class TestClusteringSample:
    def test_rows_with_missing_features_skipped(self, listings):
        listings = listings.astype({"availability_365": float})
        listings.loc[listings.index[:5], "availability_365"] = np.nan
        sample = clustering_sample(listings, ["price", "availability_365"], n=10_000, seed=0)
        assert len(sample) == len(listings) - 5
        assert sample[["price", "availability_365"]].notna().all().all()

    def test_sample_size_capped_and_reproducible(self, listings):
        first = clustering_sample(listings, ["price"], n=50, seed=3)
        assert len(first) == 50
        pd.testing.assert_frame_equal(first, clustering_sample(listings, ["price"], n=50, seed=3))
