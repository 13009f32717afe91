"""Chapter 4: Listings Dashboard -- filter short-term rentals and see the market change."""
import streamlit as st

from utils.config import DEFAULT_THEME
from utils.constants import LISTING_LABELS
from utils.data_loader import get_settings, load_listings, sidebar_listing_filters
from utils.listings import on_filters_changed
from utils.plotting import listings_location_chart, price_histogram, room_type_price_chart
from utils.stats_helpers import descriptive_stats, compare_groups
from utils.ui_components import chapter_header, concept_box, insight_box, navigation

# ── Page config ──────────────────────────────────────────────────────────────
st.set_page_config(page_title="Ch 4: Listings Dashboard", layout="wide")
settings = get_settings()
listings = load_listings(seed=settings.seed)
theme = DEFAULT_THEME

state = sidebar_listing_filters(listings)
view = on_filters_changed(listings, state)

chapter_header(4, "Every widget change produces a new filter state, and a new view from it")

concept_box(
    "How This Page Works",
    "The sidebar does not filter anything itself. It builds a <b>filter state</b> (boroughs, "
    "room types, price range, minimum nights, review count) and hands it, together with the "
    "full listings table, to one function that returns the filtered listings and their summary. "
    "Same state in, same view out.",
)

if view.is_empty:
    st.warning("No listings match these filters. Widen the price range or add boroughs.")
    navigation(4)
    st.stop()

s = view.summary
m1, m2, m3, m4 = st.columns(4)
m1.metric("Listings", f"{s.count:,}", delta=f"{s.count - len(listings):,} vs all")
m2.metric("Median price", f"${s.median_price:,.0f}")
m3.metric("Mean availability", f"{s.mean_availability:.0f} days")
m4.metric("Entire homes", f"{s.entire_home_share:.0%}")

c1, c2 = st.columns(2)
with c1:
    st.plotly_chart(listings_location_chart(view.listings, theme=theme), use_container_width=True)
with c2:
    log_x = st.checkbox("Log price axis", value=False, key="dash_logx")
    st.plotly_chart(price_histogram(view.listings, theme=theme, log_x=log_x), use_container_width=True)

st.plotly_chart(room_type_price_chart(view.price_by_room_type, theme=theme), use_container_width=True)

st.subheader("Price Summary")
price_stats = descriptive_stats(view.listings["price"])
st.dataframe(
    {k: [round(float(v), 2)] for k, v in price_stats.items()},
    use_container_width=True, hide_index=True,
)

borough_test = compare_groups(view.listings["price"], view.listings["neighbourhood_group"])
if borough_test["test"] is not None:
    insight_box(
        f"Across the {borough_test['n_groups']} boroughs in view, the price difference test "
        f"({borough_test['test']}) gives p = {borough_test['p_value']:.3g}. With thousands of "
        "listings almost any difference is 'significant'; the medians above tell you whether it matters."
    )

with st.expander("Filtered listings"):
    st.dataframe(
        view.listings.rename(columns=LISTING_LABELS).head(500),
        use_container_width=True, hide_index=True,
    )

navigation(4)
