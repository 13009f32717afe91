"""Regression & Clustering Lab — Main Entry Point."""
import streamlit as st

st.set_page_config(
    page_title="Regression & Clustering Lab",
    page_icon="📈",
    layout="wide",
    initial_sidebar_state="expanded",
)

from utils.data_loader import get_settings, load_listings, load_trajectories
from utils.constants import PAGE_TITLES, SUBJECT_COL

settings = get_settings()

st.title("Regression & Clustering Lab")
st.subheader("Lasso, k-means, and what happens when you cluster regression lines instead of raw data")

st.markdown("""
Two small datasets, four chapters. The first dataset is a table of short-term rental listings:
price, location, room type, how often they get reviewed, how many days a year they are open.
The second is longitudinal: a handful of subjects measured repeatedly over a series of days.

The chapters go from a familiar tool to a slightly unusual one:

1. **Lasso regression** -- which listing features actually help predict price, and how
   cross-validation picks the penalty
2. **K-means clustering** -- grouping listings with no labels at all
3. **Clustering trajectories** -- fit a line per subject, then cluster the intercepts and slopes
4. **Listings dashboard** -- filter the listings and watch the market summary change

### Course Outline
""")

for number, title in PAGE_TITLES.items():
    st.markdown(f"**Chapter {number}** -- {title}")

st.divider()

listings = load_listings(seed=settings.seed)
trajectories = load_trajectories(seed=settings.seed)

st.subheader("Dataset Preview")
tab1, tab2 = st.tabs(["Listings", "Trajectories"])
with tab1:
    st.dataframe(listings.head(20), use_container_width=True)
    col1, col2, col3 = st.columns(3)
    col1.metric("Listings", f"{len(listings):,}")
    col2.metric("Boroughs", listings["neighbourhood_group"].nunique())
    col3.metric("Median price", f"${listings['price'].median():,.0f}")
with tab2:
    st.dataframe(trajectories.head(20), use_container_width=True)
    col1, col2 = st.columns(2)
    col1.metric("Observations", f"{len(trajectories):,}")
    col2.metric("Subjects", trajectories[SUBJECT_COL].nunique())
