"""Chapter 2: K-Means Clustering -- grouping listings without labels, and picking K."""
import streamlit as st
import pandas as pd

from utils.config import DEFAULT_THEME
from utils.constants import LISTING_FEATURE_COLS, LISTING_LABELS, CLUSTER_COL
from utils.data_loader import get_settings, load_listings
from utils.errors import AnalysisError
from utils.listings import clustering_sample
from utils.plotting import feature_scatter, elbow_chart
from utils.stats_helpers import cluster_profiles
from utils.trajectories import assign_clusters, elbow_curve
from utils.ui_components import (
    chapter_header, concept_box, formula_box, insight_box, warning_box,
    analysis_error, code_example, quiz, takeaways, navigation,
)

# ── Page config ──────────────────────────────────────────────────────────────
st.set_page_config(page_title="Ch 2: K-Means Clustering", layout="wide")
settings = get_settings()
listings = load_listings(seed=settings.seed)
theme = DEFAULT_THEME

chapter_header(2, "Pick K centers, assign, move the centers, repeat")

concept_box(
    "The K-Means Algorithm",
    "1. <b>Initialize</b> K centroids (we use k-means++, which spreads the starting points out)<br>"
    "2. <b>Assign</b> each point to its nearest centroid (ties go to the lowest-numbered one)<br>"
    "3. <b>Update</b> each centroid to the mean of its points<br>"
    "4. <b>Repeat</b> until assignments stop changing or we hit the iteration cap<br><br>"
    "The result depends on where you start, so we run it several times and keep the best.",
)

formula_box(
    "Objective: within-cluster sum of squares (inertia)",
    r"\min \sum_{c=1}^{K} \sum_{\mathbf{x}_i \in C_c} \|\mathbf{x}_i - \boldsymbol{\mu}_c\|^2",
)

# ── Controls ─────────────────────────────────────────────────────────────────
st.header("1. Cluster the Listings")
features = st.multiselect(
    "Features", LISTING_FEATURE_COLS, default=["price", "availability_365"],
    format_func=lambda c: LISTING_LABELS.get(c, c), key="km_features",
)
K = st.slider("Number of clusters (K)", 1, 10, 4, key="km_k")
standardize = st.checkbox("Standardize features", value=True, key="km_std")

if len(features) < 2:
    st.warning("Pick at least two features.")
    st.stop()

sample = clustering_sample(listings, features, n=3000, seed=settings.seed)
X = sample[features]

try:
    result = assign_clusters(X, K, standardize=standardize, seed=settings.seed, columns=features)
except AnalysisError as exc:
    analysis_error(exc)
    st.stop()

col1, col2 = st.columns(2)
col1.metric("Inertia", f"{result.inertia:,.1f}")
col2.metric("Iterations", result.n_iter)

st.plotly_chart(
    feature_scatter(X, result.assignments, result.centroids,
                    theme=theme, x=features[0], y=features[1], title="K-Means clusters"),
    use_container_width=True,
)

st.markdown("**Cluster profiles (original units)**")
st.dataframe(cluster_profiles(X, result.assignments).round(2), use_container_width=True)

room_mix = pd.crosstab(result.assignments, sample["room_type"], normalize="index").round(3) * 100
room_mix.index.name = CLUSTER_COL
st.markdown("**Room-type mix per cluster (%)**")
st.dataframe(room_mix, use_container_width=True)

if not standardize:
    warning_box(
        "Unscaled, the feature with the largest numbers wins. Price in dollars and "
        "availability in days will steamroll reviews per month."
    )

# ── Elbow ────────────────────────────────────────────────────────────────────
st.header("2. The Elbow Method")
elbow = elbow_curve(X, range(1, 11), columns=features, standardize=standardize, seed=settings.seed)
st.plotly_chart(elbow_chart(elbow, chosen_k=K, theme=theme), use_container_width=True)
insight_box(
    "Inertia always drops as K grows; K = number of listings gives zero. Look for the point "
    "where adding another cluster stops buying you much."
)

code_example("""
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

X = StandardScaler().fit_transform(df[["price", "availability_365"]])
km = KMeans(n_clusters=4, init="k-means++", n_init=10, random_state=42)
df["cluster_id"] = km.fit_predict(X) + 1
""")

quiz(
    "You ask k-means for 5 clusters on a dataset with 3 rows. What should happen?",
    ["It returns 3 clusters", "It returns 5 clusters, two empty", "It fails with a clear error", "It duplicates rows"],
    correct_idx=2,
    explanation="You cannot partition 3 points into 5 non-empty groups, so the request is rejected up front.",
    key="ch2_quiz1",
)

takeaways([
    "k-means minimizes within-cluster squared distance; it finds a local optimum, so restart it a few times.",
    "Scale your features, or the largest-unit feature decides everything.",
    "Fix the random seed when you need the same labels twice.",
])

navigation(2)
