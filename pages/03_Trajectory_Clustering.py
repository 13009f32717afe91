"""Chapter 3: Clustering Trajectories -- per-subject regression lines, then k-means on the estimates."""
import streamlit as st
import pandas as pd

from utils.config import DEFAULT_THEME
from utils.constants import SUBJECT_COL, CLUSTER_COL, TRAJECTORY_LABELS
from utils.data_loader import get_settings, load_trajectories, sidebar_trajectory_controls
from utils.errors import AnalysisError
from utils.plotting import trajectory_chart, feature_scatter, elbow_chart
from utils.stats_helpers import cluster_profiles, compare_groups
from utils.trajectories import cluster_trajectories, elbow_curve
from utils.ui_components import (
    chapter_header, concept_box, formula_box, insight_box, warning_box,
    analysis_error, code_example, quiz, takeaways, navigation,
)

# ---------------------------------------------------------------------------
st.set_page_config(page_title="Ch 3: Clustering Trajectories", layout="wide")
settings = get_settings()
try:
    obs = load_trajectories(seed=settings.seed)
except AnalysisError as exc:
    analysis_error(exc)
    st.stop()
n_subjects = obs[SUBJECT_COL].nunique()
k, standardize, seed = sidebar_trajectory_controls(n_subjects, settings.default_k, settings.seed)
theme = DEFAULT_THEME

chapter_header(3, "Two numbers per person, then let k-means sort them out")

# ---------------------------------------------------------------------------
# 1. Theory
# ---------------------------------------------------------------------------
concept_box(
    "From Many Measurements to Two Numbers",
    "Longitudinal data is awkward to cluster directly. Each subject has a whole series of "
    "measurements, the series might have different lengths, and 'distance between two "
    "curves' is not something k-means knows how to compute. So we cheat, in a principled "
    "way: fit a straight line to each subject separately and keep only its <b>intercept</b> "
    "(where they started) and <b>slope</b> (how fast they changed). Now every subject is a "
    "point in a two-dimensional plane, and k-means is perfectly happy again.",
)

col1, col2 = st.columns(2)
with col1:
    formula_box(
        "Step 1: One OLS line per subject",
        r"y_{it} = \beta_{0i} + \beta_{1i}\, t + \varepsilon_{it}",
        "Each subject i gets their own intercept and slope. No pooling, no regularization -- "
        "just ordinary least squares on that subject's points.",
    )
with col2:
    formula_box(
        "Step 2: k-means on the estimates",
        r"\min \sum_{c=1}^{k} \sum_{i \in C_c} \left\| (\hat\beta_{0i}, \hat\beta_{1i}) - \mu_c \right\|^2",
        "The things being clustered are fitted coefficients, not raw observations.",
    )

st.divider()

# ---------------------------------------------------------------------------
# 2. The raw data
# ---------------------------------------------------------------------------
st.subheader("The Data: One Series per Subject")
st.markdown(
    f"We have **{len(obs):,} observations** from **{n_subjects} subjects**. "
    "Each row is one subject measured at one time point."
)
st.dataframe(obs.head(12), use_container_width=True, hide_index=True)

# ---------------------------------------------------------------------------
# 3. Run the pipeline
# ---------------------------------------------------------------------------
try:
    result = cluster_trajectories(obs, k=k, standardize=standardize, seed=seed)
except AnalysisError as exc:
    analysis_error(exc)
    st.stop()

st.subheader("Step 1: The Per-Subject Fits")
fits_df = pd.DataFrame(
    [(f.subject_id, f.intercept, f.slope, f.n_obs) for f in result.fits],
    columns=[SUBJECT_COL, "intercept", "slope", "n_obs"],
)
c1, c2 = st.columns([1, 2])
with c1:
    st.dataframe(fits_df.round(2), use_container_width=True, hide_index=True, height=420)
with c2:
    flat = result.annotated.assign(**{CLUSTER_COL: 1})
    st.plotly_chart(
        trajectory_chart(flat, theme=theme, fits=result.fits, title="Every subject with their fitted line"),
        use_container_width=True,
    )

insight_box(
    "The dashed lines are the fitted trends. Some subjects start high, some start low; "
    "some barely change, some climb steeply. Those two numbers are all the clustering "
    "step will ever see."
)

st.divider()

st.subheader("Step 2 & 3: Cluster the (Intercept, Slope) Pairs")
m1, m2, m3, m4 = st.columns(4)
m1.metric("Clusters (k)", k)
m2.metric("Subjects", len(result.features))
m3.metric("Iterations", result.clusters.n_iter)
m4.metric("Inertia", f"{result.clusters.inertia:,.2f}")

c1, c2 = st.columns(2)
with c1:
    st.plotly_chart(
        feature_scatter(result.features, result.assignments, result.clusters.centroids, theme=theme),
        use_container_width=True,
    )
with c2:
    st.plotly_chart(
        trajectory_chart(result.annotated, theme=theme, title="Trajectories colored by cluster"),
        use_container_width=True,
    )

st.markdown("**Cluster centroids (original units)**")
st.dataframe(
    result.clusters.centroids.rename(columns=TRAJECTORY_LABELS).round(2),
    use_container_width=True,
)

st.markdown("**Cluster profiles**")
st.dataframe(cluster_profiles(result.features, result.assignments).round(2), use_container_width=True)

if k > 1:
    slope_test = compare_groups(result.features["slope"], result.assignments)
    if slope_test["test"] is not None:
        st.markdown(
            f"Do the clusters really differ in slope? {slope_test['test']} statistic = "
            f"**{slope_test['statistic']:.2f}**, p = **{slope_test['p_value']:.3g}**."
        )
    warning_box(
        "That p-value is flattering on purpose. The clusters were chosen to be different, "
        "so testing whether they differ is circular. Treat it as a description, not evidence."
    )

if "true_group" in obs.columns:
    truth = obs.drop_duplicates(SUBJECT_COL).set_index(SUBJECT_COL)["true_group"]
    crosstab = pd.crosstab(truth.reindex(result.assignments.index), result.assignments,
                           rownames=["Simulated group"], colnames=["Cluster"])
    st.markdown("**Simulated groups vs recovered clusters**")
    st.dataframe(crosstab, use_container_width=True)

if not standardize:
    warning_box(
        "Without standardization, intercepts (hundreds of ms) dwarf slopes (tens of ms/day), "
        "so k-means is effectively clustering on the intercept alone. Flip the checkbox back "
        "and watch the groups change."
    )

st.divider()

# ---------------------------------------------------------------------------
# 4. Choosing k
# ---------------------------------------------------------------------------
st.subheader("How Many Clusters?")
elbow = elbow_curve(result.features, range(1, min(8, n_subjects) + 1), standardize=standardize, seed=seed)
st.plotly_chart(elbow_chart(elbow, chosen_k=k, theme=theme), use_container_width=True)

st.divider()

# ---------------------------------------------------------------------------
# 5. Code Example
# ---------------------------------------------------------------------------
code_example("""
import pandas as pd
from scipy import stats
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

# 1. one OLS line per subject
rows = []
for subject, g in df.groupby("subject_id"):
    fit = stats.linregress(g["time_index"], g["value"])
    rows.append({"subject_id": subject, "intercept": fit.intercept, "slope": fit.slope})
features = pd.DataFrame(rows).set_index("subject_id")

# 2. standardize, then k-means
X = StandardScaler().fit_transform(features)
labels = KMeans(n_clusters=2, n_init=10, random_state=42).fit_predict(X)

# 3. join the labels back onto every observation
clusters = pd.Series(labels + 1, index=features.index, name="cluster_id")
df = df.merge(clusters, left_on="subject_id", right_index=True, validate="many_to_one")
""")

st.divider()

# ---------------------------------------------------------------------------
# 6. Quiz
# ---------------------------------------------------------------------------
quiz(
    "A subject has a single measurement. What should the per-subject fit do?",
    [
        "Use a slope of zero",
        "Drop the subject quietly",
        "Refuse: a line needs at least two distinct time points",
        "Borrow the average slope of everyone else",
    ],
    correct_idx=2,
    explanation="One point does not determine a line. Quietly dropping or imputing changes the "
                "population you are clustering without telling anyone, so the pipeline raises an "
                "InsufficientDataError naming the subject instead.",
    key="ch3_quiz1",
)

takeaways([
    "Summarize each trajectory with a few interpretable numbers (here intercept and slope), then cluster those.",
    "Standardize before k-means whenever the features live on different scales.",
    "k-means with random seeding can give different labels on different runs; fix the seed when you need reproducibility.",
    "Join cluster labels back onto the raw observations to see what the groups actually look like over time.",
])

navigation(3)
