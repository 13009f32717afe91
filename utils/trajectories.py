"""Cluster subjects by the linear trend of their repeated measurements.

The workflow has three stages, each consuming the whole output of the
previous one:

1. ``fit_subject_trends`` fits an ordinary least-squares line to every
   subject's (time, value) series.
2. ``assemble_features`` reshapes those fits into a one-row-per-subject
   (intercept, slope) table.
3. ``assign_clusters`` runs k-means on that table and labels each subject
   with a cluster id in ``1..k``.

``annotate_observations`` joins the labels back onto the raw observations
for plotting, and ``cluster_trajectories`` runs everything in order.
"""
import logging
from dataclasses import dataclass

import numpy as np
import pandas as pd
from scipy import stats as sp_stats
from sklearn.cluster import KMeans
from sklearn.preprocessing import StandardScaler

from utils.constants import SUBJECT_COL, TIME_COL, VALUE_COL, CLUSTER_COL
from utils.errors import InsufficientDataError, DuplicateKeyError, ClusteringError, InvalidObservationsError

log = logging.getLogger(__name__)

FEATURE_NAMES = ("intercept", "slope")
MIN_OBSERVATIONS = 2


@dataclass(frozen=True)
class PerSubjectFit:
    """Least-squares line for one subject: value ~ intercept + slope * time."""

    subject_id: object
    intercept: float
    slope: float
    n_obs: int

    def predict(self, t):
        return self.intercept + self.slope * np.asarray(t, dtype=float)


@dataclass
class ClusterResult:
    """Output of ``assign_clusters``."""

    assignments: pd.Series  # index subject_id, values 1..k
    centroids: pd.DataFrame  # index cluster_id, columns = features, original units
    inertia: float
    n_iter: int
    k: int
    standardized: bool


@dataclass
class TrajectoryClustering:
    """Everything one run of the trajectory pipeline produces."""

    fits: list
    features: pd.DataFrame
    clusters: ClusterResult
    annotated: pd.DataFrame

    @property
    def assignments(self):
        return self.clusters.assignments

    def cluster_sizes(self):
        """Number of subjects per cluster id, including empty clusters."""
        counts = self.assignments.value_counts()
        ids = range(1, self.clusters.k + 1)
        return counts.reindex(ids, fill_value=0).rename_axis(CLUSTER_COL).rename("n_subjects")


def _require_columns(df, columns):
    missing = [c for c in columns if c not in df.columns]
    if missing:
        raise InvalidObservationsError(f"observations are missing column(s): {missing}")


def fit_subject_trends(observations, subject_col=SUBJECT_COL, time_col=TIME_COL, value_col=VALUE_COL):
    """Fit an OLS line to each subject's series.

    Subjects are returned in order of first appearance. A subject with
    fewer than two observations, fewer than two distinct time points, or
    any missing time/value raises ``InsufficientDataError``; nothing is
    dropped silently.
    """
    _require_columns(observations, [subject_col, time_col, value_col])
    if observations[subject_col].isna().any():
        n_bad = int(observations[subject_col].isna().sum())
        raise InvalidObservationsError(f"{n_bad} observation(s) have no {subject_col}")

    fits = []
    for subject_id, series in observations.groupby(subject_col, sort=False):
        t = series[time_col].to_numpy(dtype=float)
        v = series[value_col].to_numpy(dtype=float)
        if np.isnan(t).any() or np.isnan(v).any():
            raise InsufficientDataError(
                subject_id, len(series),
                reason=f"subject {subject_id!r} has missing {time_col} or {value_col} values",
            )
        n_distinct = np.unique(t).size
        if len(series) < MIN_OBSERVATIONS or n_distinct < MIN_OBSERVATIONS:
            raise InsufficientDataError(
                subject_id, len(series), required=MIN_OBSERVATIONS,
                reason=(f"subject {subject_id!r} has {len(series)} observation(s) at {n_distinct} "
                        f"distinct {time_col} value(s); at least {MIN_OBSERVATIONS} distinct time points are required"),
            )

        res = sp_stats.linregress(t, v)
        fits.append(PerSubjectFit(subject_id, float(res.intercept), float(res.slope), len(series)))
        log.debug("subject %r: intercept=%.4f slope=%.4f (n=%d)", subject_id, res.intercept, res.slope, len(series))

    log.info("Fitted linear trends for %d subject(s)", len(fits))
    return fits


def assemble_features(fits):
    """Reshape per-subject fits into an (intercept, slope) table indexed by subject."""
    fits = list(fits)
    ids = pd.Index([f.subject_id for f in fits])
    if ids.has_duplicates:
        raise DuplicateKeyError(ids[ids.duplicated()].unique(), where="feature table")

    features = pd.DataFrame(
        {name: [getattr(f, name) for f in fits] for name in FEATURE_NAMES},
        index=ids.rename(SUBJECT_COL),
        dtype=float,
    )
    return features


def _check_k(k, n_subjects):
    if isinstance(k, bool) or not isinstance(k, (int, np.integer)):
        raise ClusteringError(f"k must be an integer, got {k!r}")
    if k < 1:
        raise ClusteringError(f"k must be at least 1, got {k}")
    if k > n_subjects:
        raise ClusteringError(f"cannot form {k} clusters from {n_subjects} subject(s)")


def assign_clusters(features, k, standardize=True, seed=None, max_iter=300, n_init=10, columns=None):
    """Partition subjects into k groups with k-means.

    Centroids are seeded with k-means++ and the best of ``n_init`` runs is
    kept. Each point goes to its nearest centroid by Euclidean distance;
    an exact tie goes to the lowest cluster index. Pass ``seed`` for
    reproducible labels.

    Returned cluster ids are 1-based. Centroids are reported in the
    original (unstandardized) feature units.
    """
    columns = list(columns or FEATURE_NAMES)
    _check_k(k, len(features))
    X = features[columns].to_numpy(dtype=float)
    if not np.isfinite(X).all():
        raise ClusteringError("features contain missing or infinite values")

    scaler = None
    if standardize:
        scaler = StandardScaler()
        X = scaler.fit_transform(X)

    kmeans = KMeans(n_clusters=k, init="k-means++", n_init=n_init, max_iter=max_iter, random_state=seed)
    labels = kmeans.fit_predict(X)

    centers = kmeans.cluster_centers_
    if scaler is not None:
        centers = scaler.inverse_transform(centers)

    cluster_index = pd.Index(np.arange(1, k + 1), name=CLUSTER_COL)
    result = ClusterResult(
        assignments=pd.Series(labels + 1, index=features.index, name=CLUSTER_COL),
        centroids=pd.DataFrame(centers, index=cluster_index, columns=columns),
        inertia=float(kmeans.inertia_),
        n_iter=int(kmeans.n_iter_),
        k=k,
        standardized=standardize,
    )
    log.info("k-means: k=%d, %d subject(s), %d iteration(s), inertia=%.4f",
             k, len(features), result.n_iter, result.inertia)
    return result


def elbow_curve(features, k_values, columns=None, standardize=True, seed=None):
    """Inertia for each k in ``k_values`` (those larger than the row count are skipped)."""
    rows = []
    for k in k_values:
        if k > len(features):
            continue
        res = assign_clusters(features, int(k), standardize=standardize, seed=seed, columns=columns)
        rows.append({"k": int(k), "inertia": res.inertia})
    return pd.DataFrame(rows, columns=["k", "inertia"])


def annotate_observations(observations, assignments, subject_col=SUBJECT_COL):
    """Attach each observation's cluster id (many observations to one assignment)."""
    _require_columns(observations, [subject_col])
    if assignments.index.has_duplicates:
        dupes = assignments.index[assignments.index.duplicated()].unique()
        raise DuplicateKeyError(dupes, where="cluster assignments")

    subjects = pd.Index(observations[subject_col].unique())
    unassigned = subjects.difference(assignments.index, sort=False)
    if len(unassigned):
        raise ClusteringError(f"no cluster assignment for subject(s): {list(unassigned)}")

    annotated = observations.drop(columns=[CLUSTER_COL], errors="ignore").merge(
        assignments.rename(CLUSTER_COL),
        left_on=subject_col, right_index=True,
        how="left", validate="many_to_one",
    )
    return annotated


def cluster_trajectories(observations, k=2, standardize=True, seed=None, max_iter=300, n_init=10,
                         subject_col=SUBJECT_COL, time_col=TIME_COL, value_col=VALUE_COL):
    """Run fit -> assemble -> cluster -> annotate on long-format observations."""
    fits = fit_subject_trends(observations, subject_col, time_col, value_col)
    features = assemble_features(fits)
    clusters = assign_clusters(features, k, standardize=standardize, seed=seed,
                               max_iter=max_iter, n_init=n_init)
    annotated = annotate_observations(observations, clusters.assignments, subject_col)
    return TrajectoryClustering(fits=fits, features=features, clusters=clusters, annotated=annotated)


def simulate_trajectories(n_subjects=18, n_times=10, n_groups=2, seed=42, noise_sd=25.0):
    """Synthetic reaction-time-by-day data with ``n_groups`` latent trend profiles.

    Group g has mean baseline ``250 + 15 * g`` ms and mean slope ``4 + 14 * g``
    ms/day; subjects scatter around their group mean. The latent group is
    returned in ``true_group`` so a page can compare it with the clustering.
    """
    if n_subjects < 1 or n_times < MIN_OBSERVATIONS or n_groups < 1:
        raise ValueError("need n_subjects >= 1, n_times >= 2 and n_groups >= 1")
    rng = np.random.RandomState(seed)
    days = np.arange(n_times)
    frames = []
    for i in range(n_subjects):
        group = i % n_groups
        intercept = 250 + 15 * group + rng.normal(0, 20)
        slope = 4 + 14 * group + rng.normal(0, 3)
        values = intercept + slope * days + rng.normal(0, noise_sd, size=n_times)
        frames.append(pd.DataFrame({
            SUBJECT_COL: f"S{301 + i}",
            TIME_COL: days,
            VALUE_COL: np.round(values, 2),
            "true_group": group + 1,
        }))
    return pd.concat(frames, ignore_index=True)
