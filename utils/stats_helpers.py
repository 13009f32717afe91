"""Summary statistics for clusters and listing prices."""
import numpy as np
import pandas as pd
from scipy import stats

from utils.constants import CLUSTER_COL


def descriptive_stats(series):
    """Descriptive statistics for a numeric series."""
    q25, q75 = series.quantile(0.25), series.quantile(0.75)
    return {
        "count": len(series),
        "mean": series.mean(),
        "median": series.median(),
        "std": series.std(),
        "min": series.min(),
        "max": series.max(),
        "q25": q25,
        "q75": q75,
        "iqr": q75 - q25,
        "skewness": series.skew(),
    }


def cluster_profiles(features, assignments):
    """Per-cluster size, mean and standard deviation of every feature column."""
    joined = features.join(assignments.rename(CLUSTER_COL))
    grouped = joined.groupby(CLUSTER_COL)
    profile = grouped.agg(["mean", "std"])
    profile.columns = [f"{col}_{stat}" for col, stat in profile.columns]
    profile.insert(0, "n_subjects", grouped.size())
    return profile


def cohens_d(group1, group2):
    """Cohen's d effect size with pooled standard deviation."""
    n1, n2 = len(group1), len(group2)
    var1, var2 = group1.var(), group2.var()
    pooled_std = np.sqrt(((n1 - 1) * var1 + (n2 - 1) * var2) / (n1 + n2 - 2))
    return (group1.mean() - group2.mean()) / pooled_std


def compare_groups(values, groups):
    """Test whether ``values`` differ across ``groups``.

    Two groups get Welch's t-test plus Cohen's d; more get one-way ANOVA
    and Kruskal-Wallis. Groups with fewer than two members are left out.
    """
    df = pd.DataFrame({"value": np.asarray(values, dtype=float), "group": np.asarray(groups)})
    samples = {g: part["value"] for g, part in df.groupby("group") if len(part) >= 2}
    if len(samples) < 2:
        return {"test": None, "n_groups": len(samples)}

    if len(samples) == 2:
        a, b = samples.values()
        stat, p = stats.ttest_ind(a, b, equal_var=False)
        return {"test": "welch_t", "n_groups": 2, "statistic": stat, "p_value": p, "cohens_d": cohens_d(a, b)}

    f_stat, p = stats.f_oneway(*samples.values())
    h_stat, p_kw = stats.kruskal(*samples.values())
    return {"test": "anova", "n_groups": len(samples), "statistic": f_stat, "p_value": p,
            "kruskal_h": h_stat, "kruskal_p": p_kw}
