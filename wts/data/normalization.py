from __future__ import annotations
import numpy as np
import pandas as pd

CPM_SCALE = 1e6


def filter_low_counts(genes: pd.DataFrame, min_count: int = 10, min_samples: int = 1) -> pd.DataFrame:
    """Keep genes with count >= min_count in at least min_samples samples."""
    keep = (genes >= min_count).sum(axis=1) >= min_samples
    return genes.loc[keep]


def upper_quartile_factors(genes: pd.DataFrame) -> pd.Series:
    """
    Per-sample scaling factor mapping the upper-quartile library size to 1e6.

    The library size of a sample is the sum of the counts strictly above its
    75th-percentile count.
    """
    q75 = genes.quantile(0.75, axis=0)
    upper = genes.where(genes.gt(q75, axis=1), 0).sum(axis=0)
    if (upper <= 0).any():
        bad = upper.index[upper <= 0].tolist()
        raise ValueError(f"No counts above the 75th percentile for samples: {bad}")
    return (CPM_SCALE / upper).rename("factor")


def log_cpm(genes: pd.DataFrame, prior_count: float = 0.5, factors: pd.Series | None = None) -> pd.DataFrame:
    """log2 counts-per-million; prior_count keeps zero counts finite."""
    if prior_count <= 0:
        raise ValueError(f"prior_count must be positive, got {prior_count}")
    if factors is None:
        factors = upper_quartile_factors(genes)
    cpm = (genes.astype(float) + prior_count).mul(factors, axis=1)
    return np.log2(cpm)


def normalize_counts(genes: pd.DataFrame, cfg: dict | None = None) -> pd.DataFrame:
    """filter_low_counts + log_cpm with the "normalize" config section."""
    cfg = cfg or {}
    kept = filter_low_counts(
        genes,
        min_count=cfg.get("min_count", 10),
        min_samples=cfg.get("min_samples", 1),
    )
    if kept.empty:
        raise ValueError("No genes left after low-count filtering")
    return log_cpm(kept, prior_count=cfg.get("prior_count", 0.5))


def quantile_table(lcpm: pd.DataFrame, q=(0.0, 0.25, 0.5, 0.75, 1.0)) -> pd.DataFrame:
    """Per-sample lcpm quantiles, one row per sample."""
    out = lcpm.quantile(list(q), axis=0).T
    out.columns = [f"{int(x * 100)}%" for x in q]
    out.index.name = "sample"
    return out
