from __future__ import annotations
import warnings
import numpy as np
import pandas as pd
from scipy.stats import spearmanr
from tqdm import tqdm

from wts.utils.seed import sample_rng

MIN_PANEL_GENES = 3


def panel_expression(lcpm: pd.DataFrame, centroids: pd.DataFrame,
                     annotation: pd.Series | None = None) -> tuple[pd.DataFrame, pd.DataFrame]:
    """
    Restricts a gene x sample lcpm matrix to the centroid panel.

    Rows are matched by symbol, ignoring case; several ids mapping to one
    symbol are averaged. Returns (panel, centroids) on the same gene rows.
    """
    if annotation is not None:
        symbols = annotation.reindex(lcpm.index)
    else:
        symbols = pd.Series(lcpm.index, index=lcpm.index)
    keep = symbols.notna()
    data = lcpm.loc[keep.values]
    upper = symbols[keep].astype(str).str.upper().values

    by_symbol = data.groupby(upper).mean()
    ref_upper = centroids.index.str.upper()
    shared = [i for i, s in enumerate(ref_upper) if s in by_symbol.index]
    if len(shared) < MIN_PANEL_GENES:
        raise ValueError(
            f"Only {len(shared)} of {len(centroids)} panel genes found in the expression matrix"
        )

    ref = centroids.iloc[shared]
    panel = by_symbol.loc[ref_upper[shared]]
    panel.index = ref.index
    panel.columns.name = lcpm.columns.name
    return panel, ref


def correlations(values, centroids: pd.DataFrame) -> np.ndarray:
    """Spearman rho between the sample and every subtype column."""
    x = np.asarray(values, dtype=float)
    out = np.empty(centroids.shape[1])
    with warnings.catch_warnings():
        # constant vectors give nan, handled in classify
        warnings.simplefilter("ignore")
        for j in range(centroids.shape[1]):
            rho, _ = spearmanr(x, centroids.iloc[:, j].to_numpy())
            out[j] = rho
    return out


def _best(rho: np.ndarray) -> int:
    # first maximum wins; nan ranks below everything
    return int(np.argmax(np.where(np.isnan(rho), -np.inf, rho)))


def classify(values, centroids: pd.DataFrame) -> str:
    return centroids.columns[_best(correlations(values, centroids))]


def consistency(values, centroids: pd.DataFrame, alpha: float, n_trials: int = 10,
                rng=None) -> float:
    """
    Fraction of n_trials noisy re-classifications that agree with the
    unperturbed call. Each value gets independent uniform noise in
    [-alpha, alpha].
    """
    if alpha < 0:
        raise ValueError(f"alpha must be >= 0, got {alpha}")
    if n_trials < 1:
        raise ValueError(f"n_trials must be >= 1, got {n_trials}")
    if alpha == 0:
        return 1.0

    rng = np.random.default_rng(rng)
    x = np.asarray(values, dtype=float)
    original = _best(correlations(x, centroids))

    noise = alpha * rng.uniform(-1.0, 1.0, size=(n_trials, x.size))
    agree = 0
    for trial in noise:
        if _best(correlations(x + trial, centroids)) == original:
            agree += 1
    return agree / n_trials


def tolerance(values, centroids: pd.DataFrame, n_trials: int = 10, threshold: float = 0.95,
              precision: float = 0.01, seed: int = 0, sample_id: str = "",
              method: str = "bisect", window: int = 3) -> float:
    """
    Largest noise amplitude in [0, max(values)] whose consistency stays at
    or above threshold.

    Every evaluation restarts the sample's own random stream, so all
    amplitudes are scored on the same uniform draws.

    method="bisect" assumes consistency is non-increasing in alpha.
    method="scan" steps through alpha by precision and stops once the mean
    of the last `window` evaluations drops below threshold.
    """
    x = np.asarray(values, dtype=float)
    hi = float(np.max(x))
    if hi <= 0:
        return 0.0

    def score(alpha: float) -> float:
        return consistency(x, centroids, alpha, n_trials=n_trials, rng=sample_rng(seed, sample_id))

    if method == "bisect":
        if score(hi) >= threshold:
            return hi
        lo = 0.0
        while hi - lo > precision:
            mid = (lo + hi) / 2
            if score(mid) >= threshold:
                lo = mid
            else:
                hi = mid
        return lo

    if method == "scan":
        best = 0.0
        recent: list[float] = []
        for alpha in np.arange(precision, hi + precision / 2, precision):
            c = score(float(alpha))
            recent = (recent + [c])[-window:]
            if np.mean(recent) < threshold:
                break
            if c >= threshold:
                best = float(alpha)
        return best

    raise ValueError(f"Unknown tolerance search method: {method!r} (use 'bisect' or 'scan')")


def assign_subtypes(panel: pd.DataFrame, centroids: pd.DataFrame, alpha: float = 1.0,
                    n_trials: int = 10, threshold: float = 0.95, precision: float = 0.01,
                    seed: int = 0, method: str = "bisect", progress: bool = True) -> pd.DataFrame:
    """
    Classifies every sample column of panel and scores the call's stability.

    panel: gene x sample, rows aligned with centroids (see panel_expression).
    Returns one row per sample: subtype, rho per label, n_genes,
    consistency at alpha, and tolerance.
    """
    if not panel.index.equals(centroids.index):
        raise ValueError("panel rows must match centroid rows; use panel_expression first")

    rows = []
    for sample in tqdm(panel.columns, desc="subtype", leave=False, disable=not progress):
        x = panel[sample].to_numpy(dtype=float)
        rho = correlations(x, centroids)
        row = {"sample": sample, "subtype": centroids.columns[_best(rho)]}
        row.update({f"rho_{label}": float(r) for label, r in zip(centroids.columns, rho)})
        row["n_genes"] = int(x.size)
        row["consistency"] = consistency(
            x, centroids, alpha, n_trials=n_trials, rng=sample_rng(seed, str(sample))
        )
        row["tolerance"] = tolerance(
            x, centroids, n_trials=n_trials, threshold=threshold, precision=precision,
            seed=seed, sample_id=str(sample), method=method,
        )
        rows.append(row)

    return pd.DataFrame(rows).set_index("sample")
