from __future__ import annotations
from pathlib import Path
import matplotlib
matplotlib.use("Agg")
import matplotlib.pyplot as plt
import numpy as np
import pandas as pd
from scipy.stats import gaussian_kde
from sklearn.decomposition import KernelPCA


def density_plot(before: pd.DataFrame, after: pd.DataFrame, out_path: Path) -> Path:
    """lcpm density per sample, before and after low-count filtering."""
    fig, axes = plt.subplots(1, 2, figsize=(12, 5), sharey=True)
    for ax, data, title in ((axes[0], before, "All genes"), (axes[1], after, "Filtered genes")):
        lo, hi = float(np.nanmin(data.values)), float(np.nanmax(data.values))
        grid = np.linspace(lo, hi, 256)
        for sample in data.columns:
            x = data[sample].dropna().to_numpy()
            if x.size < 2 or np.ptp(x) == 0:
                continue
            ax.plot(grid, gaussian_kde(x)(grid), linewidth=0.8, alpha=0.7)
        ax.set_title(title)
        ax.set_xlabel("log-CPM")
    axes[0].set_ylabel("Density")
    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return Path(out_path)


def leading_fc_distances(lcpm: pd.DataFrame, top: int = 500) -> np.ndarray:
    """
    Pairwise distance = root-mean-square of the `top` largest absolute
    log-fold-changes between the two samples.
    """
    x = lcpm.to_numpy(dtype=float)
    n = x.shape[1]
    top = min(top, x.shape[0])
    d = np.zeros((n, n))
    for i in range(n):
        for j in range(i + 1, n):
            sq = np.sort((x[:, i] - x[:, j]) ** 2)[-top:]
            d[i, j] = d[j, i] = np.sqrt(sq.mean())
    return d


def mds_coordinates(lcpm: pd.DataFrame, top: int = 500) -> pd.DataFrame:
    """Classical MDS of the leading-fold-change distances (2 dimensions)."""
    if lcpm.shape[1] < 3:
        raise ValueError(f"MDS needs at least 3 samples, got {lcpm.shape[1]}")
    d = leading_fc_distances(lcpm, top=top)
    # kernel PCA centres -d^2/2, which is classical scaling
    kpca = KernelPCA(n_components=2, kernel="precomputed")
    coords = kpca.fit_transform(-0.5 * d ** 2)
    return pd.DataFrame(coords, index=lcpm.columns, columns=["dim1", "dim2"])


def mds_plot(lcpm: pd.DataFrame, subtypes: pd.Series, out_path: Path, top: int = 500) -> Path:
    coords = mds_coordinates(lcpm, top=top)
    labels = subtypes.reindex(coords.index).fillna("unassigned")

    fig, ax = plt.subplots(figsize=(7, 6))
    for label in sorted(labels.unique()):
        pts = coords[labels == label]
        ax.scatter(pts["dim1"], pts["dim2"], label=label, s=30)
        for sample, row in pts.iterrows():
            ax.annotate(str(sample), (row["dim1"], row["dim2"]), fontsize=6, alpha=0.7)
    ax.set_xlabel("Leading logFC dim 1")
    ax.set_ylabel("Leading logFC dim 2")
    ax.set_title(f"MDS (top {top} genes)")
    ax.legend(fontsize=8)
    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return Path(out_path)


def gene_scatter(panel: pd.DataFrame, subtypes: pd.Series, out_path: Path,
                 genes: list[str] | None = None, ncols: int = 5, seed: int = 0) -> Path:
    """Per-gene lcpm by subtype, one small panel per gene."""
    genes = list(genes) if genes else list(panel.index)
    order = sorted(subtypes.dropna().unique())
    labels = subtypes.reindex(panel.columns)
    jitter = np.random.default_rng(seed)

    nrows = int(np.ceil(len(genes) / ncols))
    fig, axes = plt.subplots(nrows, ncols, figsize=(3 * ncols, 2.5 * nrows), squeeze=False)
    for ax, gene in zip(axes.flat, genes):
        for k, label in enumerate(order):
            y = panel.loc[gene, (labels == label).values].to_numpy(dtype=float)
            x = k + jitter.uniform(-0.2, 0.2, size=y.size)
            ax.scatter(x, y, s=8)
        ax.set_title(str(gene), fontsize=8)
        ax.set_xticks(range(len(order)))
        ax.set_xticklabels(order, fontsize=6, rotation=45)
    for ax in list(axes.flat)[len(genes):]:
        ax.axis("off")
    fig.tight_layout()
    fig.savefig(out_path, dpi=120)
    plt.close(fig)
    return Path(out_path)
