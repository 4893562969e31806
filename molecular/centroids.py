# molecular/centroids.py
from __future__ import annotations
from pathlib import Path
import pandas as pd

# PAM50 label order; labels outside this list keep their file order after these
SUBTYPE_ORDER = ["LumA", "LumB", "Her2", "Basal", "Normal"]


def load_centroids(path: str | Path) -> pd.DataFrame:
    """
    Reference weight matrix: one row per gene symbol, one column per subtype.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Centroid file not found: {path}")

    df = pd.read_csv(path, sep="\t", index_col=0)
    df.index = df.index.astype(str).str.strip()
    df.index.name = "symbol"

    if df.empty or df.shape[1] < 2:
        raise ValueError(f"{path} must hold at least two subtype columns and one gene row")

    dup = df.index[df.index.duplicated()]
    if len(dup):
        raise ValueError(f"Duplicated gene symbols in {path}: {sorted(set(dup))[:10]}")

    weights = df.apply(pd.to_numeric, errors="coerce")
    if weights.isna().any().any():
        bad = weights.index[weights.isna().any(axis=1)].tolist()[:10]
        raise ValueError(f"Non-numeric or missing weights in {path} for genes: {bad}")

    return order_subtypes(weights.astype(float))


def order_subtypes(centroids: pd.DataFrame) -> pd.DataFrame:
    known = [c for c in SUBTYPE_ORDER if c in centroids.columns]
    rest = [c for c in centroids.columns if c not in SUBTYPE_ORDER]
    return centroids[known + rest]


def load_gene_annotation(path: str | Path, id_col: str = "gene_id", symbol_col: str = "symbol") -> pd.Series:
    """gene id -> gene symbol, for projecting count rows onto the centroid panel."""
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Annotation file not found: {path}")
    df = pd.read_csv(path, sep="\t", dtype=str)
    if id_col not in df.columns or symbol_col not in df.columns:
        raise ValueError(f"{path} must contain columns: {id_col}, {symbol_col}")
    df = df.dropna(subset=[id_col, symbol_col]).drop_duplicates(subset=[id_col])
    return pd.Series(df[symbol_col].str.strip().values, index=df[id_col].str.strip().values, name=symbol_col)
