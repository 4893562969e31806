"""
Loads HTSeq count files and combines them into one gene x sample matrix.
"""

from __future__ import annotations
from pathlib import Path
from typing import Mapping
import pandas as pd
from tqdm import tqdm

# HTSeq appends these counters after the gene rows
SPECIAL_PREFIX = "__"
ASSIGNED = "__assigned"


def read_count_file(path: str | Path) -> pd.Series:
    """
    Reads one HTSeq count file (gene id <tab> count, no header).
    Returns an int64 Series indexed by gene id, in file order.
    """
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Count file not found: {path}")

    df = pd.read_csv(
        path,
        sep="\t",
        header=None,
        names=["gene", "count"],
        dtype={"gene": str},
    )
    if df.empty:
        raise ValueError(f"{path} must have two columns: gene id and count")

    counts = pd.to_numeric(df["count"], errors="coerce")
    if counts.isna().any() or (counts < 0).any() or (counts % 1 != 0).any():
        bad = df.loc[counts.isna() | (counts < 0) | (counts % 1 != 0), "gene"].head(5).tolist()
        raise ValueError(f"{path} has non-integer or negative counts (e.g. {bad})")

    return pd.Series(counts.astype("int64").values, index=pd.Index(df["gene"], name="gene"), name=path.stem)


def combine_count_files(files: Mapping[str, str | Path], progress: bool = True) -> pd.DataFrame:
    """
    Joins per-sample count files into a gene x sample DataFrame.

    files: sample id -> count file path. Every file must list the same gene
    ids in the same order as the first one; anything else aborts the load.
    """
    if not files:
        raise ValueError("No count files to combine")

    columns = {}
    genes = None
    first = None
    items = list(files.items())
    for sample, path in tqdm(items, desc="counts", leave=False, disable=not progress):
        s = read_count_file(path)
        if genes is None:
            genes, first = s.index, path
        elif not s.index.equals(genes):
            raise ValueError(
                f"Gene ids in {path} (sample {sample}) do not match {first}: "
                f"{len(s.index)} vs {len(genes)} rows"
            )
        columns[sample] = s.values

    out = pd.DataFrame(columns, index=genes)
    out.columns.name = "sample"
    return out


def split_special_counters(counts: pd.DataFrame) -> tuple[pd.DataFrame, pd.DataFrame]:
    """Returns (genes, special) where special holds the HTSeq "__" rows."""
    is_special = counts.index.astype(str).str.startswith(SPECIAL_PREFIX)
    return counts.loc[~is_special], counts.loc[is_special]


def read_fractions(counts: pd.DataFrame) -> pd.DataFrame:
    """
    Fraction of each sample's reads that fell into each special counter,
    plus the fraction assigned to genes (row "__assigned"). Columns sum to 1.
    """
    genes, special = split_special_counters(counts)
    table = pd.concat([pd.DataFrame([genes.sum(axis=0)], index=[ASSIGNED]), special])
    total = table.sum(axis=0)
    if (total == 0).any():
        empty = total.index[total == 0].tolist()
        raise ValueError(f"Samples with zero reads: {empty}")
    return table / total
