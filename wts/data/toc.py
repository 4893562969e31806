"""
Sample table-of-contents and the sequencing metadata tables keyed by project.
"""

from __future__ import annotations
from pathlib import Path
import pandas as pd

PATIENT = "patient"
SAMPLE = "sample"
WTS_PROJECT = "WTS.project"
WGS_PROJECT = "WGS.project"
COUNT_FILE = "count.file"
SITE = "site"

# columns where the literal "NA" means "no value"
NA_COLUMNS = (WTS_PROJECT, WGS_PROJECT, COUNT_FILE, SITE)


def _read_tsv(path: Path, **kwargs) -> pd.DataFrame:
    path = Path(path)
    if not path.exists():
        raise FileNotFoundError(f"Table not found: {path}")
    return pd.read_csv(path, sep="\t", **kwargs)


def load_toc(path: str | Path, na_columns=NA_COLUMNS) -> pd.DataFrame:
    """
    Loads the table of contents, one row per (patient, sample).

    "NA" is turned into a missing value only in na_columns; elsewhere it is
    kept as text.
    """
    header = _read_tsv(path, nrows=0).columns
    df = _read_tsv(
        path,
        dtype=str,
        keep_default_na=False,
        na_values={c: ["NA", ""] for c in na_columns if c in header},
    )

    missing = [c for c in (PATIENT, SAMPLE) if c not in df.columns]
    if missing:
        raise ValueError(f"{path} must contain columns: {PATIENT}, {SAMPLE} (missing {missing})")

    df[PATIENT] = df[PATIENT].str.strip()
    df[SAMPLE] = df[SAMPLE].str.strip()

    dup = df.duplicated([PATIENT, SAMPLE], keep=False)
    if dup.any():
        rows = df.loc[dup, [PATIENT, SAMPLE]].head(10)
        raise ValueError(f"Duplicate (patient, sample) rows in {path}:\n" + rows.to_string(index=False))

    return df.set_index([PATIENT, SAMPLE]).sort_index()


def counted_samples(toc: pd.DataFrame) -> pd.DataFrame:
    """
    Rows that have a count file, indexed by sample id alone.

    Sample ids only need to be unique within a patient, but a count file is
    what the matrix columns are named after, so these rows must be unique.
    """
    if COUNT_FILE not in toc.columns:
        raise ValueError(f"Table of contents has no {COUNT_FILE} column")

    rows = toc[toc[COUNT_FILE].notna()].reset_index(level=PATIENT)
    dup = rows.index.duplicated(keep=False)
    if dup.any():
        raise ValueError(f"Sample ids with count files must be unique: {sorted(set(rows.index[dup]))}")
    return rows


def count_file_map(toc: pd.DataFrame, counts_dir: str | Path) -> dict[str, Path]:
    """sample id -> count file path, for every sample that has a count file."""
    counts_dir = Path(counts_dir)
    rows = counted_samples(toc)
    return {s: counts_dir / f for s, f in zip(rows.index, rows[COUNT_FILE])}


def load_read_counts(path: str | Path, key: str = "project") -> pd.DataFrame:
    """Read-count summary table indexed by sequencing project id."""
    df = _read_tsv(path)
    if key not in df.columns:
        raise ValueError(f"{path} must contain column: {key}")
    return df.set_index(key)


def load_seq_runs(path: str | Path, key: str = "project") -> pd.DataFrame:
    """Sequencing-run metadata indexed by project id."""
    df = _read_tsv(path)
    if key not in df.columns:
        raise ValueError(f"{path} must contain column: {key}")
    return df.set_index(key)


def sample_projects(toc: pd.DataFrame) -> pd.Series:
    """counted sample id -> WTS project (missing projects stay missing)."""
    rows = counted_samples(toc)
    if WTS_PROJECT not in rows.columns:
        return pd.Series(pd.NA, index=rows.index, name=WTS_PROJECT, dtype=object)
    return rows[WTS_PROJECT]


def sample_sites(toc: pd.DataFrame) -> pd.Series:
    """counted sample id -> site label (missing sites stay missing)."""
    rows = counted_samples(toc)
    if SITE not in rows.columns:
        return pd.Series(pd.NA, index=rows.index, name=SITE, dtype=object)
    return rows[SITE]
