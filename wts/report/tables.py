from __future__ import annotations
import pandas as pd

from wts.data.toc import PATIENT, SAMPLE, WTS_PROJECT, WGS_PROJECT, COUNT_FILE, SITE, sample_projects


def sample_summary(toc: pd.DataFrame) -> pd.DataFrame:
    """Patients and samples per site, with WTS / WGS / count-file availability."""
    df = toc.reset_index()
    site = df[SITE].fillna("unknown") if SITE in df.columns else pd.Series("unknown", index=df.index)

    def has(col: str) -> pd.Series:
        return df[col].notna() if col in df.columns else pd.Series(False, index=df.index)

    flags = pd.DataFrame({
        PATIENT: df[PATIENT],
        "site": site,
        "samples": 1,
        "with_wts": has(WTS_PROJECT).astype(int),
        "with_wgs": has(WGS_PROJECT).astype(int),
        "with_counts": has(COUNT_FILE).astype(int),
    })
    out = flags.groupby("site").agg(
        patients=(PATIENT, "nunique"),
        samples=("samples", "sum"),
        with_wts=("with_wts", "sum"),
        with_wgs=("with_wgs", "sum"),
        with_counts=("with_counts", "sum"),
    )
    out.loc["total"] = [
        flags[PATIENT].nunique(),
        flags["samples"].sum(),
        flags["with_wts"].sum(),
        flags["with_wgs"].sum(),
        flags["with_counts"].sum(),
    ]
    return out.astype(int)


def alignment_qc(fractions: pd.DataFrame, toc: pd.DataFrame,
                 read_counts: pd.DataFrame | None = None,
                 seq_runs: pd.DataFrame | None = None) -> pd.DataFrame:
    """
    One row per counted sample: HTSeq counter fractions, joined by WTS project
    with the read-count summary and the sequencing-run metadata.
    """
    out = fractions.T.copy()
    out.columns = [c.lstrip("_") for c in out.columns]
    out.index.name = SAMPLE

    if WTS_PROJECT in toc.columns:
        out.insert(0, WTS_PROJECT, sample_projects(toc).reindex(out.index))
        for extra in (read_counts, seq_runs):
            if extra is not None:
                joined = extra.reindex(out[WTS_PROJECT].values)
                joined.index = out.index
                out = out.join(joined, rsuffix="_run")
    return out


def subtype_table(results: pd.DataFrame, sites: pd.Series) -> pd.DataFrame:
    """Subtype counts per site, with row and column totals."""
    site = sites.reindex(results.index).fillna("unknown")
    return pd.crosstab(site, results["subtype"], margins=True, margins_name="total")


def stability_summary(results: pd.DataFrame) -> pd.DataFrame:
    """Mean / min of consistency and tolerance per subtype (NaNs skipped)."""
    return results.groupby("subtype")[["consistency", "tolerance"]].agg(["count", "mean", "min"])
