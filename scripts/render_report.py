"""
Renders the HTML report: sample / QC / quantile / subtype tables and the
density, MDS and per-gene figures.
"""

from __future__ import annotations
import argparse
from pathlib import Path
import sys
import pandas as pd

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wts.utils.io import load_config, data_path, ensure_dir, DEFAULT_CONFIG
from wts.data.toc import load_toc, load_read_counts, load_seq_runs, sample_sites
from wts.data.normalization import quantile_table
from wts.report.tables import sample_summary, alignment_qc, subtype_table, stability_summary
from wts.report.plots import density_plot, mds_plot, gene_scatter
from wts.report.render import render_report


def _read(artifacts: Path, cfg: dict, key: str) -> pd.DataFrame:
    p = artifacts / cfg["data"][key]
    if not p.exists():
        raise FileNotFoundError(f"{p} not found; run the earlier pipeline steps first")
    return pd.read_csv(p, sep="\t", index_col=0)


def _optional_table(cfg: dict, key: str, loader):
    if not cfg["data"].get(key):
        return None
    p = data_path(cfg, key)
    if not p.exists():
        print(f"[WARN] {p} not found; leaving it out of the QC table")
        return None
    return loader(p, key=cfg["data"].get("project_key", "project"))


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=DEFAULT_CONFIG)
    args = ap.parse_args()

    cfg = load_config(args.config)
    rep_cfg = cfg.get("report", {})
    artifacts = Path(cfg["data"]["artifacts_dir"])
    report_dir = ensure_dir(Path(cfg["data"]["report_dir"]))

    toc = load_toc(data_path(cfg, "toc_tsv"))
    fractions = _read(artifacts, cfg, "read_fractions_tsv")
    lcpm = _read(artifacts, cfg, "lcpm_tsv")
    lcpm_all = _read(artifacts, cfg, "lcpm_all_tsv")
    panel = _read(artifacts, cfg, "panel_tsv")
    results = _read(artifacts, cfg, "subtypes_tsv")

    read_counts = _optional_table(cfg, "read_counts_tsv", load_read_counts)
    seq_runs = _optional_table(cfg, "seq_runs_tsv", load_seq_runs)

    tables = {
        "Samples": sample_summary(toc),
        "Alignment QC": alignment_qc(fractions, toc, read_counts, seq_runs),
        "log-CPM quantiles": quantile_table(lcpm),
        "Subtypes by site": subtype_table(results, sample_sites(toc)),
        "Subtype stability": stability_summary(results),
        "Subtype calls": results,
    }

    print(f"[REPORT] plotting {lcpm.shape[1]} samples")
    figures = {
        "log-CPM density": density_plot(lcpm_all, lcpm, report_dir / "density.png"),
        "Panel genes by subtype": gene_scatter(
            panel, results["subtype"], report_dir / "panel_genes.png", genes=rep_cfg.get("scatter_genes")
        ),
    }
    if lcpm.shape[1] >= 3:
        figures["MDS"] = mds_plot(lcpm, results["subtype"], report_dir / "mds.png", top=rep_cfg.get("mds_top", 500))
    else:
        print("[WARN] fewer than 3 samples; skipping MDS")

    out = render_report(report_dir, tables, figures, title=rep_cfg.get("title", "WTS subtyping report"))
    print(f"[OK] report -> {out}")


if __name__ == "__main__":
    main()
