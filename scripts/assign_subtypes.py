"""
Normalizes the combined count matrix to log-CPM and assigns each sample a
subtype by rank correlation against the reference centroids, with the
consistency / tolerance stability scores.
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
from wts.data.counts import split_special_counters
from wts.data.normalization import normalize_counts, log_cpm
from molecular.centroids import load_centroids, load_gene_annotation
from molecular.subtype_assignment import panel_expression, assign_subtypes


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=DEFAULT_CONFIG)
    args = ap.parse_args()

    cfg = load_config(args.config)
    artifacts = ensure_dir(Path(cfg["data"]["artifacts_dir"]))
    norm_cfg = cfg.get("normalize", {})
    sub_cfg = cfg.get("subtype", {})

    counts_tsv = artifacts / cfg["data"]["count_matrix_tsv"]
    if not counts_tsv.exists():
        raise FileNotFoundError(f"{counts_tsv} not found; run scripts/build_count_matrix.py first")

    counts = pd.read_csv(counts_tsv, sep="\t", index_col=0)
    genes, special = split_special_counters(counts)
    print(f"[NORM] genes={genes.shape[0]} | counters={special.shape[0]} | samples={genes.shape[1]}")

    lcpm = normalize_counts(genes, norm_cfg)
    lcpm_all = log_cpm(genes, prior_count=norm_cfg.get("prior_count", 0.5))
    print(f"[NORM] kept {lcpm.shape[0]} genes with >= {norm_cfg.get('min_count', 10)} counts")

    centroids = load_centroids(data_path(cfg, "centroids_tsv"))
    annotation = None
    if cfg["data"].get("annotation_tsv"):
        annotation = load_gene_annotation(data_path(cfg, "annotation_tsv"))

    panel, ref = panel_expression(lcpm, centroids, annotation)
    print(f"[SUBTYPE] panel genes={panel.shape[0]}/{centroids.shape[0]} | labels={list(ref.columns)}")

    results = assign_subtypes(
        panel,
        ref,
        alpha=sub_cfg.get("alpha", 1.0),
        n_trials=sub_cfg.get("n_trials", 10),
        threshold=sub_cfg.get("threshold", 0.95),
        precision=sub_cfg.get("precision", 0.01),
        seed=sub_cfg.get("seed", 42),
        method=sub_cfg.get("method", "bisect"),
    )

    outputs = {
        "lcpm_tsv": lcpm,
        "lcpm_all_tsv": lcpm_all,
        "panel_tsv": panel,
        "subtypes_tsv": results,
    }
    for key, df in outputs.items():
        out = artifacts / cfg["data"][key]
        df.to_csv(out, sep="\t")
        print(f"[OK] wrote {out}")

    print(f"[SUBTYPE] counts={results['subtype'].value_counts().to_dict()}")


if __name__ == "__main__":
    main()
