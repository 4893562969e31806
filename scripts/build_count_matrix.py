"""
Combines the per-sample HTSeq count files listed in the table of contents
into one gene x sample matrix, plus the per-sample read fractions.
"""

from __future__ import annotations
import argparse
from pathlib import Path
import sys

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from wts.utils.io import load_config, data_path, ensure_dir, DEFAULT_CONFIG
from wts.data.toc import load_toc, count_file_map
from wts.data.counts import combine_count_files, read_fractions


def main():
    ap = argparse.ArgumentParser()
    ap.add_argument("--config", default=DEFAULT_CONFIG)
    args = ap.parse_args()

    cfg = load_config(args.config)
    artifacts = ensure_dir(Path(cfg["data"]["artifacts_dir"]))
    out_counts = artifacts / cfg["data"]["count_matrix_tsv"]
    out_frac = artifacts / cfg["data"]["read_fractions_tsv"]

    toc = load_toc(data_path(cfg, "toc_tsv"))
    files = count_file_map(toc, data_path(cfg, "counts_dir"))
    print(f"[COUNTS] toc rows={len(toc)} | with count file={len(files)}")
    if not files:
        raise ValueError("No samples in the table of contents have a count file")

    counts = combine_count_files(files)
    fractions = read_fractions(counts)

    counts.to_csv(out_counts, sep="\t")
    fractions.to_csv(out_frac, sep="\t")

    print(f"[COUNTS] genes+counters={counts.shape[0]} | samples={counts.shape[1]}")
    print(f"[OK] wrote {out_counts}")
    print(f"[OK] wrote {out_frac}")


if __name__ == "__main__":
    main()
