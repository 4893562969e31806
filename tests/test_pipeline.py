"""
Runs the three analysis scripts end to end on a small synthetic study.
"""

from pathlib import Path
import runpy
import sys
import numpy as np
import pandas as pd
import pytest

from conftest import write_count_file

SCRIPTS = Path(__file__).resolve().parents[1] / "scripts"


def run_script(name, monkeypatch, *args):
    monkeypatch.setattr(sys, "argv", [name, *args])
    runpy.run_path(str(SCRIPTS / name), run_name="__main__")


@pytest.fixture
def study(tmp_path):
    rng = np.random.default_rng(2)
    base = tmp_path / "study"
    (base / "htseq").mkdir(parents=True)
    (base / "metadata").mkdir()
    (base / "reference").mkdir()

    genes = [f"G{i}" for i in range(20)]
    samples = ["S1", "S2", "S3", "S4"]
    for s in samples:
        write_count_file(base / "htseq" / f"{s}.txt", genes, rng.poisson(rng.uniform(20, 2000, size=20)))

    (base / "metadata" / "toc.tsv").write_text(
        "patient\tsample\tWTS.project\tWGS.project\tcount.file\tsite\n"
        "P1\tS1\tproj1\tNA\tS1.txt\tliver\n"
        "P1\tS2\tproj2\tNA\tS2.txt\tlung\n"
        "P2\tS3\tproj3\tW3\tS3.txt\tliver\n"
        "P3\tS4\tproj4\tNA\tS4.txt\tNA\n"
        "P3\tS5\tNA\tW5\tNA\tlung\n"
    )
    (base / "metadata" / "read_counts.tsv").write_text(
        "project\treads\n" + "".join(f"proj{i}\t{1000 * i}\n" for i in range(1, 5))
    )

    weights = pd.DataFrame(
        rng.normal(size=(6, 3)), index=pd.Index(genes[:6], name="gene"), columns=["LumA", "LumB", "Basal"]
    )
    weights.to_csv(base / "reference" / "centroids.tsv", sep="\t")

    artifacts = tmp_path / "artifacts"
    cfg = tmp_path / "config.yaml"
    cfg.write_text(
        "data:\n"
        f"  base_dir: {base}\n"
        "  toc_tsv: metadata/toc.tsv\n"
        "  read_counts_tsv: metadata/read_counts.tsv\n"
        "  seq_runs_tsv: metadata/seq_runs.tsv\n"
        "  counts_dir: htseq\n"
        "  centroids_tsv: reference/centroids.tsv\n"
        "  annotation_tsv: null\n"
        f"  artifacts_dir: {artifacts}\n"
        f"  report_dir: {artifacts / 'report'}\n"
        "  count_matrix_tsv: count_matrix.tsv\n"
        "  read_fractions_tsv: read_fractions.tsv\n"
        "  lcpm_tsv: lcpm.tsv\n"
        "  lcpm_all_tsv: lcpm_all.tsv\n"
        "  panel_tsv: panel_lcpm.tsv\n"
        "  subtypes_tsv: subtypes.tsv\n"
        "normalize:\n  min_count: 10\n  min_samples: 1\n  prior_count: 0.5\n"
        "subtype:\n  alpha: 0.5\n  n_trials: 5\n  threshold: 0.95\n  precision: 0.05\n  seed: 1\n"
        "report:\n  mds_top: 10\n"
    )
    return cfg, artifacts, base


def test_pipeline_end_to_end(study, monkeypatch):
    cfg, artifacts, base = study

    run_script("build_count_matrix.py", monkeypatch, "--config", str(cfg))
    counts = pd.read_csv(artifacts / "count_matrix.tsv", sep="\t", index_col=0)
    assert list(counts.columns) == ["S1", "S2", "S3", "S4"]
    original = pd.read_csv(base / "htseq" / "S3.txt", sep="\t", header=None, index_col=0)[1]
    assert counts["S3"].tolist() == original.tolist()

    run_script("assign_subtypes.py", monkeypatch, "--config", str(cfg))
    results = pd.read_csv(artifacts / "subtypes.tsv", sep="\t", index_col=0)
    assert list(results.index) == ["S1", "S2", "S3", "S4"]
    assert set(results["subtype"]) <= {"LumA", "LumB", "Basal"}
    assert results["consistency"].between(0, 1).all()
    assert (results["tolerance"] >= 0).all()

    lcpm = pd.read_csv(artifacts / "lcpm.tsv", sep="\t", index_col=0)
    assert np.isfinite(lcpm.values).all()

    run_script("render_report.py", monkeypatch, "--config", str(cfg))
    report = artifacts / "report" / "report.html"
    assert report.exists()
    text = report.read_text()
    assert "Alignment QC" in text
    assert (artifacts / "report" / "mds.png").exists()
