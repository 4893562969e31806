from pathlib import Path
import numpy as np
import pandas as pd
import pytest

COUNTERS = ["__no_feature", "__ambiguous", "__too_low_aQual", "__not_aligned", "__alignment_not_unique"]


def write_count_file(path: Path, genes, counts, counters=(5, 3, 2, 10, 4)) -> Path:
    rows = [f"{g}\t{c}" for g, c in zip(genes, counts)]
    rows += [f"{name}\t{c}" for name, c in zip(COUNTERS, counters)]
    path.write_text("\n".join(rows) + "\n")
    return path


@pytest.fixture
def count_files(tmp_path):
    genes = ["ENSG01", "ENSG02", "ENSG03", "ENSG04"]
    files = {
        "S1": write_count_file(tmp_path / "S1.txt", genes, [0, 12, 40, 7]),
        "S2": write_count_file(tmp_path / "S2.txt", genes, [3, 0, 55, 120]),
    }
    return genes, files


@pytest.fixture
def toc_file(tmp_path):
    path = tmp_path / "toc.tsv"
    path.write_text(
        "patient\tsample\tWTS.project\tWGS.project\tcount.file\tsite\tnotes\n"
        "P1\tS1\tproj1\tNA\tS1.txt\tliver\tNA\n"
        "P1\tS2\tNA\tW1\tNA\tliver\tok\n"
        "P2\tS3\tproj2\tNA\tS3.txt\tNA\t\n"
    )
    return path


@pytest.fixture
def centroids():
    rng = np.random.default_rng(0)
    genes = [f"G{i}" for i in range(12)]
    return pd.DataFrame(
        rng.normal(size=(12, 3)),
        index=pd.Index(genes, name="symbol"),
        columns=["LumA", "LumB", "Basal"],
    )


@pytest.fixture
def panel(centroids):
    """Three samples built from the centroids, shifted into the lcpm range."""
    return pd.DataFrame(
        {
            "S1": centroids["LumA"] + 6.0,
            "S2": centroids["LumB"] + 6.0,
            "S3": centroids["Basal"] + 6.0,
        },
        index=centroids.index,
    )
