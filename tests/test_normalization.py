import numpy as np
import pandas as pd
import pytest

from wts.data.normalization import (
    filter_low_counts,
    upper_quartile_factors,
    log_cpm,
    normalize_counts,
    quantile_table,
)


@pytest.fixture
def genes():
    return pd.DataFrame(
        {
            "S1": [0, 10, 20, 30, 40],
            "S2": [0, 0, 5, 100, 200],
        },
        index=["g1", "g2", "g3", "g4", "g5"],
    )


def test_upper_quartile_factor(genes):
    factors = upper_quartile_factors(genes)
    # S1: 75th percentile is 30, only 40 lies above it
    assert factors["S1"] == pytest.approx(1e6 / 40)
    # S2: 75th percentile is 100, only 200 lies above it
    assert factors["S2"] == pytest.approx(1e6 / 200)


def test_log_cpm_values_and_zero_counts(genes):
    lcpm = log_cpm(genes, prior_count=0.5)
    assert np.isfinite(lcpm.values).all()
    assert lcpm.loc["g5", "S1"] == pytest.approx(np.log2(40.5 * 1e6 / 40))
    assert lcpm.loc["g1", "S2"] == pytest.approx(np.log2(0.5 * 1e6 / 200))


def test_prior_count_must_be_positive(genes):
    with pytest.raises(ValueError):
        log_cpm(genes, prior_count=0)


def test_sample_without_upper_quartile_reads():
    zeros = pd.DataFrame({"S1": [0, 0, 0, 0], "S2": [1, 2, 3, 4]}, index=list("abcd"))
    with pytest.raises(ValueError, match="S1"):
        upper_quartile_factors(zeros)


def test_filter_low_counts(genes):
    assert list(filter_low_counts(genes, min_count=10, min_samples=1).index) == ["g2", "g3", "g4", "g5"]
    assert list(filter_low_counts(genes, min_count=10, min_samples=2).index) == ["g4", "g5"]


def test_normalize_counts_uses_config(genes):
    lcpm = normalize_counts(genes, {"min_count": 10, "min_samples": 2, "prior_count": 1.0})
    assert list(lcpm.index) == ["g4", "g5"]
    assert np.isfinite(lcpm.values).all()

    with pytest.raises(ValueError, match="No genes"):
        normalize_counts(genes, {"min_count": 1000})


def test_quantile_table(genes):
    table = quantile_table(log_cpm(genes))
    assert list(table.columns) == ["0%", "25%", "50%", "75%", "100%"]
    assert list(table.index) == ["S1", "S2"]
    assert (table.diff(axis=1).iloc[:, 1:] >= 0).all().all()
