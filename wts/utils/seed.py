from __future__ import annotations
import zlib
import numpy as np


def sample_rng(seed: int, sample_id: str) -> np.random.Generator:
    """
    Random generator owned by one sample.

    The stream depends only on (seed, sample_id), so a sample's noise draws
    do not change when other samples are added, dropped or reordered.
    """
    key = zlib.crc32(str(sample_id).encode("utf-8"))
    return np.random.default_rng([int(seed), key])
