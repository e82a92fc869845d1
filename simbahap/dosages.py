"""
dosages.py

Dosage histogram algebra shared by the readers, the fitters and the writers.

A dosage distribution is a NumPy vector D of length p+1 where D[k] is the
weight of samples carrying exactly k alternate alleles. Distributions read
from a VCF hold integer counts; after normalization they hold floats that
sum to the number of simulated samples.
"""

from __future__ import annotations

from typing import Iterable, Optional, Sequence

import numpy as np


def is_unknown(genotype: Sequence) -> bool:
    """
    A genotype is unknown if any of its alleles is missing (None or '.').
    """
    return any(allele is None or allele == "." for allele in genotype)


def get_dosage(genotype: Sequence) -> int:
    return sum(1 for allele in genotype if allele == 1 or allele == "1")


def make_dosages_distribution(genotypes: Iterable[Sequence], ploidy: int, where: Optional[str] = None) -> np.ndarray:
    """
    Count called genotypes by alternate-allele dosage.

    genotypes: iterable of allele sequences, e.g. (0, 1, 1, 0) or "0110"
    Unknown genotypes are skipped; a called genotype whose length differs
    from ploidy raises ValueError.
    """
    dosages_d = np.zeros(ploidy + 1, dtype=np.int64)
    for genotype in genotypes:
        if is_unknown(genotype):
            continue
        if len(genotype) != ploidy:
            loc = f" @ {where}" if where else ""
            raise ValueError(
                f"Input ploidy does not match VCF genotypes{loc}: "
                f"expected {ploidy} alleles, got {len(genotype)}"
            )
        dosages_d[get_dosage(genotype)] += 1
    return dosages_d


def normalize_dosages_distribution(dosages_d: np.ndarray, n_samples: int) -> np.ndarray:
    """
    Scale a distribution so that it sums to n_samples.
    """
    total = float(np.sum(dosages_d))
    if total <= 0:
        raise ValueError("Cannot normalize an empty dosage distribution.")
    return n_samples * np.asarray(dosages_d, dtype=np.float64) / total


def normalize_dosages_vector(dosages_v: np.ndarray, n_samples: int) -> np.ndarray:
    """
    dosages_v: (M, p+1) integer counts -> (M, p+1) float64 summing to n_samples per row
    """
    dosages_v = np.asarray(dosages_v)
    out = np.empty(dosages_v.shape, dtype=np.float64)
    for m in range(dosages_v.shape[0]):
        out[m] = normalize_dosages_distribution(dosages_v[m], n_samples)
    return out


def l1_norm(a: np.ndarray, b: np.ndarray) -> float:
    return float(np.sum(np.abs(np.asarray(a, dtype=np.float64) - np.asarray(b, dtype=np.float64))))


def dosages_from_view(view, ploidy: int) -> np.ndarray:
    """
    Histogram of simulated dosages: sum the p haplotype alleles of every
    sample in a SampleAllelesView and bin the sums.
    """
    return np.bincount(view.dosages(), minlength=ploidy + 1).astype(np.int64)


def format_distribution(dosages_d: np.ndarray) -> str:
    return "[ " + " ".join(f"{float(d):g}" for d in dosages_d) + " ]"
