"""
founders.py

Founder simulation:
- founders distribution g: how many of the S*p haplotype slots each founder fills
- haplotypes map H: fixed random assignment (sample, haplotype slot) -> founder

Only two draws from the generator are made, always in this order:
the S*p - F founder tokens, then one permutation of the S*p slots.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np

logger = logging.getLogger(__name__)


def simulate_founders_distribution(
    n_founders: int,
    n_samples: int,
    ploidy: int,
    rng: np.random.Generator,
) -> np.ndarray:
    """
    Every founder gets one slot; the remaining S*p - F slots are handed out
    uniformly at random. Returns g of shape (F,), int64, summing to S*p.
    """
    if n_samples < 1:
        raise ValueError("n_samples must be >= 1")
    if n_founders < 1:
        raise ValueError("n_founders must be >= 1")
    n_slots = n_samples * ploidy
    if n_founders > n_slots:
        raise ValueError(
            f"Number of founders ({n_founders}) exceeds samples * ploidy ({n_samples} * {ploidy} = {n_slots})"
        )

    founders_d = np.ones(n_founders, dtype=np.int64)
    tokens = rng.integers(0, n_founders, size=n_slots - n_founders)
    founders_d += np.bincount(tokens, minlength=n_founders)

    logger.info("FOUNDERS DISTRIBUTION: %s", founders_d.tolist())
    return founders_d


@dataclass(frozen=True)
class HaplotypesMap:
    founders: np.ndarray     # (S, p) int64 founder index per sample haplotype slot
    n_founders: int

    @property
    def n_samples(self) -> int:
        return int(self.founders.shape[0])

    @property
    def ploidy(self) -> int:
        return int(self.founders.shape[1])

    def founder_counts(self) -> np.ndarray:
        return np.bincount(self.founders.ravel(), minlength=self.n_founders)

    def __getitem__(self, key):
        return self.founders[key]


def simulate_haplotypes_map(
    founders_d: np.ndarray,
    n_samples: int,
    ploidy: int,
    rng: np.random.Generator,
) -> HaplotypesMap:
    """
    Write g[j] copies of j contiguously, shuffle all S*p slots, reshape to (S, p).
    """
    n_slots = n_samples * ploidy
    if int(np.sum(founders_d)) != n_slots:
        raise ValueError(
            f"Founders distribution sums to {int(np.sum(founders_d))}, expected {n_slots}"
        )

    slots = np.repeat(np.arange(len(founders_d), dtype=np.int64), founders_d)
    slots = rng.permutation(slots)
    founders = slots.reshape(n_samples, ploidy)
    founders.setflags(write=False)

    hmap = HaplotypesMap(founders=founders, n_founders=len(founders_d))
    logger.info(
        "HAPLOTYPES MAP: %d samples x %d haplotypes over %d founders; slots per founder %s",
        n_samples, ploidy, len(founders_d), hmap.founder_counts().tolist(),
    )
    logger.debug("HAPLOTYPES MAP: %s", founders.tolist())
    return hmap
