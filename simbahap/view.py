"""
view.py

Sample alleles view: Allele[sample, haplotype] -> Allele[founder].

Nothing is copied; every lookup goes through the haplotypes map into the
current founder allele row, so writes to that row are seen immediately.
"""

from __future__ import annotations

from typing import Iterator, Tuple

import numpy as np

from simbahap.founders import HaplotypesMap


class SampleAllelesView:

    def __init__(self, haplotypes_m: HaplotypesMap, founders_alts: np.ndarray):
        if founders_alts.shape != (haplotypes_m.n_founders,):
            raise ValueError(
                f"Founder allele row has shape {founders_alts.shape}, expected ({haplotypes_m.n_founders},)"
            )
        self.haplotypes_m = haplotypes_m
        self.founders_alts = founders_alts

    @property
    def n_samples(self) -> int:
        return self.haplotypes_m.n_samples

    @property
    def ploidy(self) -> int:
        return self.haplotypes_m.ploidy

    def __getitem__(self, key: Tuple[int, int]) -> int:
        sample_id, haplotype_id = key
        return int(self.founders_alts[self.haplotypes_m.founders[sample_id, haplotype_id]])

    def dosages(self) -> np.ndarray:
        """
        Simulated alt-allele count of every sample, shape (S,).
        """
        return self.founders_alts[self.haplotypes_m.founders].sum(axis=1).astype(np.int64)

    def genotypes(self) -> Iterator[Tuple[int, ...]]:
        for sample_id in range(self.n_samples):
            yield tuple(self[sample_id, h] for h in range(self.ploidy))
