#!/usr/bin/env python3
"""
descent.py

Approximate founder-allele fitting by greedy ascent on the number of 1-bits:
- Start with all founder alleles at 0.
- Repeat: try switching each 0-founder to 1; keep the switch with the smallest
  L1 distance to the target (ties -> lowest founder index).
- Stop as soon as no switch strictly improves the distance.

Bits are never switched back from 1 to 0, so at most F rounds are made and
each round rebuilds O(F) histograms of O(S * p).
"""

from __future__ import annotations

import logging
from typing import List

import numpy as np

from simbahap.dosages import dosages_from_view, format_distribution, l1_norm
from simbahap.founders import HaplotypesMap
from simbahap.view import SampleAllelesView

logger = logging.getLogger(__name__)


class DescentFitting:
    name = "descent"

    def __init__(self, haplotypes_m: HaplotypesMap):
        self.haplotypes_m = haplotypes_m
        self.trace: List[float] = []

    def fit(self, founders_alts: np.ndarray, dosages_d: np.ndarray) -> float:
        """
        Overwrite founders_alts (shape (F,)) with the fitted alleles and
        return the achieved L1 distance to dosages_d.
        """
        ploidy = self.haplotypes_m.ploidy
        view = SampleAllelesView(self.haplotypes_m, founders_alts)

        founders_alts[:] = 0
        n_founders = founders_alts.shape[0]
        distances = np.empty(n_founders, dtype=np.float64)

        distance = l1_norm(dosages_d, dosages_from_view(view, ploidy))
        self.trace = [distance]

        for _ in range(n_founders):
            for j in range(n_founders):
                if founders_alts[j] == 1:
                    distances[j] = np.inf
                    continue
                founders_alts[j] = 1
                distances[j] = l1_norm(dosages_d, dosages_from_view(view, ploidy))
                founders_alts[j] = 0

            min_j = int(np.argmin(distances))
            min_distance = float(distances[min_j])
            if min_distance >= distance:
                break

            founders_alts[min_j] = 1
            distance = min_distance
            self.trace.append(distance)

        dosages_out = dosages_from_view(view, ploidy)
        logger.info(
            "DISTANCE: %g = <%s,%s>",
            distance, format_distribution(dosages_d), format_distribution(dosages_out),
        )
        return distance
