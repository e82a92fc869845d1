import logging
import time
from dataclasses import dataclass, field
from typing import List

import numpy as np

logger = logging.getLogger(__name__)


@dataclass
class FittingReport:
    distances: List[float] = field(default_factory=list)   # per marker
    seconds: float = 0.0

    @property
    def total_distance(self) -> float:
        return float(sum(self.distances))


def fit_founders_alleles(fitting, founders_alts_v: np.ndarray, dosages_v: np.ndarray) -> FittingReport:
    """
    Fit every marker independently, in input order.

    founders_alts_v: (M, F) uint8, rows are overwritten in place
    dosages_v: (M, p+1) normalized target distributions
    """
    n_markers = founders_alts_v.shape[0]
    if dosages_v.shape[0] != n_markers:
        raise ValueError(f"Got {dosages_v.shape[0]} target distributions for {n_markers} markers")

    report = FittingReport()
    start = time.time()
    for marker_id in range(n_markers):
        report.distances.append(fitting.fit(founders_alts_v[marker_id], dosages_v[marker_id]))
    report.seconds = time.time() - start

    logger.info("DISTANCES: %g", report.total_distance)
    logger.info("SECONDS: %.3f", report.seconds)
    for founders_alts in founders_alts_v:
        logger.debug("FOUNDERS ALLELE: %s", founders_alts.tolist())
    return report
