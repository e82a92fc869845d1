#!/usr/bin/env python3
"""
mip.py

Exact founder-allele fitting as a mixed-integer program (PuLP + CBC).

Variables:
  f_j      in {0,1}      founder alleles                       j in [0,F)
  d_k      integer >= 0  simulated dosage counts               k in [0,p]
  e_{s,k}  real >= 0     |sigma_s - k| slack                   s in [0,S)
  i_{s,k}  integer >= 0  sample s has dosage k
  z_k      real >= 0     |d_k - t_k| slack
  t_k      real, fixed   target dosage count D*_k of the current marker
with sigma_s = sum_h f_{H[s][h]}.

Rows (all built once):
  sum_k i_{s,k} = 1
  d_k = sum_s i_{s,k}
  e_{s,k} >= sigma_s - k,  e_{s,k} >= k - sigma_s
  e_{s,k} <= p * (1 - i_{s,k})
  d_k - t_k <= z_k,  t_k - d_k <= z_k

Objective: minimize sum_k z_k.

Each marker only moves the bounds of t_k onto its target, so the row set
is identical for every solve and no target outlives its marker.
"""

from __future__ import annotations

import logging
from typing import Optional

import numpy as np
import pulp

from simbahap.dosages import format_distribution
from simbahap.founders import HaplotypesMap

logger = logging.getLogger(__name__)


def default_solver() -> pulp.LpSolver:
    return pulp.PULP_CBC_CMD(msg=False)


class MipFitting:
    name = "mip"

    def __init__(self, haplotypes_m: HaplotypesMap, n_founders: int, solver: Optional[pulp.LpSolver] = None):
        if n_founders != haplotypes_m.n_founders:
            raise ValueError(
                f"Haplotypes map covers {haplotypes_m.n_founders} founders, got n_founders={n_founders}"
            )
        self.haplotypes_m = haplotypes_m
        self.solver = solver if solver is not None else default_solver()
        self.marker_id = 0
        self._init(n_founders)

    def _init(self, n_founders: int) -> None:
        n_samples = self.haplotypes_m.n_samples
        ploidy = self.haplotypes_m.ploidy
        dosages = range(ploidy + 1)

        self.mip = pulp.LpProblem("founders_alleles", pulp.LpMinimize)

        # Vector z to linearize the l1-norm objective.
        self.mip_z = [pulp.LpVariable(f"z_{k}", lowBound=0, cat=pulp.LpContinuous) for k in dosages]
        # Target dosages, pinned per marker.
        self.mip_targets = [pulp.LpVariable(f"t_{k}", lowBound=0, upBound=0, cat=pulp.LpContinuous) for k in dosages]
        # Dosages d.
        self.mip_dosages = [pulp.LpVariable(f"d_{k}", lowBound=0, cat=pulp.LpInteger) for k in dosages]
        # Dosage absolute errors e_s,k.
        self.mip_errors = [
            [pulp.LpVariable(f"e_{s}_{k}", lowBound=0, cat=pulp.LpContinuous) for k in dosages]
            for s in range(n_samples)
        ]
        # Dosage indicators i_s,k.
        self.mip_indicators = [
            [pulp.LpVariable(f"i_{s}_{k}", lowBound=0, cat=pulp.LpInteger) for k in dosages]
            for s in range(n_samples)
        ]
        # Founder alleles f.
        self.mip_alts = [pulp.LpVariable(f"f_{j}", cat=pulp.LpBinary) for j in range(n_founders)]

        for k in dosages:
            self.mip += (
                self.mip_dosages[k] == pulp.lpSum(self.mip_indicators[s][k] for s in range(n_samples)),
                f"dosage_count_{k}",
            )

        for s in range(n_samples):
            self.mip += pulp.lpSum(self.mip_indicators[s]) == 1, f"one_dosage_{s}"

        for s in range(n_samples):
            sample_sum = pulp.lpSum(self.mip_alts[j] for j in self.haplotypes_m.founders[s])
            for k in dosages:
                e = self.mip_errors[s][k]
                self.mip += e >= sample_sum - k, f"error_above_{s}_{k}"
                self.mip += e >= k - sample_sum, f"error_below_{s}_{k}"
                self.mip += e <= ploidy * (1 - self.mip_indicators[s][k]), f"indicator_{s}_{k}"

        for k in dosages:
            self.mip += self.mip_dosages[k] - self.mip_targets[k] <= self.mip_z[k], f"dosage_plus_{k}"
            self.mip += self.mip_targets[k] - self.mip_dosages[k] <= self.mip_z[k], f"dosage_minus_{k}"

        self.mip.setObjective(pulp.lpSum(self.mip_z))

    def set_target(self, dosages_d: np.ndarray) -> None:
        """Pin t_k to the marker's target dosage counts."""
        dosages_d = np.asarray(dosages_d, dtype=np.float64)
        if dosages_d.shape != (len(self.mip_targets),):
            raise ValueError(f"Target dosages must have shape ({len(self.mip_targets)},), got {dosages_d.shape}")
        for t, target in zip(self.mip_targets, dosages_d.tolist()):
            t.lowBound = target
            t.upBound = target

    def target(self) -> np.ndarray:
        return np.array([t.lowBound for t in self.mip_targets], dtype=np.float64)

    def fit(self, founders_alts: np.ndarray, dosages_d: np.ndarray) -> float:
        """
        Overwrite founders_alts (shape (F,)) with an optimal allele vector and
        return the optimal L1 distance to dosages_d.
        """
        marker_id = self.marker_id
        self.marker_id += 1

        self.set_target(dosages_d)
        self.mip.solve(self.solver)
        status = pulp.LpStatus[self.mip.status]
        if status != "Optimal":
            raise RuntimeError(f"MIP solver returned status '{status}' on marker {marker_id}")

        distance = float(pulp.value(self.mip.objective) or 0.0)
        dosages_out = np.array([round(d.varValue) for d in self.mip_dosages], dtype=np.int64)
        logger.info(
            "DISTANCE: %g = <%s,%s>",
            distance, format_distribution(dosages_d), format_distribution(dosages_out),
        )

        if int(dosages_out.sum()) != self.haplotypes_m.n_samples:
            raise RuntimeError(
                f"MIP dosages sum to {int(dosages_out.sum())} on marker {marker_id}, "
                f"expected {self.haplotypes_m.n_samples}"
            )

        # founders absent from the map are left out of the model and come back unset
        founders_alts[:] = [int(round(f.varValue or 0)) for f in self.mip_alts]
        return distance
