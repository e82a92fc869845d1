#!/usr/bin/env python3
"""
simulate.py

SimBA-hap: simulate a population of polyploid samples whose per-marker dosage
distributions match an input VCF.

Steps:
- read biallelic markers and their observed dosage distributions
- normalize every distribution to the number of simulated samples S
- draw the founders distribution and the (sample, haplotype) -> founder map
- fit founder alleles per marker (greedy descent, or exact MIP with --mip)
- write S phased samples built from the founders

Outputs:
  <output-vcf> (or standard output)
  optionally <founders-tsv> and <summary-json>
"""

from __future__ import annotations

import argparse
import logging
import sys
from dataclasses import asdict, dataclass
from typing import List, Optional

import numpy as np

from simbahap.dosages import normalize_dosages_vector
from simbahap.fitting import DescentFitting, MipFitting, fit_founders_alleles
from simbahap.founders import simulate_founders_distribution, simulate_haplotypes_map
from simbahap.io import read_vcf, write_founders_tsv, write_summary_json, write_vcf

logger = logging.getLogger("simbahap")

MIN_PLOIDY = 2
MAX_PLOIDY = 8


@dataclass
class SimParams:
    input_vcf: str
    output_vcf: str
    ploidy: int
    founders: int
    samples: int
    markers: Optional[int]
    seed: int
    mip: bool
    founders_tsv: Optional[str] = None
    summary_json: Optional[str] = None


def _validate_params(p: SimParams) -> None:
    if not (MIN_PLOIDY <= p.ploidy <= MAX_PLOIDY):
        raise ValueError(f"ploidy must be in [{MIN_PLOIDY}, {MAX_PLOIDY}], got {p.ploidy}")
    if p.founders < 1:
        raise ValueError("founders must be >= 1")
    if p.samples < 1:
        raise ValueError("samples must be >= 1")
    if p.markers is not None and p.markers < 1:
        raise ValueError("markers must be >= 1")
    if p.seed < 0:
        raise ValueError("seed must be >= 0")
    if p.founders > p.samples * p.ploidy:
        raise ValueError(
            f"founders ({p.founders}) must not exceed samples * ploidy ({p.samples} * {p.ploidy})"
        )


def run(params: SimParams) -> dict:
    _validate_params(params)

    rng = np.random.default_rng(params.seed)

    data = read_vcf(params.input_vcf, params.ploidy, max_markers=params.markers)
    dosages_v = normalize_dosages_vector(data.dosages_matrix(), params.samples)

    founders_d = simulate_founders_distribution(params.founders, params.samples, params.ploidy, rng)
    haplotypes_m = simulate_haplotypes_map(founders_d, params.samples, params.ploidy, rng)

    founders_alts_v = np.zeros((data.n_markers, params.founders), dtype=np.uint8)

    if params.mip:
        fitting = MipFitting(haplotypes_m, params.founders)
    else:
        fitting = DescentFitting(haplotypes_m)
    report = fit_founders_alleles(fitting, founders_alts_v, dosages_v)

    write_vcf(params.output_vcf, data, haplotypes_m, founders_alts_v)
    written = [params.output_vcf or "<stdout>"]

    if params.founders_tsv:
        write_founders_tsv(founders_alts_v, params.founders_tsv)
        written.append(params.founders_tsv)

    summary = {
        "params": asdict(params),
        "algorithm": fitting.name,
        "input_samples": data.n_input_samples,
        "markers": data.n_markers,
        "markers_skipped": data.n_skipped,
        "founders_distribution": founders_d.tolist(),
        "distances": report.distances,
        "total_distance": report.total_distance,
        "seconds": report.seconds,
    }
    if params.summary_json:
        write_summary_json(summary, params.summary_json)
        written.append(params.summary_json)

    logger.info("Wrote:\n  %s", "\n  ".join(written))
    return summary


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(
        prog="simba-hap",
        description="Haplotype simulator: fit founder haplotypes to the dosage distributions of an input VCF.",
    )
    ap.add_argument("-i", "--input-vcf", required=True, help="Input VCF file")
    ap.add_argument("-o", "--output-vcf", default="", help="Output VCF file (default: standard output)")
    ap.add_argument("-p", "--ploidy", type=int, default=4, help="Organism ploidy, 2..8 (default: 4)")
    ap.add_argument("-f", "--founders", type=int, default=1, help="Number of founders to simulate (default: 1)")
    ap.add_argument("-s", "--samples", type=int, default=1, help="Number of samples to simulate (default: 1)")
    ap.add_argument("-m", "--markers", type=int, default=None,
                    help="Maximum number of markers to use (default: all markers in the input VCF)")
    ap.add_argument("-g", "--seed", type=int, default=0, help="Seed for pseudo-random number generation (default: 0)")
    ap.add_argument("--mip", action="store_true",
                    help="Compute the optimal fit via Mixed-Integer Programming (default: greedy descent)")
    ap.add_argument("--founders-tsv", default=None, help="Also write fitted founder alleles as TSV")
    ap.add_argument("--summary-json", default=None, help="Also write a JSON run summary")
    verbosity = ap.add_mutually_exclusive_group()
    verbosity.add_argument("-q", "--quiet", action="store_true", help="Only report warnings and errors")
    verbosity.add_argument("-v", "--verbose", action="store_true", help="Also report debug diagnostics")
    return ap


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.WARNING if args.quiet else logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stderr)
    logging.getLogger().setLevel(level)

    params = SimParams(
        input_vcf=args.input_vcf,
        output_vcf=args.output_vcf,
        ploidy=args.ploidy,
        founders=args.founders,
        samples=args.samples,
        markers=args.markers,
        seed=args.seed,
        mip=args.mip,
        founders_tsv=args.founders_tsv,
        summary_json=args.summary_json,
    )

    try:
        run(params)
    except (ValueError, RuntimeError, OSError) as e:
        logger.error("ERROR: %s", e)
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
