import json
import logging
from pathlib import Path
from typing import Optional

import numpy as np
import pysam

from simbahap.founders import HaplotypesMap
from simbahap.io.variants_data import VariantsData
from simbahap.view import SampleAllelesView

logger = logging.getLogger(__name__)


def sample_names(n_samples: int):
    return [f"SAMPLE_{s}" for s in range(n_samples)]


def make_vcf_header(data: VariantsData, n_samples: int) -> pysam.VariantHeader:
    header = pysam.VariantHeader()
    header.formats.add("GT", 1, "String", "Genotype")
    for name, length in data.contigs:
        if length is None:
            header.contigs.add(name)
        else:
            header.contigs.add(name, length=length)
    for name in sample_names(n_samples):
        header.add_sample(name)
    return header


def write_vcf(
    path: Optional[str | Path],
    data: VariantsData,
    haplotypes_m: HaplotypesMap,
    founders_alts_v: np.ndarray,
) -> None:
    """
    Write the simulated population: one phased GT per sample, alleles taken
    from the sample alleles view over each marker's founder allele row.
    An empty or missing path writes to standard output.
    """
    if founders_alts_v.shape[0] != data.n_markers:
        raise ValueError(
            f"Got founder alleles for {founders_alts_v.shape[0]} markers, expected {data.n_markers}"
        )

    header = make_vcf_header(data, haplotypes_m.n_samples)
    path = str(path) if path else "-"
    mode = "wz" if path.endswith(".gz") else "w"

    if data.n_markers == 0:
        logger.warning("No markers left to simulate; writing header only.")

    with pysam.VariantFile(path, mode, header=header) as vcf_out:
        for marker_id, record in enumerate(data.records):
            alleles = (record.ref,) if record.alt == "." else (record.ref, record.alt)
            rec = vcf_out.new_record(
                contig=record.contig,
                start=record.position - 1,
                alleles=alleles,
                id=str(marker_id),
            )
            view = SampleAllelesView(haplotypes_m, founders_alts_v[marker_id])
            for sample_id, genotype in enumerate(view.genotypes()):
                rec.samples[sample_id]["GT"] = genotype
                rec.samples[sample_id].phased = True
            logger.debug("SAMPLES ALLELE: %s", [list(g) for g in view.genotypes()])
            vcf_out.write(rec)


def write_founders_tsv(founders_alts_v: np.ndarray, path: str | Path) -> None:
    """
    founders_alts_v: (M, F) 0/1 -> one line per founder with its alleles over all markers
    """
    M, F = founders_alts_v.shape
    with open(path, "w", encoding="utf-8") as f:
        f.write(f"# founders\t{F}\n")
        f.write(f"# markers\t{M}\n")
        f.write("# format: founder_id<TAB>alleles_as_0_1_string\n")
        for j in range(F):
            bitstr = "".join("1" if x else "0" for x in founders_alts_v[:, j])
            f.write(f"f{j}\t{bitstr}\n")


def write_summary_json(obj: dict, path: str | Path) -> None:
    with open(path, "w", encoding="utf-8") as f:
        json.dump(obj, f, indent=2)
