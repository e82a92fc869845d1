import logging
from pathlib import Path
from typing import Iterator, Optional

import pysam

from simbahap.dosages import format_distribution, is_unknown, make_dosages_distribution
from simbahap.io.variants_data import VariantRecord, VariantsData

logger = logging.getLogger(__name__)


def _open_vcf(path) -> pysam.VariantFile:
    try:
        return pysam.VariantFile(str(path))
    except (OSError, ValueError) as e:
        raise ValueError(f"Could not read VCF {path}: {e}") from e


def _records(vcf: pysam.VariantFile, path) -> Iterator[pysam.VariantRecord]:
    it = iter(vcf)
    while True:
        try:
            rec = next(it)
        except StopIteration:
            return
        except (OSError, ValueError) as e:
            raise ValueError(f"Could not parse VCF {path}: {e}") from e
        yield rec


def read_vcf(path: str | Path, ploidy: int, max_markers: Optional[int] = None) -> VariantsData:
    """
    Read biallelic records and their observed dosage distributions.

    - polyallelic records are skipped with a warning
    - unknown genotypes are left out of the distribution with a warning
    - records without any called genotype are skipped with a warning
    - a called genotype with a ploidy other than `ploidy` raises ValueError
    - stops after max_markers accepted records when given
    """
    data = VariantsData(ploidy=ploidy)

    with _open_vcf(path) as vcf:
        samples = list(vcf.header.samples)
        data.n_input_samples = len(samples)

        for rec in _records(vcf, path):
            if max_markers is not None and data.n_markers >= max_markers:
                break

            where = f"{rec.chrom}:{rec.pos}"
            alts = rec.alts or (".",)
            if len(alts) > 1:
                logger.warning("INPUT VARIANT @ %s POLYALLELIC", where)
                data.n_skipped += 1
                continue

            genotypes = []
            for name in samples:
                gt = rec.samples[name].get("GT")
                if gt is None or is_unknown(gt):
                    logger.warning("INPUT GENOTYPE @ %s UNKNOWN", where)
                    continue
                genotypes.append(gt)

            dosages_d = make_dosages_distribution(genotypes, ploidy, where=where)
            if dosages_d.sum() == 0:
                logger.warning("INPUT VARIANT @ %s NO CALLED GENOTYPES", where)
                data.n_skipped += 1
                continue

            data.add(VariantRecord(contig=rec.chrom, position=rec.pos, ref=rec.ref, alt=alts[0]), dosages_d)
            logger.info("INPUT DOSAGES @ %s # %s", where, format_distribution(dosages_d))

        # htslib may add undeclared contigs while reading records, so collect them last.
        for name, contig in vcf.header.contigs.items():
            data.contigs.append((name, contig.length))

    logger.info(
        "Read %d markers (%d skipped) over %d input samples",
        data.n_markers, data.n_skipped, data.n_input_samples,
    )
    return data
