from .parser import read_vcf

from .writer import (
    write_vcf,
    write_founders_tsv,
    write_summary_json,
)

from .variants_data import VariantsData, VariantRecord
