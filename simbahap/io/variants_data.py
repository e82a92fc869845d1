from dataclasses import dataclass, field
from typing import List, Optional, Tuple

import numpy as np


@dataclass
class VariantRecord:
    contig: str
    position: int        # 1-based, as in the VCF POS column
    ref: str
    alt: str


@dataclass
class VariantsData:
    ploidy: int
    contigs: List[Tuple[str, Optional[int]]] = field(default_factory=list)   # (name, length or None)
    records: List[VariantRecord] = field(default_factory=list)
    dosages: List[np.ndarray] = field(default_factory=list)                 # per record, (p+1,) int64
    n_input_samples: int = 0
    n_skipped: int = 0

    @property
    def n_markers(self) -> int:
        return len(self.records)

    def dosages_matrix(self) -> np.ndarray:
        """
        Stack per-marker counts into shape (M, p+1).
        """
        if not self.dosages:
            return np.zeros((0, self.ploidy + 1), dtype=np.int64)
        return np.stack(self.dosages, axis=0)

    def add(self, record: VariantRecord, dosages_d: np.ndarray) -> None:
        self.records.append(record)
        self.dosages.append(dosages_d)
