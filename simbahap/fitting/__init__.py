from .descent import DescentFitting
from .mip import MipFitting
from .driver import fit_founders_alleles, FittingReport
