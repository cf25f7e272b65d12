"""pgxn-meta - Validate and manipulate PGXN distribution metadata.

pgxn-meta checks decoded META structures against the version of the PGXN
META specification they declare, and models distribution prerequisites by
phase and type.
"""

__version__ = "0.1.0"
__author__ = "pgxn"
__description__ = "Validate and manipulate PGXN distribution metadata"

from pgxn_meta.config import MetaConfig, load_config
from pgxn_meta.models import DistributionMeta, InvalidMetaError, Prereqs, PrereqsError
from pgxn_meta.validation import MetaValidator, ValidationResult, validate
from pgxn_meta.versioning import FinalizedError, RequirementsError, VersionRequirements

__all__ = [
    "__version__",
    "__author__",
    "__description__",
    "MetaConfig",
    "load_config",
    "MetaValidator",
    "ValidationResult",
    "validate",
    "Prereqs",
    "PrereqsError",
    "DistributionMeta",
    "InvalidMetaError",
    "VersionRequirements",
    "RequirementsError",
    "FinalizedError",
]
