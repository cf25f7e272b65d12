"""Models for PGXN distribution metadata and prerequisites."""

from pgxn_meta.models.meta import DistributionMeta, InvalidMetaError, ReleaseStatus
from pgxn_meta.models.prereqs import Prereqs, PrereqsError

__all__ = [
    "DistributionMeta",
    "InvalidMetaError",
    "ReleaseStatus",
    "Prereqs",
    "PrereqsError",
]
