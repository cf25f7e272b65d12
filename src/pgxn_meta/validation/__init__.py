"""Schema-driven validation of PGXN META structures.

Rule trees for each spec version live in ``specs``; ``framework`` walks a
document against one and collects errors with their location.
"""

from .framework import MetaValidator, ValidationContext, ValidationResult, validate
from .rules import NodeKind, Rule, SpecificationError
from .specs import get_definition

__all__ = [
    "MetaValidator",
    "ValidationContext",
    "ValidationResult",
    "validate",
    "NodeKind",
    "Rule",
    "SpecificationError",
    "get_definition",
]
