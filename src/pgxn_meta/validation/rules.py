"""Rule tree nodes used to describe a META schema version.

A schema is a tree of ``Rule`` nodes. Each node has a ``NodeKind`` that says
how the matching part of the document is checked:

- ``VALUE``: a leaf; ``check`` is a predicate called with the value
- ``MAP``: ``fields`` holds the rules for known keys, ``wildcard`` (if any)
  applies to every other key and carries a ``name`` predicate for the key
- ``LIST``: every element is checked against ``items``
- ``LAZYLIST``: like ``LIST`` but a lone scalar counts as a one-element list
"""

import dataclasses
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Callable, Mapping, Optional

# (context, key, value) -> bool; predicates report their own errors
Predicate = Callable[[Any, Any, Any], bool]


class NodeKind(str, Enum):
    """How a rule tree node checks its part of the document."""
    VALUE = "value"
    MAP = "map"
    LIST = "list"
    LAZYLIST = "lazylist"


class SpecificationError(Exception):
    """Raised for a rule tree node that has no validation action."""


@dataclass(frozen=True)
class Rule:
    """A single node of a schema rule tree."""
    kind: Optional[NodeKind] = None
    check: Optional[Predicate] = None
    fields: Mapping[str, "Rule"] = field(default_factory=lambda: MappingProxyType({}))
    wildcard: Optional["Rule"] = None
    items: Optional["Rule"] = None
    name: Optional[Predicate] = None
    mandatory: bool = False  # the key holding this node must be present
    non_empty: bool = False  # a list node must have at least one entry

    @property
    def is_well_formed(self) -> bool:
        if self.kind is NodeKind.VALUE:
            return self.check is not None
        if self.kind is NodeKind.MAP:
            return True
        if self.kind in (NodeKind.LIST, NodeKind.LAZYLIST):
            return self.items is not None
        return False

    def require_well_formed(self, label: str = "rule") -> "Rule":
        """Return the node, or raise ``SpecificationError`` if it is malformed."""
        if not self.is_well_formed:
            raise SpecificationError(
                f"Missing validation action in specification for '{label}'. "
                "Must be one of 'map', 'list', 'lazylist', or 'value'"
            )
        return self


def value(check: Predicate, *, mandatory: bool = False) -> Rule:
    return Rule(kind=NodeKind.VALUE, check=check, mandatory=mandatory)


def map_of(fields: Optional[Mapping[str, Rule]] = None, *, wildcard: Optional[Rule] = None,
           mandatory: bool = False) -> Rule:
    """Build a map node; ``wildcard`` must come from ``any_key``."""
    return Rule(
        kind=NodeKind.MAP,
        fields=MappingProxyType(dict(fields or {})),
        wildcard=wildcard,
        mandatory=mandatory,
    )


def list_of(items: Rule, *, mandatory: bool = False, non_empty: bool = False) -> Rule:
    return Rule(kind=NodeKind.LIST, items=items, mandatory=mandatory, non_empty=non_empty)


def lazylist_of(items: Rule, *, mandatory: bool = False, non_empty: bool = False) -> Rule:
    return Rule(kind=NodeKind.LAZYLIST, items=items, mandatory=mandatory, non_empty=non_empty)


def any_key(name: Predicate, rule: Rule) -> Rule:
    """Turn ``rule`` into a wildcard entry whose keys must satisfy ``name``."""
    return dataclasses.replace(rule, name=name)
