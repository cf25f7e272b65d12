"""Distribution prerequisites organized by phase and type.

A ``Prereqs`` object holds one ``VersionRequirements`` set per
``(phase, type)`` pair, e.g. the ``requires`` of the ``runtime`` phase. It
reads and writes the shape of the ``prereqs`` field of a META structure::

    {
        "runtime": {
            "requires": {"plpgsql": "0", "semver": ">= 0.2.0"},
        },
        "test": {"recommends": {"pgtap": "0.90.0"}},
    }

Besides the standard phases and types, names starting with ``x_`` or ``X_``
are accepted as custom phases and types.
"""

import logging
from typing import Any, Dict, Iterable, List, Mapping, Optional, Tuple, Union

from ..constants import LEGAL_PHASES, LEGAL_TYPES, is_custom_name
from ..versioning import FinalizedError, VersionRequirements

logger = logging.getLogger(__name__)


class PrereqsError(ValueError):
    """Raised for a missing or unknown phase or type."""


def _ordered(names: Iterable[str], legal: Tuple[str, ...]) -> List[str]:
    """Standard names in their canonical order, then custom names sorted."""
    present = set(names)
    return list(legal) + sorted(name for name in present if name not in legal)


class Prereqs:
    """A set of distribution prerequisites by phase and type."""

    def __init__(self, spec: Optional[Mapping[str, Any]] = None):
        """Build prereqs from the contents of a ``prereqs`` field.

        Unknown phases and types are skipped, as are empty cells. Every kept
        cell is parsed into ``VersionRequirements``; a malformed range raises
        ``RequirementsError``.
        """
        self._prereqs: Dict[str, Dict[str, VersionRequirements]] = {}
        self._finalized = False

        for phase, phase_spec in (spec or {}).items():
            if not self._is_legal_phase(phase):
                logger.debug(f"Skipping unknown prereq phase: {phase}")
                continue
            if not phase_spec:
                continue

            for type_, type_spec in phase_spec.items():
                if not self._is_legal_type(type_):
                    logger.debug(f"Skipping unknown prereq type: {phase}.{type_}")
                    continue
                if not type_spec:
                    continue

                self._prereqs.setdefault(phase, {})[type_] = VersionRequirements.from_string_hash(type_spec)

    @staticmethod
    def _is_legal_phase(phase: Any) -> bool:
        return phase in LEGAL_PHASES or is_custom_name(phase)

    @staticmethod
    def _is_legal_type(type_: Any) -> bool:
        return type_ in LEGAL_TYPES or is_custom_name(type_)

    def _cell(self, phase: str, type_: str) -> Optional[VersionRequirements]:
        return self._prereqs.get(phase, {}).get(type_)

    def _pairs(self, *sources: "Prereqs") -> List[Tuple[str, str]]:
        """All standard (phase, type) pairs plus the custom ones in ``sources``."""
        sources = sources or (self,)
        phases = _ordered((phase for source in sources for phase in source._prereqs), LEGAL_PHASES)
        pairs = []
        for phase in phases:
            types = (type_ for source in sources for type_ in source._prereqs.get(phase, {}))
            pairs.extend((phase, type_) for type_ in _ordered(types, LEGAL_TYPES))
        return pairs

    def requirements_for(self, phase: str, type_: str) -> VersionRequirements:
        """Return the requirements for ``phase`` and ``type_``.

        A new, empty set is created and stored when none exists yet, so it
        can be added to. On a finalized object the returned set is finalized
        as well.

        Raises:
            PrereqsError: if the phase or type is missing or unknown
        """
        if phase is None:
            raise PrereqsError("invalid phase: requirements_for called without phase")
        if type_ is None:
            raise PrereqsError("invalid type: requirements_for called without type")
        if not self._is_legal_phase(phase):
            raise PrereqsError(f"invalid phase: requested requirements for unknown phase '{phase}'")
        if not self._is_legal_type(type_):
            raise PrereqsError(f"invalid type: requested requirements for unknown type '{type_}'")

        requirements = self._prereqs.setdefault(phase, {}).setdefault(type_, VersionRequirements())
        if self._finalized:
            requirements.finalize()
        return requirements

    def with_merged_prereqs(self, other: Union["Prereqs", Iterable["Prereqs"]]) -> "Prereqs":
        """Return a new ``Prereqs`` with ``other`` merged into this set.

        ``other`` is a single ``Prereqs`` or an iterable of them. Ranges for
        the same dependency are conjoined, so the result only accepts versions
        that every source accepts. Neither this object nor ``other`` changes.
        """
        others = [other] if isinstance(other, Prereqs) else list(other)
        sources = (self, *others)

        merged: Dict[str, Dict[str, Dict[str, str]]] = {}
        for phase, type_ in self._pairs(*sources):
            requirements = VersionRequirements()
            for source in sources:
                cell = source._cell(phase, type_)
                if cell is None or not cell.required_modules():
                    continue
                requirements.add_requirements(cell)

            if requirements.required_modules():
                merged.setdefault(phase, {})[type_] = requirements.as_string_hash()

        logger.debug(f"Merged {len(sources)} prereq sets into {sum(map(len, merged.values()))} cells")
        return type(self)(merged)

    def as_string_hash(self) -> Dict[str, Dict[str, Dict[str, str]]]:
        """Dump the non-empty cells as plain dicts and strings."""
        result: Dict[str, Dict[str, Dict[str, str]]] = {}
        for phase, type_ in self._pairs():
            cell = self._cell(phase, type_)
            if cell is None or not cell.required_modules():
                continue
            result.setdefault(phase, {})[type_] = cell.as_string_hash()
        return result

    def is_finalized(self) -> bool:
        return self._finalized

    def finalize(self) -> None:
        """Close the prereqs, and every requirements set in them, for changes."""
        self._finalized = True
        for types in self._prereqs.values():
            for requirements in types.values():
                requirements.finalize()

    def clone(self) -> "Prereqs":
        """Copy the prereqs. The copy is never finalized."""
        return type(self)(self.as_string_hash())

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Prereqs):
            return NotImplemented
        return self.as_string_hash() == other.as_string_hash()

    def __repr__(self) -> str:
        state = ", finalized" if self._finalized else ""
        return f"Prereqs({self.as_string_hash()!r}{state})"


__all__ = ["Prereqs", "PrereqsError", "FinalizedError"]
