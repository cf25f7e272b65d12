"""Version predicates and per-module version constraint sets.

Versions are semantic versions parsed with the ``semver`` library. A
``VersionRequirements`` object maps dependency names to version ranges and
combines ranges by conjunction: adding ``>= 1.0.0`` and then ``< 2.0.0`` for
the same module leaves a single range that both constraints hold for.
"""

import logging
import re
from typing import Any, Callable, Dict, List, Mapping, NamedTuple, Optional, Tuple

import semver

logger = logging.getLogger(__name__)

_COMPARISON_RE = re.compile(r"^(==|!=|>=|<=|>|<)?\s*(\S.*)$")


class RequirementsError(ValueError):
    """Raised for malformed version ranges or constraints that cannot all hold."""


class FinalizedError(RuntimeError):
    """Raised when a finalized object is asked to change."""


def _text(value: Any) -> Optional[str]:
    if value is None or isinstance(value, (bool, dict, list, tuple)):
        return None
    return str(value).strip()


def is_version(value: Any) -> bool:
    """Check that ``value`` is a single, strictly formed semantic version."""
    text = _text(value)
    if not text:
        return False
    return semver.Version.is_valid(text)


def is_version_range(value: Any) -> bool:
    """Check a comma-separated list of version comparisons.

    Each element is an optional operator (``==``, ``!=``, ``>=``, ``<=``,
    ``>``, ``<``) followed by either the literal ``0`` or a valid version,
    e.g. ``">= 1.2.0, < 2.0.0"``.
    """
    text = _text(value)
    if not text:
        return False
    for part in text.split(","):
        match = _COMPARISON_RE.match(part.strip())
        if match is None:
            return False
        version = match.group(2).strip()
        if version != "0" and not is_version(version):
            return False
    return True


class _Version(NamedTuple):
    """A parsed version that remembers how it was written."""
    parsed: semver.Version
    text: str

    @classmethod
    def parse(cls, value: Any) -> "_Version":
        text = _text(value)
        if not text:
            raise RequirementsError(f"invalid version requirement: '{value}'")
        try:
            parsed = semver.Version.parse(text, optional_minor_and_patch=True)
        except (TypeError, ValueError) as e:
            raise RequirementsError(f"invalid version requirement: '{value}'") from e
        return cls(parsed, text)

    def __str__(self) -> str:
        return self.text


class _ExactRange:
    """A range satisfied by exactly one version."""

    def __init__(self, version: _Version):
        self.version = version

    def with_exact(self, version: _Version) -> "_ExactRange":
        if version.parsed == self.version.parsed:
            return self
        raise RequirementsError(
            f"can't be exactly {version} when exact requirement is already {self.version}"
        )

    def with_minimum(self, version: _Version) -> "_ExactRange":
        if self.version.parsed >= version.parsed:
            return self
        raise RequirementsError(f"minimum {version} exceeds exact specification {self.version}")

    def with_maximum(self, version: _Version) -> "_ExactRange":
        if self.version.parsed <= version.parsed:
            return self
        raise RequirementsError(f"maximum {version} below exact specification {self.version}")

    def with_exclusion(self, version: _Version) -> "_ExactRange":
        if version.parsed != self.version.parsed:
            return self
        raise RequirementsError(f"tried to exclude {version}, which is the exact version required")

    def accepts(self, version: semver.Version) -> bool:
        return version == self.version.parsed

    def as_struct(self) -> List[Tuple[str, str]]:
        return [("==", self.version.text)]

    def as_string(self) -> str:
        return f"== {self.version}"


class _BoundedRange:
    """A range with an optional minimum, maximum and excluded versions."""

    def __init__(self, minimum: Optional[_Version] = None, maximum: Optional[_Version] = None,
                 exclusions: Tuple[_Version, ...] = ()):
        self.minimum = minimum
        self.maximum = maximum
        self.exclusions = exclusions

    def with_exact(self, version: _Version) -> _ExactRange:
        if not self.accepts(version.parsed):
            raise RequirementsError(
                f"exact specification {version} outside of range '{self.as_string()}'"
            )
        return _ExactRange(version)

    def with_minimum(self, version: _Version):
        minimum = self.minimum
        if minimum is None or version.parsed > minimum.parsed:
            minimum = version
        return self._simplified(minimum, self.maximum, self.exclusions)

    def with_maximum(self, version: _Version):
        maximum = self.maximum
        if maximum is None or version.parsed < maximum.parsed:
            maximum = version
        return self._simplified(self.minimum, maximum, self.exclusions)

    def with_exclusion(self, version: _Version):
        if any(excluded.parsed == version.parsed for excluded in self.exclusions):
            return self
        return self._simplified(self.minimum, self.maximum, self.exclusions + (version,))

    @staticmethod
    def _simplified(minimum, maximum, exclusions):
        if minimum is not None and maximum is not None:
            if minimum.parsed > maximum.parsed:
                raise RequirementsError(f"minimum {minimum} exceeds maximum {maximum}")

        kept = tuple(
            excluded for excluded in exclusions
            if (minimum is None or excluded.parsed >= minimum.parsed)
            and (maximum is None or excluded.parsed <= maximum.parsed)
        )

        if minimum is not None and maximum is not None and minimum.parsed == maximum.parsed:
            if any(excluded.parsed == minimum.parsed for excluded in kept):
                raise RequirementsError(f"excluded all possible versions between {minimum} and {maximum}")
            return _ExactRange(minimum)

        return _BoundedRange(minimum, maximum, tuple(sorted(kept, key=lambda v: v.parsed)))

    def accepts(self, version: semver.Version) -> bool:
        if self.minimum is not None and version < self.minimum.parsed:
            return False
        if self.maximum is not None and version > self.maximum.parsed:
            return False
        return all(version != excluded.parsed for excluded in self.exclusions)

    def as_struct(self) -> List[Tuple[str, str]]:
        exclusions = list(self.exclusions)
        parts = []
        for op, exclusive_op, bound in ((">=", ">", self.minimum), ("<=", "<", self.maximum)):
            if bound is None:
                continue
            remaining = [excluded for excluded in exclusions if excluded.parsed != bound.parsed]
            if len(remaining) == len(exclusions):
                parts.append((op, bound.text))
            else:
                parts.append((exclusive_op, bound.text))
                exclusions = remaining
        parts.extend(("!=", excluded.text) for excluded in exclusions)
        return parts

    def as_string(self) -> str:
        parts = self.as_struct()
        if not parts:
            return "0"
        if len(parts) == 1 and parts[0][0] == ">=":
            return parts[0][1]
        return ", ".join(f"{op} {version}" for op, version in parts)


class VersionRequirements:
    """A set of version requirements keyed by dependency name.

    Every ``add_*`` call narrows the range recorded for a module. Once
    ``finalize()`` has been called, any attempt to add or clear a requirement
    raises ``FinalizedError``.
    """

    def __init__(self):
        self._requirements: Dict[str, Any] = {}
        self._finalized = False

    @classmethod
    def from_string_hash(cls, mapping: Mapping[str, Any]) -> "VersionRequirements":
        """Build requirements from a ``{module: range-string}`` mapping."""
        requirements = cls()
        for module, requirement in mapping.items():
            requirements.add_string_requirement(module, requirement)
        return requirements

    def _update(self, module: str, change: Callable[[Any], Any]) -> "VersionRequirements":
        if self._finalized:
            raise FinalizedError(f"can't alter requirements for '{module}' after finalization")
        current = self._requirements.get(module, _BoundedRange())
        # Only commit once the new range has been computed without error
        self._requirements[module] = change(current)
        return self

    def add_minimum(self, module: str, version: Any) -> "VersionRequirements":
        bound = _Version.parse(version)
        return self._update(module, lambda current: current.with_minimum(bound))

    def add_maximum(self, module: str, version: Any) -> "VersionRequirements":
        bound = _Version.parse(version)
        return self._update(module, lambda current: current.with_maximum(bound))

    def add_exclusion(self, module: str, version: Any) -> "VersionRequirements":
        excluded = _Version.parse(version)
        return self._update(module, lambda current: current.with_exclusion(excluded))

    def exact_version(self, module: str, version: Any) -> "VersionRequirements":
        exact = _Version.parse(version)
        return self._update(module, lambda current: current.with_exact(exact))

    def add_string_requirement(self, module: str, requirement: Any) -> "VersionRequirements":
        """Add a range such as ``"1.2.0"`` or ``">= 1.2.0, != 1.5.0, < 2.0.0"``.

        A bare version is a minimum. ``>`` and ``<`` record the bound together
        with an exclusion of the bound itself.
        """
        text = _text(requirement)
        if not text:
            raise RequirementsError(f"invalid version requirement for '{module}': '{requirement}'")

        steps = []
        for part in text.split(","):
            match = _COMPARISON_RE.match(part.strip())
            if match is None:
                raise RequirementsError(f"invalid version requirement for '{module}': '{requirement}'")
            op, version = match.group(1) or ">=", match.group(2).strip()
            steps.append((op, _Version.parse(version)))

        def change(current):
            for op, version in steps:
                if op == ">=":
                    current = current.with_minimum(version)
                elif op == "<=":
                    current = current.with_maximum(version)
                elif op == "==":
                    current = current.with_exact(version)
                elif op == "!=":
                    current = current.with_exclusion(version)
                elif op == ">":
                    current = current.with_minimum(version).with_exclusion(version)
                else:
                    current = current.with_maximum(version).with_exclusion(version)
            return current

        return self._update(module, change)

    def add_requirements(self, other: "VersionRequirements") -> "VersionRequirements":
        """Conjoin every range of ``other`` into this set."""
        for module, requirement in other.as_string_hash().items():
            self.add_string_requirement(module, requirement)
        return self

    def clear_requirement(self, module: str) -> "VersionRequirements":
        if self._finalized:
            raise FinalizedError(f"can't clear requirements for '{module}' after finalization")
        self._requirements.pop(module, None)
        return self

    def required_modules(self) -> List[str]:
        return list(self._requirements)

    def requirements_for_module(self, module: str) -> Optional[str]:
        requirement = self._requirements.get(module)
        return requirement.as_string() if requirement is not None else None

    def accepts_module(self, module: str, version: Any) -> bool:
        """Check whether ``version`` of ``module`` satisfies the recorded range."""
        requirement = self._requirements.get(module)
        if requirement is None:
            return True
        return requirement.accepts(_Version.parse(version).parsed)

    def as_string_hash(self) -> Dict[str, str]:
        return {module: requirement.as_string() for module, requirement in self._requirements.items()}

    def clone(self) -> "VersionRequirements":
        """Copy the requirements. The copy is never finalized."""
        copy = type(self)()
        # Range objects are never mutated in place, so sharing them is safe
        copy._requirements = dict(self._requirements)
        return copy

    def finalize(self) -> None:
        self._finalized = True

    def is_finalized(self) -> bool:
        return self._finalized

    def __contains__(self, module: object) -> bool:
        return module in self._requirements

    def __len__(self) -> int:
        return len(self._requirements)

    def __repr__(self) -> str:
        return f"VersionRequirements({self.as_string_hash()!r})"
