"""Core validation walker for PGXN META structures.

A ``MetaValidator`` selects the rule tree for the spec version declared in
``meta-spec.version`` and walks the document depth-first, collecting every
problem it finds instead of stopping at the first one. Each error names the
path of keys that leads to the problem and the spec version, e.g.::

    Missing mandatory field, 'file' (provides -> pair -> file) [Validation: 1.0.0]
"""

import logging
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Any, Iterator, Mapping

from ..config import MetaConfig, create_default_config
from .rules import NodeKind, Rule
from .specs import get_definition

logger = logging.getLogger(__name__)

SPEC_ERROR = (
    "Missing validation action in specification. "
    "Must be one of 'map', 'list', 'lazylist', or 'value'"
)


class ValidationContext:
    """Path stack and error log for a single validation run."""

    def __init__(self, data: Any, spec: str):
        self.data = data
        self.spec = spec
        self.stack: list[str] = []
        self.errors: list[str] = []
        self.specification_errors: list[str] = []

    @contextmanager
    def at(self, segment: Any) -> Iterator[None]:
        """Push ``segment`` on the path stack for the duration of the block."""
        self.stack.append("<undef>" if segment is None else str(segment))
        try:
            yield
        finally:
            self.stack.pop()

    def _format(self, message: str) -> str:
        if self.stack:
            message += f" ({' -> '.join(self.stack)})"
        return f"{message} [Validation: {self.spec}]"

    def error(self, message: str) -> None:
        self.errors.append(self._format(message))

    def specification_error(self, message: str) -> None:
        """Record a defect in the rule tree rather than in the document."""
        formatted = self._format(message)
        logger.warning(f"Rule tree defect: {formatted}")
        self.errors.append(formatted)
        self.specification_errors.append(formatted)


@dataclass
class ValidationResult:
    """Outcome of validating one META structure."""
    spec_version: str
    errors: list[str] = field(default_factory=list)
    specification_errors: list[str] = field(default_factory=list)

    @property
    def is_valid(self) -> bool:
        return not self.errors

    @property
    def exit_code(self) -> int:
        """Exit code for CI: 0 = valid, 1 = invalid."""
        return 0 if self.is_valid else 1

    def to_dict(self) -> dict:
        """Convert to dictionary for JSON output."""
        return {
            "valid": self.is_valid,
            "spec_version": self.spec_version,
            "exit_code": self.exit_code,
            "errors": list(self.errors),
            "specification_errors": list(self.specification_errors),
        }


def _dispatch(context: ValidationContext, rule: Rule, key: Any, data: Any, where: str) -> None:
    if not rule.is_well_formed:
        context.specification_error(f"{SPEC_ERROR} {where}")
        return

    if rule.kind is NodeKind.VALUE:
        rule.check(context, key, data)
    elif rule.kind is NodeKind.MAP:
        check_map(context, rule, data)
    elif rule.kind is NodeKind.LIST:
        check_list(context, rule, data)
    else:
        check_lazylist(context, rule, data)


def check_map(context: ValidationContext, rule: Rule | None, data: Any) -> None:
    """Check a map against a ``MAP`` rule node."""
    if rule is None or rule.kind is not NodeKind.MAP:
        context.error("Unknown META specification, cannot validate.")
        return

    if not isinstance(data, Mapping):
        context.error("Expected a map structure from string or file.")
        return

    for key, field_rule in rule.fields.items():
        if field_rule.mandatory and data.get(key) is None:
            with context.at(key):
                context.error(f"Missing mandatory field, '{key}'")

    for key, item in data.items():
        with context.at(key):
            if key in rule.fields:
                _dispatch(context, rule.fields[key], key, item, f"for '{key}'")
            elif rule.wildcard is not None:
                wildcard = rule.wildcard
                if wildcard.name is None:
                    context.specification_error(f"{SPEC_ERROR} for ':key'")
                    continue
                wildcard.name(context, key, key)
                _dispatch(context, wildcard, key, item, "for ':key'")
            else:
                context.error(f"Unknown key, '{key}', found in map structure")


def check_list(context: ValidationContext, rule: Rule, data: Any) -> None:
    """Check every element of a list against ``rule.items``.

    When ``rule.items`` is a ``MAP`` node, each element is checked as a map
    against that node, wildcard entry included.
    """
    if not isinstance(data, (list, tuple)):
        context.error("Expected a list structure")
        return

    if rule.non_empty and (not data or data[0] is None):
        context.error("Missing entries from mandatory list")

    parent = context.stack[-1] if context.stack else "list"
    for element in data:
        with context.at(element):
            if rule.items is None:
                context.specification_error(f"{SPEC_ERROR} associated with '{parent}'")
                continue
            _dispatch(context, rule.items, "list", element, f"associated with '{parent}'")


def check_lazylist(context: ValidationContext, rule: Rule, data: Any) -> None:
    """Check a list, treating a lone scalar as a one-element list."""
    if data is not None and not isinstance(data, (Mapping, list, tuple)):
        data = [data]
    check_list(context, rule, data)


class MetaValidator:
    """Validates a decoded META structure against its declared spec version.

    Example:
        validator = MetaValidator(struct)
        if not validator.is_valid():
            raise SystemExit("\\n".join(validator.errors()))
    """

    def __init__(self, data: Any, config: MetaConfig | None = None, spec_version: str | None = None):
        self.data = data
        self.config = config or create_default_config()
        self._spec_version = spec_version
        self._last_result: ValidationResult | None = None

    @property
    def spec(self) -> str:
        """Spec version to validate against: explicit, declared, or the default."""
        if self._spec_version:
            return self._spec_version
        declared = None
        if isinstance(self.data, Mapping):
            meta_spec = self.data.get("meta-spec")
            if isinstance(meta_spec, Mapping):
                declared = meta_spec.get("version")
        return str(declared) if declared else self.config.validation.default_spec_version

    def validate(self) -> ValidationResult:
        """Run a fresh validation pass and return its result."""
        spec = self.spec
        context = ValidationContext(self.data, spec)
        definition = get_definition(spec, self.config.validation.strict_spec_url)

        logger.debug(f"Validating META structure against spec {spec}")
        if definition is None:
            logger.warning(f"Unknown META specification version: {spec}")

        check_map(context, definition, self.data)

        self._last_result = ValidationResult(
            spec_version=spec,
            errors=context.errors,
            specification_errors=context.specification_errors,
        )
        logger.info(f"Validation against spec {spec} found {len(context.errors)} errors")
        return self._last_result

    def is_valid(self) -> bool:
        return self.validate().is_valid

    def errors(self) -> tuple[str, ...]:
        """Errors from the most recent run (empty before the first run)."""
        if self._last_result is None:
            return ()
        return tuple(self._last_result.errors)


def validate(document: Any, spec_version: str | None = None,
             config: MetaConfig | None = None) -> ValidationResult:
    """Validate ``document``; ``spec_version`` overrides ``meta-spec.version``."""
    return MetaValidator(document, config=config, spec_version=spec_version).validate()
