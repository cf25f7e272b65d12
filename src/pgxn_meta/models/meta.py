"""Typed models for validated PGXN distribution metadata."""

from enum import Enum
from typing import Any, Dict, List, Mapping

from pydantic import BaseModel, ConfigDict, Field, field_validator

from ..config import MetaConfig
from ..constants import is_custom_name
from ..validation.framework import validate
from .prereqs import Prereqs


class InvalidMetaError(ValueError):
    """Raised when a META structure does not pass validation."""

    def __init__(self, errors: List[str]):
        self.errors = list(errors)
        message = "Invalid META structure. Errors found:\n" + "\n".join(self.errors)
        super().__init__(message)


class ReleaseStatus(str, Enum):
    """Release status of a distribution."""
    STABLE = "stable"
    TESTING = "testing"
    UNSTABLE = "unstable"


def _as_list(v):
    """Accept the single-value shorthand of list fields."""
    if v is None or isinstance(v, list):
        return v
    return [v]


class MetaSpec(BaseModel):
    """The meta-spec section."""
    version: str
    url: str | None = None

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class ProvidedExtension(BaseModel):
    """An extension listed under provides."""
    file: str
    version: str | None = None
    abstract: str | None = None
    docfile: str | None = None

    model_config = ConfigDict(extra="allow", coerce_numbers_to_str=True)


class Resources(BaseModel):
    """Web resources for the distribution."""
    homepage: str | None = None
    bugtracker: Dict[str, Any] | None = None
    repository: Dict[str, Any] | None = None
    license: List[str] | None = None

    @field_validator("license", mode="before")
    @classmethod
    def coerce_license(cls, v):
        return _as_list(v)

    model_config = ConfigDict(extra="allow")


class DistributionMeta(BaseModel):
    """Complete metadata for a PGXN distribution."""
    name: str
    version: str
    abstract: str
    description: str | None = None
    maintainer: List[str]
    license: List[str]
    generated_by: str
    release_status: ReleaseStatus
    meta_spec: MetaSpec = Field(alias="meta-spec")
    provides: Dict[str, ProvidedExtension]
    tags: List[str] = Field(default_factory=list)
    no_index: Dict[str, Any] | None = None
    resources: Resources | None = None
    prereqs: Dict[str, Dict[str, Dict[str, str]]] = Field(default_factory=dict)
    custom: Dict[str, Any] = Field(default_factory=dict)  # x_ keys, kept as-is

    @field_validator("maintainer", "license", "tags", mode="before")
    @classmethod
    def coerce_lazy_lists(cls, v):
        return _as_list(v)

    model_config = ConfigDict(populate_by_name=True, coerce_numbers_to_str=True)

    @classmethod
    def from_struct(cls, data: Mapping[str, Any], config: MetaConfig | None = None,
                    validate_struct: bool = True) -> "DistributionMeta":
        """Build the model from a decoded META structure.

        Raises:
            InvalidMetaError: if ``validate_struct`` is set and the structure
                does not pass validation
        """
        if validate_struct:
            result = validate(data, config=config)
            if not result.is_valid:
                raise InvalidMetaError(result.errors)

        fields = {key: item for key, item in data.items() if not is_custom_name(key)}
        fields["custom"] = {key: item for key, item in data.items() if is_custom_name(key)}
        return cls.model_validate(fields)

    @property
    def is_stable(self) -> bool:
        return self.release_status == ReleaseStatus.STABLE

    def effective_prereqs(self) -> Prereqs:
        """A new ``Prereqs`` object for the prereqs field."""
        return Prereqs(self.prereqs)

    def as_struct(self) -> Dict[str, Any]:
        """Dump back to a plain META structure, leaving out unset optional fields."""
        struct = self.model_dump(mode="json", by_alias=True, exclude_none=True, exclude={"custom"})
        for key in ("tags", "prereqs"):
            if not struct.get(key):
                struct.pop(key, None)
        struct.update(self.custom)
        return struct
