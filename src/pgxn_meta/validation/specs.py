"""Rule trees for each known version of the META specification."""

import logging
from types import MappingProxyType
from typing import Optional

from . import predicates as p
from .rules import Predicate, Rule, any_key, lazylist_of, list_of, map_of, value

logger = logging.getLogger(__name__)

_custom = any_key(p.custom_2, value(p.anything))

_no_index = map_of(
    {
        "file": list_of(value(p.string)),
        "directory": list_of(value(p.string)),
    },
    wildcard=_custom,
)

# prereqs: phase -> relation -> extension name -> version range
_prereqs = map_of(wildcard=any_key(
    p.phase,
    map_of(wildcard=any_key(
        p.relation,
        map_of(wildcard=any_key(p.module, value(p.exversion))),
    )),
))

_resources = map_of(
    {
        "license": lazylist_of(value(p.url)),
        "homepage": value(p.url),
        "bugtracker": map_of(
            {
                "web": value(p.url),
                "mailto": value(p.string),
            },
            wildcard=_custom,
        ),
        "repository": map_of(
            {
                "web": value(p.url),
                "url": value(p.url),
                "type": value(p.string),
            },
            wildcard=_custom,
        ),
    },
    wildcard=any_key(p.custom_2, value(p.string)),
)

_provides = map_of(
    wildcard=any_key(
        p.module,
        map_of(
            {
                "file": value(p.file, mandatory=True),
                "version": value(p.version),
                "abstract": value(p.string),
                "docfile": value(p.file),
            },
            wildcard=_custom,
        ),
    ),
    mandatory=True,
)


def _spec_1_0_0(spec_url_check: Predicate) -> Rule:
    return map_of(
        {
            # required
            "abstract": value(p.string, mandatory=True),
            "maintainer": lazylist_of(value(p.string), mandatory=True),
            "generated_by": value(p.string, mandatory=True),
            "license": lazylist_of(value(p.license), mandatory=True),
            "meta-spec": map_of(
                {
                    "version": value(p.version, mandatory=True),
                    "url": value(spec_url_check),
                },
                wildcard=_custom,
                mandatory=True,
            ),
            "name": value(p.string, mandatory=True),
            "release_status": value(p.release_status, mandatory=True),
            "version": value(p.version, mandatory=True),
            "provides": _provides,
            # optional
            "description": value(p.string),
            "tags": lazylist_of(value(p.string)),
            "no_index": _no_index,
            "prereqs": _prereqs,
            "resources": _resources,
        },
        # user-defined keys: only the name can be checked
        wildcard=_custom,
    )


DEFINITIONS = MappingProxyType({
    "1.0.0": _spec_1_0_0(p.url),
})

# Same trees, but meta-spec.url must be the canonical URL of the version
STRICT_DEFINITIONS = MappingProxyType({
    "1.0.0": _spec_1_0_0(p.urlspec),
})


def get_definition(spec_version: str, strict_spec_url: bool = False) -> Optional[Rule]:
    """Return the root rule for ``spec_version``, or None if it is unknown."""
    definitions = STRICT_DEFINITIONS if strict_spec_url else DEFINITIONS
    definition = definitions.get(spec_version)
    if definition is None:
        logger.debug(f"No rule tree registered for META spec {spec_version}")
    return definition
