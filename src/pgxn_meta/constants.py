"""Fixed tables shared by the validator and the prerequisites model."""

from types import MappingProxyType

DEFAULT_SPEC_VERSION = "1.0.0"

# Schema versions with a rule tree, mapped to their canonical URL
KNOWN_SPECS = MappingProxyType({
    "1.0.0": "http://pgxn.org/spec/1.0.0/",
})
KNOWN_URLS = MappingProxyType({url: version for version, url in KNOWN_SPECS.items()})

LICENSES = frozenset({
    "agpl_3",
    "apache_1_1",
    "apache_2_0",
    "artistic_1",
    "artistic_2",
    "bsd",
    "freebsd",
    "gfdl_1_2",
    "gfdl_1_3",
    "gpl_1",
    "gpl_2",
    "gpl_3",
    "lgpl_2_1",
    "lgpl_3_0",
    "mit",
    "mozilla_1_0",
    "mozilla_1_1",
    "openssl",
    "perl_5",
    "postgresql",
    "qpl_1_0",
    "ssleay",
    "sun",
    "zlib",
    "open_source",
    "restricted",
    "unrestricted",
    "unknown",
})

RELEASE_STATUSES = ("stable", "testing", "unstable")
# Allowed when the distribution version carries an underscore
UNSTABLE_RELEASE_STATUSES = ("testing", "unstable")

# Phases and relationships accepted as keys of the prereqs map
VALID_PHASES = ("configure", "build", "test", "runtime", "develop")
VALID_RELATIONS = ("requires", "recommends", "suggests", "conflicts")

# Phases and types the prerequisites model stores (conflicts is not modelled)
LEGAL_PHASES = VALID_PHASES
LEGAL_TYPES = ("requires", "recommends", "suggests")

CUSTOM_PREFIX = "x_"


def is_custom_name(name) -> bool:
    """True for user-defined names, which start with ``x_`` or ``X_``."""
    return isinstance(name, str) and name[:2].lower() == CUSTOM_PREFIX
