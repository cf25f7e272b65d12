"""Leaf predicates for META rule trees.

Every predicate takes ``(context, key, value)``, returns a bool, and reports
its own error through ``context.error`` when the value does not pass. Name
predicates (``custom_2``, ``module``, ``phase``, ...) are called with the map
key as both ``key`` and ``value``.
"""

import re
from typing import Any, Mapping

from ..constants import (
    KNOWN_SPECS,
    KNOWN_URLS,
    LICENSES,
    RELEASE_STATUSES,
    UNSTABLE_RELEASE_STATUSES,
    VALID_PHASES,
    VALID_RELATIONS,
    is_custom_name,
)
from ..versioning import is_version, is_version_range

# Generic URI splitting: scheme, authority, path, query, fragment
_URI_SPLIT_RE = re.compile(r"(?:([^:/?#]+):)?(?://([^/?#]*))?([^?#]*)(?:\?([^#]*))?(?:#(.*))?")
_MODULE_RE = re.compile(r"[A-Za-z0-9_]+(?:::[A-Za-z0-9_]+)*")
_IDENTIFIER_RE = re.compile(r"[a-z][_a-z]+", re.IGNORECASE)
_CAMEL_CASE_RE = re.compile(r"[_a-z]+", re.IGNORECASE)
_BOOLEAN_RE = re.compile(r"0|1|true|false")


def _text(value: Any) -> str:
    """Render a decoded JSON scalar the way it appears in the document."""
    if isinstance(value, bool):
        return "1" if value else "0"
    return str(value)


def anything(context, key, value) -> bool:
    return True


def string(context, key, value) -> bool:
    if value is not None and (value or _text(value) == "0"):
        return True
    context.error("value is an undefined string")
    return False


def string_or_undef(context, key, value) -> bool:
    if value is None or value or _text(value) == "0":
        return True
    context.error(f"No string defined for '{key}'")
    return False


def file(context, key, value) -> bool:
    # Presence only; the path itself is not inspected
    if value is not None:
        return True
    context.error(f"No file defined for '{key}'")
    return False


def url(context, key, value) -> bool:
    if value is not None and not isinstance(value, (dict, list)):
        text = _text(value)
        scheme, authority = _URI_SPLIT_RE.match(text).group(1, 2)
        if not scheme:
            context.error(f"'{text}' for '{key}' does not have a URL scheme")
            return False
        if not authority:
            context.error(f"'{text}' for '{key}' does not have a URL authority")
            return False
        return True
    context.error(f"'{value if value is not None else ''}' for '{key}' is not a valid URL.")
    return False


def urlspec(context, key, value) -> bool:
    """The META specification URL must match the declared spec version."""
    if value and isinstance(value, str):
        if KNOWN_SPECS.get(context.spec) == value:
            return True
        if value in KNOWN_URLS:
            context.error("META specification URL does not match version")
            return False
    context.error("Unknown META specification")
    return False


def version(context, key, value) -> bool:
    if is_version(value):
        return True
    shown = "<undef>" if value is None else _text(value)
    context.error(f"'{shown}' for '{key}' is not a valid version.")
    return False


def exversion(context, key, value) -> bool:
    """Validate a list of versions, e.g. ``'>= 1.0.0, != 1.2.0, < 2.0.0'`` or ``0``."""
    if value is None or isinstance(value, (dict, list, bool)) or _text(value).strip() == "":
        shown = "<undef>" if value is None else _text(value)
        context.error(f"'{shown}' for '{key}' is not a valid version.")
        return False

    passed = True
    for element in _text(value).split(","):
        if not is_version_range(element):
            context.error(f"'{element.strip()}' for '{key}' is not a valid version.")
            passed = False
    return passed


def boolean(context, key, value) -> bool:
    if value is not None:
        if _BOOLEAN_RE.fullmatch(_text(value)):
            return True
    else:
        value = "<undef>"
    context.error(f"'{_text(value)}' for '{key}' is not a boolean value.")
    return False


def license(context, key, value) -> bool:
    if value is not None:
        if isinstance(value, str) and value in LICENSES:
            return True
    else:
        value = "<undef>"
    context.error(f"License '{_text(value)}' is invalid")
    return False


def release_status(context, key, value) -> bool:
    """Check the release status against the distribution version.

    A version containing an underscore marks a developer release, which can
    only be ``testing`` or ``unstable``.
    """
    if value is None:
        context.error(f"'{key}' is not defined")
        return False

    dist_version = ""
    if isinstance(context.data, Mapping):
        dist_version = _text(context.data.get("version") or "")

    if "_" in dist_version:
        if value in UNSTABLE_RELEASE_STATUSES:
            return True
        context.error(f"'{_text(value)}' for '{key}' is invalid for version '{dist_version}'")
    else:
        if value in RELEASE_STATUSES:
            return True
        context.error(f"'{_text(value)}' for '{key}' is invalid")
    return False


def custom_1(context, key, value=None) -> bool:
    """User-defined keys in CamelCase: letters and underscores, one capital at least."""
    if key is not None:
        if key and _CAMEL_CASE_RE.fullmatch(key) and re.search(r"[A-Z]", key):
            return True
    else:
        key = "<undef>"
    context.error(f"Custom resource '{key}' must be in CamelCase.")
    return False


def custom_2(context, key, value=None) -> bool:
    if key is not None:
        if is_custom_name(key):
            return True
    else:
        key = "<undef>"
    context.error(f"Custom key '{key}' must begin with 'x_' or 'X_'.")
    return False


def identifier(context, key, value=None) -> bool:
    if key is not None:
        if key and _IDENTIFIER_RE.fullmatch(key):
            return True
    else:
        key = "<undef>"
    context.error(f"Key '{key}' is not a legal identifier.")
    return False


def module(context, key, value=None) -> bool:
    if key is not None:
        if key and _MODULE_RE.fullmatch(key):
            return True
    else:
        key = "<undef>"
    context.error(f"Key '{key}' is not a legal module name.")
    return False


def phase(context, key, value=None) -> bool:
    if key is not None:
        if key in VALID_PHASES or is_custom_name(key):
            return True
    else:
        key = "<undef>"
    context.error(f"Key '{key}' is not a legal phase.")
    return False


def relation(context, key, value=None) -> bool:
    if key is not None:
        if key in VALID_RELATIONS or is_custom_name(key):
            return True
    else:
        key = "<undef>"
    context.error(f"Key '{key}' is not a legal prereq relationship.")
    return False
