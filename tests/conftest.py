"""Shared fixtures for pgxn-meta tests."""

import copy

import pytest


MINIMAL_META = {
    "name": "foo",
    "version": "1.0.0",
    "abstract": "x",
    "maintainer": "me",
    "generated_by": "x",
    "license": "mit",
    "release_status": "stable",
    "meta-spec": {"version": "1.0.0"},
    "provides": {"foo": {"file": "foo.sql"}},
}

FULL_META = {
    "name": "pair",
    "abstract": "A key/value pair data type",
    "description": "This library contains a single PostgreSQL extension, a key/value pair data type called `pair`.",
    "version": "0.1.0",
    "maintainer": ["David E. Wheeler <david@justatheory.com>"],
    "license": ["postgresql"],
    "provides": {
        "pair": {
            "abstract": "A key/value pair data type",
            "file": "sql/pair.sql",
            "docfile": "doc/pair.md",
            "version": "0.1.0",
        }
    },
    "prereqs": {
        "runtime": {
            "requires": {"PostgreSQL": "8.0.0", "plpgsql": "0"},
            "recommends": {"PostgreSQL": "8.4.0"},
        },
        "test": {"requires": {"pgtap": ">= 0.90.0, < 2.0.0"}},
    },
    "resources": {
        "homepage": "http://pgxn.org/dist/pair/",
        "bugtracker": {"web": "https://github.com/theory/kv-pair/issues/"},
        "repository": {
            "url": "git://github.com/theory/kv-pair.git",
            "web": "https://github.com/theory/kv-pair/",
            "type": "git",
        },
    },
    "generated_by": "David E. Wheeler",
    "meta-spec": {"version": "1.0.0", "url": "http://pgxn.org/spec/1.0.0/"},
    "tags": ["variadic function", "ordered pair", "pair", "key value"],
    "no_index": {"file": ["src/badfile.c"], "directory": ["src/private"]},
    "release_status": "stable",
    "x_extra": {"anything": ["goes"]},
}


@pytest.fixture
def minimal_meta():
    """Smallest structure that passes validation."""
    return copy.deepcopy(MINIMAL_META)


@pytest.fixture
def full_meta():
    """Structure using every optional section of the 1.0.0 spec."""
    return copy.deepcopy(FULL_META)
