"""Tests for the prerequisites model."""

import pytest

from pgxn_meta.models.prereqs import Prereqs, PrereqsError
from pgxn_meta.versioning import FinalizedError, RequirementsError


@pytest.fixture
def prereqs():
    return Prereqs({
        "runtime": {"requires": {"foo-ext": "1.2.0"}},
        "build": {"requires": {"bar-ext": "0.5.0"}},
    })


class TestConstruction:
    """Test building Prereqs from a prereqs structure."""

    def test_empty(self):
        assert Prereqs().as_string_hash() == {}
        assert Prereqs({}).as_string_hash() == {}

    def test_cells_are_parsed(self, prereqs):
        runtime = prereqs.requirements_for("runtime", "requires")
        assert "foo-ext" in runtime
        assert runtime.requirements_for_module("foo-ext") == "1.2.0"
        assert prereqs.requirements_for("build", "requires").required_modules() == ["bar-ext"]

    def test_illegal_phases_and_types_dropped(self):
        prereqs = Prereqs({
            "deploy": {"requires": {"foo": "1.0.0"}},
            "runtime": {"conflicts": {"bar": "1.0.0"}, "requires": {"baz": "0"}},
        })
        assert prereqs.as_string_hash() == {"runtime": {"requires": {"baz": "0"}}}

    def test_empty_cells_skipped(self):
        prereqs = Prereqs({"runtime": {"requires": {}}, "test": {}})
        assert prereqs.as_string_hash() == {}

    def test_custom_phase_and_type(self):
        prereqs = Prereqs({"x_deploy": {"X_wants": {"foo": "1.0.0"}}})
        assert prereqs.requirements_for("x_deploy", "X_wants").required_modules() == ["foo"]
        assert prereqs.as_string_hash() == {"x_deploy": {"X_wants": {"foo": "1.0.0"}}}

    def test_numeric_ranges(self):
        prereqs = Prereqs({"runtime": {"requires": {"plpgsql": 0}}})
        assert prereqs.as_string_hash() == {"runtime": {"requires": {"plpgsql": "0"}}}

    def test_invalid_range(self):
        with pytest.raises(RequirementsError, match="invalid version requirement"):
            Prereqs({"runtime": {"requires": {"foo": "latest"}}})


class TestRequirementsFor:
    """Test looking up requirement sets."""

    @pytest.mark.parametrize("phase,type_,message", [
        ("configure", "build", "invalid type"),
        ("deploy", "requires", "invalid phase"),
        (None, "requires", "invalid phase"),
        ("runtime", None, "invalid type"),
        ("runtime", "conflicts", "invalid type"),
    ])
    def test_invalid_arguments(self, prereqs, phase, type_, message):
        with pytest.raises(PrereqsError, match=message):
            prereqs.requirements_for(phase, type_)

    def test_creates_empty_cell_for_accumulation(self, prereqs):
        suggests = prereqs.requirements_for("develop", "suggests")
        assert suggests.required_modules() == []
        suggests.add_minimum("pgtap", "0.90.0")
        assert prereqs.requirements_for("develop", "suggests") is suggests
        assert prereqs.as_string_hash()["develop"] == {"suggests": {"pgtap": "0.90.0"}}


class TestMerge:
    """Test with_merged_prereqs."""

    def test_conjunctive_ranges(self):
        left = Prereqs({"runtime": {"requires": {"A": "1.0"}}})
        right = Prereqs({"runtime": {"requires": {"A": ">=1.0,<2.0"}}})
        merged = left.with_merged_prereqs(right)

        requires = merged.requirements_for("runtime", "requires")
        assert requires.as_string_hash() == {"A": ">= 1.0, < 2.0"}
        assert requires.accepts_module("A", "1.9.0")
        assert not requires.accepts_module("A", "2.0.0")
        assert not requires.accepts_module("A", "0.9.0")

    def test_commutative(self):
        left = Prereqs({"runtime": {"requires": {"A": "1.0.0"}}, "test": {"requires": {"B": "0"}}})
        right = Prereqs({"runtime": {"requires": {"A": "< 2.0.0", "C": "1.0.0"}}})
        assert left.with_merged_prereqs(right) == right.with_merged_prereqs(left)

    def test_associative(self):
        a = Prereqs({"runtime": {"requires": {"A": "1.0.0"}}})
        b = Prereqs({"runtime": {"requires": {"A": "!= 1.5.0"}}})
        c = Prereqs({"runtime": {"requires": {"A": "<= 3.0.0"}}})
        assert a.with_merged_prereqs(b).with_merged_prereqs(c) == a.with_merged_prereqs(b.with_merged_prereqs(c))

    def test_merge_many(self, prereqs):
        other = Prereqs({"test": {"recommends": {"pgtap": "0.90.0"}}})
        custom = Prereqs({"x_ci": {"requires": {"docker": "20.0.0"}}})
        merged = prereqs.with_merged_prereqs([other, custom])
        assert merged.as_string_hash() == {
            "build": {"requires": {"bar-ext": "0.5.0"}},
            "test": {"recommends": {"pgtap": "0.90.0"}},
            "runtime": {"requires": {"foo-ext": "1.2.0"}},
            "x_ci": {"requires": {"docker": "20.0.0"}},
        }

    def test_inputs_untouched(self, prereqs):
        before = prereqs.as_string_hash()
        other = Prereqs({"runtime": {"requires": {"foo-ext": "< 2.0.0"}}})
        other.finalize()
        merged = prereqs.with_merged_prereqs(other)

        assert prereqs.as_string_hash() == before
        assert other.as_string_hash() == {"runtime": {"requires": {"foo-ext": "< 2.0.0"}}}
        assert prereqs._prereqs.keys() == {"runtime", "build"}
        assert not merged.is_finalized()
        merged.requirements_for("runtime", "requires").add_minimum("baz", "1.0.0")

    def test_conflicting_merge(self):
        left = Prereqs({"runtime": {"requires": {"A": "== 1.0.0"}}})
        right = Prereqs({"runtime": {"requires": {"A": ">= 2.0.0"}}})
        with pytest.raises(RequirementsError):
            left.with_merged_prereqs(right)


class TestFinalizeAndClone:
    """Test the Mutable -> Finalized lifecycle."""

    def test_mutation_before_finalize(self, prereqs):
        prereqs.requirements_for("runtime", "requires").add_minimum("semver", "0.2.0")
        assert "semver" in prereqs.requirements_for("runtime", "requires")

    def test_finalize(self, prereqs):
        assert not prereqs.is_finalized()
        prereqs.finalize()
        assert prereqs.is_finalized()

        with pytest.raises(FinalizedError):
            prereqs.requirements_for("runtime", "requires").add_minimum("semver", "0.2.0")
        with pytest.raises(FinalizedError):
            prereqs.requirements_for("test", "requires").add_string_requirement("pgtap", "0")

    def test_finalize_is_idempotent(self, prereqs):
        prereqs.finalize()
        prereqs.finalize()
        assert prereqs.is_finalized()

    def test_clone_is_mutable(self, prereqs):
        prereqs.finalize()
        clone = prereqs.clone()
        assert not clone.is_finalized()
        assert clone == prereqs

        clone.requirements_for("runtime", "requires").add_minimum("semver", "0.2.0")
        assert "semver" not in prereqs.requirements_for("runtime", "requires")

    def test_round_trip(self, full_meta):
        prereqs = Prereqs(full_meta["prereqs"])
        dumped = prereqs.as_string_hash()
        assert Prereqs(dumped).as_string_hash() == dumped
        assert dumped == {
            "runtime": {
                "requires": {"PostgreSQL": "8.0.0", "plpgsql": "0"},
                "recommends": {"PostgreSQL": "8.4.0"},
            },
            "test": {"requires": {"pgtap": ">= 0.90.0, < 2.0.0"}},
        }
