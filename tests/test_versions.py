"""Tests for secbuddy.versions: range expressions and lexical version matching."""

import pytest

from secbuddy.errors import ActivationError, VersionRangeError
from secbuddy.versions import compile_range, matches


def test_prefix_ranges_match_by_containment():
    """Declared 3.8.2 falls in ["3.7.", "3.8."]; 3.11.0 does not."""
    assert matches("3.8.2", ["3.7.", "3.8."])
    assert not matches("3.11.0", ["3.7.", "3.8."])


def test_any_range_is_enough():
    assert matches("3.7.1", ["3.10.", "3.9.", "3.8.", "3.7."])


def test_empty_range_list_never_matches():
    assert not matches("3.8.2", [])


def test_missing_declared_version_never_matches():
    assert not matches("", ["3.8."])
    assert not matches(None, ["3.8."])


def test_unanchored_version_matches_contained_substring():
    """No semantic parsing: any string containing the range text matches."""
    assert matches("python-3.8.2-custom", ["3.8."])
    assert not matches("three point eight", ["3.8."])


def test_trailing_dot_requires_another_component():
    assert not matches("3.8", ["3.8."])


class TestComponentSets:
    def test_minor_range(self):
        assert matches("3.8.0", ["3.{7-9}."])
        assert matches("3.9.17", ["3.{7-9}."])
        assert not matches("3.10.0", ["3.{7-9}."])

    def test_patch_subrange(self):
        assert matches("3.10.0", ["3.10.{0-8}"])
        assert matches("3.10.8", ["3.10.{0-8}"])
        assert not matches("3.10.9", ["3.10.{0-8}"])

    def test_final_component_is_not_a_digit_prefix(self):
        """{0-8} must not match the "8" at the start of "80"."""
        assert not matches("3.10.80", ["3.10.{0-8}"])
        assert not matches("3.11.01", ["3.11.0"])

    def test_two_digit_members(self):
        assert matches("3.9.15", ["3.9.{0-15}"])
        assert not matches("3.9.16", ["3.9.{0-15}"])

    def test_mixed_set(self):
        assert matches("3.11.4", ["3.{7,9,11-12}.*"])
        assert not matches("3.10.4", ["3.{7,9,11-12}.*"])

    def test_wildcard(self):
        assert matches("3.12.1", ["3.*.1"])

    def test_exact_version_matches_prerelease_suffix(self):
        assert matches("3.11.0rc1", ["3.11.0"])


@pytest.mark.parametrize("expression", ["", "   ", "3.{9-", "3.{9-7}.", "3.x.", "3..1", "3.{a}."])
def test_malformed_expressions_raise(expression):
    with pytest.raises(VersionRangeError):
        compile_range(expression)


def test_malformed_expression_raises_even_after_a_match():
    """Range lists are validated as a whole, not short-circuited."""
    with pytest.raises(ActivationError):
        matches("3.8.2", ["3.8.", "3.{oops}."])


def test_valid_range_compiles():
    assert compile_range("3.{7-9}.{0-15}").search("3.9.15")
