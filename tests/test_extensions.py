"""Tests for extension normalization."""

from apiledger.kernel.extensions import canonical_extension_key, normalize_extensions


def test_adds_prefix_and_keeps_existing():
    """Plain keys get x-, prefixed keys are kept, no duplicates."""
    result = normalize_extensions({"foo": 1, "x-bar": 2})
    assert result == {"x-foo": 1, "x-bar": 2}


def test_prefix_check_is_case_insensitive():
    assert canonical_extension_key("X-Upper") == "X-Upper"
    assert canonical_extension_key("xylophone") == "x-xylophone"


def test_empty_or_none_input_is_absent():
    assert normalize_extensions(None) is None
    assert normalize_extensions({}) is None


def test_blank_keys_and_absent_values_are_dropped():
    result = normalize_extensions({"": 1, "   ": 2, None: 3, "gone": None, "kept": "v"})
    assert result == {"x-kept": "v"}


def test_nothing_surviving_is_absent():
    """No surviving entry means no extension map, not an empty one."""
    assert normalize_extensions({"a": None, " ": 1}) is None


def test_last_write_wins_after_canonicalization():
    result = normalize_extensions({"rate": 1, "x-rate": 2})
    assert result == {"x-rate": 2}


def test_values_are_converted_to_nodes():
    result = normalize_extensions({"meta": {"tags": ("a", "b"), "skip": None}})
    assert result == {"x-meta": {"tags": ["a", "b"]}}
