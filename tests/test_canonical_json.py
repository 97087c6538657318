"""Tests for canonical JSON rendering of document nodes."""

from decimal import Decimal

from apiledger._internal.canonical_json import canonical_dumps


def test_sorted_keys_and_compact_separators():
    assert canonical_dumps({"b": 1, "a": [1, 2]}) == '{"a":[1,2],"b":1}'


def test_document_order_kept_when_unsorted():
    assert canonical_dumps({"b": 1, "a": 2}, sort_keys=False) == '{"b":1,"a":2}'


def test_utf8_not_escaped():
    assert canonical_dumps({"name": "Zoë"}) == '{"name":"Zoë"}'


def test_wide_integer_decimal_written_as_integer():
    value = Decimal(2 ** 70)
    assert canonical_dumps([value]) == f"[{2 ** 70}]"


def test_exact_fractional_decimal_written_as_number():
    assert canonical_dumps({"v": Decimal("0.5")}) == '{"v":0.5}'


def test_high_precision_decimal_written_as_number():
    value = Decimal("0.10000000000000000000001")
    assert canonical_dumps({"v": value}) == '{"v":0.10000000000000000000001}'


def test_decimal_keeps_its_own_digits():
    assert canonical_dumps([Decimal("1.10"), Decimal("-2.5")]) == "[1.10,-2.5]"


def test_decimal_number_survives_key_sorting():
    value = {"b": Decimal("0.3000000000000000000001"), "a": Decimal("0.25")}
    assert canonical_dumps(value) == '{"a":0.25,"b":0.3000000000000000000001}'


def test_mapping_types_become_objects():
    from apiledger.kernel.uri_template import CaseInsensitiveDict

    assert canonical_dumps(CaseInsensitiveDict({"Id": "7"})) == '{"Id":"7"}'


def test_non_finite_decimal_written_as_string():
    assert canonical_dumps([Decimal("NaN")]) == '["NaN"]'


def test_nested_tuples_become_arrays():
    assert canonical_dumps({"t": (1, (Decimal(2),))}) == '{"t":[1,[2]]}'
