"""Tests for path-template parsing and route-value extraction."""

from datetime import date
from decimal import Decimal
from enum import Enum

import pytest

from apiledger.codes import ErrorCode
from apiledger.errors import TemplateVariableError, UriTemplateSyntaxError
from apiledger.kernel.uri_template import (
    CaseInsensitiveDict,
    VarSegment,
    build_variables,
    extract_variables,
    parse_template,
    to_invariant_text,
)


class TestParseTemplate:
    """Grammar acceptance and rejection."""

    def test_simple_variable(self):
        assert parse_template("/users/{id}") == [VarSegment("id")]

    def test_modifiers(self):
        segments = parse_template("/a/{+path}/b/{rest*}/c/{+both*}")
        assert segments == [
            VarSegment("path", is_reserved_expansion=True),
            VarSegment("rest", is_explode=True),
            VarSegment("both", is_reserved_expansion=True, is_explode=True),
        ]
        assert all(s.is_multi_segment for s in segments)

    def test_single_segment_flag(self):
        assert parse_template("/{id}")[0].is_multi_segment is False

    def test_no_variables(self):
        assert parse_template("/health") == []

    def test_whitespace_is_trimmed(self):
        assert parse_template("/users/{ id }") == [VarSegment("id")]

    def test_name_characters(self):
        assert parse_template("/{a.b-c_9}")[0].name == "a.b-c_9"

    @pytest.mark.parametrize("template, fragment", [
        ("/users/{id:[0-9]+}", "constraint syntax"),
        ("/users/{a,b}", "multiple variables"),
        ("/users/{id", "missing '}'"),
        ("/users/{}", "empty expression"),
        ("/users/{  }", "empty expression"),
        ("/users/{+}", "no variable name"),
        ("/users/{*}", "no variable name"),
        ("/users/{na me}", "invalid variable name"),
        ("/users/{?q}", "invalid variable name"),
    ])
    def test_rejections(self, template, fragment):
        with pytest.raises(UriTemplateSyntaxError) as excinfo:
            parse_template(template)
        message = str(excinfo.value)
        assert fragment in message
        assert template in message
        assert excinfo.value.code == ErrorCode.INVALID_TEMPLATE

    def test_syntax_error_is_value_error(self):
        with pytest.raises(ValueError):
            parse_template("/{a,b}")


class TestExtractVariables:
    """Matching route values to template segments."""

    def test_simple_round_trip(self):
        result = build_variables("/users/{id}", {"id": "42"})
        assert result.ok is True
        assert result.variables == {"id": "42"}
        assert result.error is None

    def test_multi_segment_strips_one_leading_slash(self):
        result = build_variables("/files/{+path}", {"path": "/a/b/c"})
        assert result.ok
        assert result.variables == {"path": "a/b/c"}

    def test_only_one_leading_slash_stripped(self):
        assert extract_variables("/files/{path*}", {"path": "//a"})["path"] == "/a"

    def test_single_segment_rejects_slash(self):
        result = build_variables("/users/{id}", {"id": "a/b"})
        assert result.ok is False
        assert result.variables == {}
        assert result.code == ErrorCode.INVALID_VARIABLE_VALUE
        assert result.variable == "id"
        assert "/users/{id}" in result.error

    def test_missing_variable_leaves_map_empty(self):
        result = build_variables("/users/{org}/{id}", {"org": "acme"})
        assert result.ok is False
        assert result.variables == {}
        assert result.code == ErrorCode.MISSING_VARIABLE
        assert "'id'" in result.error
        assert "/users/{org}/{id}" in result.error

    def test_none_value_counts_as_missing(self):
        assert build_variables("/users/{id}", {"id": None}).code == ErrorCode.MISSING_VARIABLE

    def test_lookup_is_case_insensitive(self):
        variables = extract_variables("/users/{userId}", {"USERID": "7"})
        assert variables["userid"] == "7"
        assert variables["UserId"] == "7"
        assert list(variables) == ["userId"]

    def test_only_declared_segments_returned(self):
        variables = extract_variables("/users/{id}", {"id": "1", "extra": "x"})
        assert dict(variables.items()) == {"id": "1"}

    def test_non_string_values(self):
        variables = extract_variables(
            "/{n}/{f}/{d}/{flag}/{day}",
            {"n": 5, "f": 0.5, "d": Decimal("1.20"), "flag": True, "day": date(2024, 2, 3)},
        )
        assert dict(variables.items()) == {
            "n": "5", "f": "0.5", "d": "1.20", "flag": "true", "day": "2024-02-03",
        }

    def test_non_raising_result_is_case_insensitive(self):
        result = build_variables("/orgs/{orgId}", {"ORGID": "acme"})
        assert isinstance(result.variables, CaseInsensitiveDict)
        assert result.variables["orgid"] == "acme"
        assert isinstance(build_variables("/orgs/{orgId}", {}).variables, CaseInsensitiveDict)

    def test_raising_variant(self):
        with pytest.raises(TemplateVariableError) as excinfo:
            extract_variables("/users/{id}", {})
        assert excinfo.value.variable == "id"
        assert excinfo.value.template == "/users/{id}"

    def test_bad_template_in_non_raising_variant(self):
        result = build_variables("/users/{a,b}", {"a": "1", "b": "2"})
        assert result.ok is False
        assert result.variables == {}
        assert result.code == ErrorCode.INVALID_TEMPLATE

    def test_no_route_values(self):
        assert build_variables("/health", None).ok is True
        assert build_variables("/users/{id}", None).code == ErrorCode.MISSING_VARIABLE


class TestInvariantText:
    """Locale-independent rendering of route values."""

    def test_enum_name(self):
        class Kind(Enum):
            A = 1

        assert to_invariant_text(Kind.A) == "A"

    def test_float_round_trip_form(self):
        assert to_invariant_text(1e20) == "1e+20"


class TestCaseInsensitiveDict:
    """The variable map type."""

    def test_keys_fold_case(self):
        d = CaseInsensitiveDict({"Name": 1})
        d["NAME"] = 2
        assert len(d) == 1
        assert d["name"] == 2
        assert list(d) == ["NAME"]

    def test_equality_ignores_case(self):
        assert CaseInsensitiveDict({"A": 1}) == {"a": 1}

    def test_delete(self):
        d = CaseInsensitiveDict(a=1)
        del d["A"]
        assert "a" not in d
