"""Tests for apiledger public API.

Tests that the high-level functions in apiledger.api return complete,
structured results and never leak exceptions for bad input templates.
"""

import json
from decimal import Decimal

import pytest

import apiledger
from apiledger.api import (
    TemplateReport,
    inspect_template,
    match_route,
    normalize_extensions_file,
    render_components,
)
from apiledger.codes import ErrorCode
from apiledger.kernel.components import ComponentKind


def test_inspect_template_reports_variables():
    report = inspect_template("/files/{+path}/{id}")

    assert isinstance(report, TemplateReport)
    assert report.ok is True
    assert [v.name for v in report.variables] == ["path", "id"]
    assert report.variables[0].multi_segment is True
    assert report.variables[1].multi_segment is False
    assert report.route_pattern == "/files/{path:path}/{id}"


def test_inspect_template_collects_query_parameters():
    report = inspect_template("/files/{+path}{?q,limit}")

    assert report.ok
    assert report.openapi_pattern == "/files/{+path}"
    assert report.query_parameters == ["q", "limit"]
    assert [v.name for v in report.variables] == ["path"]


def test_inspect_template_rejects_bad_syntax():
    report = inspect_template("/users/{id:int}")

    assert report.ok is False
    assert report.code == ErrorCode.INVALID_TEMPLATE
    assert "/users/{id:int}" in report.error
    assert report.variables == []


def test_inspect_template_rejects_fragment():
    report = inspect_template("/doc{#section}")
    assert report.ok is False
    assert "fragment" in report.error


def test_match_route_ok():
    result = match_route("/users/{id}", {"ID": 42})
    assert result.ok
    assert result.variables == {"id": "42"}


def test_match_route_variables_ignore_key_case():
    result = match_route("/users/{userId}", {"userid": "7"})

    assert result.variables["USERID"] == "7"
    assert result.variables.get("userId") == "7"
    assert list(result.variables) == ["userId"]
    assert result.model_dump()["variables"] == {"userId": "7"}


def test_match_route_failure_is_reported():
    result = match_route("/users/{id}", {"id": "a/b"})
    assert result.ok is False
    assert result.variables == {}
    assert result.code == ErrorCode.INVALID_VARIABLE_VALUE


def test_normalize_extensions_file(tmp_path):
    path = tmp_path / "ext.json"
    path.write_text(json.dumps({"logo": {"url": "a.png"}, "x-tag": 1}), encoding="utf-8")

    result = normalize_extensions_file(path)

    assert result == {"x-logo": {"url": "a.png"}, "x-tag": 1}


def test_normalize_extensions_file_accepts_str_path(tmp_path):
    path = tmp_path / "ext.json"
    path.write_text("{}", encoding="utf-8")
    assert normalize_extensions_file(str(path)) is None


def test_normalize_extensions_file_requires_object(tmp_path):
    path = tmp_path / "ext.json"
    path.write_text("[1, 2]", encoding="utf-8")
    with pytest.raises(ValueError, match="JSON object"):
        normalize_extensions_file(path)


def test_render_components(context, example_value):
    context.add_component(ComponentKind.EXAMPLES, "pet", example_value)
    context.add_component(ComponentKind.SCHEMAS, "Pet", {"type": "object"})
    context.add_inline(ComponentKind.SCHEMAS, "Hidden", {"type": "string"})

    rendered = json.loads(render_components(context))

    assert list(rendered) == ["schemas", "examples"]
    assert rendered["examples"]["pet"] == example_value
    assert "Hidden" not in rendered["schemas"]


def test_root_exports():
    assert apiledger.inspect_template is inspect_template
    assert apiledger.match_route is match_route
    assert "render_components" in apiledger.__all__


def test_render_components_keeps_decimal_defaults_numeric(context):
    context.add_component(
        ComponentKind.SCHEMAS, "S", {"default": Decimal("0.1000000000000000000001")}
    )

    assert render_components(context) == '{"schemas":{"S":{"default":0.1000000000000000000001}}}'
