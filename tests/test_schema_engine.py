from typing import Any, Dict

import pytest

from tool_call_lib.core import SchemaCompileError, SchemaEngine, SchemaErrorDetail, format_error_message


@pytest.fixture
def engine() -> SchemaEngine:
    return SchemaEngine()


def test_compile_rejects_invalid_schema(engine: SchemaEngine) -> None:
    with pytest.raises(SchemaCompileError, match="Invalid schema"):
        engine.compile({"type": "nonsense"})


def test_compile_rejects_non_mapping(engine: SchemaEngine) -> None:
    with pytest.raises(SchemaCompileError, match="expected an object"):
        engine.compile(["type", "object"])


def test_validate_accepts_matching_data(engine: SchemaEngine, add_schema: Dict[str, Any]) -> None:
    compiled = engine.compile(add_schema)
    outcome = engine.validate(compiled, {"x": 1, "y": 2.5})
    assert outcome.valid
    assert outcome.errors == []


def test_type_error_reports_pointer_path(engine: SchemaEngine, add_schema: Dict[str, Any]) -> None:
    compiled = engine.compile(add_schema)
    outcome = engine.validate(compiled, {"x": "a", "y": 2})

    assert not outcome.valid
    assert len(outcome.errors) == 1
    error = outcome.errors[0]
    assert error.path == "/x"
    assert error.keyword == "type"
    assert "number" in error.message


def test_missing_required_property(engine: SchemaEngine, add_schema: Dict[str, Any]) -> None:
    compiled = engine.compile(add_schema)
    outcome = engine.validate(compiled, {"x": 1})

    assert not outcome.valid
    error = outcome.errors[0]
    assert error.path == "root"
    assert error.keyword == "required"
    assert error.property == "y"


def test_enum_error_lists_allowed_values(engine: SchemaEngine) -> None:
    compiled = engine.compile(
        {"type": "object", "properties": {"unit": {"enum": ["celsius", "fahrenheit"]}}}
    )
    outcome = engine.validate(compiled, {"unit": "kelvin"})

    error = outcome.errors[0]
    assert error.path == "/unit"
    assert error.allowed_values == ["celsius", "fahrenheit"]


def test_nested_array_path(engine: SchemaEngine) -> None:
    compiled = engine.compile(
        {"type": "object", "properties": {"items": {"type": "array", "items": {"type": "integer"}}}}
    )
    outcome = engine.validate(compiled, {"items": [1, "two", 3]})
    assert [e.path for e in outcome.errors] == ["/items/1"]


def test_all_errors_are_collected(engine: SchemaEngine, add_schema: Dict[str, Any]) -> None:
    compiled = engine.compile(add_schema)
    outcome = engine.validate(compiled, {"x": "a", "y": "b"})
    assert [e.path for e in outcome.errors] == ["/x", "/y"]


def test_format_error_message() -> None:
    errors = [
        SchemaErrorDetail(path="/x", message="'a' is not of type 'number'", keyword="type"),
        SchemaErrorDetail(path="root", message="'y' is a required property", keyword="required", property="y"),
        SchemaErrorDetail(path="/unit", message="not allowed", keyword="enum", allowed_values=["c", "f"]),
    ]
    assert format_error_message(errors) == (
        "/x: 'a' is not of type 'number'; "
        "root: 'y' is a required property (property: y); "
        "/unit: not allowed (allowed: c, f)"
    )


def test_format_error_message_without_errors() -> None:
    assert format_error_message([]) == "No validation errors"


def test_has_recursive_refs() -> None:
    recursive = {
        "$defs": {"Node": {"type": "object", "properties": {"child": {"$ref": "#/$defs/Node"}}}},
        "properties": {"root": {"$ref": "#/$defs/Node"}},
    }
    flat = {"type": "object", "properties": {"prop": {"type": "object", "properties": {"sub": {"type": "integer"}}}}}

    assert SchemaEngine.has_recursive_refs(recursive)
    assert not SchemaEngine.has_recursive_refs(flat)


def test_has_remote_refs() -> None:
    assert SchemaEngine.has_remote_refs({"properties": {"a": {"$ref": "https://example.com/a.json"}}})
    assert not SchemaEngine.has_remote_refs({"properties": {"a": {"$ref": "#/$defs/A"}}})


def test_resolve_refs_inlines_local_definitions() -> None:
    schema = {
        "type": "object",
        "$defs": {"Point": {"type": "object", "properties": {"x": {"type": "number"}}}},
        "properties": {"origin": {"$ref": "#/$defs/Point"}},
    }
    resolved = SchemaEngine.resolve_refs(schema)

    assert resolved["properties"]["origin"]["properties"]["x"] == {"type": "number"}
    assert isinstance(resolved["properties"]["origin"], dict)


def test_resolve_refs_keeps_recursive_schema() -> None:
    schema = {
        "$defs": {"Node": {"type": "object", "properties": {"next": {"$ref": "#/$defs/Node"}}}},
        "properties": {"head": {"$ref": "#/$defs/Node"}},
    }
    assert SchemaEngine.resolve_refs(schema) is schema


def test_compiled_schema_with_refs_validates(engine: SchemaEngine) -> None:
    compiled = engine.compile(
        {
            "type": "object",
            "$defs": {"Point": {"type": "object", "properties": {"x": {"type": "number"}}, "required": ["x"]}},
            "properties": {"origin": {"$ref": "#/$defs/Point"}},
        }
    )
    assert engine.validate(compiled, {"origin": {"x": 1}}).valid
    outcome = engine.validate(compiled, {"origin": {}})
    assert outcome.errors[0].path == "/origin"
    assert outcome.errors[0].property == "x"
