"""Compile JSON schemas and validate tool arguments against them.

Schema semantics are delegated to ``jsonschema``; this module only adapts its
validators and errors to the structures the registry and executor work with.
"""

from __future__ import annotations

import re
from dataclasses import dataclass
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set

import jsonref  # type: ignore
from jsonschema import Draft202012Validator, validators
from jsonschema.exceptions import SchemaError
from jsonschema.exceptions import ValidationError as JsonSchemaValidationError

from ...exceptions import SchemaCompileError
from ...logger import get_logger
from ..models import SchemaErrorDetail, ValidationOutcome

logger = get_logger(__name__)

_REQUIRED_PROPERTY = re.compile(r"^'(?P<name>.+)' is a required property$")


@dataclass(frozen=True)
class CompiledSchema:
    """A schema together with the ``jsonschema`` validator built from it."""

    schema: Dict[str, Any]
    validator: Any


class SchemaEngine:
    """
    Thin wrapper around ``jsonschema`` that compiles schemas once and reports
    validation failures as ``SchemaErrorDetail`` objects.
    """

    def __init__(self, default_validator: Any = Draft202012Validator) -> None:
        """Initialize the engine.

        Args:
            default_validator: Validator class used when a schema does not declare ``$schema``.
        """
        self._default_validator = default_validator

    def compile(self, schema: Any) -> CompiledSchema:
        """Check a schema and build a reusable validator for it.

        Args:
            schema: The JSON schema to compile.

        Returns:
            The compiled schema.

        Raises:
            SchemaCompileError: If the schema is not a mapping or is not a valid JSON schema.
        """
        if not isinstance(schema, Mapping):
            raise SchemaCompileError(f"Invalid schema: expected an object, got {type(schema).__name__}")

        schema_dict = dict(schema)
        validator_cls = validators.validator_for(schema_dict, default=self._default_validator)
        try:
            validator_cls.check_schema(schema_dict)
        except SchemaError as e:
            raise SchemaCompileError(f"Invalid schema: {e.message}") from e

        return CompiledSchema(schema=schema_dict, validator=validator_cls(schema_dict))

    def validate(self, compiled: CompiledSchema, data: Any) -> ValidationOutcome:
        """Validate data against a compiled schema, collecting every error.

        Args:
            compiled: The schema returned by ``compile``.
            data: The value to check.

        Returns:
            The outcome, with errors ordered by location in ``data``.
        """
        errors = sorted(compiled.validator.iter_errors(data), key=lambda e: (e.json_path, str(e.validator)))
        return ValidationOutcome(valid=not errors, errors=[self._to_detail(e) for e in errors])

    @staticmethod
    def _to_detail(error: JsonSchemaValidationError) -> SchemaErrorDetail:
        path = "/" + "/".join(str(p) for p in error.absolute_path) if error.absolute_path else "root"
        keyword = str(error.validator) if error.validator is not None else None

        prop: Optional[str] = None
        if keyword == "required":
            match = _REQUIRED_PROPERTY.match(error.message)
            if match:
                prop = match.group("name")

        allowed: Optional[List[Any]] = None
        if keyword == "enum" and isinstance(error.validator_value, Iterable):
            allowed = list(error.validator_value)
        elif keyword == "const":
            allowed = [error.validator_value]

        return SchemaErrorDetail(path=path, message=error.message, keyword=keyword, property=prop, allowed_values=allowed)

    @staticmethod
    def has_recursive_refs(schema: Dict[str, Any]) -> bool:
        """
        Checks if the schema contains recursive local references by traversing the graph.

        Args:
            schema: The JSON schema to check.

        Returns:
            True if following local ``$ref`` pointers leads back to a definition already on the path.
        """
        defs = schema.get("$defs", {}) or schema.get("definitions", {})

        def check(node: Any, path: Set[str]) -> bool:
            if isinstance(node, dict):
                if "$ref" in node:
                    ref = node["$ref"]
                    if ref in path:
                        return True

                    # e.g. #/$defs/MyModel
                    if isinstance(ref, str) and ref.startswith("#"):
                        parts = ref.split("/")
                        if len(parts) >= 3 and parts[-1] in defs:
                            return check(defs[parts[-1]], path | {ref})
                    return False

                return any(check(v, path) for v in node.values())
            if isinstance(node, list):
                return any(check(item, path) for item in node)
            return False

        return check(schema, set())

    @staticmethod
    def has_remote_refs(schema: Any) -> bool:
        """Return True if any ``$ref`` points outside the schema document."""
        if isinstance(schema, dict):
            ref = schema.get("$ref")
            if isinstance(ref, str) and not ref.startswith("#"):
                return True
            return any(SchemaEngine.has_remote_refs(v) for v in schema.values())
        if isinstance(schema, list):
            return any(SchemaEngine.has_remote_refs(item) for item in schema)
        return False

    @classmethod
    def resolve_refs(cls, schema: Dict[str, Any]) -> Dict[str, Any]:
        """Inline local ``$ref`` pointers so the published schema is self-contained.

        Recursive or remote references cannot be inlined; such schemas are returned unchanged.

        Args:
            schema: The JSON schema to resolve.

        Returns:
            A plain-dict schema without local references, or the input itself.
        """
        if cls.has_recursive_refs(schema):
            logger.debug("Schema contains recursive references; publishing it unresolved.")
            return schema
        if cls.has_remote_refs(schema):
            logger.debug("Schema contains remote references; publishing it unresolved.")
            return schema
        try:
            # proxies=False ensures we get a plain dict back, not JsonRef objects
            return jsonref.replace_refs(schema, proxies=False)
        except jsonref.JsonRefError as e:
            logger.warning(f"Could not resolve schema references: {e}")
            return schema


def format_error_message(errors: List[SchemaErrorDetail]) -> str:
    """Create a human-readable description of validation errors.

    Args:
        errors: Structured errors from ``SchemaEngine.validate``.

    Returns:
        All errors joined with ``; ``.
    """
    if not errors:
        return "No validation errors"

    messages = []
    for error in errors:
        msg = f"{error.path or 'root'}: {error.message}"
        if error.property:
            msg += f" (property: {error.property})"
        if error.allowed_values:
            msg += f" (allowed: {', '.join(str(v) for v in error.allowed_values)})"
        messages.append(msg)
    return "; ".join(messages)
