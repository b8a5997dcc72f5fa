"""Schema compilation and validation."""

from .schema_engine import CompiledSchema, SchemaEngine, format_error_message

__all__ = ["CompiledSchema", "SchemaEngine", "format_error_message"]
