"""Export the exception hierarchy used across registration, validation and execution paths."""

from .exceptions import (
    ToolCallError,
    ToolRegistrationError,
    SchemaCompileError,
    ToolNotFoundError,
    ToolValidationError,
    ToolExecutionError,
)

__all__ = [
    "ToolCallError",
    "ToolRegistrationError",
    "SchemaCompileError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolExecutionError",
]
