"""
Custom exception classes for the tool call system.

This module defines a hierarchy of exceptions used to handle errors during
tool registration, schema compilation, argument validation, and execution.
Failures while extracting tool calls from text are not exceptions: the
extraction functions return ``None`` instead.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, List, Optional

if TYPE_CHECKING:
    from ..tools.models import SchemaErrorDetail


class ToolCallError(Exception):
    """Base exception for all tool-related errors."""

    pass


class ToolRegistrationError(ToolCallError):
    """Raised when a tool cannot be registered (bad name, handler or schema)."""

    pass


class SchemaCompileError(ToolRegistrationError):
    """Raised when a JSON schema is malformed and cannot be compiled."""

    pass


class ToolNotFoundError(ToolCallError):
    """Raised when a requested tool is not found in the registry."""

    def __init__(self, tool_name: str) -> None:
        self.tool_name = tool_name
        super().__init__(f"Tool '{tool_name}' not found")


class ToolValidationError(ToolCallError):
    """Raised when tool arguments do not match the tool's input schema.

    Attributes:
        tool_name: Name of the tool whose arguments were rejected.
        errors: Structured per-field errors reported by the schema engine.
    """

    def __init__(
        self, message: str, tool_name: Optional[str] = None, errors: Optional[List[SchemaErrorDetail]] = None
    ) -> None:
        self.tool_name = tool_name
        self.errors = list(errors or [])
        super().__init__(message)


class ToolExecutionError(ToolCallError):
    """Raised when a tool handler fails during execution."""

    def __init__(self, message: str, tool_name: Optional[str] = None) -> None:
        self.tool_name = tool_name
        super().__init__(message)
