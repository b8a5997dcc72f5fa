"""Tool-related data models."""

from .models import (
    DEFAULT_INPUT_SCHEMA,
    ExecutionOptions,
    ExecutionStats,
    SchemaErrorDetail,
    ToolConfig,
    ToolErrorInfo,
    ToolInfo,
    ToolMetadata,
    ToolRegistration,
    ToolStats,
    ValidationOutcome,
    utc_now,
)
from .tool_call import ExecutionMetadata, ExecutionResult, ToolCallRecord, canonical_args

__all__ = [
    "DEFAULT_INPUT_SCHEMA",
    "ExecutionOptions",
    "ExecutionStats",
    "SchemaErrorDetail",
    "ToolConfig",
    "ToolErrorInfo",
    "ToolInfo",
    "ToolMetadata",
    "ToolRegistration",
    "ToolStats",
    "ValidationOutcome",
    "utc_now",
    "ExecutionMetadata",
    "ExecutionResult",
    "ToolCallRecord",
    "canonical_args",
]
