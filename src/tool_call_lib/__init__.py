"""Tool Call Library - extract tool calls from model output and execute them safely."""

from .core import (
    ToolRuntime,
    RuntimeConfig,
    ToolRegistry,
    ToolExecutor,
    ToolCallExtractor,
    StreamingExtractor,
    ToolCallRecord,
    ExecutionResult,
    ExecutionOptions,
    ToolCallError,
    ToolRegistrationError,
    ToolNotFoundError,
    ToolValidationError,
    ToolExecutionError,
    extract,
    extract_all,
    validate_tool_calls,
    __version__,
)

__all__ = [
    "ToolRuntime",
    "RuntimeConfig",
    "ToolRegistry",
    "ToolExecutor",
    "ToolCallExtractor",
    "StreamingExtractor",
    "ToolCallRecord",
    "ExecutionResult",
    "ExecutionOptions",
    "ToolCallError",
    "ToolRegistrationError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolExecutionError",
    "extract",
    "extract_all",
    "validate_tool_calls",
    "__version__",
]
