"""Public exports for the core tool call abstractions and utilities."""

from .exceptions import (
    ToolCallError,
    ToolRegistrationError,
    SchemaCompileError,
    ToolNotFoundError,
    ToolValidationError,
    ToolExecutionError,
)
from .logger import get_logger, setup_logging
from .config import RuntimeConfig
from .tools import (
    EventDispatcher,
    ExecutionMetadata,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStats,
    SchemaEngine,
    SchemaErrorDetail,
    ToolCallRecord,
    ToolConfig,
    ToolEvent,
    ToolEventType,
    ToolExecutor,
    ToolInfo,
    ToolRegistry,
    format_error_message,
    partition_batches,
)
from .extraction import (
    StreamingExtractor,
    ToolCallExtractor,
    extract,
    extract_all,
    validate_tool_calls,
)
from .runtime import ToolRuntime, __version__

__all__ = [
    "ToolCallError",
    "ToolRegistrationError",
    "SchemaCompileError",
    "ToolNotFoundError",
    "ToolValidationError",
    "ToolExecutionError",
    "get_logger",
    "setup_logging",
    "RuntimeConfig",
    "EventDispatcher",
    "ExecutionMetadata",
    "ExecutionOptions",
    "ExecutionResult",
    "ExecutionStats",
    "SchemaEngine",
    "SchemaErrorDetail",
    "ToolCallRecord",
    "ToolConfig",
    "ToolEvent",
    "ToolEventType",
    "ToolExecutor",
    "ToolInfo",
    "ToolRegistry",
    "format_error_message",
    "partition_batches",
    "StreamingExtractor",
    "ToolCallExtractor",
    "extract",
    "extract_all",
    "validate_tool_calls",
    "ToolRuntime",
    "__version__",
]
