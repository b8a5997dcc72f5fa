from .models import (
    ExecutionMetadata,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStats,
    SchemaErrorDetail,
    ToolCallRecord,
    ToolConfig,
    ToolInfo,
    ToolMetadata,
    ToolRegistration,
    ValidationOutcome,
)
from .events import EventDispatcher, ToolEvent, ToolEventListener, ToolEventType
from .schema import CompiledSchema, SchemaEngine, format_error_message
from .registry import ToolRegistry
from .execution import ToolExecutor, partition_batches

__all__ = [
    "ExecutionMetadata",
    "ExecutionOptions",
    "ExecutionResult",
    "ExecutionStats",
    "SchemaErrorDetail",
    "ToolCallRecord",
    "ToolConfig",
    "ToolInfo",
    "ToolMetadata",
    "ToolRegistration",
    "ValidationOutcome",
    "EventDispatcher",
    "ToolEvent",
    "ToolEventListener",
    "ToolEventType",
    "CompiledSchema",
    "SchemaEngine",
    "format_error_message",
    "ToolRegistry",
    "ToolExecutor",
    "partition_batches",
]
