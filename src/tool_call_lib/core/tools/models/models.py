"""Pydantic models describing registered tools, their bookkeeping, and execution settings."""

from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_INPUT_SCHEMA: Dict[str, Any] = {"type": "object", "additionalProperties": True}


def utc_now() -> datetime:
    """Return the current time as a timezone-aware UTC datetime."""
    return datetime.now(timezone.utc)


class SchemaErrorDetail(BaseModel):
    """
    A single problem reported by the schema engine.

    Attributes:
        path: JSON pointer of the offending value (e.g. ``/x`` or ``/items/0``), or ``root``.
        message: Human-readable description of the problem.
        keyword: The JSON Schema keyword that failed (``type``, ``required``, ``enum`` ...).
        property: The missing property name for ``required`` failures.
        allowed_values: The permitted values for ``enum``/``const`` failures.
    """

    path: str = "root"
    message: str
    keyword: Optional[str] = None
    property: Optional[str] = None
    allowed_values: Optional[List[Any]] = None


class ValidationOutcome(BaseModel):
    """Result of validating data against a compiled schema."""

    valid: bool
    errors: List[SchemaErrorDetail] = Field(default_factory=list)


class ToolConfig(BaseModel):
    """
    Registration options for a tool.

    Attributes:
        input_schema: JSON schema the call arguments are validated against.
        output_schema: Optional JSON schema describing the handler's result.
        description: Human-readable description used in tool listings.
    """

    model_config = ConfigDict(extra="forbid")

    input_schema: Dict[str, Any] = Field(default_factory=lambda: dict(DEFAULT_INPUT_SCHEMA))
    output_schema: Optional[Dict[str, Any]] = None
    description: str = ""


class ToolErrorInfo(BaseModel):
    """The most recent handler failure of a tool."""

    message: str
    timestamp: datetime = Field(default_factory=utc_now)


class ToolMetadata(BaseModel):
    """
    Usage bookkeeping for a registered tool.

    Only the executor mutates these fields, and the counters only ever grow.
    """

    registered_at: datetime = Field(default_factory=utc_now)
    call_count: int = 0
    error_count: int = 0
    last_called: Optional[datetime] = None
    last_error: Optional[ToolErrorInfo] = None


class ToolRegistration(BaseModel):
    """
    A tool stored in the registry.

    Attributes:
        name: The unique name of the tool.
        handler: Callable invoked with the validated argument mapping.
        input_schema: JSON schema for the arguments, as published to callers.
        output_schema: Optional JSON schema for the result.
        description: A brief description of what the tool does.
        metadata: Usage counters and timestamps.
        validator: The compiled input schema used during execution.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    name: str
    handler: Callable[..., Any]
    input_schema: Dict[str, Any]
    output_schema: Optional[Dict[str, Any]] = None
    description: str = ""
    metadata: ToolMetadata = Field(default_factory=ToolMetadata)
    validator: Any = Field(default=None, exclude=True, repr=False)


class ToolInfo(BaseModel):
    """Read-only snapshot of a registered tool handed out to callers."""

    name: str
    description: str = ""
    input_schema: Dict[str, Any]
    output_schema: Optional[Dict[str, Any]] = None
    metadata: ToolMetadata


class ExecutionOptions(BaseModel):
    """
    Options controlling how a list of tool calls is executed.

    Attributes:
        parallel: Run calls concurrently in batches instead of one after another.
        continue_on_error: Keep going after a call fails. When False, sequential runs stop
            after the failing call and parallel runs stop after the failing batch.
        max_concurrency: Batch size in parallel mode.
    """

    model_config = ConfigDict(extra="forbid")

    parallel: bool = False
    continue_on_error: bool = True
    max_concurrency: int = Field(default=5, ge=1)


class ToolStats(BaseModel):
    """Per-tool entry in ``ExecutionStats``."""

    name: str
    calls: int
    errors: int
    last_called: Optional[datetime] = None


class ExecutionStats(BaseModel):
    """Aggregate call statistics across the registry."""

    tool_count: int
    total_calls: int
    total_errors: int
    success_rate: float
    tools: List[ToolStats] = Field(default_factory=list)
