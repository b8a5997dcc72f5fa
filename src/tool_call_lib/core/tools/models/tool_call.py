"""Data models for extracted tool calls and their execution results."""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Dict, List, Mapping, Optional, Tuple

from ...exceptions import ToolExecutionError
from .models import SchemaErrorDetail


def canonical_args(args: Any) -> str:
    """Serialize arguments so that structurally equal mappings produce the same string."""
    return json.dumps(args, sort_keys=True, separators=(",", ":"), default=str)


@dataclass(frozen=True)
class ToolCallRecord:
    """Represents a normalized tool call extracted from model output."""

    tool: str
    args: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> "ToolCallRecord":
        """Build a record from a raw ``{"tool": ..., "args": ...}`` mapping.

        The tool name is stringified and trimmed; non-mapping arguments become ``{}``.
        """
        raw_args = data.get("args")
        args = dict(raw_args) if isinstance(raw_args, Mapping) else {}
        return cls(tool=str(data.get("tool", "")).strip(), args=args)

    def key(self) -> Tuple[str, str]:
        """Identity used for duplicate detection, independent of argument key order."""
        return self.tool, canonical_args(self.args)

    def to_dict(self) -> Dict[str, Any]:
        return {"tool": self.tool, "args": self.args}


@dataclass(frozen=True)
class ExecutionMetadata:
    """Correlation and timing data attached to every execution result."""

    call_id: str
    duration: float
    timestamp: str


@dataclass(frozen=True)
class ExecutionResult:
    """
    Represents the outcome of executing a tool call.

    Exactly one of ``result`` and ``error`` is meaningful; use ``is_error`` to tell
    which. The original exception is kept so callers can opt into exception-style
    flow via ``raise_for_error``.
    """

    tool: str
    metadata: ExecutionMetadata
    result: Any = None
    error: Optional[str] = None
    error_type: Optional[str] = None
    validation_errors: List[SchemaErrorDetail] = field(default_factory=list)
    exception: Optional[BaseException] = field(default=None, repr=False, compare=False)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def raise_for_error(self) -> None:
        """Re-raise the captured failure, if any."""
        if not self.is_error:
            return
        if self.exception is not None:
            raise self.exception
        raise ToolExecutionError(self.error or "Tool execution failed", tool_name=self.tool)

    def to_dict(self) -> Dict[str, Any]:
        """Plain representation carrying either a ``result`` or an ``error`` key."""
        payload: Dict[str, Any] = {"tool": self.tool}
        if self.is_error:
            payload["error"] = self.error
            if self.validation_errors:
                payload["validation_errors"] = [e.model_dump(exclude_none=True) for e in self.validation_errors]
        else:
            payload["result"] = self.result
        payload["metadata"] = {
            "call_id": self.metadata.call_id,
            "duration": self.metadata.duration,
            "timestamp": self.metadata.timestamp,
        }
        return payload
