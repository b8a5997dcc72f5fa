"""Tool call extraction from text and streams."""

from .extractor import (
    MAX_MISSING_CLOSERS,
    ToolCallExtractor,
    extract,
    extract_all,
    has_tool_call_structure,
    scan_braces,
    validate_tool_calls,
)
from .streaming import StreamingExtractor

__all__ = [
    "MAX_MISSING_CLOSERS",
    "ToolCallExtractor",
    "extract",
    "extract_all",
    "has_tool_call_structure",
    "scan_braces",
    "validate_tool_calls",
    "StreamingExtractor",
]
