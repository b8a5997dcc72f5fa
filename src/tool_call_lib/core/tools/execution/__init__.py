"""Tool execution logic."""

from .executor import ToolExecutor, partition_batches

__all__ = ["ToolExecutor", "partition_batches"]
