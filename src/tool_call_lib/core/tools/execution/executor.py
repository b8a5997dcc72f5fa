"""Validate, dispatch and aggregate tool calls.

Every per-call failure (unknown tool, schema mismatch, handler exception) is
captured into an ``ExecutionResult``; ``execute_direct`` is the only method
that re-raises.
"""

from __future__ import annotations

import asyncio
import copy
import inspect
import time
import uuid
from typing import Any, Dict, Iterable, List, Mapping, Optional, Sequence, TypeVar, Union

from ..events import ToolEventType
from ..models import (
    ExecutionMetadata,
    ExecutionOptions,
    ExecutionResult,
    ExecutionStats,
    ToolCallRecord,
    ToolErrorInfo,
    ToolInfo,
    ToolRegistration,
    ToolStats,
    utc_now,
)
from ..registry import ToolRegistry
from ..schema import format_error_message
from ...exceptions import ToolExecutionError, ToolNotFoundError, ToolValidationError
from ...logger import get_logger

logger = get_logger(__name__)

T = TypeVar("T")
RecordLike = Union[ToolCallRecord, Mapping[str, Any]]


def partition_batches(items: Sequence[T], size: int) -> List[List[T]]:
    """Split items into consecutive batches of at most ``size`` elements.

    Args:
        items: The items to split, in order.
        size: Maximum batch size, at least 1.

    Returns:
        The batches, in input order. Only the last one may be smaller than ``size``.

    Raises:
        ValueError: If ``size`` is smaller than 1.
    """
    if size < 1:
        raise ValueError(f"Batch size must be at least 1, got {size}")
    return [list(items[i : i + size]) for i in range(0, len(items), size)]


class ToolExecutor:
    """
    Executes tool calls against a ``ToolRegistry``.

    Handlers receive the validated argument mapping as their only argument.
    Coroutine functions are awaited directly; plain callables run in a worker
    thread so they never block the event loop. Registry metadata is only ever
    touched from the event loop.
    """

    def __init__(
        self,
        registry: ToolRegistry,
        tool_timeout: Optional[float] = None,
        default_options: Optional[ExecutionOptions] = None,
    ) -> None:
        """Initialize the executor.

        Args:
            registry: Registry used to resolve tools and their compiled schemas.
            tool_timeout: Optional per-call timeout in seconds. None waits for the handler indefinitely.
            default_options: Options used by ``execute`` when none are passed.
        """
        self.registry = registry
        self.tool_timeout = tool_timeout
        self.default_options = default_options or ExecutionOptions()

    @property
    def events(self) -> Any:
        return self.registry.events

    async def execute_single(self, record: RecordLike) -> ExecutionResult:
        """Execute one tool call. Never raises for per-call failures.

        Args:
            record: A ``ToolCallRecord`` or a ``{"tool": ..., "args": ...}`` mapping.

        Returns:
            The result, carrying either the handler's return value or the error message.
        """
        call = self._coerce_record(record)
        call_id = f"{call.tool}_{uuid.uuid4().hex}"
        start = time.perf_counter()

        logger.info(f"Executing tool call: {call.tool}")
        logger.debug("Tool arguments for '%s' (%s): %s", call.tool, call_id, call.args)

        try:
            result = await self._run(call, call_id)
        except Exception as e:
            return self._failure(call, call_id, start, e)

        duration = self._elapsed_ms(start)
        logger.info(f"Tool '{call.tool}' completed in {duration:.2f}ms")
        self.events.emit(ToolEventType.RESULT, tool=call.tool, call_id=call_id, result=result, duration=duration)
        return ExecutionResult(
            tool=call.tool,
            result=result,
            metadata=ExecutionMetadata(call_id=call_id, duration=duration, timestamp=utc_now().isoformat()),
        )

    async def _run(self, call: ToolCallRecord, call_id: str) -> Any:
        registration = self.registry.get(call.tool)
        if registration is None:
            raise ToolNotFoundError(call.tool)

        outcome = self.registry.schema_engine.validate(registration.validator, call.args)
        if not outcome.valid:
            raise ToolValidationError(
                f"Validation failed: {format_error_message(outcome.errors)}",
                tool_name=call.tool,
                errors=outcome.errors,
            )

        metadata = registration.metadata
        metadata.call_count += 1
        metadata.last_called = utc_now()

        self.events.emit(ToolEventType.CALL, tool=call.tool, call_id=call_id, args=call.args)

        try:
            return await self._invoke(registration, call.args)
        except ToolExecutionError as e:
            self._record_error(registration, str(e))
            raise
        except Exception as e:
            message = str(e) or type(e).__name__
            self._record_error(registration, message)
            raise ToolExecutionError(message, tool_name=call.tool) from e

    async def _invoke(self, registration: ToolRegistration, args: Dict[str, Any]) -> Any:
        """Call the handler, handling async/sync handlers and the optional timeout.

        Raises:
            ToolExecutionError: If execution times out.
        """
        handler = registration.handler
        if inspect.iscoroutinefunction(handler):
            pending = handler(args)
        else:
            pending = asyncio.to_thread(handler, args)

        if self.tool_timeout is None:
            result = await pending
        else:
            try:
                result = await asyncio.wait_for(pending, timeout=self.tool_timeout)
            except asyncio.TimeoutError as exc:
                msg = f"Tool execution timed out after {self.tool_timeout} seconds."
                raise ToolExecutionError(msg, tool_name=registration.name) from exc

        # Sync callables may hand back an awaitable (e.g. a coroutine from a lambda)
        if inspect.isawaitable(result):
            result = await result
        return result

    @staticmethod
    def _record_error(registration: ToolRegistration, message: str) -> None:
        registration.metadata.error_count += 1
        registration.metadata.last_error = ToolErrorInfo(message=message)

    def _failure(self, call: ToolCallRecord, call_id: str, start: float, error: Exception) -> ExecutionResult:
        duration = self._elapsed_ms(start)
        message = str(error)

        if isinstance(error, (ToolNotFoundError, ToolValidationError)):
            logger.warning(f"Tool '{call.tool}' rejected: {message}")
        else:
            logger.error(f"Tool '{call.tool}' failed: {message}")

        self.events.emit(
            ToolEventType.ERROR,
            tool=call.tool,
            call_id=call_id,
            args=call.args,
            error=message,
            duration=duration,
        )
        return ExecutionResult(
            tool=call.tool,
            error=message,
            error_type=type(error).__name__,
            validation_errors=list(getattr(error, "errors", None) or []),
            exception=error,
            metadata=ExecutionMetadata(call_id=call_id, duration=duration, timestamp=utc_now().isoformat()),
        )

    @staticmethod
    def _elapsed_ms(start: float) -> float:
        return round((time.perf_counter() - start) * 1000, 3)

    @staticmethod
    def _coerce_record(record: Any) -> ToolCallRecord:
        if isinstance(record, ToolCallRecord):
            return record
        if isinstance(record, Mapping):
            return ToolCallRecord.from_mapping(record)
        return ToolCallRecord(tool="")

    async def execute_direct(self, name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        """Execute a tool by name and return its result directly.

        Raises:
            ToolNotFoundError: If the tool is not registered.
            ToolValidationError: If the arguments do not match the input schema.
            ToolExecutionError: If the handler failed.
        """
        result = await self.execute_single(ToolCallRecord(tool=name, args=dict(args or {})))
        result.raise_for_error()
        return result.result

    async def execute(
        self,
        records: Iterable[RecordLike],
        options: Optional[Union[ExecutionOptions, Mapping[str, Any]]] = None,
        **overrides: Any,
    ) -> List[ExecutionResult]:
        """Execute multiple tool calls.

        Args:
            records: Tool calls to execute, in order.
            options: An ``ExecutionOptions`` or a mapping of its fields; defaults to the
                executor's ``default_options``.
            **overrides: Individual ``ExecutionOptions`` fields, e.g. ``parallel=True``.

        Returns:
            One result per attempted call, in input order. When ``continue_on_error``
            is False the list stops after the first failing call (sequential) or the
            first batch containing a failure (parallel).
        """
        if isinstance(records, (str, bytes, Mapping)) or not isinstance(records, Iterable):
            logger.error("Tool calls must be a sequence of records")
            return []

        calls = list(records)
        if not calls:
            logger.info("No tool calls to execute")
            return []

        if options is None:
            opts = self.default_options
        elif isinstance(options, ExecutionOptions):
            opts = options
        elif isinstance(options, Mapping):
            opts = ExecutionOptions.model_validate(dict(options))
        else:
            raise TypeError(f"options must be ExecutionOptions or a mapping, got {type(options).__name__}")
        if overrides:
            opts = ExecutionOptions.model_validate({**opts.model_dump(), **overrides})

        logger.info(f"Executing {len(calls)} tool calls (parallel: {opts.parallel})")

        if opts.parallel:
            return await self._execute_parallel(calls, opts)
        return await self._execute_sequential(calls, opts)

    async def _execute_sequential(self, calls: List[RecordLike], opts: ExecutionOptions) -> List[ExecutionResult]:
        results: List[ExecutionResult] = []
        for index, call in enumerate(calls):
            result = await self.execute_single(call)
            results.append(result)
            if result.is_error and not opts.continue_on_error:
                logger.warning(f"Stopping execution at index {index} due to error")
                break
        return results

    async def _execute_parallel(self, calls: List[RecordLike], opts: ExecutionOptions) -> List[ExecutionResult]:
        results: List[ExecutionResult] = []
        batches = partition_batches(calls, opts.max_concurrency)
        for batch_index, batch in enumerate(batches):
            logger.debug("Running batch %d/%d with %d call(s).", batch_index + 1, len(batches), len(batch))
            # gather preserves input order regardless of completion order
            batch_results = await asyncio.gather(*(self.execute_single(call) for call in batch))
            results.extend(batch_results)

            if not opts.continue_on_error and any(r.is_error for r in batch_results):
                logger.warning("Stopping parallel execution due to error")
                break
        return results

    def has_tool(self, name: str) -> bool:
        return self.registry.has(name)

    def get_tool_info(self, name: str) -> Optional[ToolInfo]:
        """Return a snapshot of a registered tool, or None if it does not exist."""
        registration = self.registry.get(name)
        return self._to_info(registration) if registration else None

    def list_tools(self) -> List[ToolInfo]:
        """Return snapshots of all registered tools, sorted by name."""
        return [self._to_info(r) for r in self.registry.list()]

    @staticmethod
    def _to_info(registration: ToolRegistration) -> ToolInfo:
        return ToolInfo(
            name=registration.name,
            description=registration.description,
            input_schema=copy.deepcopy(registration.input_schema),
            output_schema=copy.deepcopy(registration.output_schema),
            metadata=registration.metadata.model_copy(deep=True),
        )

    def describe_tools(self) -> str:
        """Generate a human-readable summary of all tools, e.g. for a system prompt."""
        tools = self.list_tools()
        if not tools:
            return "No tools registered."

        descriptions = []
        for tool in tools:
            desc = f"**{tool.name}**"
            if tool.description:
                desc += f": {tool.description}"

            properties = tool.input_schema.get("properties")
            if isinstance(properties, dict) and properties:
                desc += f"\n  Parameters: {', '.join(properties)}"
            required = tool.input_schema.get("required")
            if isinstance(required, list) and required:
                desc += f"\n  Required: {', '.join(str(r) for r in required)}"

            descriptions.append(desc)
        return "\n\n".join(descriptions)

    def get_stats(self) -> ExecutionStats:
        """Aggregate call and error counts across all registered tools."""
        tools = self.registry.list()
        total_calls = sum(t.metadata.call_count for t in tools)
        total_errors = sum(t.metadata.error_count for t in tools)
        success_rate = round((total_calls - total_errors) / total_calls * 100, 2) if total_calls else 0.0

        return ExecutionStats(
            tool_count=len(tools),
            total_calls=total_calls,
            total_errors=total_errors,
            success_rate=success_rate,
            tools=[
                ToolStats(
                    name=t.name,
                    calls=t.metadata.call_count,
                    errors=t.metadata.error_count,
                    last_called=t.metadata.last_called,
                )
                for t in tools
            ],
        )
