"""Runtime context bundling registry, schema engine, executor and extractor.

Each ``ToolRuntime`` is fully independent, so applications and tests can keep as
many isolated tool sets as they need.
"""

from typing import Any, Callable, Dict, Iterable, List, Mapping, Optional, Union

from .config import RuntimeConfig
from .extraction import StreamingExtractor, ToolCallExtractor
from .logger import get_logger, setup_logging
from .tools.events import EventDispatcher, ToolEventListener, ToolEventType
from .tools.execution import ToolExecutor
from .tools.models import (
    ExecutionOptions,
    ExecutionResult,
    ExecutionStats,
    ToolCallRecord,
    ToolConfig,
    ToolInfo,
)
from .tools.registry import ToolRegistry
from .tools.schema import SchemaEngine

logger = get_logger(__name__)

__version__ = "0.1.0"


class ToolRuntime:
    """
    Register tools, extract tool calls from model output and execute them.

    Example:
        >>> runtime = ToolRuntime()
        >>> runtime.register(
        ...     "add",
        ...     lambda args: args["x"] + args["y"],
        ...     input_schema={
        ...         "type": "object",
        ...         "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
        ...         "required": ["x", "y"],
        ...     },
        ... )
        True
        >>> runtime.parse('{"tool_call":{"tool":"add","args":{"x":2,"y":3}}}')
        [ToolCallRecord(tool='add', args={'x': 2, 'y': 3})]

        Inside a coroutine, ``await runtime.parse_and_execute(response)`` runs the calls.
    """

    def __init__(self, config: Optional[RuntimeConfig] = None, schema_engine: Optional[SchemaEngine] = None) -> None:
        """Initialize the runtime.

        Args:
            config: Runtime settings. Defaults to ``RuntimeConfig()``.
            schema_engine: Schema engine shared by registry and executor.
        """
        self.config = config or RuntimeConfig()
        if self.config.log_level:
            setup_logging(self.config.log_level.upper())

        self.events = EventDispatcher()
        self.schema_engine = schema_engine or SchemaEngine()
        self.registry = ToolRegistry(
            schema_engine=self.schema_engine,
            events=self.events,
            strict=self.config.strict,
            allow_overwrite=self.config.allow_overwrite,
        )
        self.executor = ToolExecutor(
            self.registry,
            tool_timeout=self.config.tool_timeout,
            default_options=ExecutionOptions(max_concurrency=self.config.max_concurrency),
        )
        self.extractor = ToolCallExtractor(
            max_depth=self.config.max_extraction_depth,
            max_nodes=self.config.max_extraction_nodes,
        )
        self._streaming_extractor: Optional[StreamingExtractor] = None

    @property
    def version(self) -> str:
        return __version__

    # Registration

    def register(
        self,
        name: str,
        handler: Callable[..., Any],
        config: Optional[Union[ToolConfig, Mapping[str, Any]]] = None,
        **options: Any,
    ) -> bool:
        """Register a tool. See ``ToolRegistry.register``."""
        return self.registry.register(name, handler, config, **options)

    def tool(self, func: Optional[Callable[..., Any]] = None, **options: Any) -> Any:
        """Decorator registering a function as a tool. See ``ToolRegistry.tool``."""
        return self.registry.tool(func, **options)

    def unregister(self, name: str) -> bool:
        return self.registry.unregister(name)

    def clear(self) -> None:
        self.registry.clear()

    @property
    def strict(self) -> bool:
        return self.registry.strict

    def set_strict(self, enabled: bool) -> None:
        """Enable or disable raising on registration failures."""
        self.registry.strict = bool(enabled)
        logger.info(f"Strict mode {'enabled' if enabled else 'disabled'}")

    # Inspection

    def has_tool(self, name: str) -> bool:
        return self.executor.has_tool(name)

    def get_tool_info(self, name: str) -> Optional[ToolInfo]:
        return self.executor.get_tool_info(name)

    def list_tools(self) -> List[ToolInfo]:
        return self.executor.list_tools()

    def describe_tools(self) -> str:
        return self.executor.describe_tools()

    def get_stats(self) -> ExecutionStats:
        return self.executor.get_stats()

    def get_info(self) -> Dict[str, Any]:
        """Summary of the runtime state."""
        stats = self.get_stats()
        return {
            "version": self.version,
            "strict": self.strict,
            "tool_count": stats.tool_count,
            "total_calls": stats.total_calls,
            "success_rate": stats.success_rate,
        }

    # Extraction

    def parse(self, response: Any) -> Optional[List[ToolCallRecord]]:
        """Extract and validate tool calls from a model response.

        Returns:
            The executable records, or None if no tool call was found.
        """
        records = self.extractor.extract(response)
        return self.extractor.validate(records) if records else None

    def parse_multiple(self, response: Any) -> Optional[List[ToolCallRecord]]:
        """Like ``parse``, but also extracts tool calls line by line."""
        records = self.extractor.extract_all(response)
        return self.extractor.validate(records) if records else None

    def create_streaming_extractor(self) -> StreamingExtractor:
        """Create a new streaming extractor sharing this runtime's extraction limits."""
        return StreamingExtractor(self.extractor)

    @property
    def streaming_extractor(self) -> StreamingExtractor:
        """The default streaming extractor, created on first use."""
        if self._streaming_extractor is None:
            self._streaming_extractor = self.create_streaming_extractor()
        return self._streaming_extractor

    def reset_streaming_extractor(self) -> None:
        if self._streaming_extractor is not None:
            self._streaming_extractor.reset()

    # Execution

    async def execute(
        self,
        records: Iterable[Union[ToolCallRecord, Mapping[str, Any]]],
        options: Optional[Union[ExecutionOptions, Mapping[str, Any]]] = None,
        **overrides: Any,
    ) -> List[ExecutionResult]:
        return await self.executor.execute(records, options, **overrides)

    async def execute_single(self, record: Union[ToolCallRecord, Mapping[str, Any]]) -> ExecutionResult:
        return await self.executor.execute_single(record)

    async def execute_direct(self, name: str, args: Optional[Dict[str, Any]] = None) -> Any:
        return await self.executor.execute_direct(name, args)

    async def parse_and_execute(
        self, response: Any, options: Optional[Union[ExecutionOptions, Mapping[str, Any]]] = None, **overrides: Any
    ) -> List[ExecutionResult]:
        """Parse a model response and execute every tool call found in it."""
        records = self.parse(response)
        if not records:
            logger.info("No tool calls found in response")
            return []
        return await self.execute(records, options, **overrides)

    # Events

    def subscribe(self, listener: ToolEventListener, event_type: Optional[Union[ToolEventType, str]] = None) -> Any:
        """Subscribe to lifecycle events. Returns a callable that unsubscribes again."""
        return self.events.subscribe(listener, event_type)

    def unsubscribe(self, listener: ToolEventListener, event_type: Optional[Union[ToolEventType, str]] = None) -> bool:
        return self.events.unsubscribe(listener, event_type)
