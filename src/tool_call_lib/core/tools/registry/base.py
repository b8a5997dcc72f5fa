"""Tool registry holding handlers, compiled schemas and usage metadata."""

import inspect
from typing import Any, Callable, Dict, Iterator, List, Mapping, Optional, Union

from pydantic import ValidationError

from ..events import EventDispatcher, ToolEventType
from ..models import ToolConfig, ToolMetadata, ToolRegistration
from ..schema import SchemaEngine
from ...exceptions import ToolRegistrationError
from ...logger import get_logger

logger = get_logger(__name__)


def _normalize(name: Any) -> Any:
    """Registered names are stored trimmed, so lookups are trimmed too."""
    return name.strip() if isinstance(name, str) else name


class ToolRegistry:
    """
    A central registry to manage and access all available tools.

    The registry maps tool names to their handlers and compiled input schemas.
    Registration failures are reported by returning ``False``; in strict mode they
    raise ``ToolRegistrationError`` instead.
    """

    def __init__(
        self,
        schema_engine: Optional[SchemaEngine] = None,
        events: Optional[EventDispatcher] = None,
        strict: bool = False,
        allow_overwrite: bool = True,
    ) -> None:
        """Initialize the ToolRegistry.

        Args:
            schema_engine: Engine used to compile input and output schemas.
            events: Dispatcher receiving registration lifecycle events.
            strict: Raise on registration failures instead of returning False.
            allow_overwrite: Whether registering an existing name replaces the old tool.
        """
        self.schema_engine = schema_engine or SchemaEngine()
        self.events = events or EventDispatcher()
        self.strict = strict
        self.allow_overwrite = allow_overwrite
        self._tools: Dict[str, ToolRegistration] = {}

    def register(
        self,
        name: str,
        handler: Callable[..., Any],
        config: Optional[Union[ToolConfig, Mapping[str, Any]]] = None,
        **options: Any,
    ) -> bool:
        """
        Register a new tool.

        Args:
            name: The unique name of the tool. Surrounding whitespace is removed.
            handler: Callable invoked with the validated argument mapping. May be async.
            config: A ``ToolConfig`` or mapping with ``input_schema``, ``output_schema``
                and ``description``. Keyword ``options`` are used when omitted.
            **options: Same fields as ``ToolConfig``.

        Returns:
            True if the tool was registered, False otherwise (non-strict mode).

        Raises:
            ToolRegistrationError: In strict mode, if the name, handler or a schema is invalid.
        """
        try:
            tool = self._build_registration(name, handler, config, options)
        except ToolRegistrationError as e:
            logger.error(f"Failed to register tool '{name}': {e}")
            self.events.emit(ToolEventType.REGISTRATION_ERROR, tool=str(name), error=str(e))
            if self.strict:
                raise
            return False

        if tool.name in self._tools:
            logger.warning(f"Tool '{tool.name}' is already registered; replacing it and resetting its metadata.")

        self._tools[tool.name] = tool
        logger.info(f"Successfully registered tool: '{tool.name}'")
        self.events.emit(
            ToolEventType.TOOL_REGISTERED,
            tool=tool.name,
            input_schema=tool.input_schema,
            description=tool.description,
        )
        return True

    def _build_registration(
        self,
        name: Any,
        handler: Any,
        config: Optional[Union[ToolConfig, Mapping[str, Any]]],
        options: Dict[str, Any],
    ) -> ToolRegistration:
        if not isinstance(name, str) or not name.strip():
            raise ToolRegistrationError("Tool name must be a non-empty string")
        if not callable(handler):
            raise ToolRegistrationError("Tool handler must be callable")

        tool_name = name.strip()
        if not self.allow_overwrite and tool_name in self._tools:
            raise ToolRegistrationError(f"Tool '{tool_name}' is already registered.")

        try:
            if isinstance(config, ToolConfig):
                tool_config = config
            else:
                tool_config = ToolConfig.model_validate({**dict(config or {}), **options})
        except ValidationError as e:
            raise ToolRegistrationError(f"Invalid tool configuration: {e}") from e

        # SchemaCompileError is a ToolRegistrationError
        compiled = self.schema_engine.compile(tool_config.input_schema)
        if tool_config.output_schema is not None:
            self.schema_engine.compile(tool_config.output_schema)

        return ToolRegistration(
            name=tool_name,
            handler=handler,
            input_schema=self.schema_engine.resolve_refs(compiled.schema),
            output_schema=tool_config.output_schema,
            description=tool_config.description,
            metadata=ToolMetadata(),
            validator=compiled,
        )

    def tool(
        self,
        func: Optional[Callable[..., Any]] = None,
        *,
        name: Optional[str] = None,
        input_schema: Optional[Dict[str, Any]] = None,
        output_schema: Optional[Dict[str, Any]] = None,
        description: Optional[str] = None,
    ) -> Any:
        """A decorator to turn a function into a tool.

        Usable bare (``@registry.tool``) or with options
        (``@registry.tool(input_schema={...})``). The description defaults to the
        function's docstring and the name to the function's name.

        Returns:
            The original function, after registering it as a tool.
        """

        def decorator(fn: Callable[..., Any]) -> Callable[..., Any]:
            options: Dict[str, Any] = {"description": description or inspect.getdoc(fn) or ""}
            if input_schema is not None:
                options["input_schema"] = input_schema
            if output_schema is not None:
                options["output_schema"] = output_schema
            self.register(name or fn.__name__, fn, **options)
            return fn

        if func is not None:
            return decorator(func)
        return decorator

    def unregister(self, name: str) -> bool:
        """Unregister a tool from the registry.

        Args:
            name: The name of the tool to remove.

        Returns:
            True if the tool existed.
        """
        key = _normalize(name)
        if self._tools.pop(key, None) is None:
            return False
        logger.info(f"Successfully unregistered tool: '{key}'")
        self.events.emit(ToolEventType.TOOL_UNREGISTERED, tool=key)
        return True

    def clear(self) -> None:
        """Drop every registered tool."""
        count = len(self._tools)
        self._tools.clear()
        logger.info(f"Cleared {count} tools")
        self.events.emit(ToolEventType.REGISTRY_CLEARED, count=count)

    def has(self, name: str) -> bool:
        return _normalize(name) in self._tools

    def get(self, name: str) -> Optional[ToolRegistration]:
        return self._tools.get(_normalize(name))

    def list(self) -> List[ToolRegistration]:
        """Returns all registrations sorted by name."""
        return [self._tools[name] for name in sorted(self._tools)]

    def names(self) -> List[str]:
        return sorted(self._tools)

    def __contains__(self, name: object) -> bool:
        return _normalize(name) in self._tools

    def __len__(self) -> int:
        return len(self._tools)

    def __iter__(self) -> Iterator[ToolRegistration]:
        return iter(self.list())
