from typing import Any, Dict

import pytest

from tool_call_lib import ToolRuntime
from tool_call_lib.core import EventDispatcher, ToolEvent, ToolExecutor, ToolRegistry


def add(args: Dict[str, Any]) -> Any:
    return args["x"] + args["y"]


@pytest.fixture
def add_schema() -> Dict[str, Any]:
    return {
        "type": "object",
        "properties": {"x": {"type": "number"}, "y": {"type": "number"}},
        "required": ["x", "y"],
    }


@pytest.fixture
def events() -> EventDispatcher:
    return EventDispatcher()


@pytest.fixture
def registry(events: EventDispatcher, add_schema: Dict[str, Any]) -> ToolRegistry:
    registry = ToolRegistry(events=events)
    assert registry.register("add", add, input_schema=add_schema, description="Add two numbers")
    return registry


@pytest.fixture
def executor(registry: ToolRegistry) -> ToolExecutor:
    return ToolExecutor(registry)


@pytest.fixture
def runtime(add_schema: Dict[str, Any]) -> ToolRuntime:
    runtime = ToolRuntime()
    assert runtime.register("add", add, input_schema=add_schema, description="Add two numbers")
    return runtime


@pytest.fixture
def recorded_events(events: EventDispatcher) -> list[ToolEvent]:
    """Collects every event emitted on the shared dispatcher."""
    received: list[ToolEvent] = []
    events.subscribe(received.append)
    return received
