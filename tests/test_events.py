import logging
from typing import Any, Dict, List

import pytest

from tool_call_lib import ToolRuntime
from tool_call_lib.core import EventDispatcher, ToolEvent, ToolEventType


def test_subscribe_to_single_type() -> None:
    events = EventDispatcher()
    received: List[ToolEvent] = []
    events.subscribe(received.append, ToolEventType.RESULT)

    events.emit(ToolEventType.CALL, tool="a")
    events.emit(ToolEventType.RESULT, tool="a", result=1)

    assert len(received) == 1
    assert received[0].type == ToolEventType.RESULT
    assert received[0].data == {"result": 1}
    assert received[0].timestamp


def test_subscribe_by_type_name() -> None:
    events = EventDispatcher()
    received: List[ToolEvent] = []
    events.subscribe(received.append, "error")
    events.emit(ToolEventType.ERROR, tool="a", error="boom")
    assert received[0].data["error"] == "boom"


def test_unsubscribe() -> None:
    events = EventDispatcher()
    received: List[ToolEvent] = []
    unsubscribe = events.subscribe(received.append)
    assert events.listener_count() == 1

    assert unsubscribe() is True
    assert events.listener_count() == 0
    assert events.unsubscribe(received.append) is False

    events.emit(ToolEventType.CALL, tool="a")
    assert received == []


def test_listener_count_includes_catch_all() -> None:
    events = EventDispatcher()
    events.subscribe(lambda e: None)
    events.subscribe(lambda e: None, ToolEventType.CALL)
    assert events.listener_count(ToolEventType.CALL) == 2
    assert events.listener_count(ToolEventType.RESULT) == 1


def test_failing_listener_is_isolated(caplog: pytest.LogCaptureFixture) -> None:
    events = EventDispatcher()
    received: List[ToolEvent] = []

    def broken(event: ToolEvent) -> None:
        raise RuntimeError("listener bug")

    events.subscribe(broken)
    events.subscribe(received.append)

    with caplog.at_level(logging.ERROR, logger="tool_call_lib"):
        events.emit(ToolEventType.CALL, tool="a")

    assert len(received) == 1
    assert "listener bug" in caplog.text


def test_payload_is_a_snapshot() -> None:
    events = EventDispatcher()
    received: List[ToolEvent] = []
    events.subscribe(received.append)

    args: Dict[str, Any] = {"items": [1]}
    events.emit(ToolEventType.CALL, tool="a", args=args)
    args["items"].append(2)

    assert received[0].data["args"] == {"items": [1]}


@pytest.mark.asyncio
async def test_failing_listener_does_not_affect_execution(runtime: ToolRuntime) -> None:
    def broken(event: ToolEvent) -> None:
        raise RuntimeError("listener bug")

    runtime.subscribe(broken)
    result = await runtime.execute_single({"tool": "add", "args": {"x": 1, "y": 2}})

    assert result.result == 3
    assert runtime.unsubscribe(broken) is True


class Unclonable:
    def __deepcopy__(self, memo: Dict[int, Any]) -> "Unclonable":
        raise RuntimeError("cannot copy")


def test_uncopyable_payload_is_passed_by_reference() -> None:
    events = EventDispatcher()
    received: List[ToolEvent] = []
    events.subscribe(received.append)

    value = Unclonable()
    events.emit(ToolEventType.RESULT, tool="a", result=value)

    assert received[0].data["result"] is value
