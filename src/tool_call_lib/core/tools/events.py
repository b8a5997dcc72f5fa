"""Lifecycle notifications for registry and executor activity.

Listeners subscribe to an ``EventDispatcher``; the registry and executor only
know the dispatcher, never the listeners themselves.
"""

from __future__ import annotations

import copy
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Callable, Dict, List, Optional, Protocol

from ..logger import get_logger
from .models import utc_now

logger = get_logger(__name__)


class ToolEventType(str, Enum):
    """Kinds of lifecycle events."""

    TOOL_REGISTERED = "tool_registered"
    TOOL_UNREGISTERED = "tool_unregistered"
    REGISTRATION_ERROR = "registration_error"
    REGISTRY_CLEARED = "registry_cleared"
    CALL = "call"
    RESULT = "result"
    ERROR = "error"


@dataclass(frozen=True)
class ToolEvent:
    """A single lifecycle notification.

    Attributes:
        type: What happened.
        tool: The tool concerned, if any.
        call_id: Correlates ``call``/``result``/``error`` events of one invocation.
        data: Event specific payload (arguments, result, error message, duration ...).
        timestamp: UTC ISO-8601 time the event was emitted.
    """

    type: ToolEventType
    tool: Optional[str] = None
    call_id: Optional[str] = None
    data: Dict[str, Any] = field(default_factory=dict)
    timestamp: str = field(default_factory=lambda: utc_now().isoformat())


class ToolEventListener(Protocol):
    """Anything callable with a ``ToolEvent``."""

    def __call__(self, event: ToolEvent) -> None: ...


def _snapshot(value: Any) -> Any:
    try:
        return copy.deepcopy(value)
    except Exception as e:
        logger.debug(
            "Event payload of type %s is not deep-copyable (%s); passing it by reference.", type(value).__name__, e
        )
        return value


class EventDispatcher:
    """Delivers ``ToolEvent`` objects to subscribed listeners."""

    def __init__(self) -> None:
        # None key holds listeners interested in every event type
        self._listeners: Dict[Optional[ToolEventType], List[ToolEventListener]] = {}

    def subscribe(
        self, listener: ToolEventListener, event_type: Optional[ToolEventType | str] = None
    ) -> Callable[[], bool]:
        """Register a listener.

        Args:
            listener: Callable receiving each matching event.
            event_type: Only deliver events of this type. None subscribes to everything.

        Returns:
            A callable that removes the subscription again.
        """
        key = ToolEventType(event_type) if event_type is not None else None
        self._listeners.setdefault(key, []).append(listener)
        return lambda: self.unsubscribe(listener, key)

    def unsubscribe(self, listener: ToolEventListener, event_type: Optional[ToolEventType | str] = None) -> bool:
        """Remove a listener. Returns True if it was subscribed."""
        key = ToolEventType(event_type) if event_type is not None else None
        listeners = self._listeners.get(key)
        if not listeners or listener not in listeners:
            return False
        listeners.remove(listener)
        if not listeners:
            del self._listeners[key]
        return True

    def listener_count(self, event_type: Optional[ToolEventType | str] = None) -> int:
        """Number of listeners that would receive an event of ``event_type``.

        With no argument, counts every subscription.
        """
        if event_type is None:
            return sum(len(v) for v in self._listeners.values())
        key = ToolEventType(event_type)
        return len(self._listeners.get(key, [])) + len(self._listeners.get(None, []))

    def emit(
        self,
        event_type: ToolEventType,
        *,
        tool: Optional[str] = None,
        call_id: Optional[str] = None,
        **data: Any,
    ) -> None:
        """Build an event and deliver it to every matching listener.

        Listener failures are logged and never reach the emitter.
        """
        targets = [*self._listeners.get(event_type, []), *self._listeners.get(None, [])]
        if not targets:
            return

        event = ToolEvent(
            type=event_type,
            tool=tool,
            call_id=call_id,
            data={k: _snapshot(v) for k, v in data.items()},
        )
        for listener in targets:
            try:
                listener(event)
            except Exception as e:
                logger.error(f"Error in event listener for '{event_type.value}': {e}", exc_info=True)
