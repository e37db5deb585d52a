"""Event system for the CivicLedger contracts.

This module provides the event data structures and event emitter for audit
logging. Every successful contract write emits a typed ContractEvent that is
appended to the owning store's event list and dispatched to listeners.

The event stream is append-only and immutable. Failed calls emit nothing.
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Any, Callable, Dict, List, Optional
import json

from dateutil import parser as date_parser

from civicledger.logging_config import get_logger
from civicledger.types import ContractName, EventType

logger = get_logger("events")


@dataclass(frozen=True)
class ContractEvent:
    """A single event emitted by a contract write.

    Attributes:
        event_id: Globally unique event identifier (e.g., "evt_3f2a...")
        type: Event type from EventType enum
        contract: Contract that emitted the event
        block: Block height at which the write happened
        caller: Principal that submitted the call
        ts: UTC wall-clock time the event was recorded
        payload: Optional event-specific data (e.g., project id, metric value)

    Examples:
        >>> from datetime import datetime, timezone
        >>> event = ContractEvent(
        ...     event_id="evt_001",
        ...     type=EventType.PROJECT_REGISTERED,
        ...     contract=ContractName.PERFORMANCE_MEASUREMENT,
        ...     block=42,
        ...     caller="ST1PQ",
        ...     ts=datetime.now(timezone.utc),
        ...     payload={"projectId": 0},
        ... )
        >>> event.to_dict()["type"]
        'project.registered'
    """
    event_id: str
    type: EventType
    contract: ContractName
    block: int
    caller: str
    ts: datetime
    payload: Optional[Dict[str, Any]] = None

    def __post_init__(self):
        """Normalize string enum values."""
        if isinstance(self.type, str) and not isinstance(self.type, EventType):
            object.__setattr__(self, "type", EventType(self.type))
        if isinstance(self.contract, str) and not isinstance(self.contract, ContractName):
            object.__setattr__(self, "contract", ContractName(self.contract))

    def to_dict(self) -> Dict[str, Any]:
        """Convert event to dictionary for serialization.

        Timestamp is formatted as ISO 8601 string.
        """
        result: Dict[str, Any] = {
            "eventId": self.event_id,
            "type": self.type.value,
            "contract": self.contract.value,
            "block": self.block,
            "caller": self.caller,
            "ts": self.ts.isoformat(),
        }
        if self.payload is not None:
            result["payload"] = self.payload
        return result

    def to_jsonl(self) -> str:
        """Convert event to JSONL format (single-line JSON)."""
        return json.dumps(self.to_dict(), separators=(',', ':'))

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ContractEvent":
        """Create ContractEvent from dictionary with camelCase keys."""
        return cls(
            event_id=data["eventId"],
            type=EventType(data["type"]),
            contract=ContractName(data["contract"]),
            block=data["block"],
            caller=data["caller"],
            ts=date_parser.isoparse(data["ts"]),
            payload=data.get("payload"),
        )


EventListener = Callable[[ContractEvent], None]
"""Type alias for event listener callbacks.

Listeners are called synchronously when events are emitted.
"""


class EventEmitter:
    """Event emitter for managing event listeners and dispatching events.

    Features:
    - Type-specific subscriptions (listen to specific event types)
    - Wildcard subscriptions (listen to all events)
    - Synchronous dispatch (listeners called in registration order)
    - Error isolation (a failing listener is logged and skipped)

    Examples:
        >>> emitter = EventEmitter()
        >>> seen = []
        >>> emitter.on(EventType.VERIFIER_ADDED, seen.append)
        >>> emitter.listener_count()
        1
    """

    def __init__(self):
        self._listeners: Dict[EventType, List[EventListener]] = {}
        self._any_listeners: List[EventListener] = []

    def on(self, event_type: EventType, listener: EventListener) -> None:
        """Subscribe to a specific event type."""
        if event_type not in self._listeners:
            self._listeners[event_type] = []
        self._listeners[event_type].append(listener)

    def on_any(self, listener: EventListener) -> None:
        """Subscribe to all event types (wildcard subscription)."""
        self._any_listeners.append(listener)

    def off(self, event_type: EventType, listener: EventListener) -> None:
        """Unsubscribe from a specific event type. Unknown listeners are ignored."""
        listeners = self._listeners.get(event_type, [])
        if listener in listeners:
            listeners.remove(listener)

    def off_any(self, listener: EventListener) -> None:
        """Unsubscribe from wildcard subscription. Unknown listeners are ignored."""
        if listener in self._any_listeners:
            self._any_listeners.remove(listener)

    def emit(self, event: ContractEvent) -> None:
        """Dispatch an event to all registered listeners.

        Listeners are called synchronously in registration order:
        1. Type-specific listeners for this event type
        2. Wildcard listeners (subscribed to all events)

        A listener that raises is logged and does not prevent the remaining
        listeners from running. The contract write has already happened.
        """
        listeners = list(self._listeners.get(event.type, [])) + list(self._any_listeners)
        for listener in listeners:
            try:
                listener(event)
            except Exception:
                logger.exception(
                    "event_listener_failed",
                    extra={"event_id": event.event_id, "event_type": event.type.value},
                )

    def clear(self) -> None:
        """Remove all event listeners."""
        self._listeners.clear()
        self._any_listeners.clear()

    def listener_count(self, event_type: Optional[EventType] = None) -> int:
        """Get count of registered listeners.

        Args:
            event_type: If provided, count listeners for this type only.
                        If None, count all listeners (including wildcard).
        """
        if event_type is not None:
            return len(self._listeners.get(event_type, []))
        return len(self._any_listeners) + sum(len(ls) for ls in self._listeners.values())


__all__ = [
    "ContractEvent",
    "EventListener",
    "EventEmitter",
]
