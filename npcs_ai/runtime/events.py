from dataclasses import dataclass, field
from enum import Enum, auto
from typing import Optional, List, Dict, Any
from collections import deque


class EventType(Enum):
    """Things the runtime reports about a tick."""
    STATE_CHANGED = auto()      # An agent switched behavior state
    NO_PATH = auto()            # Planner found no route; agent held still
    MAP_DATA_MISSING = auto()   # Walls layer absent; navigation skipped
    TARGET_MISSING = auto()     # Pursued target no longer exists
    LEVEL_CHANGED = auto()      # Active level selection moved


@dataclass
class Event:
    """
    Represents an event in the runtime system.
    Failures are handled locally per tick; events are how callers see them.
    """
    event_type: EventType
    tick: int
    data: Dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "event_type": self.event_type.name.lower(),
            "tick": self.tick,
            "data": self.data,
        }


class EventQueue:
    """
    Bounded log of emitted events.

    Events are pushed as they occur during a tick and drained by whoever
    consumes them (UI, debugging, tests).
    """

    def __init__(self, max_size: int = 1000):
        self._queue: deque = deque(maxlen=max_size)
        self._processed: List[Event] = []

    def push(self, event: Event) -> None:
        """Add an event to the queue."""
        self._queue.append(event)

    def pop_all(self) -> List[Event]:
        """Pop all pending events from the queue."""
        events = list(self._queue)
        self._queue.clear()
        self._processed.extend(events)
        return events

    def of_type(self, event_type: EventType, agent_id: Optional[str] = None) -> List[Event]:
        """Pending events of one type, optionally for one agent."""
        return [
            e for e in self._queue
            if e.event_type == event_type
            and (agent_id is None or e.data.get("agent_id") == agent_id)
        ]

    def get_processed_history(self) -> List[Dict[str, Any]]:
        """Get all drained events as dicts."""
        return [e.to_dict() for e in self._processed]

    def clear_history(self) -> None:
        """Clear drained event history."""
        self._processed.clear()

    @property
    def pending_count(self) -> int:
        return len(self._queue)

    @property
    def history_count(self) -> int:
        return len(self._processed)
