"""
Structured Trace Hooks
Optional caller-injected hooks that observe engine decisions without affecting them
"""
from typing import Any, Callable, Dict, List, Optional
import logging
import threading
import time
from collections import defaultdict, deque
from dataclasses import dataclass, asdict

logger = logging.getLogger(__name__)

TraceHook = Callable[[str, Dict[str, Any]], None]


@dataclass
class TraceEvent:
    """One structured trace event"""
    event: str
    payload: Dict[str, Any]
    timestamp: float


def emit(trace: Optional[TraceHook], event: str, **payload: Any) -> None:
    """Send an event to the hook if one was injected.

    A failing hook is logged and ignored; it must never change engine output.
    """
    if trace is None:
        return
    try:
        trace(event, payload)
    except Exception as e:
        logger.warning(f"Trace hook failed on {event}: {e}")


class TraceCollector:
    """Ready-made hook that records events and per-event counters"""

    def __init__(self, max_events: int = 1000):
        self.events = deque(maxlen=max_events)
        self.counters = defaultdict(int)
        self._lock = threading.Lock()

    def __call__(self, event: str, payload: Dict[str, Any]) -> None:
        with self._lock:
            self.events.append(TraceEvent(event=event, payload=dict(payload), timestamp=time.time()))
            self.counters[event] += 1

    def events_named(self, event: str) -> List[TraceEvent]:
        with self._lock:
            return [e for e in self.events if e.event == event]

    def as_dicts(self) -> List[Dict[str, Any]]:
        with self._lock:
            return [asdict(e) for e in self.events]

    def reset(self) -> None:
        with self._lock:
            self.events.clear()
            self.counters.clear()
