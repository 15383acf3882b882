"""Analytics event tracking and the app-rating prompt hook."""

import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Callable, Dict, List, Optional

logger = logging.getLogger(__name__)

EventSink = Callable[[str, Dict[str, Any]], None]


@dataclass
class TrackedEvent:
    """An analytics event recorded during this process."""

    name: str
    properties: Dict[str, Any] = field(default_factory=dict)
    recorded_at: str = field(
        default_factory=lambda: datetime.now(timezone.utc).isoformat()
    )


class AnalyticsTracker:
    """Records analytics events and forwards them to an optional sink.

    The sink is whatever reporting backend the host application uses; without
    one, events are only logged and kept in memory.
    """

    def __init__(self, sink: Optional[EventSink] = None):
        self._sink = sink
        self.events: List[TrackedEvent] = []

    def track_event(self, name: str, **properties: Any) -> None:
        event = TrackedEvent(name=name, properties=properties)
        self.events.append(event)
        logger.info(f"Analytics event: {name} {properties or ''}".rstrip())
        if self._sink is not None:
            self._sink(name, properties)

    def count(self, name: str) -> int:
        return sum(1 for event in self.events if event.name == name)


def log_rating_prompt() -> None:
    """Default rating prompt hook for hosts without a native review dialog."""
    logger.info("Requesting app rating prompt")
