"""Lending metrics."""

import logfire

from . import is_enabled

circulation_events = logfire.metric_counter(
    "library.books.circulation", description="Borrow and return events"
)


def record_circulation_event(event_type: str) -> None:
    """Count a ``borrow`` or ``return``."""
    if is_enabled():
        circulation_events.add(1, {"event_type": event_type})
