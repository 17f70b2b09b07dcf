# ticket_hawk/models/event.py

"""Tracked event model and the raw Discovery API event shape."""

from dataclasses import dataclass
from typing import Any

# A single event object as returned by the Discovery API, prior to mapping.
ExternalEvent = dict[str, Any]


@dataclass
class Event:
    """An event tracked for price changes, keyed by its external id."""

    external_id: str
    name: str
    event_date: str
    venue: str | None = None
    city: str | None = None
    url: str | None = None
    is_active: bool = True
    id: int | None = None
