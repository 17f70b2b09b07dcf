# ticket_hawk/models/price_snapshot.py

"""Append-only price observation model for event price tracking."""

from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class Availability(str, Enum):
    """Ticket availability recorded with each snapshot."""

    AVAILABLE = "available"
    LIMITED = "limited"
    SOLD_OUT = "sold_out"


@dataclass
class PriceSnapshot:
    """A single price/availability observation for an event.

    ``id`` and ``checked_at`` are assigned by the store on insert.
    """

    event_id: int
    min_price: float | None
    max_price: float | None
    currency: str
    availability: Availability
    id: int | None = None
    checked_at: datetime | None = None
