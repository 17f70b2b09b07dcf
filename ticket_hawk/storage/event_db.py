# ticket_hawk/storage/event_db.py

"""SQLite-backed store for tracked events and their price snapshots."""

import logging
import sqlite3
from datetime import datetime
from pathlib import Path
from types import TracebackType

from ticket_hawk.config.settings import Settings
from ticket_hawk.models.event import Event
from ticket_hawk.models.price_snapshot import Availability, PriceSnapshot

logger = logging.getLogger("ticket_hawk.storage")

_SCHEMA = """\
CREATE TABLE IF NOT EXISTS events (
    id          INTEGER PRIMARY KEY AUTOINCREMENT,
    external_id TEXT    NOT NULL UNIQUE,
    name        TEXT    NOT NULL,
    event_date  TEXT    NOT NULL,
    venue       TEXT,
    city        TEXT,
    url         TEXT,
    is_active   INTEGER NOT NULL DEFAULT 1,
    created_at  TEXT    NOT NULL
                DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
);

CREATE TABLE IF NOT EXISTS price_snapshots (
    id           INTEGER PRIMARY KEY AUTOINCREMENT,
    event_id     INTEGER NOT NULL
                 REFERENCES events(id),
    min_price    REAL,
    max_price    REAL,
    currency     TEXT    NOT NULL DEFAULT 'CAD',
    availability TEXT    NOT NULL
                 CHECK (availability IN ('available', 'limited', 'sold_out')),
    checked_at   TEXT    NOT NULL
                 DEFAULT (strftime('%Y-%m-%d %H:%M:%f', 'now'))
);

CREATE INDEX IF NOT EXISTS idx_snapshots_event_checked
    ON price_snapshots(event_id, checked_at);

CREATE INDEX IF NOT EXISTS idx_events_active_date
    ON events(is_active, event_date);
"""

_EVENT_COLUMNS = (
    "id, external_id, name, event_date, venue, city, url, is_active"
)

_SNAPSHOT_COLUMNS = (
    "id, event_id, min_price, max_price, currency, availability, checked_at"
)


def _row_to_event(row: tuple) -> Event:
    return Event(
        id=row[0],
        external_id=row[1],
        name=row[2],
        event_date=row[3],
        venue=row[4],
        city=row[5],
        url=row[6],
        is_active=bool(row[7]),
    )


def _row_to_snapshot(row: tuple) -> PriceSnapshot:
    return PriceSnapshot(
        id=row[0],
        event_id=row[1],
        min_price=row[2],
        max_price=row[3],
        currency=row[4],
        availability=Availability(row[5]),
        checked_at=datetime.fromisoformat(row[6]),
    )


class EventDB:
    """SQLite-backed store for events and append-only price snapshots.

    Each method runs a single statement and commits it; nothing groups
    several operations into one transaction.  ``add_event`` performs no
    existence check: callers look the event up with
    :meth:`get_event_by_external_id` first.
    """

    def __init__(
        self, db_path: Path | None = None,
    ) -> None:
        path = db_path or Settings.DB_PATH
        if not path.parent.exists():
            path.parent.mkdir(parents=True, exist_ok=True)
            logger.info("Created data directory: %s", path.parent)
        self.path = path
        self._conn: sqlite3.Connection | None = sqlite3.connect(str(path))
        self._conn.execute("PRAGMA journal_mode=WAL")
        self._conn.execute("PRAGMA foreign_keys=ON")
        self._conn.executescript(_SCHEMA)
        logger.info("EventDB opened at %s", path)

    @property
    def conn(self) -> sqlite3.Connection:
        """The open connection; raises once the store is closed."""
        if self._conn is None:
            raise sqlite3.ProgrammingError(
                "Cannot operate on a closed EventDB",
            )
        return self._conn

    def close(self) -> None:
        """Close the database connection. Further calls are no-ops."""
        if self._conn is None:
            return
        self._conn.close()
        self._conn = None
        logger.info("EventDB connection closed")

    def __enter__(self) -> "EventDB":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ── Events ───────────────────────────────────────────

    def add_event(self, event: Event) -> int:
        """Insert an event and return its store-assigned id."""
        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO events "
                "(external_id, name, event_date, venue, city, url, is_active) "
                "VALUES (?, ?, ?, ?, ?, ?, ?)",
                (
                    event.external_id,
                    event.name,
                    event.event_date,
                    event.venue or None,
                    event.city or None,
                    event.url or None,
                    1 if event.is_active else 0,
                ),
            )
        event_id = int(cur.lastrowid or 0)
        logger.info(
            "Added event to database: %s (ID: %d)", event.name, event_id,
        )
        return event_id

    def get_active_events(self) -> list[Event]:
        """Return active events, soonest first."""
        rows = self.conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events "
            "WHERE is_active = 1 "
            "ORDER BY event_date ASC, id ASC",
        ).fetchall()
        return [_row_to_event(r) for r in rows]

    def get_event_by_external_id(
        self, external_id: str,
    ) -> Event | None:
        """Look up an event by its Ticketmaster id."""
        row = self.conn.execute(
            f"SELECT {_EVENT_COLUMNS} FROM events WHERE external_id = ?",
            (external_id,),
        ).fetchone()
        return _row_to_event(row) if row else None

    # ── Price snapshots ──────────────────────────────────

    def add_price_snapshot(self, snapshot: PriceSnapshot) -> int:
        """Append a price snapshot; ``checked_at`` is set by the database."""
        with self.conn:
            cur = self.conn.execute(
                "INSERT INTO price_snapshots "
                "(event_id, min_price, max_price, currency, availability) "
                "VALUES (?, ?, ?, ?, ?)",
                (
                    snapshot.event_id,
                    snapshot.min_price,
                    snapshot.max_price,
                    snapshot.currency,
                    Availability(snapshot.availability).value,
                ),
            )
        snapshot_id = int(cur.lastrowid or 0)
        logger.info(
            "Added price snapshot for event ID %d: %s-%s %s (%s)",
            snapshot.event_id,
            snapshot.min_price,
            snapshot.max_price,
            snapshot.currency,
            Availability(snapshot.availability).value,
        )
        return snapshot_id

    def get_recent_snapshots(
        self, event_id: int, limit: int = 10,
    ) -> list[PriceSnapshot]:
        """Return up to *limit* snapshots for an event, newest first."""
        if limit <= 0:
            return []
        rows = self.conn.execute(
            f"SELECT {_SNAPSHOT_COLUMNS} FROM price_snapshots "
            "WHERE event_id = ? "
            "ORDER BY checked_at DESC, id DESC "
            "LIMIT ?",
            (event_id, limit),
        ).fetchall()
        return [_row_to_snapshot(r) for r in rows]

    def get_latest_snapshot(
        self, event_id: int,
    ) -> PriceSnapshot | None:
        """Return the most recent snapshot for an event, if any."""
        snapshots = self.get_recent_snapshots(event_id, limit=1)
        return snapshots[0] if snapshots else None
