# ticket_hawk/clients/ticketmaster_client.py

"""Rate-limited client for the Ticketmaster Discovery API."""

import logging
from types import TracebackType
from typing import Any
from urllib.parse import quote

from curl_cffi import requests as curl_requests

from ticket_hawk.clients.errors import ApiError, NetworkError
from ticket_hawk.clients.rate_limiter import RateLimiter
from ticket_hawk.config.settings import Settings
from ticket_hawk.models.event import Event, ExternalEvent
from ticket_hawk.models.price_snapshot import Availability, PriceSnapshot


class TicketmasterClient:
    """Client for the Discovery API search and detail endpoints.

    Every outbound request goes through the supplied :class:`RateLimiter`.
    Connectivity failures surface as :class:`NetworkError` and non-2xx
    responses as :class:`ApiError`; neither is retried here.
    """

    def __init__(
        self,
        api_key: str,
        base_url: str | None = None,
        rate_limiter: RateLimiter | None = None,
        session: curl_requests.Session | None = None,
        timeout: int | None = None,
    ) -> None:
        self.logger = logging.getLogger("ticket_hawk.client")
        self.api_key = api_key
        self.base_url = (
            base_url or Settings.TICKETMASTER_BASE_URL
        ).rstrip("/")
        self.rate_limiter = rate_limiter or RateLimiter()
        self.session = session or curl_requests.Session()
        self.timeout = timeout or Settings.REQUEST_TIMEOUT

    def close(self) -> None:
        """Close the underlying HTTP session."""
        self.session.close()

    def __enter__(self) -> "TicketmasterClient":
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()

    # ── Transport ────────────────────────────────────────

    def _get(
        self,
        path: str,
        params: dict[str, str] | None = None,
    ) -> curl_requests.Response:
        """Rate-limited GET; raises NetworkError on connectivity failure."""
        query = {"apikey": self.api_key, **(params or {})}
        url = f"{self.base_url}{path}"
        self.rate_limiter.wait()
        try:
            return self.session.get(
                url, params=query, timeout=self.timeout,
            )
        except curl_requests.RequestsError as exc:
            self.logger.error("Network error: %s", exc)
            raise NetworkError(str(exc)) from exc

    @staticmethod
    def _fault_message(resp: curl_requests.Response) -> str:
        """Pull the structured fault string out of an error response."""
        try:
            body: Any = resp.json()
        except ValueError:
            body = None
        if isinstance(body, dict):
            fault = body.get("fault")
            if isinstance(fault, dict) and fault.get("faultstring"):
                return str(fault["faultstring"])
            errors = body.get("errors")
            if isinstance(errors, list) and errors:
                first = errors[0]
                if isinstance(first, dict) and first.get("detail"):
                    return str(first["detail"])
        for fallback in (getattr(resp, "reason", None), resp.text):
            if isinstance(fallback, str) and fallback.strip():
                return fallback.strip()[:200]
        return "Unknown error"

    def _raise_api_error(self, resp: curl_requests.Response) -> None:
        message = self._fault_message(resp)
        self.logger.error(
            "Ticketmaster API error: %d - %s",
            resp.status_code,
            message,
        )
        raise ApiError(resp.status_code, message)

    def _json(self, resp: curl_requests.Response) -> dict[str, Any]:
        try:
            data: Any = resp.json()
        except ValueError as exc:
            self.logger.error(
                "Malformed JSON from Ticketmaster (HTTP %d): %s",
                resp.status_code,
                exc,
            )
            raise ApiError(
                resp.status_code, f"Malformed JSON response: {exc}",
            ) from exc
        if not isinstance(data, dict):
            raise ApiError(
                resp.status_code, "Unexpected response payload",
            )
        return data

    # ── Endpoints ────────────────────────────────────────

    def search_events(
        self,
        keyword: str,
        city: str | None = None,
    ) -> list[ExternalEvent]:
        """Search upcoming events by keyword, optionally within a city.

        Results are filtered to ``Settings.COUNTRY_CODE`` and sorted by
        ascending date.  Zero matches yields an empty list.
        """
        if not keyword or not keyword.strip():
            raise ValueError("keyword must be a non-empty string")

        params = {
            "keyword": keyword,
            "countryCode": Settings.COUNTRY_CODE,
            "sort": Settings.SEARCH_SORT,
        }
        if city:
            params["city"] = city

        self.logger.info(
            "Searching Ticketmaster for: %r%s",
            keyword,
            f" in {city}" if city else "",
        )
        resp = self._get("/events.json", params)
        if not 200 <= resp.status_code < 300:
            self._raise_api_error(resp)

        data = self._json(resp)
        events: list[ExternalEvent] = (
            (data.get("_embedded") or {}).get("events") or []
        )
        page = data.get("page") or {}
        self.logger.info(
            "Found %d events (total matches: %s)",
            len(events),
            page.get("totalElements", len(events)),
        )
        return events

    def get_event_details(
        self, external_id: str,
    ) -> ExternalEvent | None:
        """Fetch one event by its Ticketmaster id; ``None`` on 404."""
        if not external_id or not external_id.strip():
            raise ValueError("external_id must be a non-empty string")

        self.logger.info("Fetching details for event: %s", external_id)
        resp = self._get(f"/events/{quote(external_id, safe='')}.json")
        if resp.status_code == 404:
            self.logger.warning("Event not found: %s", external_id)
            return None
        if not 200 <= resp.status_code < 300:
            self._raise_api_error(resp)

        event = self._json(resp)
        self.logger.info(
            "Retrieved event details: %s", event.get("name", "N/A"),
        )
        return event


# ── Mapping (pure) ───────────────────────────────────────


def _first_venue(external_event: ExternalEvent) -> dict[str, Any]:
    venues = (external_event.get("_embedded") or {}).get("venues") or []
    return venues[0] if venues else {}


def _first_price_range(
    external_event: ExternalEvent,
) -> dict[str, Any] | None:
    ranges = external_event.get("priceRanges") or []
    return ranges[0] if ranges else None


def map_to_event(external_event: ExternalEvent) -> Event:
    """Map a Discovery API event to a new (unsaved) :class:`Event`."""
    venue = _first_venue(external_event)
    start = (external_event.get("dates") or {}).get("start") or {}
    return Event(
        external_id=str(external_event["id"]),
        name=str(external_event.get("name", "")),
        event_date=str(start.get("localDate", "")),
        venue=venue.get("name"),
        city=(venue.get("city") or {}).get("name"),
        url=external_event.get("url"),
        is_active=True,
    )


def map_to_price_snapshot(
    external_event: ExternalEvent,
    event_id: int,
    default_currency: str | None = None,
) -> PriceSnapshot:
    """Map the first price range of an event to a :class:`PriceSnapshot`.

    An event without any price range is recorded as sold out.
    """
    price_range = _first_price_range(external_event)
    fallback = default_currency or Settings.DEFAULT_CURRENCY
    if price_range is None:
        return PriceSnapshot(
            event_id=event_id,
            min_price=None,
            max_price=None,
            currency=fallback,
            availability=Availability.SOLD_OUT,
        )
    return PriceSnapshot(
        event_id=event_id,
        min_price=price_range.get("min"),
        max_price=price_range.get("max"),
        currency=price_range.get("currency") or fallback,
        availability=Availability.AVAILABLE,
    )


def describe_event(external_event: ExternalEvent) -> list[str]:
    """Human-readable summary lines for a Discovery API event."""
    start = (external_event.get("dates") or {}).get("start") or {}
    lines = [
        f"Event: {external_event.get('name', 'N/A')}",
        f"Date: {start.get('localDate', 'N/A')}",
    ]
    venue = _first_venue(external_event)
    if venue:
        city = (venue.get("city") or {}).get("name")
        lines.append(
            f"Venue: {venue.get('name', 'N/A')}"
            + (f", {city}" if city else "")
        )
    price_range = _first_price_range(external_event)
    if price_range is not None:
        lines.append(
            f"Price Range: ${price_range.get('min')} - "
            f"${price_range.get('max')} "
            f"{price_range.get('currency') or Settings.DEFAULT_CURRENCY}"
        )
    else:
        lines.append("Price: Not available / Sold out")
    lines.append(f"URL: {external_event.get('url', 'N/A')}")
    return lines
