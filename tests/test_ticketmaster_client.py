# tests/test_ticketmaster_client.py

"""Tests for the Ticketmaster Discovery API client."""

import unittest
from typing import Any
from unittest.mock import MagicMock

from curl_cffi import requests as curl_requests

from ticket_hawk.clients.errors import ApiError, NetworkError
from ticket_hawk.clients.rate_limiter import RateLimiter
from ticket_hawk.clients.ticketmaster_client import TicketmasterClient
from ticket_hawk.config.settings import Settings


def _make_resp(
    status_code: int = 200,
    payload: Any = None,
    text: str = "",
) -> MagicMock:
    """Build a mock HTTP response."""
    resp = MagicMock()
    resp.status_code = status_code
    resp.reason = ""
    resp.text = text
    if isinstance(payload, Exception):
        resp.json.side_effect = payload
    else:
        resp.json.return_value = payload
    return resp


def _tm_event(event_id: str = "G5vYZ9pJqXk1a") -> dict[str, Any]:
    """A trimmed Discovery API event payload."""
    return {
        "id": event_id,
        "name": "Arkells Live",
        "url": f"https://www.ticketmaster.ca/event/{event_id}",
        "dates": {"start": {"localDate": "2026-12-05"}},
        "priceRanges": [
            {"type": "standard", "currency": "CAD", "min": 49.5, "max": 129.0},
        ],
        "_embedded": {
            "venues": [
                {"name": "Scotiabank Arena", "city": {"name": "Toronto"}},
            ],
        },
    }


class _ClientTestCase(unittest.TestCase):
    """Client wired to a mock session and a non-blocking limiter."""

    def setUp(self) -> None:
        """Create a client around a MagicMock session."""
        self.session = MagicMock()
        self.limiter = MagicMock(spec=RateLimiter)
        self.client = TicketmasterClient(
            api_key="test-key",
            base_url="https://api.example.com/discovery/v2/",
            rate_limiter=self.limiter,
            session=self.session,
        )


class TestSearchEvents(_ClientTestCase):
    """Tests for search_events."""

    def test_returns_embedded_events(self) -> None:
        """Events under _embedded.events are returned as-is."""
        events = [_tm_event("a"), _tm_event("b")]
        self.session.get.return_value = _make_resp(
            payload={
                "_embedded": {"events": events},
                "page": {"size": 20, "totalElements": 2,
                         "totalPages": 1, "number": 0},
            },
        )
        result = self.client.search_events("concert", "Toronto")
        self.assertEqual(result, events)

    def test_sends_fixed_filters_and_api_key(self) -> None:
        """Country, sort, city and apikey are sent as query params."""
        self.session.get.return_value = _make_resp(payload={})
        self.client.search_events("concert", "Toronto")

        args, kwargs = self.session.get.call_args
        self.assertEqual(
            args[0], "https://api.example.com/discovery/v2/events.json",
        )
        params = kwargs["params"]
        self.assertEqual(params["apikey"], "test-key")
        self.assertEqual(params["keyword"], "concert")
        self.assertEqual(params["countryCode"], Settings.COUNTRY_CODE)
        self.assertEqual(params["sort"], "date,asc")
        self.assertEqual(params["city"], "Toronto")
        self.assertEqual(kwargs["timeout"], Settings.REQUEST_TIMEOUT)

    def test_city_omitted_when_not_given(self) -> None:
        """No city filter is sent without a city."""
        self.session.get.return_value = _make_resp(payload={})
        self.client.search_events("concert")
        params = self.session.get.call_args.kwargs["params"]
        self.assertNotIn("city", params)

    def test_zero_matches_returns_empty_list(self) -> None:
        """A response without _embedded is an empty result, not an error."""
        self.session.get.return_value = _make_resp(
            payload={"page": {"totalElements": 0}},
        )
        self.assertEqual(self.client.search_events("zzzz"), [])

    def test_empty_keyword_rejected(self) -> None:
        """An empty keyword raises before any request."""
        with self.assertRaises(ValueError):
            self.client.search_events("   ")
        self.session.get.assert_not_called()
        self.limiter.wait.assert_not_called()

    def test_each_request_is_rate_limited(self) -> None:
        """The limiter is consulted once per outbound request."""
        self.session.get.return_value = _make_resp(payload={})
        self.client.search_events("a")
        self.client.search_events("b")
        self.assertEqual(self.limiter.wait.call_count, 2)

    def test_non_2xx_raises_api_error_with_fault(self) -> None:
        """The structured fault string becomes the ApiError message."""
        self.session.get.return_value = _make_resp(
            status_code=401,
            payload={"fault": {"faultstring": "Invalid ApiKey"}},
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.search_events("concert")
        self.assertEqual(ctx.exception.status, 401)
        self.assertEqual(ctx.exception.message, "Invalid ApiKey")

    def test_api_error_falls_back_to_body_text(self) -> None:
        """Without a JSON fault the body text is used."""
        self.session.get.return_value = _make_resp(
            status_code=503,
            payload=ValueError("not json"),
            text="Service Unavailable",
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.search_events("concert")
        self.assertEqual(ctx.exception.status, 503)
        self.assertEqual(ctx.exception.message, "Service Unavailable")

    def test_connectivity_failure_raises_network_error(self) -> None:
        """Transport errors surface as NetworkError."""
        self.session.get.side_effect = curl_requests.RequestsError(
            "Could not resolve host: api.example.com",
        )
        with self.assertRaises(NetworkError) as ctx:
            self.client.search_events("concert")
        self.assertIsInstance(
            ctx.exception.__cause__, curl_requests.RequestsError,
        )

    def test_malformed_json_raises_api_error(self) -> None:
        """A 200 with an unparsable body is an ApiError."""
        self.session.get.return_value = _make_resp(
            payload=ValueError("Expecting value"),
        )
        with self.assertRaises(ApiError):
            self.client.search_events("concert")


class TestGetEventDetails(_ClientTestCase):
    """Tests for get_event_details."""

    def test_returns_event(self) -> None:
        """A 200 response returns the event object."""
        event = _tm_event("G5v")
        self.session.get.return_value = _make_resp(payload=event)
        result = self.client.get_event_details("G5v")
        self.assertEqual(result, event)
        self.assertEqual(
            self.session.get.call_args.args[0],
            "https://api.example.com/discovery/v2/events/G5v.json",
        )

    def test_id_is_path_escaped(self) -> None:
        """Path separators in an id cannot reach another resource."""
        self.session.get.return_value = _make_resp(status_code=404)
        self.client.get_event_details("../venues/KovZpZAFnIEA?x=1")
        self.assertEqual(
            self.session.get.call_args.args[0],
            "https://api.example.com/discovery/v2/events/"
            "..%2Fvenues%2FKovZpZAFnIEA%3Fx%3D1.json",
        )

    def test_404_returns_none(self) -> None:
        """Unknown ids yield None instead of raising."""
        self.session.get.return_value = _make_resp(
            status_code=404,
            payload={"errors": [{"detail": "Resource not found"}]},
        )
        self.assertIsNone(self.client.get_event_details("nope"))

    def test_other_status_raises_api_error(self) -> None:
        """Non-404 failures are ApiError."""
        self.session.get.return_value = _make_resp(
            status_code=500,
            payload={"errors": [{"detail": "Internal error"}]},
        )
        with self.assertRaises(ApiError) as ctx:
            self.client.get_event_details("G5v")
        self.assertEqual(ctx.exception.status, 500)
        self.assertEqual(ctx.exception.message, "Internal error")

    def test_unreachable_endpoint_raises_network_error(self) -> None:
        """Connectivity failures on detail lookup are NetworkError."""
        self.session.get.side_effect = curl_requests.RequestsError(
            "Failed to connect",
        )
        with self.assertRaises(NetworkError):
            self.client.get_event_details("G5v")

    def test_empty_id_rejected(self) -> None:
        """An empty external id raises ValueError."""
        with self.assertRaises(ValueError):
            self.client.get_event_details("")


class TestClientLifecycle(unittest.TestCase):
    """Session ownership and spacing through the real limiter."""

    def test_context_manager_closes_session(self) -> None:
        """Leaving the with-block closes the HTTP session."""
        session = MagicMock()
        with TicketmasterClient("k", session=session) as client:
            self.assertIs(client.session, session)
        session.close.assert_called_once()

    def test_requests_are_spaced_by_limiter(self) -> None:
        """Request starts through the client are >= 200ms apart."""
        now = [0.0]
        starts: list[float] = []

        def fake_sleep(seconds: float) -> None:
            now[0] += seconds

        def fake_get(*args: Any, **kwargs: Any) -> MagicMock:
            starts.append(now[0])
            return _make_resp(payload={})

        session = MagicMock()
        session.get.side_effect = fake_get
        limiter = RateLimiter(
            min_interval=0.2,
            clock=lambda: now[0],
            sleep=fake_sleep,
        )
        client = TicketmasterClient(
            "k", rate_limiter=limiter, session=session,
        )
        for _ in range(5):
            client.search_events("concert")

        self.assertEqual(len(starts), 5)
        for a, b in zip(starts, starts[1:]):
            self.assertGreaterEqual(b - a, 0.2 - 1e-9)


if __name__ == "__main__":
    unittest.main()
