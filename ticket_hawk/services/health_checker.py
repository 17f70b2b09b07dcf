# ticket_hawk/services/health_checker.py

"""Discovery API connectivity health check."""

import logging
import time
from dataclasses import dataclass

from ticket_hawk.clients.ticketmaster_client import TicketmasterClient
from ticket_hawk.config.settings import Settings

logger = logging.getLogger("ticket_hawk.health")

_HEALTH_TIMEOUT = 10  # seconds
_SLOW_THRESHOLD_MS = 5000


@dataclass
class HealthResult:
    """Result of a single API health probe."""

    endpoint: str
    status: str  # "ok", "slow", "down"
    latency_ms: float
    message: str


def probe_api(client: TicketmasterClient) -> HealthResult:
    """Issue one minimal search request and classify the outcome."""
    endpoint = f"{client.base_url}/events.json"
    client.rate_limiter.wait()
    start = time.monotonic()
    try:
        resp = client.session.get(
            endpoint,
            params={
                "apikey": client.api_key,
                "countryCode": Settings.COUNTRY_CODE,
                "size": "1",
            },
            timeout=_HEALTH_TIMEOUT,
        )
        elapsed_ms = (time.monotonic() - start) * 1000

        if resp.status_code != 200:
            result = HealthResult(
                endpoint=endpoint,
                status="down",
                latency_ms=elapsed_ms,
                message=f"HTTP {resp.status_code}",
            )
        elif elapsed_ms > _SLOW_THRESHOLD_MS:
            result = HealthResult(
                endpoint=endpoint,
                status="slow",
                latency_ms=elapsed_ms,
                message="High latency",
            )
        else:
            result = HealthResult(
                endpoint=endpoint,
                status="ok",
                latency_ms=elapsed_ms,
                message="",
            )
    except Exception as exc:
        elapsed_ms = (time.monotonic() - start) * 1000
        result = HealthResult(
            endpoint=endpoint,
            status="down",
            latency_ms=elapsed_ms,
            message=str(exc)[:80],
        )

    logger.info(
        "Health check %s: %s (%.0fms) %s",
        result.endpoint,
        result.status,
        result.latency_ms,
        result.message,
    )
    return result
