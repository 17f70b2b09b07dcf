# ticket_hawk/config/settings.py

"""Central configuration for the ticket_hawk pipeline."""

import os
from pathlib import Path

from dotenv import load_dotenv

from ticket_hawk.clients.errors import ConfigError

load_dotenv()


class Settings:
    """Central configuration for the ticket_hawk pipeline."""

    # --- Ticketmaster Discovery API ---
    TICKETMASTER_API_KEY: str = os.getenv("TICKETMASTER_API_KEY", "")
    TICKETMASTER_BASE_URL: str = os.getenv(
        "TICKETMASTER_BASE_URL",
        "https://app.ticketmaster.com/discovery/v2",
    )
    COUNTRY_CODE: str = "CA"            # Fixed country filter on search
    SEARCH_SORT: str = "date,asc"
    DEFAULT_CURRENCY: str = "CAD"       # Used when a price range omits it

    # --- Requests ---
    MIN_REQUEST_INTERVAL: float = 0.2   # Seconds between requests (5 req/s)
    REQUEST_TIMEOUT: int = 15           # Seconds before a request times out

    # --- Monitoring (reserved for alerting, not read by the pipeline) ---
    MONITOR_INTERVAL_MINUTES: int = 20
    PRICE_DROP_THRESHOLD: float = 0.10  # 10% drop

    # --- Paths ---
    BASE_DIR: Path = Path(__file__).resolve().parent.parent.parent
    DATA_DIR: Path = BASE_DIR / "data"
    DB_PATH: Path = Path(
        os.getenv("TICKET_HAWK_DB_PATH", str(DATA_DIR / "ticket-hawk.db"))
    )
    LOGS_DIR: Path = BASE_DIR / "logs"

    @classmethod
    def validate(cls) -> None:
        """Raise :class:`ConfigError` when required settings are missing."""
        if not cls.TICKETMASTER_API_KEY:
            raise ConfigError(
                "TICKETMASTER_API_KEY is required "
                "(set it in the environment or a .env file)"
            )
