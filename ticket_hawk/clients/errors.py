# ticket_hawk/clients/errors.py

"""Error types raised by the configuration layer and the API client."""


class ConfigError(RuntimeError):
    """Required configuration is missing or invalid."""


class NetworkError(RuntimeError):
    """The API could not be reached (DNS, connect, TLS, timeout)."""


class ApiError(RuntimeError):
    """The API answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(f"Ticketmaster API error {status}: {message}")
        self.status = status
        self.message = message
