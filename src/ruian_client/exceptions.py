"""
Výjimky RUIAN klienta.

Všechny chyby dědí z RuianError, takže volající může zachytit jednu třídu
nebo rozlišovat podle druhu chyby.
"""

DEFAULT_RATE_LIMIT = 1000


class RuianError(Exception):
    """Základní výjimka pro RUIAN API."""


class RuianConnectionError(RuianError):
    """Nepodařilo se spojit s API (DNS, odmítnuté spojení, TLS, timeout)."""

    def __init__(self, message: str = "Failed to connect to RUIAN API"):
        super().__init__(message)


class RuianAuthError(RuianError):
    """Neplatný API klíč (HTTP 401)."""

    def __init__(self, message: str = "Invalid API key"):
        super().__init__(message)


class RuianRateLimitError(RuianError):
    """Překročen limit požadavků (HTTP 429)."""

    def __init__(self, message: str | None = None, limit: int = DEFAULT_RATE_LIMIT):
        self.limit = limit
        super().__init__(message or f"Rate limit exceeded ({limit} requests/hour)")


class RuianAPIError(RuianError):
    """Chyba komunikace s API nebo nečitelná odpověď."""

    @classmethod
    def missing_parameters(cls) -> "RuianAPIError":
        return cls("Missing required parameters")

    @classmethod
    def server_error(cls) -> "RuianAPIError":
        return cls("RUIAN API server error")

    @classmethod
    def unexpected_status(cls, status_code: int) -> "RuianAPIError":
        return cls(f"Unexpected HTTP status: {status_code}")

    @classmethod
    def invalid_json(cls, error: str) -> "RuianAPIError":
        return cls(f"Invalid JSON response: {error}")

    @classmethod
    def invalid_payload(cls, error: str) -> "RuianAPIError":
        return cls(f"Invalid API payload: {error}")


class RuianValidationError(RuianError):
    """Neplatné vstupní parametry zachycené ještě před voláním API."""
