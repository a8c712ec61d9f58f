"""Error types shared by the client, the configuration layer and the UI."""


class FfiiiError(RuntimeError):
    """Base class for errors raised by ffiii-tui."""


class APIError(FfiiiError):
    """The Firefly III API answered with a non-success status."""

    def __init__(self, status: int, message: str):
        super().__init__(message)
        self.status = status
        self.message = message


class ConfigError(FfiiiError):
    """Missing or malformed configuration."""


def http_error(status: int) -> str:
    """Return message for a response without an API error body."""
    return f"HTTP error: {status}"
