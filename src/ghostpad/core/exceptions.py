"""Custom exceptions for Ghostpad."""


class GhostpadError(Exception):
    """Base exception for all Ghostpad errors."""


class ConfigError(GhostpadError):
    """Configuration error."""


class CredentialError(GhostpadError):
    """API key missing or keyring failure."""


class DocumentError(GhostpadError):
    """Invalid document edit or inconsistent document state."""


class GatewayError(GhostpadError):
    """Completion request failed.

    ``response`` carries the upstream payload when there was one, for display.
    """

    status_code = 500

    def __init__(self, message: str = "", response: dict | None = None) -> None:
        super().__init__(message)
        self.response = response


class AuthenticationError(GatewayError):
    """Shared password did not match."""

    status_code = 401


class InvalidSuffixError(GatewayError):
    """Missing or empty text to complete."""

    status_code = 400


class CompletionParseError(GatewayError):
    """Upstream answered, but not with a usable completion."""


class UpstreamError(GatewayError):
    """Network or API error talking to the completion backend."""
