"""
Custom exceptions for the biztositok API client
"""


class BiztositokError(Exception):
    """Base exception for all biztositok client errors"""

    pass


class ConfigurationError(BiztositokError):
    """
    Raised when the client cannot work with its current configuration.

    This includes:
    - A transport that does not provide the send capability
    - Missing required values (e.g. no API endpoint set before invoking)
    - Unknown transport option names
    """

    def __init__(self, message: str, config_key: str | None = None):
        self.config_key = config_key
        if config_key:
            super().__init__(f"Configuration error for '{config_key}': {message}")
        else:
            super().__init__(f"Configuration error: {message}")


class TransportError(BiztositokError):
    """
    Raised when the HTTP request could not be completed.

    Covers refused connections, DNS failures, timeouts, redirect loops and
    requests that could not be built. The code follows the curl error numbering
    so callers can tell the failure classes apart.
    """

    def __init__(self, message: str, code: int = 0):
        self.code = code
        self.message = message
        super().__init__(f"Transport error [{code}]: {message}")


class DecodeError(BiztositokError):
    """
    Raised when the API response body is not a valid JSON document.

    The raw body is kept for debugging.
    """

    def __init__(self, message: str, raw_response: str | None = None):
        self.raw_response = raw_response
        super().__init__(message)
