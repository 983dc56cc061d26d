"""HTTP transport for the API client, built on requests."""

from typing import TYPE_CHECKING

import requests

from .exceptions import DecodeError, TransportError
from .logging_config import get_module_logger

if TYPE_CHECKING:
    from .client import TransportOptions

logger = get_module_logger("http_client")

# curl error numbers, kept so failures read the same as in other clients
CURLE_UNSUPPORTED_PROTOCOL = 1
CURLE_URL_MALFORMAT = 3
CURLE_COULDNT_CONNECT = 7
CURLE_OPERATION_TIMEDOUT = 28
CURLE_TOO_MANY_REDIRECTS = 47


class HttpClient:
    """
    HTTP client wrapper for sending API requests.

    This abstraction enables:
    - Dependency injection for testing
    - Easy mocking in unit tests
    - Mapping of requests exceptions to TransportError
    """

    def send(
        self,
        method: str,
        url: str,
        headers: dict[str, str],
        body: str,
        options: "TransportOptions",
    ) -> str:
        """
        Send a request and return the response body.

        Args:
            method: HTTP method (e.g. "POST")
            url: URL to request
            headers: HTTP headers, an empty value removes the header
            body: Encoded request body
            options: Timeouts, user agent and redirect policy

        Returns:
            The response body decoded as UTF-8, whatever the HTTP status

        Raises:
            TransportError: If the request could not be completed
            DecodeError: If the body is not valid UTF-8
        """
        request_headers: dict[str, str | None] = {"User-Agent": options.user_agent}
        for name, value in headers.items():
            request_headers[name] = value if value != "" else None

        try:
            with requests.Session() as session:
                session.max_redirects = options.max_redirects
                response = session.request(
                    method,
                    url,
                    headers=request_headers,
                    data=body.encode("utf-8"),
                    timeout=(options.connect_timeout, options.timeout),
                    allow_redirects=options.follow_redirects,
                )
        except requests.exceptions.RequestException as e:
            code = _error_code(e)
            logger.error(f"Request to {url} failed: {e}")
            raise TransportError(str(e), code=code) from e

        if not response.ok:
            logger.warning(f"{method} {url} returned HTTP {response.status_code}")

        # JSON replies are UTF-8 whatever charset the Content-Type announces
        try:
            return response.content.decode("utf-8")
        except UnicodeDecodeError as e:
            logger.error(f"Response from {url} is not valid UTF-8: {e}")
            raise DecodeError(
                f"Invalid API response (not UTF-8): {e}",
                raw_response=response.content.decode("utf-8", errors="replace"),
            ) from e


def _error_code(error: requests.exceptions.RequestException) -> int:
    """Map a requests exception to a curl error number."""
    if isinstance(error, requests.exceptions.Timeout):
        return CURLE_OPERATION_TIMEDOUT
    if isinstance(error, requests.exceptions.TooManyRedirects):
        return CURLE_TOO_MANY_REDIRECTS
    if isinstance(error, requests.exceptions.InvalidSchema | requests.exceptions.MissingSchema):
        return CURLE_UNSUPPORTED_PROTOCOL
    if isinstance(error, requests.exceptions.InvalidURL):
        return CURLE_URL_MALFORMAT
    if isinstance(error, requests.exceptions.ConnectionError):
        return CURLE_COULDNT_CONNECT
    return 0


# Shared instance used when no transport is injected
default_http_client = HttpClient()
