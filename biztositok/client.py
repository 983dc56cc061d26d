"""
Client for the biztositok site API

Invokes API functions by POSTing form-encoded parameters to
``<endpoint>/api/run/<path>`` and wraps the decoded JSON reply in a Response.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, fields, replace
from typing import TYPE_CHECKING, Any

from .exceptions import ConfigurationError, DecodeError
from .http_client import HttpClient, default_http_client
from .logging_config import get_module_logger
from .request_builder import Credentials, build_request
from .response import Response

if TYPE_CHECKING:
    from .config import Config

logger = get_module_logger("client")

DEFAULT_USER_AGENT = "biztositok-python-1.0"


@dataclass(frozen=True)
class TransportOptions:
    """
    Transport settings used for every request

    Attributes:
        connect_timeout: Seconds to wait for the connection (default 10)
        timeout: Seconds to wait for the response (default 60)
        user_agent: User-Agent header value
        follow_redirects: Whether redirects are followed (default True)
        max_redirects: Maximum number of redirects followed (default 2)
        headers: Extra headers sent with every request
    """

    connect_timeout: float = 10
    timeout: float = 60
    user_agent: str = DEFAULT_USER_AGENT
    follow_redirects: bool = True
    max_redirects: int = 2
    headers: dict[str, str] = field(default_factory=dict)

    def merged(self, **overrides: Any) -> "TransportOptions":
        """
        Return a copy with some options overridden.

        Raises:
            ConfigurationError: If an option name is unknown
        """
        known = {f.name for f in fields(self)}
        unknown = sorted(set(overrides) - known)
        if unknown:
            raise ConfigurationError(
                f"unknown transport option(s): {', '.join(unknown)}", config_key="transport"
            )
        return replace(self, **overrides)


class Client:
    """
    Client to communicate with the site API

    Example:
        >>> client = Client({"api_endpoint": "https://example.com", "username": "u", "password": "p"})
        >>> response = client.invoke("/user/get", {"id": 5})
        >>> response.is_success()
        True
    """

    def __init__(
        self,
        config: Mapping[str, Any] | None = None,
        http_client: HttpClient | None = None,
        transport_options: TransportOptions | None = None,
    ):
        """
        Initialize an API client

        Args:
            config: Optional mapping with ``api_endpoint``, ``username`` and
                    ``password``. Each value can also be set later.
            http_client: Transport used for requests (uses default if None)
            transport_options: Timeouts, user agent and redirect policy
                               (uses TransportOptions defaults if None)

        Raises:
            ConfigurationError: If the transport cannot send requests
        """
        self.http_client = http_client or default_http_client
        self._check_requirements()

        config = config or {}
        self._api_endpoint: str | None = config.get("api_endpoint")
        self._credentials = Credentials(config.get("username"), config.get("password"))
        self._transport_options = transport_options or TransportOptions()

    @classmethod
    def from_config(
        cls, config_obj: "Config | None" = None, http_client: HttpClient | None = None
    ) -> "Client":
        """
        Create a client from the ``client`` and ``transport`` config sections

        Args:
            config_obj: Config object (uses global config if None)
            http_client: Transport used for requests (uses default if None)
        """
        if config_obj is None:
            from .config import config as config_obj

        options = TransportOptions().merged(**config_obj.transport)
        return cls(config_obj.client, http_client=http_client, transport_options=options)

    def _check_requirements(self):
        if not callable(getattr(self.http_client, "send", None)):
            raise ConfigurationError(
                f"{type(self.http_client).__name__} does not provide a send() method",
                config_key="http_client",
            )

    @property
    def api_endpoint(self) -> str | None:
        """Base URL of the API, e.g. ``http://example.com``."""
        return self._api_endpoint

    @api_endpoint.setter
    def api_endpoint(self, endpoint: str | None):
        self._api_endpoint = endpoint

    @property
    def username(self) -> str | None:
        return self._credentials.username

    @username.setter
    def username(self, username: str | None):
        self._credentials = replace(self._credentials, username=username)

    @property
    def password(self) -> str | None:
        return self._credentials.password

    @password.setter
    def password(self, password: str | None):
        self._credentials = replace(self._credentials, password=password)

    @property
    def credentials(self) -> Credentials:
        return self._credentials

    @property
    def transport_options(self) -> TransportOptions:
        return self._transport_options

    def set_transport_options(self, **overrides: Any) -> TransportOptions:
        """
        Override some transport options, keeping the others.

        Example:
            >>> client.set_transport_options(timeout=5, max_redirects=0)
        """
        self._transport_options = self._transport_options.merged(**overrides)
        return self._transport_options

    def invoke(
        self,
        path: str,
        params: Mapping[str, Any] | None = None,
        query: Mapping[str, Any] | None = None,
    ) -> Response:
        """
        Invoke an API function

        Args:
            path: Path of the invoked function (e.g. "/user/get")
            params: POST parameters, non-string values are sent as JSON text
            query: Optional query string parameters

        Returns:
            Response wrapping the decoded JSON reply

        Raises:
            ConfigurationError: If no API endpoint is set
            TransportError: If the request could not be completed
            DecodeError: If the reply is not valid JSON
        """
        if not self._api_endpoint:
            raise ConfigurationError("no API endpoint set", config_key="api_endpoint")

        options = self._transport_options
        request = build_request(
            self._api_endpoint, path, params, self._credentials, options, query=query
        )

        logger.debug(f"Invoking {request.url}")
        body = self.http_client.send("POST", request.url, request.headers, request.body, options)

        return Response(self._decode(body))

    @staticmethod
    def _decode(body: str) -> Any:
        """Decode a JSON reply; null is a valid payload, NaN and Infinity are not."""
        # Nesting deeper than the interpreter stack ends in RecursionError
        try:
            return json.loads(body, parse_constant=_reject_constant)
        except (ValueError, RecursionError) as e:
            logger.error(f"Invalid API response (json decode error): {e}")
            raise DecodeError(
                f"Invalid API response (json decode error): {e}", raw_response=body
            ) from e


def _reject_constant(name: str) -> Any:
    raise ValueError(f"non-standard JSON constant {name}")
