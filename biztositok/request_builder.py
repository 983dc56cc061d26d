"""
Request building for the biztositok API

Turns an endpoint, a function path, parameters and credentials into the URL,
headers and form-encoded body of a POST request. Nothing here touches the
network.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any
from urllib.parse import urlencode

if TYPE_CHECKING:
    from .client import TransportOptions

API_ROUTE = "api/run/"

FORM_CONTENT_TYPE = "application/x-www-form-urlencoded"


@dataclass(frozen=True)
class Credentials:
    """Username and password sent with every request in the ``auth`` field."""

    username: str | None = None
    password: str | None = None

    def as_dict(self) -> dict[str, str | None]:
        return {"username": self.username, "password": self.password}


@dataclass(frozen=True)
class RequestSpec:
    """A fully built request, ready for the transport."""

    url: str
    headers: dict[str, str] = field(default_factory=dict)
    body: str = ""


def build_url(endpoint: str, path: str = "", query: Mapping[str, Any] | None = None) -> str:
    """
    Build the URL of an API function

    Args:
        endpoint: Base URL of the API, with or without a trailing slash
        path: Function path, a single leading slash is ignored
        query: Optional query parameters appended after "?"

    Returns:
        e.g. "http://example.com/api/run/user/get?id=5"
    """
    url = endpoint + ("" if endpoint.endswith("/") else "/") + API_ROUTE

    if path:
        if path.startswith("/"):
            path = path[1:]
        url += path

    if query:
        url += "?" + encode_form(query)

    return url


def prepare_params(params: Mapping[str, Any] | None, credentials: Credentials) -> dict[str, str]:
    """
    Prepare the POST parameters of an API call

    The ``auth`` entry always carries the client credentials, replacing any
    value given by the caller. Values that are not strings are sent as JSON
    text, so the result is a flat string mapping.
    """
    prepared = dict(params or {})
    prepared["auth"] = credentials.as_dict()

    for key, value in prepared.items():
        if not isinstance(value, str):
            prepared[key] = json.dumps(value, separators=(",", ":"))

    return prepared


def encode_form(params: Mapping[str, Any]) -> str:
    """
    Encode parameters as application/x-www-form-urlencoded

    Nested mappings and lists are flattened with bracket notation
    (``a[b]=1``, ``a[0]=x``). None values are left out and booleans become
    1/0.
    """
    pairs: list[tuple[str, str]] = []
    for key, value in params.items():
        _flatten(str(key), value, pairs)
    return urlencode(pairs)


def _flatten(key: str, value: Any, pairs: list[tuple[str, str]]) -> None:
    if value is None:
        return
    if isinstance(value, Mapping):
        for sub_key, sub_value in value.items():
            _flatten(f"{key}[{sub_key}]", sub_value, pairs)
    elif isinstance(value, (list, tuple)):
        for index, item in enumerate(value):
            _flatten(f"{key}[{index}]", item, pairs)
    elif isinstance(value, bool):
        pairs.append((key, "1" if value else "0"))
    else:
        pairs.append((key, str(value)))


def build_headers(extra_headers: Mapping[str, str] | None = None) -> dict[str, str]:
    """
    Build the request headers

    Caller headers are kept. ``Expect`` is always emptied, which tells the
    transport not to send ``Expect: 100-continue`` with the body.
    """
    headers = dict(extra_headers or {})

    if not any(name.lower() == "content-type" for name in headers):
        headers["Content-Type"] = FORM_CONTENT_TYPE

    for name in [name for name in headers if name.lower() == "expect"]:
        del headers[name]
    headers["Expect"] = ""

    return headers


def build_request(
    endpoint: str,
    path: str,
    params: Mapping[str, Any] | None,
    credentials: Credentials,
    options: "TransportOptions | None" = None,
    query: Mapping[str, Any] | None = None,
) -> RequestSpec:
    """
    Build the POST request for an API function call

    Args:
        endpoint: Base URL of the API
        path: Function path (e.g. "/user/get")
        params: POST parameters
        credentials: Credentials injected as the ``auth`` parameter
        options: Transport options, only their extra headers are used here
        query: Optional query string parameters

    Returns:
        RequestSpec with url, headers and encoded body
    """
    extra_headers = options.headers if options is not None else None

    return RequestSpec(
        url=build_url(endpoint, path, query),
        headers=build_headers(extra_headers),
        body=encode_form(prepare_params(params, credentials)),
    )
