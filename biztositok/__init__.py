"""
Python client for the biztositok site API
"""

from .client import Client, TransportOptions
from .exceptions import BiztositokError, ConfigurationError, DecodeError, TransportError
from .http_client import HttpClient
from .request_builder import Credentials, RequestSpec, build_request
from .response import Response

__version__ = "1.0.0"

__all__ = [
    "BiztositokError",
    "Client",
    "ConfigurationError",
    "Credentials",
    "DecodeError",
    "HttpClient",
    "RequestSpec",
    "Response",
    "TransportError",
    "TransportOptions",
    "build_request",
]
