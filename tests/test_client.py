"""
Tests for client.py - API invocation

Tests cover:
- Construction and configuration plumbing
- Transport option defaults and merging
- invoke() request delegation
- Error mapping for transport and decode failures
- Real failure against an unreachable endpoint
- Real UTF-8 reply from a local server
"""

import json
import threading
from http.server import BaseHTTPRequestHandler, HTTPServer
from unittest.mock import Mock
from urllib.parse import parse_qs

import pytest

from biztositok import Client, Response, TransportOptions
from biztositok.config import Config
from biztositok.exceptions import ConfigurationError, DecodeError, TransportError


class TestConstruction:
    """Test client construction and accessors"""

    def test_constructor(self, client_config):
        """Should take endpoint and credentials from the config mapping"""
        client = Client(client_config, http_client=Mock())

        assert client.api_endpoint == "http://example.com"
        assert client.username == "test"
        assert client.password == "1234567"

    def test_constructor_without_config(self):
        """Should allow all values to be set later"""
        client = Client(http_client=Mock())

        assert client.api_endpoint is None
        assert client.username is None
        assert client.password is None

    def test_setters(self):
        """Should update endpoint and credentials"""
        client = Client(http_client=Mock())

        client.api_endpoint = "https://example.org"
        client.username = "user"
        client.password = "secret"

        assert client.api_endpoint == "https://example.org"
        assert client.credentials.username == "user"
        assert client.credentials.password == "secret"

    def test_transport_without_send_rejected(self):
        """Should fail at construction when the transport cannot send"""
        with pytest.raises(ConfigurationError) as exc_info:
            Client(http_client=object())

        assert exc_info.value.config_key == "http_client"

    def test_from_config(self, test_config_dict, mock_http_client):
        """Should read client and transport sections"""
        client = Client.from_config(Config(test_config_dict), http_client=mock_http_client)

        assert client.api_endpoint == "https://api.example.com"
        assert client.username == "config-user"
        assert client.password == "config-pass"
        assert client.transport_options.timeout == 30
        assert client.transport_options.max_redirects == 5
        assert client.transport_options.user_agent == "Test/1.0"
        assert client.transport_options.connect_timeout == 10

    def test_from_config_unknown_transport_option(self, mock_http_client):
        """Should reject unknown transport options from the config"""
        config_obj = Config({"transport": {"retries": 3}})

        with pytest.raises(ConfigurationError, match="retries"):
            Client.from_config(config_obj, http_client=mock_http_client)


class TestTransportOptions:
    """Test transport option defaults and overrides"""

    def test_defaults(self):
        options = TransportOptions()

        assert options.connect_timeout == 10
        assert options.timeout == 60
        assert options.follow_redirects is True
        assert options.max_redirects == 2
        assert options.user_agent == "biztositok-python-1.0"
        assert options.headers == {}

    def test_overrides_merge_into_current(self, client):
        """Should change only the given options"""
        client.set_transport_options(timeout=5)
        client.set_transport_options(max_redirects=0)

        assert client.transport_options.timeout == 5
        assert client.transport_options.max_redirects == 0
        assert client.transport_options.connect_timeout == 10

    def test_unknown_option_rejected(self, client):
        with pytest.raises(ConfigurationError):
            client.set_transport_options(verify_ssl=False)


class TestInvoke:
    """Test invoke() request and response handling"""

    def test_invoke_success(self, client, mock_http_client):
        """Should POST the built request and wrap the decoded reply"""
        response = client.invoke("/test", {"id": 5})

        assert isinstance(response, Response)
        assert response.is_success()
        assert response.message() == "OK"

        method, url, headers, body, options = mock_http_client.send.call_args[0]
        assert method == "POST"
        assert url == "http://example.com/api/run/test"
        assert headers["Expect"] == ""
        assert options is client.transport_options

        fields = parse_qs(body)
        assert fields["id"] == ["5"]
        assert json.loads(fields["auth"][0]) == {"username": "test", "password": "1234567"}

    def test_invoke_with_query(self, client, mock_http_client):
        client.invoke("list", query={"page": 2})

        url = mock_http_client.send.call_args[0][1]
        assert url == "http://example.com/api/run/list?page=2"

    def test_invoke_uses_current_settings(self, client, mock_http_client):
        """Should build each request from the latest endpoint and credentials"""
        client.api_endpoint = "http://other.example.com/"
        client.password = "changed"

        client.invoke("test")

        _, url, _, body, _ = mock_http_client.send.call_args[0]
        assert url == "http://other.example.com/api/run/test"
        assert json.loads(parse_qs(body)["auth"][0])["password"] == "changed"

    def test_invoke_without_endpoint(self, mock_http_client):
        """Should fail before sending when no endpoint is set"""
        client = Client(http_client=mock_http_client)

        with pytest.raises(ConfigurationError) as exc_info:
            client.invoke("/test")

        assert exc_info.value.config_key == "api_endpoint"
        mock_http_client.send.assert_not_called()

    def test_transport_error_propagated(self, client, mock_http_client):
        """Should surface transport failures with their code"""
        mock_http_client.send.side_effect = TransportError("Connection refused", code=7)

        with pytest.raises(TransportError) as exc_info:
            client.invoke("/test")

        assert exc_info.value.code == 7
        assert exc_info.value.message == "Connection refused"
        mock_http_client.send.assert_called_once()

    @pytest.mark.parametrize("body", ["not json", "", "{", "[1, 2", "NaN", '{"value": Infinity}'])
    def test_invalid_json_raises_decode_error(self, client, mock_http_client, body):
        """Should raise DecodeError for bodies that are not valid JSON"""
        mock_http_client.send.return_value = body

        with pytest.raises(DecodeError) as exc_info:
            client.invoke("/test")

        assert exc_info.value.raw_response == body

    @pytest.mark.parametrize("body", ["[" * 100000, '{"a":' * 100000], ids=["array", "object"])
    def test_deeply_nested_body_raises_decode_error(self, client, mock_http_client, body):
        """Should raise DecodeError when nesting exceeds the decoder's depth"""
        mock_http_client.send.return_value = body

        with pytest.raises(DecodeError):
            client.invoke("/test")

    def test_json_null_is_valid(self, client, mock_http_client):
        """Should wrap a literal null reply instead of failing"""
        mock_http_client.send.return_value = "null"

        response = client.invoke("/test")

        assert response.payload is None
        assert not response.is_success()

    def test_echoed_nested_params_round_trip(self, client, mock_http_client):
        """Should send nested values that decode back to the same structure"""
        nested = {"user": {"name": "Test", "tags": ["a", "b"], "zip": 1234}}

        def echo(method, url, headers, body, options):
            fields = parse_qs(body)
            return json.dumps({"success": 1, "echo": json.loads(fields["data"][0])})

        mock_http_client.send.side_effect = echo

        response = client.invoke("echo", {"data": nested})

        assert response.get("echo") == nested
        assert response.get("echo.user.tags") == ["a", "b"]


class TestUnreachableEndpoint:
    """Test a real request against a closed local port"""

    def test_unreachable_endpoint_raises_transport_error(self):
        """Should raise TransportError instead of returning a Response"""
        client = Client(
            {
                "api_endpoint": "http://127.0.0.1:9999",
                "username": "test",
                "password": "1234567",
            }
        )
        client.set_transport_options(connect_timeout=2, timeout=5)

        with pytest.raises(TransportError) as exc_info:
            client.invoke("/test")

        assert exc_info.value.code in (7, 28)


@pytest.fixture
def local_server():
    """Local HTTP server answering every POST with a UTF-8 body labelled text/html"""

    class Handler(BaseHTTPRequestHandler):
        def do_POST(self):
            self.rfile.read(int(self.headers.get("Content-Length", 0)))
            body = '{"success": 1, "message": "Sikeres mentés"}'.encode()
            self.send_response(200)
            self.send_header("Content-Type", "text/html")
            self.send_header("Content-Length", str(len(body)))
            self.end_headers()
            self.wfile.write(body)

        def log_message(self, format, *args):
            pass

    server = HTTPServer(("127.0.0.1", 0), Handler)
    thread = threading.Thread(target=server.serve_forever, daemon=True)
    thread.start()
    yield f"http://127.0.0.1:{server.server_port}"
    server.shutdown()
    server.server_close()


class TestLocalServer:
    """Test real requests against a local server"""

    def test_utf8_reply_without_charset(self, local_server):
        """Should decode accented text correctly when no charset is announced"""
        client = Client({"api_endpoint": local_server, "username": "test", "password": "x"})
        client.set_transport_options(connect_timeout=2, timeout=5)

        response = client.invoke("/save")

        assert response.is_success()
        assert response.message() == "Sikeres mentés"
