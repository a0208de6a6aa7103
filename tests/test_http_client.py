"""Tests for the shared HTTP helper."""

from unittest.mock import Mock, patch

import pytest
import requests

from crategate.common.http_client import get_text
from crategate.constants import Constants
from crategate.errors import RemoteFetchError

URL = "https://raw.githubusercontent.com/o/r/master/Cargo.toml"


def _response(status_code=200, content=b'[package]\nname = "r"\n'):
    resp = Mock()
    resp.status_code = status_code
    resp.content = content
    return resp


@pytest.fixture(autouse=True)
def no_proxy_env(monkeypatch):
    """Keep proxy settings of the host out of the tests."""
    for var in ("HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY", "NO_PROXY",
                "http_proxy", "https_proxy", "all_proxy", "no_proxy"):
        monkeypatch.delenv(var, raising=False)


class TestGetText:
    """Test get_text success and failure handling."""

    @patch("crategate.common.http_client.requests.get")
    def test_success_uses_timeout(self, mock_get):
        mock_get.return_value = _response()
        assert get_text(URL, context="test") == '[package]\nname = "r"\n'
        assert mock_get.call_args.kwargs["timeout"] == Constants.REQUEST_TIMEOUT
        assert Constants.REQUEST_TIMEOUT == 10

    @patch("crategate.common.http_client.requests.get")
    def test_proxy_from_environment(self, mock_get, monkeypatch):
        monkeypatch.setenv("HTTPS_PROXY", "http://proxy.local:3128")
        monkeypatch.setenv("https_proxy", "http://proxy.local:3128")
        mock_get.return_value = _response()

        get_text(URL, context="test")

        assert mock_get.call_args.kwargs["proxies"]["https"] == "http://proxy.local:3128"

    @patch("crategate.common.http_client.requests.get")
    def test_non_success_status(self, mock_get):
        mock_get.return_value = _response(status_code=404, content=b"Not Found")
        with pytest.raises(RemoteFetchError) as excinfo:
            get_text(URL, context="test")
        assert excinfo.value.url == URL
        assert "404" in excinfo.value.cause

    @patch("crategate.common.http_client.requests.get")
    def test_connection_error(self, mock_get):
        mock_get.side_effect = requests.ConnectionError("connection refused")
        with pytest.raises(RemoteFetchError) as excinfo:
            get_text(URL, context="test")
        assert excinfo.value.url == URL
        assert "connection refused" in excinfo.value.cause
        assert URL in str(excinfo.value)

    @patch("crategate.common.http_client.requests.get")
    def test_timeout(self, mock_get):
        mock_get.side_effect = requests.Timeout()
        with pytest.raises(RemoteFetchError) as excinfo:
            get_text(URL, context="test")
        assert "timed out" in excinfo.value.cause

    @patch("crategate.common.http_client.requests.get")
    def test_invalid_utf8(self, mock_get):
        mock_get.return_value = _response(content=b"\xff\xfe\xfa")
        with pytest.raises(RemoteFetchError):
            get_text(URL, context="test")
