from unittest.mock import MagicMock, patch

import pytest
from fastapi import Request

from wallet_gateway.core.config import Environment
from wallet_gateway.core.utils import (
    get_client_ip,
    is_trusted_proxy,
    mask_token,
    validate_content_type,
)


def make_request(headers: dict | None = None, host: str | None = "10.0.0.5") -> MagicMock:
    request = MagicMock(spec=Request)
    request.headers = headers or {}
    request.client = MagicMock(host=host) if host else None
    return request


class TestGetClientIp:
    """Test get_client_ip function."""

    @pytest.fixture
    def mock_settings(self):
        with patch("wallet_gateway.core.utils.settings") as mock_settings:
            mock_settings.current_environment = Environment.PRD
            mock_settings.trusted_proxies_list = ["10.0.0.0/8"]
            yield mock_settings

    def test_local_environment_returns_localhost(self, mock_settings: MagicMock):
        """Test that all local requests share one identity."""
        mock_settings.current_environment = Environment.LOCAL

        assert get_client_ip(make_request()) == "localhost"

    def test_untrusted_peer_ignores_forwarded_headers(self, mock_settings: MagicMock):
        """Test that a direct client cannot pick its own identity."""
        request = make_request(
            headers={"X-Forwarded-For": "203.0.113.7", "X-Real-IP": "203.0.113.8"},
            host="198.51.100.20",
        )

        assert get_client_ip(request) == "198.51.100.20"

    def test_no_trusted_proxies_uses_peer(self, mock_settings: MagicMock):
        mock_settings.trusted_proxies_list = []
        request = make_request(headers={"X-Forwarded-For": "203.0.113.7"})

        assert get_client_ip(request) == "10.0.0.5"

    def test_trusted_proxy_forwarded_for(self, mock_settings: MagicMock):
        request = make_request(headers={"X-Forwarded-For": "203.0.113.7"})

        assert get_client_ip(request) == "203.0.113.7"

    def test_forwarded_for_rightmost_untrusted_hop(self, mock_settings: MagicMock):
        """Test that hops the client prepended are skipped."""
        request = make_request(
            headers={"X-Forwarded-For": "1.2.3.4, 203.0.113.7, 10.0.0.2, 10.0.0.3"}
        )

        assert get_client_ip(request) == "203.0.113.7"

    def test_forwarded_for_all_trusted_uses_first_hop(self, mock_settings: MagicMock):
        request = make_request(headers={"X-Forwarded-For": "10.1.1.1, 10.0.0.2"})

        assert get_client_ip(request) == "10.1.1.1"

    def test_real_ip_from_trusted_proxy(self, mock_settings: MagicMock):
        mock_settings.current_environment = Environment.STG
        request = make_request(headers={"X-Real-IP": " 198.51.100.2 "})

        assert get_client_ip(request) == "198.51.100.2"

    def test_falls_back_to_client_host(self, mock_settings: MagicMock):
        mock_settings.current_environment = Environment.DEV

        assert get_client_ip(make_request()) == "10.0.0.5"

    def test_unknown_client(self, mock_settings: MagicMock):
        request = make_request(headers={"X-Forwarded-For": "203.0.113.7"}, host=None)

        assert get_client_ip(request) == "unknown"


class TestIsTrustedProxy:
    """Test is_trusted_proxy function."""

    @pytest.mark.parametrize(
        "host, trusted, expected",
        [
            ("127.0.0.1", ["127.0.0.1"], True),
            ("10.20.30.40", ["10.0.0.0/8"], True),
            ("::1", ["::1"], True),
            ("11.0.0.1", ["10.0.0.0/8"], False),
            ("127.0.0.1", [], False),
            ("testclient", ["127.0.0.1"], False),
            (None, ["127.0.0.1"], False),
            ("127.0.0.1", ["not-a-network", "127.0.0.1"], True),
        ],
    )
    def test_matching(self, host: str | None, trusted: list[str], expected: bool):
        assert is_trusted_proxy(host, trusted) is expected


class TestValidateContentType:
    """Test validate_content_type function."""

    @pytest.mark.parametrize(
        "content_type",
        ["application/json", "application/json; charset=utf-8", "Application/JSON"],
    )
    def test_json_accepted(self, content_type: str):
        assert validate_content_type(content_type) is True

    @pytest.mark.parametrize(
        "content_type",
        [None, "", "text/plain", "application/x-www-form-urlencoded", "application/jsonp"],
    )
    def test_others_rejected(self, content_type: str | None):
        assert validate_content_type(content_type) is False

    def test_custom_allowed_types(self):
        assert validate_content_type("text/plain", ("text/plain",)) is True


class TestMaskToken:
    def test_short_token_unchanged(self):
        assert mask_token("abc") == "abc"

    def test_long_token_truncated(self):
        token = "x" * 64

        assert mask_token(token) == "x" * 20 + "..."

    def test_custom_visible_length(self):
        assert mask_token("abcdefgh", visible=4) == "abcd..."
