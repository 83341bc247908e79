import pytest

from wallet_gateway.core.config import Environment, Settings, split_csv


class TestSplitCsv:
    """Test parsing of comma-separated settings."""

    def test_splits_and_strips(self):
        assert split_csv(" https://a.example , https://b.example ") == [
            "https://a.example",
            "https://b.example",
        ]

    def test_drops_blanks_and_duplicates_keeping_order(self):
        assert split_csv("b,,a, b ,a,") == ["b", "a"]

    def test_empty(self):
        assert split_csv("") == []


class TestSettings:
    """Test computed settings."""

    @pytest.mark.parametrize(
        "environment, expected",
        [
            (Environment.LOCAL, False),
            (Environment.DEV, False),
            (Environment.STG, True),
            (Environment.PRD, True),
        ],
    )
    def test_is_production(self, environment: Environment, expected: bool):
        assert Settings(current_environment=environment).is_production is expected

    def test_dev_origin_added_outside_production(self):
        settings = Settings(
            current_environment=Environment.DEV,
            allowed_origins="https://site.example",
            dev_origin="http://localhost:3000",
        )

        assert settings.allowed_origins_list == ["https://site.example", "http://localhost:3000"]

    def test_dev_origin_excluded_in_production(self):
        settings = Settings(
            current_environment=Environment.PRD,
            allowed_origins="https://site.example,https://www.site.example",
        )

        assert settings.allowed_origins_list == ["https://site.example", "https://www.site.example"]

    def test_dev_origin_not_duplicated(self):
        settings = Settings(
            current_environment=Environment.LOCAL,
            allowed_origins="http://localhost:3000,https://site.example",
            dev_origin="http://localhost:3000",
        )

        assert settings.allowed_origins_list.count("http://localhost:3000") == 1

    def test_allowed_return_urls_list(self):
        settings = Settings(allowed_return_urls="https://site.example, https://site.example")

        assert settings.allowed_return_urls_list == ["https://site.example"]

    def test_defaults(self):
        settings = Settings(_env_file=None)

        assert settings.session_ttl_seconds == 7200
        assert settings.session_cookie_name == "wallet_session"
        assert settings.csrf_cookie_name == "csrf_token"
        assert settings.rate_limit_capacity == 10
        assert settings.rate_limit_fill_rate == 1
        assert settings.rate_limit_prune_interval_seconds == 60
        assert settings.trusted_proxies_list == ["127.0.0.1"]
        assert settings.app_name == "wallet-session-gateway"

    def test_session_secret_is_masked(self):
        settings = Settings(session_secret="very-secret")

        assert "very-secret" not in repr(settings)
        assert settings.session_secret is not None
        assert settings.session_secret.get_secret_value() == "very-secret"

    def test_trusted_proxies_list(self):
        settings = Settings(trusted_proxies="10.0.0.0/8, 127.0.0.1,")

        assert settings.trusted_proxies_list == ["10.0.0.0/8", "127.0.0.1"]

    def test_trusted_proxies_can_be_empty(self):
        assert Settings(trusted_proxies="").trusted_proxies_list == []
