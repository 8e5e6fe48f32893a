"""Tests for environment-driven configuration."""

from config import load_config


def test_defaults(monkeypatch):
    for name in ("WEB_PORT", "PORT", "DATABASE_PATH", "EMAIL_SERVICE", "SMTP_USER", "RATE_LIMIT_MAX", "TRUST_PROXY"):
        monkeypatch.delenv(name, raising=False)

    config = load_config()

    assert config.web_port == 3000
    assert config.database_path == "data/picker.sqlite"
    assert config.email_service is None
    assert config.smtp_user is None
    assert config.smtp_host == "smtp.ethereal.email"
    assert config.rate_limit_max == 20
    assert config.trust_proxy is False


def test_environment_overrides(monkeypatch):
    monkeypatch.delenv("WEB_PORT", raising=False)
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("EMAIL_SERVICE", " provider ")
    monkeypatch.setenv("SENDGRID_API_KEY", "SG.key")
    monkeypatch.setenv("TRUST_PROXY", "yes")
    monkeypatch.setenv("RATE_LIMIT_WINDOW", "2.5")

    config = load_config()

    assert config.web_port == 8080
    assert config.email_service == "provider"
    assert config.sendgrid_api_key == "SG.key"
    assert config.trust_proxy is True
    assert config.rate_limit_window == 2.5


def test_web_port_wins_over_port(monkeypatch):
    monkeypatch.setenv("PORT", "8080")
    monkeypatch.setenv("WEB_PORT", "9090")

    assert load_config().web_port == 9090


def test_malformed_numbers_fall_back(monkeypatch):
    monkeypatch.setenv("RATE_LIMIT_MAX", "lots")
    monkeypatch.setenv("PARTICIPANTS_CACHE_TTL", "")

    config = load_config()

    assert config.rate_limit_max == 20
    assert config.participants_cache_ttl == 0
