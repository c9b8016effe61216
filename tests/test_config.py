import pytest
from pydantic import ValidationError

from core.config import AppSettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in (
        "LINODE_TOKEN",
        "NODEBALANCER_ID",
        "PORT",
        "CERT_WEBHOOK_LINODE_TOKEN",
        "CERT_WEBHOOK_NODEBALANCER_ID",
        "CERT_WEBHOOK_PORT",
        "CERT_WEBHOOK_RETRY_MAX_ATTEMPTS",
    ):
        monkeypatch.delenv(name, raising=False)


def test_defaults(settings: AppSettings) -> None:
    assert settings.retry_max_attempts == 3
    assert settings.retry_base_delay_seconds == 0.5
    assert settings.http_connect_timeout_seconds == 10.0
    assert settings.http_timeout_seconds == 30.0
    assert settings.port == 8080
    assert settings.linode_api_url == "https://api.linode.com/v4"


def test_unprefixed_variables(monkeypatch) -> None:
    monkeypatch.setenv("LINODE_TOKEN", "tok")
    monkeypatch.setenv("NODEBALANCER_ID", "42")
    monkeypatch.setenv("PORT", "9000")

    settings = AppSettings(_env_file=None)

    assert (settings.linode_token, settings.nodebalancer_id, settings.port) == ("tok", "42", 9000)


def test_prefixed_variables(monkeypatch) -> None:
    monkeypatch.setenv("CERT_WEBHOOK_LINODE_TOKEN", "tok")
    monkeypatch.setenv("CERT_WEBHOOK_NODEBALANCER_ID", "42")
    monkeypatch.setenv("CERT_WEBHOOK_RETRY_MAX_ATTEMPTS", "5")

    settings = AppSettings(_env_file=None)

    assert settings.nodebalancer_id == "42"
    assert settings.retry_max_attempts == 5


def test_token_is_required() -> None:
    with pytest.raises(ValidationError):
        AppSettings(nodebalancer_id="42", _env_file=None)


def test_settings_are_immutable(settings: AppSettings) -> None:
    with pytest.raises(ValidationError):
        settings.nodebalancer_id = "other"  # type: ignore[misc]
