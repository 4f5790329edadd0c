"""EmailSender without an SMTP relay."""
import pytest

from api.config import DevelopmentConfig, ProductionConfig, TestingConfig
from tests.conftest import PASSWORD
from utils.mailer import EmailSender, NotificationError


def _settings(config_cls, **overrides):
    settings = {name: getattr(config_cls, name) for name in dir(config_cls) if name.isupper()}
    settings.update(overrides)
    return settings


def test_unconfigured_sender_fails_outside_debug_and_testing():
    sender = EmailSender.from_config(_settings(ProductionConfig, SMTP_HOST=None))

    assert sender.log_only is False
    with pytest.raises(NotificationError):
        sender.send("alice@example.com", "Código de Verificação", "123456")


@pytest.mark.parametrize("config_cls", [DevelopmentConfig, TestingConfig])
def test_unconfigured_sender_logs_in_debug_and_testing(config_cls, caplog):
    sender = EmailSender.from_config(_settings(config_cls, SMTP_HOST=None))

    with caplog.at_level("INFO", logger="utils.mailer"):
        sender.send("alice@example.com", "Código de Verificação", "Seu código é 123456")

    assert sender.log_only is True
    assert "al***@example.com" in caplog.text
    assert "123456" not in caplog.text


def test_mfa_login_without_relay_is_an_error(app, login, mfa_user):
    app.extensions["mailer"] = EmailSender.from_config(_settings(ProductionConfig, SMTP_HOST=None))

    resp = login("mfa_user", PASSWORD)

    assert resp.status_code == 500
    assert "requireMfa" not in resp.get_json()


def test_reset_request_without_relay_keeps_generic_answer(app, client, alice):
    app.extensions["mailer"] = EmailSender.from_config(_settings(ProductionConfig, SMTP_HOST=None))

    resp = client.post("/api/auth/password/reset-request", json={"email": "alice@example.com"})

    assert resp.status_code == 200
    assert resp.get_json()["message"].startswith("Se o e-mail estiver cadastrado")
