"""Tests for email transports and their start-up selection."""

from dataclasses import replace
from unittest.mock import AsyncMock, MagicMock, patch

import aiosmtplib
import pytest
import requests

from core.exceptions import ConfigurationError
from services import ConsoleNotifier, Notifier, ProviderNotifier, TestNotifier, create_notifier
from services.email_templates import render_results_email, render_winner_email


def test_console_notifier_logs_and_keeps_outbox(caplog):
    notifier = ConsoleNotifier(outbox_size=2)

    with caplog.at_level("INFO", logger="services.notifier"):
        result = notifier.send("a@x.com", "Hello", "<p>" + "x" * 500 + "</p>")
        notifier.send("b@x.com", "Hello", "<p>b</p>")
        notifier.send("c@x.com", "Hello", "<p>c</p>")

    assert result.delivered is True
    assert result.service == "console"
    assert [message.to for message in notifier.outbox] == ["b@x.com", "c@x.com"]
    assert "[EMAIL PREVIEW] To: a@x.com" in caplog.text
    assert "x" * 250 not in caplog.text


def _smtp_client(response="250 Accepted [STATUS=new MSGID=YWJjZGVm.qwerty]", refused=None):
    smtp = MagicMock()
    smtp.is_connected = False
    for name in ("connect", "starttls", "login", "quit"):
        setattr(smtp, name, AsyncMock())
    smtp.send_message = AsyncMock(return_value=(refused or {}, response))
    return smtp


@patch("services.notifier.aiosmtplib.SMTP")
def test_test_notifier_sends_over_smtp(smtp_cls):
    smtp = smtp_cls.return_value = _smtp_client()
    notifier = TestNotifier("smtp.ethereal.email", 587, "user", "pass", sender="noreply@randompicker.app")

    result = notifier.send("a@x.com", "You Won!", "<p>hi</p>")

    assert result.delivered is True
    assert result.service == "test"
    assert result.message_id.endswith("@randompicker.app>")
    assert result.preview_url == "https://ethereal.email/message/YWJjZGVm.qwerty"
    assert result.to_dict()["previewUrl"] == result.preview_url
    _, kwargs = smtp_cls.call_args
    assert kwargs["hostname"] == "smtp.ethereal.email"
    assert kwargs["port"] == 587
    smtp.connect.assert_awaited_once()
    smtp.starttls.assert_awaited_once()
    smtp.login.assert_awaited_once_with("user", "pass")
    smtp.quit.assert_awaited_once()
    sent = smtp.send_message.call_args[0][0]
    assert sent["To"] == "a@x.com"
    assert sent["Subject"] == "You Won!"


@patch("services.notifier.aiosmtplib.SMTP")
def test_test_notifier_without_preview_for_other_hosts(smtp_cls):
    smtp_cls.return_value = _smtp_client(response="250 OK queued")
    notifier = TestNotifier("mail.example.com", 587, "user", "pass")

    result = notifier.send("a@x.com", "Subject", "<p>hi</p>")

    assert result.delivered is True
    assert result.preview_url is None
    assert "previewUrl" not in result.to_dict()


@patch("services.notifier.aiosmtplib.SMTP")
def test_test_notifier_reports_smtp_failure(smtp_cls):
    smtp = smtp_cls.return_value = _smtp_client()
    smtp.login.side_effect = aiosmtplib.SMTPAuthenticationError(535, "bad credentials")
    smtp.is_connected = True
    notifier = TestNotifier("smtp.ethereal.email", 587, "user", "wrong")

    result = notifier.send("a@x.com", "Subject", "<p>hi</p>")

    assert result.delivered is False
    assert "SMTP error" in result.error
    smtp.close.assert_called_once()


@patch("services.notifier.aiosmtplib.SMTP")
def test_test_notifier_reports_refused_recipient(smtp_cls):
    smtp_cls.return_value = _smtp_client(refused={"a@x.com": (550, "no such user")})
    notifier = TestNotifier("smtp.ethereal.email", 587, "user", "pass")

    result = notifier.send("a@x.com", "Subject", "<p>hi</p>")

    assert result.delivered is False
    assert "Recipient refused" in result.error


def test_notifier_requires_a_transport():
    class Incomplete(Notifier):
        pass

    with pytest.raises(TypeError):
        Incomplete()


def test_provider_notifier_posts_to_sendgrid():
    session = MagicMock()
    session.post.return_value = MagicMock(status_code=202, headers={"X-Message-Id": "abc123"}, text="")
    notifier = ProviderNotifier("SG.key", sender="picker@example.com", session=session)

    result = notifier.send("a@x.com", "Results", "<p>hi</p>")

    assert result.delivered is True
    assert result.message_id == "abc123"
    _, kwargs = session.post.call_args
    assert kwargs["headers"]["Authorization"] == "Bearer SG.key"
    assert kwargs["json"]["personalizations"] == [{"to": [{"email": "a@x.com"}]}]
    assert kwargs["json"]["from"] == {"email": "picker@example.com"}
    assert kwargs["json"]["content"][0] == {"type": "text/html", "value": "<p>hi</p>"}


def test_provider_notifier_reports_http_errors():
    session = MagicMock()
    session.post.return_value = MagicMock(status_code=401, headers={}, text="unauthorized")
    notifier = ProviderNotifier("SG.bad", session=session)

    result = notifier.send("a@x.com", "Results", "<p>hi</p>")

    assert result.delivered is False
    assert "401" in result.error


def test_provider_notifier_reports_connection_errors():
    session = MagicMock()
    session.post.side_effect = requests.ConnectionError("no route")
    notifier = ProviderNotifier("SG.key", session=session)

    result = notifier.send("a@x.com", "Results", "<p>hi</p>")

    assert result.delivered is False
    assert "no route" in result.error


def test_unexpected_transport_error_is_contained():
    class Exploding(ConsoleNotifier):
        def _deliver(self, message):
            raise RuntimeError("boom")

    result = Exploding().send("a@x.com", "s", "h")

    assert result.delivered is False
    assert result.error == "boom"


@pytest.mark.parametrize(
    "overrides, expected",
    [
        ({}, ConsoleNotifier),
        ({"sendgrid_api_key": "SG.key"}, ProviderNotifier),
        ({"smtp_user": "u", "smtp_pass": "p"}, TestNotifier),
        ({"sendgrid_api_key": "SG.key", "smtp_user": "u", "smtp_pass": "p"}, ProviderNotifier),
        ({"email_service": "console", "sendgrid_api_key": "SG.key"}, ConsoleNotifier),
        ({"email_service": "TEST", "smtp_user": "u", "smtp_pass": "p"}, TestNotifier),
    ],
)
def test_create_notifier_selection(config, overrides, expected):
    assert isinstance(create_notifier(replace(config, **overrides)), expected)


@pytest.mark.parametrize(
    "overrides",
    [
        {"email_service": "carrier-pigeon"},
        {"email_service": "provider"},
        {"email_service": "test", "smtp_user": "u"},
    ],
)
def test_create_notifier_rejects_bad_configuration(config, overrides):
    with pytest.raises(ConfigurationError):
        create_notifier(replace(config, **overrides))


def test_email_templates_escape_room_name():
    winner = render_winner_email("<b>Team</b>", 3)
    results = render_results_email("<b>Team</b>", "a@x.com")

    assert "&lt;b&gt;Team&lt;/b&gt;" in winner.html
    assert "<b>Team</b>" not in winner.html
    assert "3 participants" in winner.html
    assert "a@x.com" in results.html
    assert results.subject == "Selection Results - <b>Team</b>"
