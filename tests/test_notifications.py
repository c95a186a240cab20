import smtplib
import uuid
from datetime import date

import pytest

from conftest import START

from orderdesk.core import email_client, notifications
from orderdesk.core.config import get_settings
from orderdesk.schemas.order import OrderItemRead, OrderWithItemsRead


@pytest.fixture
def order():
    return OrderWithItemsRead(
        id=uuid.uuid4(),
        order_number="PED-20260310-ABC123",
        customer_id=uuid.uuid4(),
        customer_name="Almacén Don Pepe",
        status="pendiente",
        delivery_due=date(2026, 3, 12),
        delivered_at=None,
        location=None,
        notes="Entregar por la tarde",
        total=5000.0,
        created_by=uuid.uuid4(),
        created_at=START,
        updated_at=START,
        items=[
            OrderItemRead(
                id=uuid.uuid4(),
                product_id=uuid.uuid4(),
                product_name="Aceite 1L",
                position=0,
                quantity=2,
                unit_of_measure="unidad",
                unit_price=2500.0,
                line_total=5000.0,
            )
        ],
    )


@pytest.fixture
def recipients(monkeypatch):
    monkeypatch.setattr(get_settings(), "NOTIFY_EMAILS", "ventas@example.com, bodega@example.com")
    monkeypatch.setattr(email_client, "is_configured", lambda: True)


class TestNotifyOrderCreated:
    def test_skips_without_recipients(self, order, monkeypatch):
        monkeypatch.setattr(get_settings(), "NOTIFY_EMAILS", "")
        assert notifications.notify_order_created(order) is False

    def test_skips_when_smtp_is_not_configured(self, order, monkeypatch):
        monkeypatch.setattr(get_settings(), "NOTIFY_EMAILS", "ventas@example.com")
        monkeypatch.setattr(email_client, "is_configured", lambda: False)
        assert notifications.notify_order_created(order) is False

    def test_sends_summary(self, order, recipients, monkeypatch):
        sent = {}

        def fake_send(to_emails, subject, text_body, html_body=None):
            sent.update(to=to_emails, subject=subject, body=text_body)

        monkeypatch.setattr(email_client, "send_email", fake_send)

        assert notifications.notify_order_created(order) is True
        assert sent["to"] == ["ventas@example.com", "bodega@example.com"]
        assert sent["subject"] == "Nuevo pedido PED-20260310-ABC123"
        assert "Aceite 1L: 2 unidad" in sent["body"]
        assert "Entregar por la tarde" in sent["body"]

    def test_smtp_failure_is_logged_not_raised(self, order, recipients, monkeypatch, caplog):
        def failing_send(*args, **kwargs):
            raise smtplib.SMTPServerDisconnected("connection closed")

        monkeypatch.setattr(email_client, "send_email", failing_send)

        assert notifications.notify_order_created(order) is False
        assert "Failed to send notification" in caplog.text


class FakeSMTP:
    instances: list["FakeSMTP"] = []

    def __init__(self, host, port, timeout=None):
        self.host, self.port = host, port
        self.calls: list[str] = []
        self.sent = None
        FakeSMTP.instances.append(self)

    def starttls(self):
        self.calls.append("starttls")

    def login(self, username, password):
        self.calls.append(f"login:{username}")

    def send_message(self, msg):
        self.sent = msg

    def quit(self):
        self.calls.append("quit")


class TestEmailClient:
    @pytest.fixture
    def smtp_env(self, monkeypatch):
        monkeypatch.setenv("SMTP_HOST", "smtp.example.com")
        monkeypatch.setenv("SMTP_USERNAME", "pedidos@example.com")
        monkeypatch.setenv("SMTP_PASSWORD", "secret")
        for name in ("SMTP_PORT", "SMTP_FROM_EMAIL", "SMTP_FROM_NAME"):
            monkeypatch.delenv(name, raising=False)
        monkeypatch.delenv("SMTP_USE_SSL", raising=False)
        monkeypatch.delenv("SMTP_USE_TLS", raising=False)
        FakeSMTP.instances = []
        monkeypatch.setattr(smtplib, "SMTP", FakeSMTP)

    def test_not_configured_without_host(self, monkeypatch):
        monkeypatch.delenv("SMTP_HOST", raising=False)
        assert email_client.is_configured() is False
        with pytest.raises(RuntimeError):
            email_client.send_email(["a@example.com"], "s", "b")

    def test_sends_with_starttls(self, smtp_env):
        email_client.send_email(["a@example.com", "b@example.com"], "Hola", "cuerpo")

        server = FakeSMTP.instances[0]
        assert (server.host, server.port) == ("smtp.example.com", 587)
        assert server.calls == ["starttls", "login:pedidos@example.com", "quit"]
        assert server.sent["To"] == "a@example.com, b@example.com"
        assert server.sent["From"] == "OrderDesk <pedidos@example.com>"
