import pytest
import requests

from app.core.config import settings
from app.models.notification import Notification
from app.models.staff import StaffRole, StaffUser
from app.routers import visitor as visitor_router
from app.services import email_service as email_module
from app.services import webhook_service as webhook_module
from app.services.email_service import EmailService
from app.services.visitor_store import VisitorStore
from app.services.webhook_service import WebhookService

from tests.helpers import check_in

RELAY_URL = "http://relay.test/visitor-check-in"


class FakeResponse:
    def __init__(self, status_code=200, text=""):
        self.status_code = status_code
        self.ok = status_code < 400
        self.text = text


@pytest.fixture
def outbox(monkeypatch):
    """Messages handed to SMTP, captured instead of sent."""
    sent = []

    class FakeSMTP:
        def __init__(self, host, port, timeout=None):
            self.host = host

        def __enter__(self):
            return self

        def __exit__(self, *exc):
            return False

        def starttls(self):
            pass

        def login(self, user, password):
            pass

        def send_message(self, msg):
            sent.append(msg)

    monkeypatch.setattr(email_module.smtplib, "SMTP", FakeSMTP)
    return sent


@pytest.fixture
def relay(monkeypatch):
    """Payloads posted to the webhook relay."""
    posted = []

    def fake_post(url, json=None, timeout=None):
        posted.append((url, json))
        return FakeResponse(200)

    monkeypatch.setattr(webhook_module.requests, "post", fake_post)
    return posted


@pytest.fixture
def alert_services(monkeypatch, session_factory):
    email = EmailService()
    email.enabled = True
    email.smtp_user = "kiosk@example.com"
    email.smtp_password = "secret"
    monkeypatch.setattr(visitor_router, "email_service", email)
    monkeypatch.setattr(visitor_router, "webhook_service", WebhookService(url=RELAY_URL))
    monkeypatch.setattr(visitor_router, "get_thread_db", session_factory)


def body_of(msg):
    return msg.get_payload()[0].get_payload(decode=True).decode()


def test_check_in_payload_shape():
    payload = WebhookService(url=RELAY_URL).build_check_in_payload(
        visitor_name="Jane Doe",
        host_name="Alice",
        company="Acme",
        host_phone="555-0100",
        host_email="alice@example.com",
    )

    assert payload["event"] == "VISITOR_CHECK_IN"
    assert payload["visitor"]["name"] == "Jane Doe"
    assert payload["visitor"]["company"] == "Acme"
    assert payload["visitor"]["email"] == ""
    assert payload["host"] == {"name": "Alice", "department": "", "phone": "555-0100", "email": "alice@example.com"}
    assert "Jane Doe from Acme" in payload["message"]
    assert settings.portal_url in payload["message"]


def test_host_alert_email_content():
    msg = EmailService().build_host_alert("alice@example.com", "Jane Doe", "Alice", company="Acme", purpose="Meeting")

    assert msg["To"] == "alice@example.com"
    assert msg["Subject"] == "VISITOR WAITING FOR APPROVAL"
    body = body_of(msg)
    assert "Name: Jane Doe" in body
    assert "Purpose: Meeting" in body
    assert "Phone: N/A" in body


def test_disabled_email_sends_nothing(outbox):
    email = EmailService()
    email.enabled = False

    assert email.send_host_alert("alice@example.com", "Jane Doe", "Alice") is False
    assert outbox == []


def test_check_in_notifies_host_from_directory(db, outbox, relay, alert_services):
    db.add(StaffUser(name="Alice", email="alice@example.com", phone_number="555-0100", role=StaffRole.STAFF))
    db.commit()
    visitor = VisitorStore().create_visitor(db, check_in(full_name="Jane Doe", host_name="Alice"))

    visitor_router.notify_host_background(visitor.id)

    [msg] = outbox
    assert msg["To"] == "alice@example.com"
    assert "Name: Jane Doe" in body_of(msg)

    [(url, payload)] = relay
    assert url == RELAY_URL
    assert payload["event"] == "VISITOR_CHECK_IN"
    assert payload["host"]["phone"] == "555-0100"
    assert payload["host"]["email"] == "alice@example.com"


def test_unknown_host_skips_email_but_posts_webhook(db, outbox, relay, alert_services):
    visitor = VisitorStore().create_visitor(db, check_in(full_name="Jane Doe", host_name="Nobody Here"))

    visitor_router.notify_host_background(visitor.id)

    assert outbox == []
    [(_, payload)] = relay
    assert payload["host"]["name"] == "Nobody Here"
    assert payload["host"]["phone"] == ""


def test_failing_webhook_leaves_event_log_untouched(db, outbox, alert_services, monkeypatch):
    def refused(url, json=None, timeout=None):
        raise requests.ConnectionError("connection refused")

    monkeypatch.setattr(webhook_module.requests, "post", refused)
    visitor = VisitorStore().create_visitor(db, check_in(host_name="Alice"))

    assert WebhookService(url=RELAY_URL).send_check_in_alert({"visitor": {"name": "x"}, "host": {"phone": ""}}) is False
    visitor_router.notify_host_background(visitor.id)

    db.expire_all()
    assert db.query(Notification).count() == 1


def test_rejected_webhook_returns_false(monkeypatch):
    monkeypatch.setattr(webhook_module.requests, "post", lambda url, json=None, timeout=None: FakeResponse(502, "bad gateway"))

    payload = WebhookService(url=RELAY_URL).build_check_in_payload(visitor_name="Jane Doe", host_name="Alice")

    assert WebhookService(url=RELAY_URL).send_check_in_alert(payload) is False


def test_unconfigured_webhook_posts_nothing(relay):
    payload = WebhookService(url="").build_check_in_payload(visitor_name="Jane Doe", host_name="Alice")

    assert WebhookService(url="").send_check_in_alert(payload) is False
    assert relay == []
