import pytest
import resend

from vetcare.email_templates import appointment_rescheduled_template
from vetcare.exceptions import EmailDeliveryError
from vetcare.services.email_service import EmailService

DATA = {
    "recipient_name": "Olivia",
    "pet_name": "Biscuit <3",
    "vet_name": "Dr. Jordan Lee",
    "date": "Monday, June 03, 2030",
    "time": "10:00 AM",
}


@pytest.mark.asyncio
async def test_without_api_key_the_email_is_only_logged(monkeypatch):
    def fail(*args, **kwargs):
        raise AssertionError("should not call Resend")

    monkeypatch.setattr(resend.Emails, "send", fail)

    assert await EmailService(api_key="").send("appointment-requested", DATA, to="o@example.com", subject="Hi")


@pytest.mark.asyncio
async def test_sends_rendered_html_through_resend(monkeypatch):
    calls = []

    def send(payload):
        calls.append(payload)
        return {"id": "email-1"}

    monkeypatch.setattr(resend.Emails, "send", send)
    service = EmailService(api_key="re_test", from_address="VetCare <noreply@vetcare.test>")

    await service.send("appointment-confirmation", DATA, to="o@example.com", subject="Appointment Confirmed")

    (payload,) = calls
    assert payload["to"] == ["o@example.com"]
    assert payload["from"] == "VetCare <noreply@vetcare.test>"
    assert "Biscuit &lt;3" in payload["html"]


@pytest.mark.asyncio
async def test_resend_failure_raises_delivery_error(monkeypatch):
    def send(payload):
        raise RuntimeError("rate limited")

    monkeypatch.setattr(resend.Emails, "send", send)

    with pytest.raises(EmailDeliveryError):
        await EmailService(api_key="re_test").send("appointment-cancelled", DATA, to="o@example.com", subject="x")


@pytest.mark.asyncio
async def test_unknown_template_and_missing_recipient():
    service = EmailService(api_key="")

    with pytest.raises(EmailDeliveryError):
        await service.send("welcome", DATA, to="o@example.com", subject="x")
    with pytest.raises(EmailDeliveryError):
        await service.send("appointment-requested", DATA, to=None, subject="x")


def test_rescheduled_template_mentions_previous_time():
    html = appointment_rescheduled_template({**DATA, "previous_date": "Monday, June 03, 2030", "previous_time": "9:00 AM"})

    assert "previously scheduled for Monday, June 03, 2030 at 9:00 AM" in html
