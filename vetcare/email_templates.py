"""HTML bodies for appointment emails.

Each template takes the ``data`` dict passed to ``EmailService.send``:
recipient_name, pet_name, vet_name, clinic_name, clinic_location, date, time,
appointment_type, notes, and for reschedules previous_date / previous_time.
"""

from html import escape


def _layout(title: str, body: str) -> str:
    return f"""
<html>
  <body style="font-family: Arial, sans-serif; color: #1f2937;">
    <h2 style="color: #0f766e;">{escape(title)}</h2>
    {body}
    <p style="color: #6b7280; font-size: 12px;">VetCare - please do not reply to this email.</p>
  </body>
</html>
""".strip()


def _details(data: dict) -> str:
    rows = [
        ("Pet", data.get("pet_name")),
        ("Veterinarian", data.get("vet_name")),
        ("Type", data.get("appointment_type")),
        ("Date", data.get("date")),
        ("Time", data.get("time")),
        ("Clinic", data.get("clinic_location") or data.get("clinic_name")),
        ("Notes", data.get("notes")),
    ]
    items = "".join(
        f"<li><strong>{label}:</strong> {escape(str(value))}</li>"
        for label, value in rows
        if value
    )
    return f"<ul>{items}</ul>"


def appointment_requested_template(data: dict) -> str:
    greeting = f"<p>Hi {escape(data.get('recipient_name') or 'there')},</p>"
    body = (
        f"{greeting}<p>We received your appointment request. "
        "The clinic will confirm it shortly.</p>"
        f"{_details(data)}"
    )
    return _layout("Appointment requested", body)


def appointment_confirmed_template(data: dict) -> str:
    greeting = f"<p>Hi {escape(data.get('recipient_name') or 'there')},</p>"
    body = f"{greeting}<p>Your appointment has been confirmed.</p>{_details(data)}"
    return _layout("Appointment confirmed", body)


def appointment_rescheduled_template(data: dict) -> str:
    greeting = f"<p>Hi {escape(data.get('recipient_name') or 'there')},</p>"
    previous = ""
    if data.get("previous_date"):
        previous = (
            f"<p>It was previously scheduled for {escape(data['previous_date'])}"
            f" at {escape(data.get('previous_time') or '')}.</p>"
        )
    body = f"{greeting}<p>An appointment has been moved to a new time.</p>{previous}{_details(data)}"
    return _layout("Appointment rescheduled", body)


def appointment_cancelled_template(data: dict) -> str:
    greeting = f"<p>Hi {escape(data.get('recipient_name') or 'there')},</p>"
    body = f"{greeting}<p>The following appointment has been cancelled.</p>{_details(data)}"
    return _layout("Appointment cancelled", body)
