"""
Email Service

SMTP delivery for transactional emails.
Supports booking confirmations, worker assignment, care visit summaries,
and office alerts for completed shifts.
"""

import logging
import smtplib
from email.mime.multipart import MIMEMultipart
from email.mime.text import MIMEText
from html import escape

from backend.config import get_settings

logger = logging.getLogger(__name__)

settings = get_settings()

BRAND_COLOR = "#0f766e"


def _send_email(to: str, subject: str, html_body: str, text_body: str | None = None) -> bool:
    """
    Send an email via SMTP.

    Returns True if sent successfully, False otherwise.
    In development mode (no SMTP configured), logs the email instead.
    """
    if not settings.smtp_host:
        logger.info(f"[EMAIL-DEV] To: {to} | Subject: {subject}")
        logger.debug(f"[EMAIL-DEV] Body: {text_body or html_body[:200]}")
        return True

    try:
        msg = MIMEMultipart("alternative")
        msg["Subject"] = subject
        msg["From"] = f"{settings.smtp_from_name} <{settings.smtp_from_email}>"
        msg["To"] = to

        if text_body:
            msg.attach(MIMEText(text_body, "plain"))
        msg.attach(MIMEText(html_body, "html"))

        with smtplib.SMTP(settings.smtp_host, settings.smtp_port) as server:
            if settings.smtp_use_tls:
                server.starttls()
            if settings.smtp_username and settings.smtp_password:
                server.login(settings.smtp_username, settings.smtp_password)
            server.sendmail(settings.smtp_from_email, to, msg.as_string())

        logger.info(f"Email sent to {to}: {subject}")
        return True

    except (smtplib.SMTPException, OSError) as e:
        logger.error(f"Failed to send email to {to}: {e}")
        return False


# ── Template Functions ─────────────────────────────


def send_booking_confirmation_email(
    to_email: str,
    client_name: str,
    booking_id: str,
    service_date: str,
    start_time: str,
    services: list[str],
    total: str,
) -> bool:
    """Confirm a new booking with its quoted total."""
    subject = f"Booking Confirmed - {service_date}"
    service_items = "".join(f"<li>{escape(s)}</li>" for s in services)
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: {BRAND_COLOR};">Your booking is confirmed</h2>
        <p>Hi {escape(client_name)},</p>
        <table style="border-collapse: collapse; margin: 16px 0;">
            <tr><td style="padding: 8px; color: #666;">Booking:</td>
                <td style="padding: 8px;"><code>{booking_id[:8]}</code></td></tr>
            <tr><td style="padding: 8px; color: #666;">Date:</td>
                <td style="padding: 8px;">{service_date} at {start_time}</td></tr>
            <tr><td style="padding: 8px; color: #666;">Total:</td>
                <td style="padding: 8px;">${total}</td></tr>
        </table>
        <ul>{service_items}</ul>
        <p style="color: #666; font-size: 12px;">
            Cancellations within {settings.cancellation_refund_hours} hours of the
            scheduled time are non-refundable.
        </p>
    </div>
    """
    text = (
        f"Hi {client_name},\n\n"
        f"Your booking for {service_date} at {start_time} is confirmed.\n"
        f"Services: {', '.join(services)}\n"
        f"Total: ${total}\n\n"
        f"Cancellations within {settings.cancellation_refund_hours} hours of the "
        f"scheduled time are non-refundable."
    )
    return _send_email(to_email, subject, html, text)


def send_job_claimed_email(
    to_email: str,
    client_name: str,
    worker_first_name: str,
    service_date: str,
    start_time: str,
) -> bool:
    """Tell the client which caregiver accepted the booking."""
    subject = f"Your caregiver for {service_date} has been assigned"
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: {BRAND_COLOR};">Caregiver assigned</h2>
        <p>Hi {escape(client_name)},</p>
        <p><strong>{escape(worker_first_name)}</strong> will be caring for you on
        {service_date} at {start_time}.</p>
    </div>
    """
    text = (
        f"Hi {client_name},\n\n"
        f"{worker_first_name} will be caring for you on {service_date} at {start_time}."
    )
    return _send_email(to_email, subject, html, text)


def send_care_summary_email(
    to_email: str,
    client_name: str,
    worker_first_name: str,
    service_date: str,
    tasks_completed: list[str],
    observations: str,
    office_number: str,
) -> bool:
    """Send the care visit summary after sign-out."""
    subject = f"Care Visit Summary - {service_date}"
    task_items = "".join(f"<li>{escape(t)}</li>" for t in tasks_completed)
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: {BRAND_COLOR};">Care Visit Summary</h2>
        <p>Hi {escape(client_name)},</p>
        <p>Here's a summary of today's care visit with
        <strong>{escape(worker_first_name)}</strong> on {service_date}.</p>
        <h3>Tasks Completed</h3>
        <ul>{task_items}</ul>
        <h3>Observations</h3>
        <div style="background: #f0fdfa; border-left: 4px solid {BRAND_COLOR};
                    padding: 12px; margin: 16px 0;">{escape(observations) or "None"}</div>
        <p style="color: #666;">Questions or follow-ups: {escape(office_number)}</p>
    </div>
    """
    text = (
        f"Hi {client_name},\n\n"
        f"Date: {service_date}\nPSW: {worker_first_name}\n\n"
        "Tasks Completed:\n"
        + "\n".join(f"- {t}" for t in tasks_completed)
        + f"\n\nObservations:\n{observations or 'None'}\n\n"
        f"Questions or follow-ups: {office_number}"
    )
    return _send_email(to_email, subject, html, text)


def send_shift_completed_alert_email(
    to_email: str,
    shift_id: str,
    worker_name: str,
    client_name: str,
    completed_at: str,
    overtime_minutes: int,
    flagged_for_overtime: bool,
) -> bool:
    """Alert the office that a shift finished, highlighting overtime."""
    if flagged_for_overtime:
        subject = f"[PSW Direct] Shift completed with overtime - {shift_id[:8]}"
        color = "#d97706"
    else:
        subject = f"[PSW Direct] Shift completed - {shift_id[:8]}"
        color = BRAND_COLOR
    html = f"""
    <div style="font-family: Arial, sans-serif; max-width: 600px; margin: 0 auto;">
        <h2 style="color: {color};">Shift Completed</h2>
        <table style="border-collapse: collapse; margin: 16px 0;">
            <tr><td style="padding: 8px; color: #666;">PSW:</td>
                <td style="padding: 8px;">{escape(worker_name)}</td></tr>
            <tr><td style="padding: 8px; color: #666;">Client:</td>
                <td style="padding: 8px;">{escape(client_name)}</td></tr>
            <tr><td style="padding: 8px; color: #666;">Completed at:</td>
                <td style="padding: 8px;">{completed_at}</td></tr>
            <tr><td style="padding: 8px; color: #666;">Overtime:</td>
                <td style="padding: 8px;">{overtime_minutes} min</td></tr>
        </table>
        {"<p><strong>Flagged for overtime billing.</strong></p>" if flagged_for_overtime else ""}
    </div>
    """
    return _send_email(to_email, subject, html)
