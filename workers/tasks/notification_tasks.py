"""
Notification Tasks

Background delivery of lifecycle notifications through the email service.
"""

import logging

from workers.celery_app import app

logger = logging.getLogger(__name__)


def _send_booking_confirmed(recipient: str, payload: dict) -> bool:
    from backend.services.email import send_booking_confirmation_email

    return send_booking_confirmation_email(
        to_email=recipient,
        client_name=payload.get("client_name", ""),
        booking_id=payload.get("booking_id", ""),
        service_date=payload.get("service_date", ""),
        start_time=payload.get("start_time", ""),
        services=payload.get("services", []),
        total=payload.get("total", "0.00"),
    )


def _send_job_claimed(recipient: str, payload: dict) -> bool:
    from backend.services.email import send_job_claimed_email

    return send_job_claimed_email(
        to_email=recipient,
        client_name=payload.get("client_name", ""),
        worker_first_name=payload.get("worker_first_name", ""),
        service_date=payload.get("service_date", ""),
        start_time=payload.get("start_time", ""),
    )


def _send_care_summary(recipient: str, payload: dict) -> bool:
    from backend.services.email import send_care_summary_email

    return send_care_summary_email(
        to_email=recipient,
        client_name=payload.get("client_name", ""),
        worker_first_name=payload.get("worker_first_name", ""),
        service_date=payload.get("service_date", ""),
        tasks_completed=payload.get("tasks_completed", []),
        observations=payload.get("observations", ""),
        office_number=payload.get("office_number", ""),
    )


def _send_shift_completed(recipient: str, payload: dict) -> bool:
    from backend.services.email import send_shift_completed_alert_email

    return send_shift_completed_alert_email(
        to_email=recipient,
        shift_id=payload.get("shift_id", ""),
        worker_name=payload.get("worker_name", ""),
        client_name=payload.get("client_name", ""),
        completed_at=payload.get("completed_at", ""),
        overtime_minutes=int(payload.get("overtime_minutes", 0)),
        flagged_for_overtime=bool(payload.get("flagged_for_overtime", False)),
    )


HANDLERS = {
    "booking_confirmed": _send_booking_confirmed,
    "job_claimed": _send_job_claimed,
    "care_summary": _send_care_summary,
    "shift_completed": _send_shift_completed,
}


@app.task
def dispatch_notification(event: str, recipient: str, payload: dict) -> bool:
    """Route a lifecycle event to its email template."""
    handler = HANDLERS.get(event)
    if handler is None:
        logger.warning(f"No handler for notification event {event}, dropping")
        return False

    logger.info(f"Dispatching {event} notification to {recipient}")
    return handler(recipient, payload)
