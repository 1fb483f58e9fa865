"""
Celery Application

Redis-backed worker for outbound notifications. Shift transitions queue
events here after their commit; delivery never blocks the API.
"""

from celery import Celery

from backend.config import get_settings

settings = get_settings()

app = Celery(
    "pswdirect",
    broker=settings.redis_url,
    backend=settings.result_backend,
)

app.conf.update(
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone=settings.timezone,
    enable_utc=True,
    # A lost worker redelivers the email rather than dropping it
    task_acks_late=True,
    worker_prefetch_multiplier=1,
    result_expires=3600,
    task_default_queue="default",
    task_routes={
        "workers.tasks.notification_tasks.*": {"queue": "notifications"},
    },
    task_annotations={
        "workers.tasks.notification_tasks.dispatch_notification": {"rate_limit": "60/m"},
    },
)

if settings.sentry_dsn:
    import sentry_sdk
    from sentry_sdk.integrations.celery import CeleryIntegration

    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        environment=settings.environment,
        release=f"pswdirect-worker@{settings.app_version}",
        traces_sample_rate=0.1,
        integrations=[CeleryIntegration()],
    )

app.autodiscover_tasks(["workers.tasks"])
