from celery import Celery

from tokenpulse.config import settings

celery_app = Celery(
    "tokenpulse",
    broker=settings.redis_url,
    backend=settings.redis_url,
    include=["tokenpulse.workers.tasks"],
)

celery_app.conf.update(
    task_serializer="json",
    result_serializer="json",
    accept_content=["json"],
    timezone="UTC",
    enable_utc=True,
    beat_schedule={
        "refresh-active-tokens": {
            "task": "refresh_active_tokens",
            "schedule": float(settings.refresh_interval_seconds),
        },
    },
)
