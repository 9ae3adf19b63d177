from celery import Celery
from config import ENV


class CeleryManager:
    def __init__(self):
        self.env = ENV()
        self.celery_app = Celery(
            "split_ledger",
            broker=self.env.CELERY_BROKER_URL,
            backend=self.env.CELERY_RESULT_BACKEND,
            include=["ledger.bground.tasks"]
        )

        self.celery_app.conf.update(
            task_serializer="json",
            result_serializer="json",
            accept_content=["json"],
            timezone=self.env.CELERY_TIMEZONE,
            worker_prefetch_multiplier=1,
            task_acks_late=True,
            broker_transport_options={"visibility_timeout": 3600},
            beat_schedule={
                "release-matured-credits": {
                    "task": "ledger.release_matured_credits",
                    "schedule": float(self.env.RELEASE_INTERVAL_SECONDS),
                },
            },
        )
