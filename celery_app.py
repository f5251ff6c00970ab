"""
Celery Application Configuration

Background processing for carrier webhooks.

Usage:
    Start worker: celery -A celery_app worker -Q webhooks --loglevel=info --pool=solo (Windows)
    Start worker: celery -A celery_app worker -Q webhooks --loglevel=info --concurrency=4 (Linux/Mac)
"""

import os
from celery import Celery
from kombu import Queue
from dotenv import load_dotenv

load_dotenv()

# Redis configuration from environment variables
REDIS_HOST = os.environ.get("REDIS_HOST", "localhost")
REDIS_PORT = os.environ.get("REDIS_PORT", "6379")
REDIS_PASSWORD = os.environ.get("REDIS_PASSWORD", "")
REDIS_DB = os.environ.get("REDIS_DB", "0")

# Build Redis URL
if REDIS_PASSWORD:
    REDIS_URL = f"redis://:{REDIS_PASSWORD}@{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}"
else:
    REDIS_URL = f"redis://{REDIS_HOST}:{REDIS_PORT}/{REDIS_DB}"

# run tasks inline, used by the test suite and local runs without redis
TASK_ALWAYS_EAGER = os.environ.get("CELERY_TASK_ALWAYS_EAGER", "false").lower() in (
    "1",
    "true",
    "yes",
)

# Initialize Celery app
celery_app = Celery(
    "shipsarthi_worker",
    broker=REDIS_URL,
    backend=None if TASK_ALWAYS_EAGER else REDIS_URL,
    include=[
        "modules.shipment.celery_tasks",  # Carrier webhook processing
    ],
)

# Celery Configuration
celery_app.conf.update(
    # Task settings
    task_serializer="json",
    accept_content=["json"],
    result_serializer="json",
    timezone="UTC",
    enable_utc=True,
    task_always_eager=TASK_ALWAYS_EAGER,
    # Task execution settings
    task_acks_late=True,  # Acknowledge task after completion (prevents task loss on worker crash)
    task_reject_on_worker_lost=True,
    task_time_limit=300,
    task_soft_time_limit=240,
    # Worker settings
    worker_prefetch_multiplier=4,
    worker_max_tasks_per_child=1000,
    # Result backend settings
    result_expires=3600,
    # Queue configuration
    task_queues=(Queue("webhooks", routing_key="webhooks.#"),),
    task_default_queue="webhooks",
    task_default_routing_key="webhooks.default",
    # Retry settings
    task_default_retry_delay=30,
    task_max_retries=3,
)

celery_app.conf.task_routes = {
    "modules.shipment.celery_tasks.*": {"queue": "webhooks"},
}
