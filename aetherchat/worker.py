"""
Celery worker entry point

Beat runs embedded: reminder dispatch every few seconds and the
end-of-day session sweep once a day.
"""
import logging

from celery.signals import worker_process_init, worker_ready, worker_shutdown

from aetherchat.config.celery_config import celery_app
from aetherchat.services.registry import build_registry
from aetherchat.utils.my_logging import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@worker_process_init.connect
def worker_process_init_handler(sender=None, **kwargs):
    """Each forked process gets its own registry (and Redis connections)"""
    celery_app.registry = build_registry()


@worker_ready.connect
def worker_ready_handler(sender=None, **kwargs):
    for name, entry in celery_app.conf.beat_schedule.items():
        logger.info(f"Scheduled job {name}: {entry['task']} ({entry['schedule']})")


@worker_shutdown.connect
def worker_shutdown_handler(sender=None, **kwargs):
    logger.info("Celery worker shutting down")


if __name__ == "__main__":
    celery_app.start([
        "worker",
        "--beat",
        "--loglevel=info",
        "--concurrency=4",
        "--max-tasks-per-child=1000",
    ])
