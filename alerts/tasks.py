import logging

from celery import shared_task

from .detection import AlertCheckError, check_event_drops as run_check

logger = logging.getLogger(__name__)


@shared_task
def check_event_drops() -> dict:
    """
    Runs daily from Celery Beat.
    Returns the summary of the check, or ``{"skipped": reason}`` when
    monitoring is off or no API token is configured.
    """
    try:
        return run_check()
    except AlertCheckError as exc:
        logger.warning("Scheduled drop check skipped: %s", exc)
        return {"skipped": str(exc)}
