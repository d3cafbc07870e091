import logging

from celery import shared_task

from .services import refresh_open_tickets

logger = logging.getLogger(__name__)


@shared_task
def refresh_sla_statuses():
    """Beat job: re-grade open tickets so at_risk/breached show up without an edit."""
    changed = refresh_open_tickets()
    logger.info("sla refresh finished, %s ticket(s) changed", changed)
    return changed
