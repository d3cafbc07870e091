from celery import shared_task


@shared_task
def ping():
    """Tiny task used by health probes to confirm a worker is consuming."""
    return "pong"
