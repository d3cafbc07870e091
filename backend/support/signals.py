import logging

from django.db.models.signals import pre_save, post_save
from django.dispatch import receiver
from django.utils import timezone

from sla.services import compute_deadlines, evaluate_sla_status
from .caching import invalidate_kb_list
from .models import Ticket, TicketComment, KnowledgeArticle

logger = logging.getLogger(__name__)


@receiver(pre_save, sender=Ticket)
def fill_ticket_defaults(sender, instance: Ticket, **kwargs):
    now = timezone.now()
    previous = None
    if instance.pk:
        previous = Ticket.objects.filter(pk=instance.pk).values("priority", "status").first()

    # Lifecycle stamps
    if instance.status == Ticket.Status.RESOLVED and not instance.resolved_at:
        instance.resolved_at = now
    if instance.status == Ticket.Status.CLOSED:
        if not instance.closed_at:
            instance.closed_at = now
        if not instance.resolved_at:
            instance.resolved_at = now

    # SLA: attach on creation and whenever the priority moves
    if previous is None or previous["priority"] != instance.priority:
        try:
            compute_deadlines(instance, start=instance.created_at or now)
        except Exception:
            # A broken business-hours table must not block ticket intake
            logger.exception("could not compute SLA deadlines for %s", instance.ticket_number)

    instance.sla_status = evaluate_sla_status(instance, now)

    if previous and previous["status"] != instance.status:
        logger.info("ticket %s status %s -> %s", instance.ticket_number, previous["status"], instance.status)


@receiver(post_save, sender=Ticket)
def log_ticket_created(sender, instance: Ticket, created, **kwargs):
    if created:
        logger.info("ticket %s created (priority=%s, sla=%s)",
                    instance.ticket_number, instance.priority, instance.sla_id)


@receiver(post_save, sender=TicketComment)
def stamp_first_response(sender, instance: TicketComment, created, **kwargs):
    """The first comment from anyone other than the requester counts as the first response."""
    if not created:
        return
    ticket = instance.ticket
    if ticket.first_response_at or instance.user_id == ticket.requester_id:
        return
    ticket.first_response_at = instance.created_at
    ticket.time_to_first_response = max(0, int((instance.created_at - ticket.created_at).total_seconds() // 60))
    ticket.save()


@receiver(post_save, sender=KnowledgeArticle)
def invalidate_kb_list_on_change(sender, instance: KnowledgeArticle, **kwargs):
    invalidate_kb_list()
