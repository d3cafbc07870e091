from django.db.models.signals import pre_save
from django.dispatch import receiver
from django.utils import timezone

from .models import Problem, Change


@receiver(pre_save, sender=Problem)
def stamp_problem_resolution(sender, instance: Problem, **kwargs):
    if instance.status == Problem.Status.RESOLVED and not instance.resolved_at:
        instance.resolved_at = timezone.now()


@receiver(pre_save, sender=Change)
def stamp_change_approval(sender, instance: Change, **kwargs):
    if instance.approved_by_id and not instance.approval_date:
        instance.approval_date = timezone.now()
