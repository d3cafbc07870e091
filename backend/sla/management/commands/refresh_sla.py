from django.core.management.base import BaseCommand

from sla.services import refresh_open_tickets


class Command(BaseCommand):
    help = "Re-evaluate SLA status for all open tickets (same job the beat schedule runs)."

    def handle(self, *args, **opts):
        changed = refresh_open_tickets()
        self.stdout.write(self.style.SUCCESS(f"SLA refresh complete: {changed} ticket(s) changed"))
