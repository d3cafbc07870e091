from datetime import time

from django.contrib.auth import get_user_model
from django.core.management.base import BaseCommand
from django.db import transaction

from sla.models import SlaDefinition, BusinessHours
from support.models import Ticket, TicketComment, KnowledgeArticle, ServiceItem

User = get_user_model()

USERS = [
    # email, username, full name, role, password
    ("admin@example.com", "admin", "Admin User", User.Role.ADMIN, "admin123"),
    ("james@example.com", "technician1", "James Wilson", User.Role.TECHNICIAN, "tech123"),
    ("sarah@example.com", "technician2", "Sarah Parker", User.Role.TECHNICIAN, "tech123"),
    ("olivia@example.com", "manager1", "Olivia Chen", User.Role.MANAGER, "manager123"),
    ("john@example.com", "user1", "John Smith", User.Role.USER, "user123"),
    ("lisa@example.com", "user2", "Lisa Johnson", User.Role.USER, "user123"),
]

SLAS = [
    # priority, response minutes, resolution minutes
    ("critical", 15, 240),
    ("high", 60, 480),
    ("medium", 240, 1440),
    ("low", 480, 2880),
]

TICKETS = [
    ("Email not syncing on mobile", "Outlook on my phone stopped syncing since this morning.", "high", "incident", "email", "user1", "technician1", "in_progress"),
    ("Laptop will not boot", "Black screen after the BIOS logo.", "critical", "incident", "hardware", "user2", "technician2", "open"),
    ("Request access to finance share", "Need read access to \\\\fs01\\finance for the quarter close.", "medium", "service_request", "access", "user1", None, "open"),
    ("VPN drops every hour", "Connection resets roughly every 60 minutes.", "medium", "incident", "network", "user2", "technician1", "resolved"),
    ("New monitor for desk 4B", "Second monitor requested for the new analyst.", "low", "service_request", "hardware", "user1", "technician2", "closed"),
]

ARTICLES = [
    ("How to reset your password", "Use the self-service portal at /reset and follow the prompts.", "accounts", ["password", "self-service"], True),
    ("Connecting to the VPN", "Install the client, sign in with SSO and pick the nearest gateway.", "network", ["vpn", "remote"], True),
    ("Setting up email on mobile", "Add an Exchange account using your work address.", "email", ["email", "mobile"], True),
    ("Printer driver rollout (draft)", "Steps for the Q3 driver update.", "hardware", ["printer"], False),
]

SERVICES = [
    ("New laptop", "Standard issue laptop with corporate image.", "hardware", "5 business days", True, "medium"),
    ("Software installation", "Install licensed software from the catalog.", "software", "1 business day", False, "low"),
    ("Shared drive access", "Grant access to a departmental share.", "access", "4 hours", True, "medium"),
]


class Command(BaseCommand):
    help = "Load idempotent demo data: users, SLAs, business hours, tickets, articles and catalog items."

    @transaction.atomic
    def handle(self, *args, **opts):
        users = self._seed_users()
        self._seed_slas()
        self._seed_business_hours()
        self._seed_tickets(users)
        self._seed_articles(users["admin"])
        self._seed_services()
        self.stdout.write(self.style.SUCCESS("Service desk demo data ready."))

    def _seed_users(self):
        out = {}
        for email, username, full_name, role, password in USERS:
            user, created = User.objects.get_or_create(
                email=email,
                defaults={"username": username, "full_name": full_name, "role": role,
                          "is_staff": role == User.Role.ADMIN},
            )
            if created:
                user.set_password(password)
                user.save()
            out[username] = user
        self.stdout.write(f" users: {len(out)}")
        return out

    def _seed_slas(self):
        for priority, response, resolution in SLAS:
            SlaDefinition.objects.get_or_create(
                priority=priority, name=f"{priority.capitalize()} priority",
                defaults={"response_time": response, "resolution_time": resolution,
                          "description": f"Default targets for {priority} tickets"},
            )
        self.stdout.write(f" slas: {SlaDefinition.objects.count()}")

    def _seed_business_hours(self):
        for dow in range(7):
            working = 1 <= dow <= 5  # Monday..Friday
            BusinessHours.objects.update_or_create(
                day_of_week=dow,
                defaults={"start_time": time(9, 0), "end_time": time(17, 0), "is_working_day": working},
            )

    def _seed_tickets(self, users):
        created = 0
        for subject, description, priority, type_, category, requester, assignee, status in TICKETS:
            if Ticket.objects.filter(subject=subject).exists():
                continue
            ticket = Ticket.objects.create(
                subject=subject, description=description, priority=priority, type=type_,
                category=category, requester=users[requester],
                assignee=users[assignee] if assignee else None, status=status,
                time_spent=90 if status in Ticket.DONE_STATUSES else None,
            )
            if assignee:
                TicketComment.objects.create(ticket=ticket, user=users[assignee],
                                             content="Thanks, looking into this now.")
            created += 1
        self.stdout.write(f" tickets: {created} new")

    def _seed_articles(self, author):
        for title, content, category, tags, published in ARTICLES:
            KnowledgeArticle.objects.get_or_create(
                title=title,
                defaults={"content": content, "category": category, "tags": tags,
                          "published": published, "author": author},
            )

    def _seed_services(self):
        for name, description, category, eta, approval, priority in SERVICES:
            ServiceItem.objects.get_or_create(
                name=name,
                defaults={"description": description, "category": category, "estimated_time": eta,
                          "approval_required": approval,
                          "sla": SlaDefinition.objects.filter(priority=priority, active=True).first()},
            )
