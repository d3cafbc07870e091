import csv
import io
from unittest import mock

from django.contrib.auth import get_user_model
from django.core.cache import cache
from django.core.management import call_command
from django.db import IntegrityError
from django.test import override_settings
from rest_framework import status
from rest_framework.test import APITestCase

from core.models import AuditLog
from sla.models import SlaDefinition
from support.models import Ticket, TicketComment, KnowledgeArticle, ServiceItem

User = get_user_model()


class SupportTestBase(APITestCase):

    def setUp(self):
        self.requester = User.objects.create_user(email="rita@example.com", password="x", full_name="Rita Requester")
        self.other = User.objects.create_user(email="otto@example.com", password="x")
        self.tech = User.objects.create_user(email="tech@example.com", password="x", role=User.Role.TECHNICIAN,
                                             full_name="James Wilson")
        self.manager = User.objects.create_user(email="boss@example.com", password="x", role=User.Role.MANAGER)
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.Role.ADMIN)

    def make_ticket(self, **kwargs):
        data = {"subject": "Laptop will not boot", "description": "Black screen", "category": "hardware",
                "requester": self.requester}
        data.update(kwargs)
        return Ticket.objects.create(**data)


class TicketModelTest(SupportTestBase):

    def test_ticket_numbers_are_sequential(self):
        self.assertEqual(self.make_ticket().ticket_number, "T-1000")
        self.assertEqual(self.make_ticket().ticket_number, "T-1001")

    def test_number_collision_draws_again(self):
        self.make_ticket()  # T-1000
        with mock.patch("common.numbering.next_number", side_effect=["T-1000", "T-1001"]) as drawn:
            ticket = self.make_ticket(subject="Printer jam")
        self.assertEqual(ticket.ticket_number, "T-1001")
        self.assertEqual(drawn.call_count, 2)
        self.assertEqual(Ticket.objects.count(), 2)

    def test_number_collision_gives_up_after_retries(self):
        self.make_ticket()
        with mock.patch("common.numbering.next_number", return_value="T-1000"):
            with self.assertRaises(IntegrityError):
                self.make_ticket(subject="Printer jam")
        self.assertEqual(Ticket.objects.count(), 1)

    def test_explicit_number_is_kept(self):
        self.assertEqual(self.make_ticket(ticket_number="T-5000").ticket_number, "T-5000")
        self.assertEqual(self.make_ticket().ticket_number, "T-5001")

    def test_resolution_stamps(self):
        ticket = self.make_ticket()
        ticket.status = Ticket.Status.CLOSED
        ticket.save()
        self.assertIsNotNone(ticket.resolved_at)
        self.assertIsNotNone(ticket.closed_at)

    def test_first_staff_comment_records_first_response(self):
        ticket = self.make_ticket()
        TicketComment.objects.create(ticket=ticket, user=self.requester, content="Any news?")
        ticket.refresh_from_db()
        self.assertIsNone(ticket.first_response_at)

        TicketComment.objects.create(ticket=ticket, user=self.tech, content="On it")
        ticket.refresh_from_db()
        self.assertIsNotNone(ticket.first_response_at)
        self.assertEqual(ticket.time_to_first_response, 0)

        first = ticket.first_response_at
        TicketComment.objects.create(ticket=ticket, user=self.tech, content="Still on it")
        ticket.refresh_from_db()
        self.assertEqual(ticket.first_response_at, first)


class TicketApiTest(SupportTestBase):

    def test_requester_files_ticket_for_themselves(self):
        SlaDefinition.objects.create(name="High", priority="high", response_time=60, resolution_time=240,
                                     business_hours_only=False)
        self.client.force_authenticate(self.requester)
        response = self.client.post("/api/tickets", {
            "subject": "VPN drops", "description": "Every hour", "category": "network",
            "priority": "high", "requester": str(self.other.id),
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["ticket_number"], "T-1000")
        self.assertEqual(str(response.data["requester"]), str(self.requester.id))
        self.assertIsNotNone(response.data["sla"])
        self.assertIsNotNone(response.data["response_deadline"])
        self.assertTrue(AuditLog.objects.filter(entity="support.Ticket", action="create").exists())

    def test_staff_may_file_on_behalf_of_someone(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post("/api/tickets", {
            "subject": "Phone setup", "description": "New starter", "category": "hardware",
            "requester": str(self.other.id),
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data["requester"]), str(self.other.id))

    def test_requesters_only_list_their_own_tickets(self):
        self.make_ticket()
        self.make_ticket(requester=self.other)

        self.client.force_authenticate(self.requester)
        self.assertEqual(self.client.get("/api/tickets").data["count"], 1)

        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.get("/api/tickets").data["count"], 2)

    def test_anonymous_cannot_list(self):
        self.assertEqual(self.client.get("/api/tickets").status_code, status.HTTP_401_UNAUTHORIZED)

    def test_ticket_detail_is_staff_only(self):
        ticket = self.make_ticket()
        url = f"/api/tickets/{ticket.id}"

        self.client.force_authenticate(self.requester)
        self.assertEqual(self.client.get(url).status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.tech)
        response = self.client.get(url)
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["requester_name"], "Rita Requester")

    def test_technician_updates_status(self):
        ticket = self.make_ticket()
        self.client.force_authenticate(self.tech)
        response = self.client.patch(f"/api/tickets/{ticket.id}", {"status": "resolved", "assignee": str(self.tech.id)},
                                     format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertIsNotNone(response.data["resolved_at"])
        audit = AuditLog.objects.filter(action="update").first()
        self.assertEqual(audit.meta_json["fields"], ["assignee", "status"])

    def test_filter_unassigned(self):
        self.make_ticket(assignee=self.tech)
        unassigned = self.make_ticket()

        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/tickets", {"assignee": "none"})
        self.assertEqual([row["id"] for row in response.data["results"]], [unassigned.id])

        response = self.client.get("/api/tickets", {"assignee": str(self.tech.id)})
        self.assertEqual(response.data["count"], 1)

        response = self.client.get("/api/tickets", {"assignee": "not-a-uuid"})
        self.assertEqual(response.data["count"], 0)

    def test_sort_by_priority(self):
        self.make_ticket(priority="low")
        self.make_ticket(priority="critical")
        self.make_ticket(priority="medium")

        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/tickets", {"sort": "priority"})
        self.assertEqual([row["priority"] for row in response.data["results"]], ["critical", "medium", "low"])

    def test_search(self):
        self.make_ticket(subject="Printer on floor 3 jammed")
        self.make_ticket(subject="Password reset")

        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/tickets", {"q": "printer"})
        self.assertEqual(response.data["count"], 1)


class TicketCommentApiTest(SupportTestBase):

    def setUp(self):
        super().setUp()
        self.ticket = self.make_ticket()
        self.url = f"/api/tickets/{self.ticket.id}/comments"

    def test_technician_reply_sets_first_response(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post(self.url, {"content": "Rebooting remotely"}, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["user_name"], "James Wilson")
        self.ticket.refresh_from_db()
        self.assertIsNotNone(self.ticket.first_response_at)
        self.assertTrue(AuditLog.objects.filter(action="comment", entity_id=str(self.ticket.id)).exists())

    def test_internal_notes_hidden_from_requester(self):
        TicketComment.objects.create(ticket=self.ticket, user=self.tech, content="Check warranty", is_internal=True)
        TicketComment.objects.create(ticket=self.ticket, user=self.tech, content="We are on it")

        self.client.force_authenticate(self.requester)
        response = self.client.get(self.url)
        self.assertEqual([c["content"] for c in response.data], ["We are on it"])

        self.client.force_authenticate(self.tech)
        self.assertEqual(len(self.client.get(self.url).data), 2)

    def test_requester_cannot_post_internal_note(self):
        self.client.force_authenticate(self.requester)
        response = self.client.post(self.url, {"content": "psst", "is_internal": True}, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertFalse(response.data["is_internal"])

    def test_requester_cannot_comment_on_others_ticket(self):
        other_ticket = self.make_ticket(requester=self.other)
        self.client.force_authenticate(self.requester)
        response = self.client.post(f"/api/tickets/{other_ticket.id}/comments", {"content": "hi"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_404_NOT_FOUND)

    def test_manager_cannot_post_comment(self):
        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get(self.url).status_code, status.HTTP_200_OK)
        response = self.client.post(self.url, {"content": "hello"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


class KnowledgeBaseApiTest(SupportTestBase):

    def setUp(self):
        super().setUp()
        self.vpn = KnowledgeArticle.objects.create(title="Connecting to the VPN", content="Install the client",
                                                   category="network", author=self.admin, published=True, views=3)
        self.reset = KnowledgeArticle.objects.create(title="Reset your password", content="Use the portal",
                                                     category="accounts", author=self.admin, published=True, views=9)
        self.draft = KnowledgeArticle.objects.create(title="Printer rollout", content="TBD",
                                                     category="hardware", author=self.admin, published=False)

    def test_anonymous_list_shows_published_only(self):
        response = self.client.get("/api/knowledge")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 2)

    def test_show_unpublished_requires_staff(self):
        self.assertEqual(self.client.get("/api/knowledge", {"show_unpublished": "true"}).data["count"], 2)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get("/api/knowledge", {"show_unpublished": "true"}).data["count"], 3)

    def test_retrieve_counts_views(self):
        response = self.client.get(f"/api/knowledge/{self.vpn.id}")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["views"], 4)
        self.vpn.refresh_from_db()
        self.assertEqual(self.vpn.views, 4)

    def test_drafts_are_not_retrievable_publicly(self):
        self.assertEqual(self.client.get(f"/api/knowledge/{self.draft.id}").status_code, status.HTTP_404_NOT_FOUND)

    def test_most_viewed_and_recent(self):
        response = self.client.get("/api/knowledge/most-viewed", {"limit": 1})
        self.assertEqual([a["id"] for a in response.data], [self.reset.id])

        response = self.client.get("/api/knowledge/recent")
        self.assertEqual({a["id"] for a in response.data}, {self.vpn.id, self.reset.id})

    def test_categories(self):
        response = self.client.get("/api/knowledge/categories")
        self.assertEqual(response.data, ["accounts", "network"])

    def test_category_filter_is_case_insensitive(self):
        response = self.client.get("/api/knowledge", {"category": "NETWORK"})
        self.assertEqual(response.data["count"], 1)

    def test_search_matches_whole_tags_not_json_text(self):
        KnowledgeArticle.objects.create(title="Guest wifi", content="Join the guest SSID", category="network",
                                        tags=["network", "café"], author=self.admin, published=True)

        self.assertEqual(self.client.get("/api/knowledge", {"q": "café"}).data["count"], 1)
        self.assertEqual(self.client.get("/api/knowledge", {"q": "NETW"}).data["count"], 1)
        self.assertEqual(self.client.get("/api/knowledge", {"q": "["}).data["count"], 0)
        self.assertEqual(self.client.get("/api/knowledge", {"q": '"'}).data["count"], 0)

    def test_search_still_covers_title_and_content(self):
        self.assertEqual(self.client.get("/api/knowledge", {"q": "portal"}).data["count"], 1)
        self.assertEqual(self.client.get("/api/knowledge", {"q": "vpn"}).data["count"], 1)

    def test_export_csv(self):
        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/knowledge/export")

        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertTrue(response["Content-Type"].startswith("text/csv"))
        self.assertIn("knowledge-base-export-", response["Content-Disposition"])
        rows = list(csv.reader(io.StringIO(response.content.decode("utf-8"))))
        self.assertEqual(rows[0], ["ID", "Title", "Category", "Author ID", "Content", "Views", "Published", "Created At"])
        self.assertEqual(len(rows), 3)
        self.assertEqual({r[6] for r in rows[1:]}, {"Yes"})

    def test_export_requires_staff(self):
        self.assertEqual(self.client.get("/api/knowledge/export").status_code, status.HTTP_401_UNAUTHORIZED)
        self.client.force_authenticate(self.requester)
        self.assertEqual(self.client.get("/api/knowledge/export").status_code, status.HTTP_403_FORBIDDEN)

    def test_admin_creates_article_with_clean_tags(self):
        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/knowledge", {
            "title": "Mobile email", "content": "Add an Exchange account", "category": "email",
            "tags": ["email", " mobile ", "email"], "published": True,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["tags"], ["email", "mobile"])
        self.assertEqual(str(response.data["author"]), str(self.admin.id))

    def test_technicians_cannot_write_articles(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post("/api/knowledge", {"title": "x", "content": "y", "category": "z"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_403_FORBIDDEN)


@override_settings(CACHES={"default": {"BACKEND": "django.core.cache.backends.locmem.LocMemCache",
                                       "LOCATION": "kb-list-tests"}})
class KnowledgeBaseListCacheTest(SupportTestBase):

    def setUp(self):
        super().setUp()
        cache.clear()
        self.vpn = KnowledgeArticle.objects.create(title="Connecting to the VPN", content="Install the client",
                                                   category="network", author=self.admin, published=True)

    def test_list_is_served_from_cache(self):
        self.assertEqual(self.client.get("/api/knowledge").data["results"][0]["title"], "Connecting to the VPN")
        # queryset updates skip the save signals
        KnowledgeArticle.objects.filter(pk=self.vpn.pk).update(title="Stale")
        self.assertEqual(self.client.get("/api/knowledge").data["results"][0]["title"], "Connecting to the VPN")

    def test_created_article_shows_up(self):
        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get("/api/knowledge").data["count"], 1)

        response = self.client.post("/api/knowledge", {
            "title": "Mobile email", "content": "Add an Exchange account", "category": "email", "published": True,
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)

        self.assertEqual(self.client.get("/api/knowledge").data["count"], 2)

    def test_edited_article_shows_up(self):
        self.assertEqual(self.client.get("/api/knowledge").data["results"][0]["title"], "Connecting to the VPN")

        self.client.force_authenticate(self.admin)
        response = self.client.patch(f"/api/knowledge/{self.vpn.id}", {"title": "VPN setup"}, format="json")
        self.assertEqual(response.status_code, status.HTTP_200_OK)

        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/knowledge").data["results"][0]["title"], "VPN setup")

    def test_view_counts_refresh_after_reads(self):
        self.assertEqual(self.client.get("/api/knowledge").data["results"][0]["views"], 0)
        self.client.get(f"/api/knowledge/{self.vpn.id}")
        self.assertEqual(self.client.get("/api/knowledge").data["results"][0]["views"], 1)

    def test_drafts_never_leak_into_public_pages(self):
        KnowledgeArticle.objects.create(title="Printer rollout", content="TBD", category="hardware",
                                        author=self.admin, published=False)
        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.get("/api/knowledge", {"show_unpublished": "true"}).data["count"], 2)

        self.client.force_authenticate(None)
        self.assertEqual(self.client.get("/api/knowledge", {"show_unpublished": "true"}).data["count"], 1)


class ServiceCatalogApiTest(SupportTestBase):

    def test_public_catalog_and_admin_writes(self):
        ServiceItem.objects.create(name="New laptop", description="Standard issue", category="hardware")

        response = self.client.get("/api/services")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["count"], 1)

        self.client.force_authenticate(self.tech)
        payload = {"name": "VPN token", "description": "Hardware token", "category": "access"}
        self.assertEqual(self.client.post("/api/services", payload, format="json").status_code,
                         status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        self.assertEqual(self.client.post("/api/services", payload, format="json").status_code,
                         status.HTTP_201_CREATED)


class SeedCommandTest(SupportTestBase):

    def test_seed_is_idempotent(self):
        call_command("seed_servicedesk", stdout=io.StringIO())
        counts = (Ticket.objects.count(), KnowledgeArticle.objects.count(), SlaDefinition.objects.count())
        call_command("seed_servicedesk", stdout=io.StringIO())
        self.assertEqual((Ticket.objects.count(), KnowledgeArticle.objects.count(), SlaDefinition.objects.count()),
                         counts)
        self.assertEqual(SlaDefinition.objects.count(), 4)
        self.assertTrue(Ticket.objects.filter(sla__isnull=False).exists())
