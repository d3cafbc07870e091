from datetime import timedelta

from django.contrib.auth import get_user_model
from django.utils import timezone
from rest_framework import status
from rest_framework.test import APITestCase

from common.numbering import next_number
from itsm.models import Problem, Change, Asset

User = get_user_model()


class ItsmTestBase(APITestCase):

    def setUp(self):
        self.requester = User.objects.create_user(email="req@example.com", password="x")
        self.tech = User.objects.create_user(email="tech@example.com", password="x", role=User.Role.TECHNICIAN)
        self.manager = User.objects.create_user(email="boss@example.com", password="x", role=User.Role.MANAGER)
        self.admin = User.objects.create_user(email="admin@example.com", password="x", role=User.Role.ADMIN)


class NumberingTest(ItsmTestBase):

    def test_problem_numbers_are_sequential(self):
        first = Problem.objects.create(title="Mail outage", description="x", category="email", created_by=self.tech)
        second = Problem.objects.create(title="DNS flaps", description="x", category="network", created_by=self.tech)
        self.assertEqual(first.problem_number, "P-1000")
        self.assertEqual(second.problem_number, "P-1001")

    def test_change_numbers_are_sequential(self):
        first = Change.objects.create(title="Patch mail", description="x", category="email", requester=self.manager)
        self.assertEqual(first.change_number, "C-1000")

    def test_numbering_follows_highest_numeric_suffix(self):
        Problem.objects.create(problem_number="P-9999", title="a", description="x", category="c", created_by=self.tech)
        nxt = Problem.objects.create(title="b", description="x", category="c", created_by=self.tech)
        self.assertEqual(nxt.problem_number, "P-10000")

    def test_numbering_skips_malformed_numbers(self):
        Problem.objects.create(problem_number="P-1200", title="a", description="x", category="c", created_by=self.tech)
        Problem.objects.create(problem_number="P-99999-old", title="b", description="x", category="c",
                               created_by=self.tech)
        self.assertEqual(next_number(Problem, "problem_number", "P-"), "P-1201")
        self.assertEqual(next_number(Change, "change_number", "C-"), "C-1000")

    def test_resolving_problem_stamps_resolved_at(self):
        problem = Problem.objects.create(title="Mail outage", description="x", category="email", created_by=self.tech)
        self.assertIsNone(problem.resolved_at)
        problem.status = Problem.Status.RESOLVED
        problem.save()
        self.assertIsNotNone(problem.resolved_at)

    def test_approval_stamps_approval_date(self):
        change = Change.objects.create(title="Patch mail", description="x", category="email", requester=self.manager)
        self.assertIsNone(change.approval_date)
        change.approved_by = self.admin
        change.save()
        self.assertIsNotNone(change.approval_date)


class ProblemApiTest(ItsmTestBase):

    def test_requesters_cannot_see_problems(self):
        self.client.force_authenticate(self.requester)
        self.assertEqual(self.client.get("/api/problems").status_code, status.HTTP_403_FORBIDDEN)

    def test_technician_creates_problem_as_author(self):
        self.client.force_authenticate(self.tech)
        response = self.client.post("/api/problems", {
            "title": "Recurring VPN drops", "description": "Hourly resets", "category": "network",
        }, format="json")

        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["problem_number"], "P-1000")
        self.assertEqual(str(response.data["created_by"]), str(self.tech.id))

    def test_no_delete(self):
        problem = Problem.objects.create(title="a", description="x", category="c", created_by=self.tech)
        self.client.force_authenticate(self.admin)
        response = self.client.delete(f"/api/problems/{problem.id}")
        self.assertEqual(response.status_code, status.HTTP_405_METHOD_NOT_ALLOWED)


class ChangeApiTest(ItsmTestBase):

    def test_changes_are_management_only(self):
        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.get("/api/changes").status_code, status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.manager)
        self.assertEqual(self.client.get("/api/changes").status_code, status.HTTP_200_OK)

    def test_requester_defaults_to_caller(self):
        self.client.force_authenticate(self.manager)
        response = self.client.post("/api/changes", {
            "title": "Firewall rule", "description": "Open 443", "category": "network",
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(str(response.data["requester"]), str(self.manager.id))

    def test_schedule_end_before_start_rejected(self):
        now = timezone.now()
        self.client.force_authenticate(self.manager)
        response = self.client.post("/api/changes", {
            "title": "Firewall rule", "description": "Open 443", "category": "network",
            "scheduled_start_time": now.isoformat(),
            "scheduled_end_time": (now - timedelta(hours=1)).isoformat(),
        }, format="json")
        self.assertEqual(response.status_code, status.HTTP_400_BAD_REQUEST)
        self.assertIn("scheduled_end_time", response.data)

    def test_scheduled_sort_puts_unscheduled_last(self):
        now = timezone.now()
        unscheduled = Change.objects.create(title="later", description="x", category="c", requester=self.manager)
        late = Change.objects.create(title="late", description="x", category="c", requester=self.manager,
                                     scheduled_start_time=now + timedelta(days=2))
        soon = Change.objects.create(title="soon", description="x", category="c", requester=self.manager,
                                     scheduled_start_time=now + timedelta(days=1))

        self.client.force_authenticate(self.manager)
        response = self.client.get("/api/changes", {"sort": "scheduled"})
        ids = [row["id"] for row in response.data["results"]]
        self.assertEqual(ids, [soon.id, late.id, unscheduled.id])


class AssetApiTest(ItsmTestBase):

    def setUp(self):
        super().setUp()
        self.asset = Asset.objects.create(asset_tag="LAP-0042", name="ThinkPad T14", type="hardware",
                                          status=Asset.Status.REPAIR_NEEDED)

    def test_lookup_by_tag(self):
        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/assets/tag/LAP-0042")
        self.assertEqual(response.status_code, status.HTTP_200_OK)
        self.assertEqual(response.data["name"], "ThinkPad T14")

        self.assertEqual(self.client.get("/api/assets/tag/NOPE").status_code, status.HTTP_404_NOT_FOUND)

    def test_filter_by_status(self):
        Asset.objects.create(asset_tag="LAP-0043", name="Spare", type="hardware")
        self.client.force_authenticate(self.tech)
        response = self.client.get("/api/assets", {"status": "repair_needed"})
        self.assertEqual(response.data["count"], 1)

    def test_only_admin_registers_assets(self):
        payload = {"asset_tag": "SRV-01", "name": "File server", "type": "hardware"}

        self.client.force_authenticate(self.tech)
        self.assertEqual(self.client.post("/api/assets", payload, format="json").status_code,
                         status.HTTP_403_FORBIDDEN)

        self.client.force_authenticate(self.admin)
        response = self.client.post("/api/assets", payload, format="json")
        self.assertEqual(response.status_code, status.HTTP_201_CREATED)
        self.assertEqual(response.data["status"], Asset.Status.ACTIVE)

    def test_requesters_cannot_browse_assets(self):
        self.client.force_authenticate(self.requester)
        self.assertEqual(self.client.get("/api/assets").status_code, status.HTTP_403_FORBIDDEN)
