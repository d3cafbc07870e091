# backend/servicedesk_backend/api_router.py
from rest_framework.routers import DefaultRouter

from identity.views import UserViewSet
from itsm.views import ProblemViewSet, ChangeViewSet, AssetViewSet
from reports.views import ReportViewSet
from sla.views import SlaDefinitionViewSet, BusinessHoursViewSet
from support.views import TicketViewSet, KnowledgeArticleViewSet, ServiceItemViewSet

router = DefaultRouter(trailing_slash=False)

# Tickets & knowledge
router.register(r"tickets", TicketViewSet, basename="ticket")
router.register(r"knowledge", KnowledgeArticleViewSet, basename="knowledge")
router.register(r"services", ServiceItemViewSet, basename="service")

# SLA configuration
router.register(r"slas", SlaDefinitionViewSet, basename="sla")
router.register(r"business-hours", BusinessHoursViewSet, basename="business-hours")

# ITSM
router.register(r"problems", ProblemViewSet, basename="problem")
router.register(r"changes", ChangeViewSet, basename="change")
router.register(r"assets", AssetViewSet, basename="asset")

# Directory & reports
router.register(r"users", UserViewSet, basename="user")
router.register(r"reports", ReportViewSet, basename="report")
