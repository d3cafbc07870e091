# File: backend/servicedesk_backend/urls.py
from django.contrib import admin
from django.urls import path, include
from django.http import JsonResponse
from django.views.generic import RedirectView
from drf_spectacular.views import SpectacularAPIView, SpectacularSwaggerView
from rest_framework_simplejwt.views import TokenObtainPairView, TokenRefreshView, TokenVerifyView

from reports.views import StatsView
from .api_router import router as api_router


def root(_r):
    return JsonResponse({
        "service": "servicedesk-backend",
        "docs": "/api/docs/",
        "health": "/api/v1/core/healthz/",
    })


urlpatterns = [
    path("admin", RedirectView.as_view(url="/admin/", permanent=False)),
    path("admin/", admin.site.urls),

    # API docs
    path("api/schema/", SpectacularAPIView.as_view(), name="schema"),
    path("api/docs/", SpectacularSwaggerView.as_view(url_name="schema"), name="swagger-ui"),

    # Health / diagnostics
    path("api/v1/core/", include("core.urls")),

    # Identity (clean surface for frontend)
    path("auth/", include("identity.urls")),

    # SimpleJWT
    path("api/token/", TokenObtainPairView.as_view(), name="token_obtain_pair"),
    path("api/token/refresh/", TokenRefreshView.as_view(), name="token_refresh"),
    path("api/token/verify/", TokenVerifyView.as_view(), name="token_verify"),

    # Service desk resources
    path("api/stats", StatsView.as_view(), name="stats"),
    path("api/", include(api_router.urls)),

    path("", root),
]
