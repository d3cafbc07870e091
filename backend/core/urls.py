from django.urls import path

from .views import healthz, VersionView, DeepHealthView

urlpatterns = [
    path('healthz/', healthz, name="core_healthz"),
    path('version/', VersionView.as_view(), name="core_version"),
    path('deep-health/', DeepHealthView.as_view(), name="core_deep_health"),
]
