from django.urls import path

from .views import RegisterView, MeView

urlpatterns = [
    path("register/", RegisterView.as_view(), name="auth_register"),
    path("me/", MeView.as_view(), name="auth_me"),
]
