from django.contrib.auth import get_user_model
from django_filters.rest_framework import DjangoFilterBackend
from rest_framework import generics, mixins, viewsets
from rest_framework.permissions import AllowAny, IsAuthenticated

from common.pagination import DefaultPagination
from common.permissions import RolePermission, STAFF_ROLES, ADMIN_ONLY, role_of, ADMIN
from .serializers import UserSerializer, UserDetailsSerializer, UserAdminSerializer

User = get_user_model()


class RegisterView(generics.CreateAPIView):
    """
    API endpoint for user registration.
    """
    queryset = User.objects.all()
    permission_classes = (AllowAny,)
    serializer_class = UserSerializer


class MeView(generics.RetrieveUpdateAPIView):
    """Current account; PATCH updates profile fields only."""
    permission_classes = (IsAuthenticated,)
    serializer_class = UserDetailsSerializer
    http_method_names = ["get", "patch", "head", "options"]

    def get_object(self):
        return self.request.user


class UserViewSet(mixins.ListModelMixin,
                  mixins.RetrieveModelMixin,
                  mixins.UpdateModelMixin,
                  viewsets.GenericViewSet):
    """
    Directory used to pick assignees and requesters.
    Staff roles can browse; only admins can change roles.
    """
    queryset = User.objects.filter(is_active=True).order_by("full_name", "email")
    permission_classes = [RolePermission]
    pagination_class = DefaultPagination
    filter_backends = [DjangoFilterBackend]
    filterset_fields = ["role", "department"]
    http_method_names = ["get", "patch", "head", "options"]

    role_rules = {
        "list": STAFF_ROLES,
        "retrieve": STAFF_ROLES,
        "partial_update": ADMIN_ONLY,
    }

    def get_serializer_class(self):
        if role_of(self.request.user) == ADMIN:
            return UserAdminSerializer
        return UserDetailsSerializer
