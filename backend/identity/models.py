import uuid
from django.contrib.auth.models import AbstractBaseUser, PermissionsMixin, BaseUserManager
from django.db import models
from django.utils.crypto import get_random_string
from django.utils import timezone
from django.utils.translation import gettext_lazy as _


class UserManager(BaseUserManager):
    """Manager for custom user model with email as the unique identifier."""

    def _unique_username(self, email):
        username = email.split('@')[0]
        original_username = username
        while self.model.objects.filter(username=username).exists():
            username = f"{original_username}_{get_random_string(4)}"
        return username

    def create_user(self, email, password=None, **extra_fields):
        """Create and save a regular User with the given email and password."""
        if not email:
            raise ValueError(_('The Email must be set'))

        email = self.normalize_email(email)
        # If username is not provided, generate a unique one from the email.
        if not extra_fields.get('username'):
            extra_fields['username'] = self._unique_username(email)

        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password, **extra_fields):
        """Create and save a SuperUser with the given email and password."""
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        extra_fields.setdefault('role', User.Role.ADMIN)

        if extra_fields.get('is_staff') is not True:
            raise ValueError(_('Superuser must have is_staff=True.'))
        if extra_fields.get('is_superuser') is not True:
            raise ValueError(_('Superuser must have is_superuser=True.'))
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Service desk account. Email is the login; `role` drives what the API allows
    (requesters, technicians working tickets, managers approving changes, admins).
    """
    class Role(models.TextChoices):
        USER = "user", _("User")
        TECHNICIAN = "technician", _("Technician")
        MANAGER = "manager", _("Manager")
        ADMIN = "admin", _("Admin")

    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(_('email address'), unique=True)
    username = models.CharField(_('username'), max_length=150, unique=True, help_text=_('Required. 150 characters or fewer. Letters, digits and @/./+/-/_ only.'))
    full_name = models.CharField(_('full name'), max_length=150, blank=True)
    role = models.CharField(_('role'), max_length=16, choices=Role.choices, default=Role.USER, db_index=True)
    department = models.CharField(_('department'), max_length=120, blank=True)
    position = models.CharField(_('position'), max_length=120, blank=True)
    avatar_url = models.URLField(_('avatar url'), max_length=500, blank=True)
    is_staff = models.BooleanField(default=False)
    is_active = models.BooleanField(default=True)
    date_joined = models.DateTimeField(default=timezone.now)

    # Add related_name to resolve clashes with the default User model
    groups = models.ManyToManyField(
        'auth.Group',
        verbose_name=_('groups'),
        blank=True,
        help_text=_(
            'The groups this user belongs to. A user will get all permissions '
            'granted to each of their groups.'
        ),
        related_name="identity_user_set",
        related_query_name="user",
    )
    user_permissions = models.ManyToManyField(
        'auth.Permission',
        verbose_name=_('user permissions'),
        blank=True,
        help_text=_('Specific permissions for this user.'),
        related_name="identity_user_set",
        related_query_name="user",
    )
    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = ['username', 'full_name']

    def __str__(self):
        return self.email

    @property
    def display_name(self):
        return self.full_name or self.username
