"""
Accounts models: auth_user, auth_role, user_roles, profiles
"""
import uuid
from django.db import models
from django.contrib.auth.models import AbstractBaseUser, BaseUserManager, PermissionsMixin

from apps.core.blood_groups import BloodGroupChoices


# ============================================================================
# User Management
# ============================================================================

class UserManager(BaseUserManager):
    """Custom user manager for email-based authentication."""

    def create_user(self, email, password=None, **extra_fields):
        if not email:
            raise ValueError('Email is required')
        email = self.normalize_email(email)
        user = self.model(email=email, **extra_fields)
        user.set_password(password)
        user.save(using=self._db)
        return user

    def create_superuser(self, email, password=None, **extra_fields):
        extra_fields.setdefault('is_staff', True)
        extra_fields.setdefault('is_superuser', True)
        extra_fields.setdefault('is_active', True)
        return self.create_user(email, password, **extra_fields)


class User(AbstractBaseUser, PermissionsMixin):
    """
    Login identity. Everything a person shows to others lives on Profile.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    email = models.EmailField(unique=True, max_length=255)
    is_active = models.BooleanField(default=True)
    is_staff = models.BooleanField(default=False)  # Required for admin access
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    objects = UserManager()

    USERNAME_FIELD = 'email'
    REQUIRED_FIELDS = []

    class Meta:
        db_table = 'auth_user'
        verbose_name = 'User'
        verbose_name_plural = 'Users'
        indexes = [
            models.Index(fields=['email'], name='idx_user_email'),
            models.Index(fields=['is_active'], name='idx_user_active'),
        ]

    def __str__(self):
        return self.email

    @property
    def role_names(self):
        return set(self.user_roles.values_list('role__name', flat=True))


class RoleChoices(models.TextChoices):
    HOSPITAL = 'hospital', 'Hospital'
    BLOOD_BANK = 'blood_bank', 'Blood Bank'
    VOLUNTEER = 'volunteer', 'Volunteer'


# Roles that publish emergency posts
POSTER_ROLES = frozenset({RoleChoices.HOSPITAL, RoleChoices.BLOOD_BANK})


class Role(models.Model):
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    name = models.CharField(
        max_length=50,
        unique=True,
        choices=RoleChoices.choices
    )
    created_at = models.DateTimeField(auto_now_add=True)

    class Meta:
        db_table = 'auth_role'
        verbose_name = 'Role'
        verbose_name_plural = 'Roles'

    def __str__(self):
        return self.get_name_display()


class UserRole(models.Model):
    """
    Role grant for a user. Unique per (user, role).
    """
    user = models.ForeignKey(
        User,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )
    role = models.ForeignKey(
        Role,
        on_delete=models.CASCADE,
        related_name='user_roles'
    )

    class Meta:
        db_table = 'user_roles'
        verbose_name = 'User Role'
        verbose_name_plural = 'User Roles'
        unique_together = [('user', 'role')]
        indexes = [
            models.Index(fields=['user'], name='idx_user_role_user'),
            models.Index(fields=['role'], name='idx_user_role_role'),
        ]

    def __str__(self):
        return f"{self.user.email} - {self.role.name}"


# ============================================================================
# Profiles
# ============================================================================

class GenderChoices(models.TextChoices):
    MALE = 'male', 'Male'
    FEMALE = 'female', 'Female'
    OTHER = 'other', 'Other'


class Profile(models.Model):
    """
    Public face of a user, keyed by the user id.

    Hospitals and blood banks are identified by organization_name and
    phone. Volunteers fill in the demographic and health attributes, and
    `profile_completed` gates their participation in emergency posts.
    """
    user = models.OneToOneField(
        User,
        on_delete=models.CASCADE,
        primary_key=True,
        related_name='profile'
    )
    role = models.CharField(max_length=20, choices=RoleChoices.choices)
    full_name = models.CharField(max_length=255)
    phone = models.CharField(max_length=30, blank=True, null=True)
    organization_name = models.CharField(max_length=255, blank=True, null=True)

    # Volunteer attributes
    age = models.PositiveSmallIntegerField(blank=True, null=True)
    gender = models.CharField(max_length=10, choices=GenderChoices.choices, blank=True, null=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, blank=True, null=True, help_text='kg')
    blood_type = models.CharField(max_length=3, choices=BloodGroupChoices.choices, blank=True, null=True)
    smoking_habit = models.CharField(max_length=100, blank=True, null=True)
    drinking_habit = models.CharField(max_length=100, blank=True, null=True)
    job_description = models.CharField(max_length=255, blank=True, null=True)
    type_of_work = models.CharField(max_length=100, blank=True, null=True)
    stress_level = models.CharField(max_length=50, blank=True, null=True)
    blood_sugar_level = models.CharField(max_length=50, blank=True, null=True)
    major_diseases_history = models.TextField(blank=True, null=True)
    previous_donation = models.BooleanField(blank=True, null=True)
    city = models.CharField(max_length=120, blank=True, null=True)
    location = models.CharField(max_length=255, blank=True, null=True)

    # Stored as given; uploads are handled outside this service
    profile_picture_url = models.URLField(max_length=500, blank=True, null=True)
    profile_completed = models.BooleanField(default=False)

    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Fields a volunteer must provide before participating
    COMPLETION_FIELDS = ('full_name', 'age', 'gender', 'weight', 'city', 'phone', 'blood_type')

    class Meta:
        db_table = 'profiles'
        verbose_name = 'Profile'
        verbose_name_plural = 'Profiles'
        indexes = [
            models.Index(fields=['role'], name='idx_profile_role'),
            models.Index(fields=['city'], name='idx_profile_city'),
        ]

    def __str__(self):
        return self.display_name

    @property
    def display_name(self):
        return self.organization_name or self.full_name

    def missing_completion_fields(self):
        return [
            name for name in self.COMPLETION_FIELDS
            if getattr(self, name) in (None, '')
        ]
