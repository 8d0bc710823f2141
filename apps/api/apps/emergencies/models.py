"""
Emergency posts and volunteer participations.
"""
import uuid
from django.conf import settings
from django.core.validators import MinValueValidator
from django.db import models

from apps.core.blood_groups import BloodGroupChoices


class UrgencyLevelChoices(models.TextChoices):
    CRITICAL = 'critical', 'Critical'
    HIGH = 'high', 'High'
    MEDIUM = 'medium', 'Medium'
    LOW = 'low', 'Low'


class EmergencyPostStatusChoices(models.TextChoices):
    ACTIVE = 'active', 'Active'
    FULFILLED = 'fulfilled', 'Fulfilled'
    CLOSED = 'closed', 'Closed'


class EmergencyPost(models.Model):
    """
    A request for `quantity` units of a blood group at a location.

    Published by a hospital or blood bank. Volunteers respond while the
    post is active. Only the poster may close or delete it.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    posted_by = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='emergency_posts'
    )
    blood_group = models.CharField(max_length=3, choices=BloodGroupChoices.choices)
    quantity = models.PositiveIntegerField(validators=[MinValueValidator(1)])
    location = models.CharField(max_length=255)
    urgency_level = models.CharField(
        max_length=10,
        choices=UrgencyLevelChoices.choices,
        default=UrgencyLevelChoices.HIGH
    )
    description = models.TextField(blank=True, null=True)
    contact_phone = models.CharField(max_length=30)
    status = models.CharField(
        max_length=10,
        choices=EmergencyPostStatusChoices.choices,
        default=EmergencyPostStatusChoices.ACTIVE
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    class Meta:
        db_table = 'emergency_posts'
        verbose_name = 'Emergency Post'
        verbose_name_plural = 'Emergency Posts'
        ordering = ['-created_at']
        constraints = [
            models.CheckConstraint(
                condition=models.Q(quantity__gte=1),
                name='emergency_post_quantity_positive'
            ),
        ]
        indexes = [
            models.Index(fields=['status', '-created_at'], name='idx_post_status_created'),
            models.Index(fields=['posted_by'], name='idx_post_posted_by'),
            models.Index(fields=['blood_group'], name='idx_post_blood_group'),
        ]

    def __str__(self):
        return f"{self.blood_group} x{self.quantity} @ {self.location} ({self.status})"

    @property
    def is_active(self):
        return self.status == EmergencyPostStatusChoices.ACTIVE


class ParticipationStatusChoices(models.TextChoices):
    PENDING = 'pending', 'Pending'
    ACCEPTED = 'accepted', 'Accepted'
    DECLINED = 'declined', 'Declined'


class Participation(models.Model):
    """
    A volunteer's response to one emergency post.

    Carries a snapshot of the volunteer's details at response time, so
    later profile edits do not change what the poster saw. A volunteer
    may respond to the same post more than once.
    """
    id = models.UUIDField(primary_key=True, default=uuid.uuid4, editable=False)
    emergency = models.ForeignKey(
        EmergencyPost,
        on_delete=models.CASCADE,
        related_name='participations'
    )
    volunteer = models.ForeignKey(
        settings.AUTH_USER_MODEL,
        on_delete=models.CASCADE,
        related_name='participations'
    )

    # Snapshot
    volunteer_name = models.CharField(max_length=255, blank=True, null=True)
    age = models.PositiveSmallIntegerField(blank=True, null=True)
    gender = models.CharField(max_length=10, blank=True, null=True)
    weight = models.DecimalField(max_digits=5, decimal_places=1, blank=True, null=True)
    city = models.CharField(max_length=120, blank=True, null=True)
    contact_number = models.CharField(max_length=30, blank=True, null=True)
    blood_sugar_level = models.CharField(max_length=50, blank=True, null=True)
    stress_level = models.CharField(max_length=50, blank=True, null=True)
    type_of_work = models.CharField(max_length=100, blank=True, null=True)
    major_diseases_history = models.TextField(blank=True, null=True)
    previous_donation = models.BooleanField(blank=True, null=True)
    message = models.TextField(blank=True, null=True)

    status = models.CharField(
        max_length=10,
        choices=ParticipationStatusChoices.choices,
        default=ParticipationStatusChoices.PENDING
    )
    created_at = models.DateTimeField(auto_now_add=True)
    updated_at = models.DateTimeField(auto_now=True)

    # Profile field -> snapshot field
    SNAPSHOT_FROM_PROFILE = {
        'full_name': 'volunteer_name',
        'age': 'age',
        'gender': 'gender',
        'weight': 'weight',
        'city': 'city',
        'phone': 'contact_number',
        'blood_sugar_level': 'blood_sugar_level',
        'stress_level': 'stress_level',
        'type_of_work': 'type_of_work',
        'major_diseases_history': 'major_diseases_history',
        'previous_donation': 'previous_donation',
    }

    class Meta:
        db_table = 'participations'
        verbose_name = 'Participation'
        verbose_name_plural = 'Participations'
        ordering = ['-created_at']
        indexes = [
            models.Index(fields=['emergency', 'status'], name='idx_participation_post'),
            models.Index(fields=['volunteer'], name='idx_participation_volunteer'),
        ]

    def __str__(self):
        return f"{self.volunteer_name or self.volunteer_id} -> {self.emergency_id} ({self.status})"
