"""
Emergency services - run the request workflow, publish posts, record
volunteer participation.
"""
from dataclasses import dataclass
from typing import Optional

from django.db import DatabaseError, transaction

from apps.accounts.models import Profile, RoleChoices
from apps.accounts.services import ensure_participation_ready
from apps.core.exceptions import DomainValidationError
from apps.core.observability.events import (
    log_domain_event,
    log_participation_recorded,
    log_workflow_transition,
)
from apps.inventory.services import find_available_supply

from .models import (
    EmergencyPost,
    EmergencyPostStatusChoices,
    Participation,
    ParticipationStatusChoices,
)
from .workflow import (
    AvailabilityChecked,
    CheckAvailability,
    CheckFailed,
    ContactBloodBanks,
    CreatePost,
    PostAnyway,
    PostRequest,
    RequestWorkflow,
    Submit,
    WorkflowError,
    WorkflowStateChoices,
    automatic_event,
    transition,
)


class ParticipationError(DomainValidationError):
    """Raised when a volunteer may not respond to a post."""
    error_type = 'participation'


class EmergencyPostError(DomainValidationError):
    error_type = 'emergency_post'


@dataclass
class WorkflowOutcome:
    workflow: RequestWorkflow
    post: Optional[EmergencyPost] = None


# ============================================================================
# Emergency posts
# ============================================================================

@transaction.atomic
def create_emergency_post(poster, request: PostRequest) -> EmergencyPost:
    """Insert one active EmergencyPost for `poster`."""
    post = EmergencyPost.objects.create(
        posted_by=poster,
        blood_group=request.blood_group,
        quantity=request.quantity,
        location=request.location,
        urgency_level=request.urgency_level,
        description=request.description,
        contact_phone=request.contact_phone,
        status=EmergencyPostStatusChoices.ACTIVE,
    )
    log_domain_event(
        'emergency_post_created',
        entity_type='EmergencyPost',
        entity_id=str(post.id),
        entity_ids={'posted_by_id': str(poster.id)},
        blood_group=post.blood_group,
        units=post.quantity,
        urgency_level=post.urgency_level,
    )
    return post


def _step(workflow, event, **log_extra):
    next_workflow, effect = transition(workflow, event)
    log_workflow_transition(
        from_state=workflow.state,
        to_state=next_workflow.state,
        poster_role=workflow.poster_role,
        **log_extra
    )
    return next_workflow, effect


def submit_emergency_request(
    poster,
    request: PostRequest,
    post_anyway: bool = False,
    contact_blood_banks: bool = False,
) -> WorkflowOutcome:
    """
    Run the request workflow from drafting to where it rests.

    Hospitals stop at availability_found when a blood bank can cover the
    request, unless `post_anyway` (post to volunteers regardless) or
    `contact_blood_banks` (abandon, no post) decides for them.

    Raises:
        WorkflowError: the poster does not hold the request's role
        DatabaseError: the availability check or the insert failed; no
            post exists afterwards
    """
    poster_roles = set(poster.user_roles.values_list('role__name', flat=True))
    if request.poster_role not in poster_roles:
        raise WorkflowError(
            f"Only a {RoleChoices(request.poster_role).label.lower()} can submit this request"
        )

    workflow, effect = _step(RequestWorkflow(request=request), Submit())
    post = None

    while True:
        if isinstance(effect, CheckAvailability):
            try:
                matches = find_available_supply(effect.blood_group, effect.min_quantity)
            except DatabaseError as e:
                _step(workflow, CheckFailed(error=str(e)), result='failure')
                raise
            workflow, effect = _step(workflow, AvailabilityChecked(matches=tuple(matches)))
            continue

        if isinstance(effect, CreatePost):
            try:
                post = create_emergency_post(poster, effect.request)
            except DatabaseError:
                log_workflow_transition(
                    from_state=WorkflowStateChoices.POSTED,
                    to_state=WorkflowStateChoices.DRAFTING,
                    poster_role=workflow.poster_role,
                    result='failure',
                )
                raise
            effect = None

        event = automatic_event(workflow)
        if event is None and workflow.state == WorkflowStateChoices.AVAILABILITY_FOUND:
            if post_anyway:
                event = PostAnyway()
            elif contact_blood_banks:
                event = ContactBloodBanks()

        if event is None:
            return WorkflowOutcome(workflow=workflow, post=post)

        workflow, effect = _step(workflow, event)


@transaction.atomic
def close_emergency_post(post: EmergencyPost, status=EmergencyPostStatusChoices.CLOSED) -> EmergencyPost:
    """Move an active post to fulfilled or closed. No further participations are accepted."""
    if status not in (EmergencyPostStatusChoices.FULFILLED, EmergencyPostStatusChoices.CLOSED):
        raise EmergencyPostError(f"Invalid status '{status}'. Must be fulfilled or closed")

    post = EmergencyPost.objects.select_for_update().get(pk=post.pk)
    if not post.is_active:
        raise EmergencyPostError(f"Post is already {post.status}")

    previous = post.status
    post.status = status
    post.save(update_fields=['status', 'updated_at'])

    log_domain_event(
        'emergency_post_status_changed',
        entity_type='EmergencyPost',
        entity_id=str(post.id),
        from_status=previous,
        to_status=status,
    )
    return post


# ============================================================================
# Participations
# ============================================================================

def build_snapshot(profile: Profile, **overrides) -> dict:
    """
    Participation snapshot from a volunteer profile.

    Values the volunteer sent with the response win over the profile.
    """
    snapshot = {
        snapshot_field: getattr(profile, profile_field)
        for profile_field, snapshot_field in Participation.SNAPSHOT_FROM_PROFILE.items()
    }
    for name, value in overrides.items():
        if value is not None:
            snapshot[name] = value
    return snapshot


@transaction.atomic
def record_participation(post: EmergencyPost, volunteer, **snapshot) -> Participation:
    """
    Record a volunteer's response to a post as a pending Participation.

    Booking an appointment afterwards is a separate, optional step; the
    participation stands on its own.

    Raises:
        ParticipationError: not a volunteer, or the post is not active
        ProfileIncompleteError: the volunteer has not completed their profile
    """
    if not volunteer.user_roles.filter(role__name=RoleChoices.VOLUNTEER).exists():
        raise ParticipationError('Only volunteers can respond to emergency posts')

    post = EmergencyPost.objects.select_for_update().get(pk=post.pk)
    if not post.is_active:
        raise ParticipationError(f"This post is {post.status} and no longer accepts responses")

    profile = volunteer.profile
    ensure_participation_ready(profile)

    participation = Participation.objects.create(
        emergency=post,
        volunteer=volunteer,
        status=ParticipationStatusChoices.PENDING,
        **build_snapshot(profile, **snapshot)
    )
    log_participation_recorded(participation)
    return participation


_PARTICIPATION_DECISIONS = {
    ParticipationStatusChoices.ACCEPTED,
    ParticipationStatusChoices.DECLINED,
}


@transaction.atomic
def review_participation(participation: Participation, reviewer, decision: str) -> Participation:
    """
    Poster accepts or declines a pending participation.

    Raises:
        ParticipationError: reviewer is not the poster, the decision is
            unknown, or the participation was already reviewed
    """
    participation = Participation.objects.select_for_update().select_related('emergency').get(
        pk=participation.pk
    )
    if participation.emergency.posted_by_id != reviewer.id:
        raise ParticipationError('Only the poster can review responses to this post')
    if decision not in _PARTICIPATION_DECISIONS:
        raise ParticipationError(f"Invalid decision '{decision}'. Must be accepted or declined")
    if participation.status != ParticipationStatusChoices.PENDING:
        raise ParticipationError(f"Participation is already {participation.status}")

    participation.status = decision
    participation.save(update_fields=['status', 'updated_at'])

    log_domain_event(
        'participation_reviewed',
        entity_type='Participation',
        entity_id=str(participation.id),
        entity_ids={'emergency_post_id': str(participation.emergency_id)},
        decision=decision,
    )
    return participation
