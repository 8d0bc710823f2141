"""
Emergency request workflow.

A hospital that needs blood first checks whether any blood bank already
holds enough units; posting to volunteers is advisory and never blocked.
Blood banks are the supply, so their requests go straight to posting.

    drafting --submit--> checking_availability      (hospital)
    drafting --submit--> posted                     (blood bank)
    checking_availability --availability_checked--> availability_found   (matches)
    checking_availability --availability_checked--> no_availability      (no matches)
    checking_availability --check_failed--> drafting                     (error kept)
    no_availability --proceed--> posted
    availability_found --post_anyway--> posted
    availability_found --contact_blood_banks--> abandoned

Transitions are pure: `transition(workflow, event)` returns the next
workflow value and the effect the caller must perform, if any. Nothing in
this module touches the database.
"""
from dataclasses import dataclass, field, replace
from typing import Optional, Tuple, Union

from django.db import models

from apps.accounts.models import RoleChoices
from apps.core.exceptions import DomainValidationError


class WorkflowError(DomainValidationError):
    """Raised for an event the current state does not accept."""
    error_type = 'workflow'


class WorkflowStateChoices(models.TextChoices):
    DRAFTING = 'drafting', 'Drafting'
    CHECKING_AVAILABILITY = 'checking_availability', 'Checking Availability'
    AVAILABILITY_FOUND = 'availability_found', 'Availability Found'
    NO_AVAILABILITY = 'no_availability', 'No Availability'
    POSTED = 'posted', 'Posted'
    ABANDONED = 'abandoned', 'Abandoned'


TERMINAL_STATES = frozenset({
    WorkflowStateChoices.POSTED,
    WorkflowStateChoices.ABANDONED,
})


# ============================================================================
# Post requests (one variant per poster role)
# ============================================================================

@dataclass(frozen=True)
class HospitalPostRequest:
    blood_group: str
    quantity: int
    location: str
    contact_phone: str
    urgency_level: str = 'high'
    description: Optional[str] = None
    poster_role = RoleChoices.HOSPITAL


@dataclass(frozen=True)
class BloodBankPostRequest:
    blood_group: str
    quantity: int
    location: str
    contact_phone: str
    urgency_level: str = 'high'
    description: Optional[str] = None
    poster_role = RoleChoices.BLOOD_BANK


PostRequest = Union[HospitalPostRequest, BloodBankPostRequest]

POST_REQUEST_TYPES = {
    RoleChoices.HOSPITAL: HospitalPostRequest,
    RoleChoices.BLOOD_BANK: BloodBankPostRequest,
}


def build_post_request(poster_role: str, **fields) -> PostRequest:
    try:
        request_type = POST_REQUEST_TYPES[poster_role]
    except KeyError:
        raise WorkflowError('Only hospitals and blood banks can post emergency requests')
    return request_type(**fields)


# ============================================================================
# Events
# ============================================================================

@dataclass(frozen=True)
class Submit:
    pass


@dataclass(frozen=True)
class AvailabilityChecked:
    matches: tuple = ()


@dataclass(frozen=True)
class CheckFailed:
    error: str


@dataclass(frozen=True)
class Proceed:
    pass


@dataclass(frozen=True)
class PostAnyway:
    pass


@dataclass(frozen=True)
class ContactBloodBanks:
    pass


Event = Union[Submit, AvailabilityChecked, CheckFailed, Proceed, PostAnyway, ContactBloodBanks]


# ============================================================================
# Effects
# ============================================================================

@dataclass(frozen=True)
class CheckAvailability:
    blood_group: str
    min_quantity: int


@dataclass(frozen=True)
class CreatePost:
    request: PostRequest


Effect = Union[CheckAvailability, CreatePost]


# ============================================================================
# Workflow
# ============================================================================

@dataclass(frozen=True)
class RequestWorkflow:
    request: PostRequest
    state: str = WorkflowStateChoices.DRAFTING
    matches: tuple = field(default=())
    error: Optional[str] = None

    @property
    def poster_role(self):
        return self.request.poster_role

    @property
    def is_terminal(self):
        return self.state in TERMINAL_STATES


def _reject(workflow, event):
    raise WorkflowError(
        f"Event {type(event).__name__} is not allowed in state '{workflow.state}'"
    )


def transition(workflow: RequestWorkflow, event: Event) -> Tuple[RequestWorkflow, Optional[Effect]]:
    state = workflow.state

    if state == WorkflowStateChoices.DRAFTING:
        if not isinstance(event, Submit):
            _reject(workflow, event)
        if workflow.poster_role == RoleChoices.HOSPITAL:
            return (
                replace(workflow, state=WorkflowStateChoices.CHECKING_AVAILABILITY, error=None),
                CheckAvailability(workflow.request.blood_group, workflow.request.quantity),
            )
        return (
            replace(workflow, state=WorkflowStateChoices.POSTED, error=None),
            CreatePost(workflow.request),
        )

    if state == WorkflowStateChoices.CHECKING_AVAILABILITY:
        if isinstance(event, AvailabilityChecked):
            matches = tuple(event.matches)
            if matches:
                return replace(workflow, state=WorkflowStateChoices.AVAILABILITY_FOUND, matches=matches), None
            return replace(workflow, state=WorkflowStateChoices.NO_AVAILABILITY, matches=()), None
        if isinstance(event, CheckFailed):
            return replace(workflow, state=WorkflowStateChoices.DRAFTING, error=event.error), None
        _reject(workflow, event)

    if state == WorkflowStateChoices.NO_AVAILABILITY:
        if isinstance(event, Proceed):
            return replace(workflow, state=WorkflowStateChoices.POSTED), CreatePost(workflow.request)
        _reject(workflow, event)

    if state == WorkflowStateChoices.AVAILABILITY_FOUND:
        if isinstance(event, PostAnyway):
            return replace(workflow, state=WorkflowStateChoices.POSTED), CreatePost(workflow.request)
        if isinstance(event, ContactBloodBanks):
            return replace(workflow, state=WorkflowStateChoices.ABANDONED), None
        _reject(workflow, event)

    _reject(workflow, event)


def automatic_event(workflow: RequestWorkflow) -> Optional[Event]:
    """The event a state fires on its own, without a user decision."""
    if workflow.state == WorkflowStateChoices.NO_AVAILABILITY:
        return Proceed()
    return None
