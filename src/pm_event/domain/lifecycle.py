"""Event lifecycle state machine.

    created --open--> open --pause--> paused --open--> open
    open --close--> closed --resolve--> resolved (terminal)

Every (status, action) pair missing from the table is rejected with 409.
"""

from datetime import datetime

from src.pm_common.enums import EventStatus, LifecycleAction
from src.pm_common.errors import InvalidTransitionError, NoOutcomesError
from src.pm_event.domain.models import Event

TRANSITIONS: dict[tuple[EventStatus, LifecycleAction], EventStatus] = {
    (EventStatus.CREATED, LifecycleAction.OPEN): EventStatus.OPEN,
    (EventStatus.OPEN, LifecycleAction.PAUSE): EventStatus.PAUSED,
    (EventStatus.PAUSED, LifecycleAction.OPEN): EventStatus.OPEN,
    (EventStatus.OPEN, LifecycleAction.CLOSE): EventStatus.CLOSED,
    (EventStatus.CLOSED, LifecycleAction.RESOLVE): EventStatus.RESOLVED,
}


def next_status(status: EventStatus, action: LifecycleAction) -> EventStatus:
    try:
        return TRANSITIONS[(status, action)]
    except KeyError:
        raise InvalidTransitionError(status.value, action.value) from None


def can_transition(event: Event, action: LifecycleAction) -> bool:
    if (event.status, action) not in TRANSITIONS:
        return False
    if action == LifecycleAction.OPEN and not event.outcomes:
        return False
    return True


def apply_transition(event: Event, action: LifecycleAction, now: datetime) -> Event:
    """Move event to its next status in place and stamp the matching timestamp."""
    new_status = next_status(event.status, action)
    if action == LifecycleAction.OPEN and not event.outcomes:
        raise NoOutcomesError(event.code)

    event.status = new_status
    if new_status == EventStatus.OPEN and event.opened_at is None:
        event.opened_at = now
    elif new_status == EventStatus.CLOSED:
        event.closed_at = now
    elif new_status == EventStatus.RESOLVED:
        event.resolved_at = now
    return event


def is_tradable(event: Event) -> bool:
    return event.status == EventStatus.OPEN


def accepts_outcomes(event: Event) -> bool:
    return event.status == EventStatus.CREATED
