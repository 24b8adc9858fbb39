"""
Asset status rules

Encodes which statuses exist, how they are labelled and which actions the
detail page offers for each one. Keeps "what is allowed" separate from
"how the writes happen" (see asset_actions).
"""

from typing import List, Optional

AVAILABLE = 'available'
IN_USE = 'in_use'
MAINTENANCE = 'maintenance'
RETIRED = 'retired'
DISPOSED = 'disposed'
LOST = 'lost'

STATUSES = (AVAILABLE, IN_USE, MAINTENANCE, RETIRED, DISPOSED, LOST)

STATUS_LABELS = {
    AVAILABLE: 'Available',
    IN_USE: 'Checked Out',
    MAINTENANCE: 'Under Maintenance',
    RETIRED: 'Retired',
    DISPOSED: 'Disposed',
    LOST: 'Lost',
}

# Bootstrap badge classes used by the list and detail templates
STATUS_BADGES = {
    AVAILABLE: 'success',
    IN_USE: 'primary',
    MAINTENANCE: 'warning',
    RETIRED: 'secondary',
    DISPOSED: 'dark',
    LOST: 'danger',
}

# Action keys in the order the actions menu renders them
ACTION_LABELS = {
    'check_out': 'Check Out',
    'check_in': 'Check In',
    'reassign': 'Reassign',
    'repair': 'Repair',
    'dispose': 'Dispose',
    'mark_lost': 'Mark as Lost',
    'replicate': 'Replicate',
    'email': 'Email',
    'edit': 'Edit',
}


def status_label(status: Optional[str]) -> str:
    """Display label for a status; unknown values get their first underscore replaced"""
    if not status:
        return 'Unknown'
    return STATUS_LABELS.get(status, status.replace('_', ' ', 1))


def status_badge(status: Optional[str]) -> str:
    return STATUS_BADGES.get(status, 'secondary')


def is_valid_status(status: Optional[str]) -> bool:
    return status in STATUSES


def can_check_out(status: Optional[str]) -> bool:
    return status == AVAILABLE


def can_check_in(status: Optional[str]) -> bool:
    return status == IN_USE


def can_reassign(status: Optional[str]) -> bool:
    return status == IN_USE


def available_actions(status: Optional[str]) -> List[str]:
    """
    Action keys offered for an asset in the given status.

    Check-out is only offered for available assets; check-in and reassign only
    for checked-out assets. Repair, dispose and mark-as-lost are hidden once
    the asset already is in that state.
    """
    actions = []
    if can_check_out(status):
        actions.append('check_out')
    if can_check_in(status):
        actions.append('check_in')
    if can_reassign(status):
        actions.append('reassign')
    if status != MAINTENANCE:
        actions.append('repair')
    if status != DISPOSED:
        actions.append('dispose')
    if status != LOST:
        actions.append('mark_lost')
    actions.extend(['replicate', 'email', 'edit'])
    return actions


def status_choices():
    """(value, label) pairs for select inputs"""
    return [(status, STATUS_LABELS[status]) for status in STATUSES]
