"""Authorization rules for unarchiving records.

Every rule is a pure function of the acting user and the record state. The
``*_denial_reason`` functions return ``None`` when the action is allowed and
a short, user-facing reason otherwise; the boolean predicates are defined in
terms of them so the two can never disagree.

Deletion is stricter than editing: records in progress may be edited by the
people working on them, but no one may delete them.
"""

from unarchiving.domain.entities.role import Actor
from unarchiving.domain.entities.unarchiving_record import UnarchivingRecord

REASON_FINALIZED = "record is finalized"
REASON_IN_PROGRESS = "record is in progress"
REASON_NOT_OWNER = "not your record"
REASON_CREATOR_AFTER_PENDING = "record is no longer pending; only the assignee or an operator can edit it"
REASON_ADMIN_ONLY_HARD_DELETE = "only administrators can permanently delete records"
REASON_ADMIN_ONLY_OVERRIDE = "only administrators can override the status workflow"


def _is_creator(actor: Actor, record: UnarchivingRecord) -> bool:
    return record.created_by_id == actor.user_id


def _is_assignee(actor: Actor, record: UnarchivingRecord) -> bool:
    return record.assigned_to_id is not None and record.assigned_to_id == actor.user_id


# ── View ─────────────────────────────────────────────────────────────

def view_denial_reason(actor: Actor, record: UnarchivingRecord) -> str | None:
    if (
        _is_creator(actor, record)
        or _is_assignee(actor, record)
        or actor.is_admin
        or actor.has_viewer_capability
        or actor.has_operator_capability
    ):
        return None
    return REASON_NOT_OWNER


def can_view(actor: Actor, record: UnarchivingRecord) -> bool:
    return view_denial_reason(actor, record) is None


def sees_all_records(actor: Actor) -> bool:
    """Whether listings for this actor need no ownership scoping."""
    return actor.is_admin or actor.has_viewer_capability or actor.has_operator_capability


# ── Edit ─────────────────────────────────────────────────────────────

def edit_denial_reason(actor: Actor, record: UnarchivingRecord) -> str | None:
    if actor.is_admin:
        return None
    if record.status.is_final():
        return REASON_FINALIZED
    if _is_creator(actor, record) and record.status.is_pending():
        return None
    if _is_assignee(actor, record):
        return None
    if actor.has_operator_capability:
        return None
    if _is_creator(actor, record):
        return REASON_CREATOR_AFTER_PENDING
    return REASON_NOT_OWNER


def can_edit(actor: Actor, record: UnarchivingRecord) -> bool:
    return edit_denial_reason(actor, record) is None


def override_denial_reason(actor: Actor, record: UnarchivingRecord) -> str | None:
    return None if actor.is_admin else REASON_ADMIN_ONLY_OVERRIDE


def can_override_status(actor: Actor, record: UnarchivingRecord) -> bool:
    return override_denial_reason(actor, record) is None


# ── Delete / restore ─────────────────────────────────────────────────

def delete_denial_reason(actor: Actor, record: UnarchivingRecord) -> str | None:
    status = record.status
    if actor.is_admin:
        return REASON_IN_PROGRESS if status.is_in_progress() else None
    if _is_creator(actor, record):
        if status.is_final():
            return REASON_FINALIZED
        if status.is_in_progress():
            return REASON_IN_PROGRESS
        return None
    if _is_assignee(actor, record):
        return REASON_FINALIZED if status.is_final() else None
    return REASON_NOT_OWNER


def can_delete(actor: Actor, record: UnarchivingRecord) -> bool:
    return delete_denial_reason(actor, record) is None


def hard_delete_denial_reason(actor: Actor, record: UnarchivingRecord) -> str | None:
    if not actor.is_admin:
        return REASON_ADMIN_ONLY_HARD_DELETE
    if record.status.is_in_progress():
        return REASON_IN_PROGRESS
    return None


def can_hard_delete(actor: Actor, record: UnarchivingRecord) -> bool:
    return hard_delete_denial_reason(actor, record) is None


def restore_denial_reason(actor: Actor, record: UnarchivingRecord) -> str | None:
    if actor.is_admin or _is_creator(actor, record):
        return None
    return REASON_NOT_OWNER


def can_restore(actor: Actor, record: UnarchivingRecord) -> bool:
    return restore_denial_reason(actor, record) is None
