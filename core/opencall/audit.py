"""
Append-only trail of curation actions.

Writing to the trail is best-effort. :func:`record` never raises: a failure
is logged as a warning and reported to the caller as ``False``. Curation
decisions are committed before their audit entries are written, so a failure
here can never undo or block them. Dropped entries are not queued for retry.
"""

from typing import Iterable, List
import logging

from .domain.agent import User, Agent
from .domain.curation import CurationAction
from .domain.open_call import OpenCall
from .domain.submission import Submission
from .exceptions import AuditLogFailure
from .services import store

logger = logging.getLogger(__name__)


def record(action: CurationAction) -> bool:
    """
    Write an entry to the curation trail.

    Parameters
    ----------
    action : :class:`.CurationAction`

    Returns
    -------
    bool
        ``True`` if the entry was written.

    """
    try:
        write(action)
    except AuditLogFailure as e:
        logger.warning('%s (submission %s): %s', e, action.submission_id,
                       e.__cause__)
        return False
    return True


def write(action: CurationAction) -> CurationAction:
    """
    Write an entry to the curation trail in its own transaction.

    Raises
    ------
    :class:`.AuditLogFailure`
        If the entry could not be persisted, for any reason.

    """
    try:
        with store.transaction():
            return store.store_curation_action(action)
    except Exception as e:
        raise AuditLogFailure(f'Could not record {action.action} for open'
                              f' call {action.open_call_id}') from e


def record_all(actions: Iterable[CurationAction]) -> int:
    """
    Write several entries, each on its own.

    Returns
    -------
    int
        The number of entries that could not be written.

    """
    return sum(1 for action in actions if not record(action))


def finalize_actions(open_call: OpenCall, winners: List[Submission],
                     curator: Agent, notes: str = '') -> List[CurationAction]:
    """
    Build the trail entries for a finalized curation.

    One entry per winner, plus a call-level entry with the curator's notes.
    """
    curator_type = curator.curator_type if isinstance(curator, User) \
        else curator.agent_type
    winner_note = f'Selected as winner for "{open_call.title}".'
    if notes:
        winner_note = f'{winner_note} {notes}'
    actions = [
        CurationAction(
            open_call_id=open_call.open_call_id,
            submission_id=winner.submission_id,
            curator_id=curator.native_id,
            curator_type=curator_type,
            action=CurationAction.SELECT_WINNER,
            notes=winner_note
        )
        for winner in winners
    ]
    actions.append(CurationAction(
        open_call_id=open_call.open_call_id,
        curator_id=curator.native_id,
        curator_type=curator_type,
        action=CurationAction.FINALIZE_CURATION,
        notes=notes
    ))
    return actions


def get_curation_log(open_call_id: int) -> List[CurationAction]:
    """Get the curation trail for an open call, oldest first."""
    return store.get_curation_actions(open_call_id)
