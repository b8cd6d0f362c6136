"""
The open call curation state machine.

An open call moves through three states, and never backwards::

    live --> under_curation --> curated

The first transition happens on its own once the deadline passes (it is
persisted the first time a curator acts on the open call), or early, when a
curator calls :func:`begin_curation`. The second transition is
:func:`finalize`, which commits the winner set and closes the open call.

Every status write is conditioned on the status and version that were read
in the same transaction. If another writer got there first, nothing is
written and :class:`.ConcurrentModification` is raised. This makes
:func:`finalize` exactly-once: of any number of attempts on one open call,
at most one succeeds, and the selected submissions are exactly the winners
of that attempt.
"""

from typing import List, Optional, Sequence
import logging

from dataclasses import replace

from . import audit
from .core import load_stored_open_call
from .domain.agent import Agent
from .domain.curation import FinalizeResult
from .domain.open_call import OpenCall
from .domain.submission import Submission
from .domain.util import get_tzaware_utc_now
from .exceptions import NotAuthorized, NotCurating, AlreadyCurated, \
    InvalidWinnerSet, TooManyWinners, ConcurrentModification
from .services import store

logger = logging.getLogger(__name__)


def _must_be_curator(agent: Agent) -> None:
    if not agent.can_curate:
        raise NotAuthorized(f'{agent.native_id} may not curate open calls')


def _advance_past_deadline(open_call: OpenCall) -> OpenCall:
    """Persist the deadline transition, if it is due and not yet stored."""
    if open_call.effective_status() == open_call.status:
        return open_call
    return _transition(open_call, OpenCall.UNDER_CURATION)


def _transition(open_call: OpenCall, status: str, **extra: object) \
        -> OpenCall:
    if not open_call.can_transition_to(status):
        raise NotCurating(f'Open call {open_call.open_call_id} cannot move'
                          f' from {open_call.status} to {status}')
    if not store.transition_open_call(open_call, status, **extra):
        raise ConcurrentModification(f'Open call {open_call.open_call_id}'
                                     f' was modified concurrently')
    logger.debug('Open call %s: %s -> %s', open_call.open_call_id,
                 open_call.status, status)
    return replace(open_call, status=status, version=open_call.version + 1,
                   **extra)


def begin_curation(open_call_id: int, curator: Agent) -> OpenCall:
    """
    Close an open call to submissions and start curating it.

    Has no effect if the open call is already under curation, whether
    explicitly or because its deadline passed.

    Parameters
    ----------
    open_call_id : int
    curator : :class:`.Agent`
        Must hold the curate capability.

    Returns
    -------
    :class:`.OpenCall`
        The open call, under curation.

    Raises
    ------
    :class:`.NotAuthorized`
    :class:`.AlreadyCurated`
    :class:`.ConcurrentModification`

    """
    _must_be_curator(curator)
    with store.transaction():
        open_call = load_stored_open_call(open_call_id, for_update=True)
        if open_call.is_curated:
            raise AlreadyCurated(f'Open call {open_call_id} is curated')
        if open_call.is_live:
            open_call = _transition(open_call, OpenCall.UNDER_CURATION)
            logger.info('Curation of open call %s started by %s',
                        open_call_id, curator.native_id)
    return open_call


def _check_winners(open_call: OpenCall,
                   winner_ids: Sequence[int]) -> List[Submission]:
    winner_ids = list(winner_ids)
    if len(set(winner_ids)) != len(winner_ids):
        raise InvalidWinnerSet('Winners must be distinct')
    if len(winner_ids) > open_call.num_winners:
        raise TooManyWinners(f'At most {open_call.num_winners} winners may be'
                             f' selected, got {len(winner_ids)}')
    found = store.get_submissions_by_id(winner_ids)
    strangers = [sid for sid in winner_ids
                 if sid not in found
                 or found[sid].open_call_id != open_call.open_call_id]
    if strangers:
        raise InvalidWinnerSet(f'Not submissions to open call'
                               f' {open_call.open_call_id}: {strangers}')
    return [found[sid] for sid in winner_ids]


def finalize(open_call_id: int, winner_submission_ids: Sequence[int],
             curator: Agent, notes: Optional[str] = '') -> FinalizeResult:
    """
    Commit the winner set and close an open call.

    Parameters
    ----------
    open_call_id : int
    winner_submission_ids : list
        IDs of the winning submissions; distinct, all submitted to this open
        call, and no more than :attr:`.OpenCall.num_winners`.
    curator : :class:`.Agent`
        Must hold the curate capability.
    notes : str
        Curator notes, stored on the open call and in the curation trail.

    Returns
    -------
    :class:`.FinalizeResult`

    Raises
    ------
    :class:`.NotAuthorized`
    :class:`.NotCurating`
        If the open call is still live.
    :class:`.AlreadyCurated`
        If the open call has already been finalized.
    :class:`.TooManyWinners`
    :class:`.InvalidWinnerSet`
    :class:`.ConcurrentModification`
        If another writer changed the open call in the meantime. Nothing was
        written; re-read and retry.

    """
    _must_be_curator(curator)
    notes = notes or ''
    with store.transaction():
        open_call = load_stored_open_call(open_call_id, for_update=True)
        if open_call.is_curated:
            raise AlreadyCurated(f'Open call {open_call_id} is already'
                                 f' curated')
        open_call = _advance_past_deadline(open_call)
        if not open_call.is_under_curation:
            raise NotCurating(f'Open call {open_call_id} is still accepting'
                              f' submissions')
        winners = _check_winners(open_call, winner_submission_ids)
        winner_ids = [winner.submission_id for winner in winners]

        open_call = _transition(open_call, OpenCall.CURATED, notes=notes,
                                curated=get_tzaware_utc_now())
        selected = store.select_submissions(open_call_id, winner_ids)
        if selected != len(winner_ids):
            raise ConcurrentModification(f'Expected to select'
                                         f' {len(winner_ids)} submissions,'
                                         f' selected {selected}')
        winners = [replace(winner, is_selected=True) for winner in winners]

    logger.info('Curation of open call %s finalized by %s with %i winner(s)',
                open_call_id, curator.native_id, len(winners))
    failures = audit.record_all(
        audit.finalize_actions(open_call, winners, curator, notes)
    )
    return FinalizeResult(open_call=open_call, winners=winners,
                          audit_failures=failures)
