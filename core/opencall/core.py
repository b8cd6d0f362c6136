"""Read access to open calls and submissions, and application wiring."""

from typing import List, Optional
import logging
import warnings

from flask import Flask

from . import config
from .domain.open_call import OpenCall
from .domain.submission import Submission
from .exceptions import NoSuchOpenCall, NoSuchSubmission
from .services import store

logger = logging.getLogger(__name__)


def load_open_call(open_call_id: int) -> OpenCall:
    """
    Load an open call, showing its effective status.

    If the deadline of a live open call has passed, the returned open call is
    shown as under curation even if that transition has not yet been
    persisted. The persisted transition happens the first time a curator acts
    on the open call; see :mod:`.curation`.

    Parameters
    ----------
    open_call_id : int

    Returns
    -------
    :class:`.domain.open_call.OpenCall`

    Raises
    ------
    :class:`opencall.exceptions.NoSuchOpenCall`
        Raised when an open call with the passed ID cannot be found.

    """
    return load_stored_open_call(open_call_id).with_effective_status()


def load_stored_open_call(open_call_id: int,
                          for_update: bool = False) -> OpenCall:
    """Load an open call exactly as it is stored."""
    try:
        return store.get_open_call(open_call_id, for_update=for_update)
    except store.NoSuchRecord as e:
        raise NoSuchOpenCall(f'No open call with id {open_call_id}') from e


def load_submission(submission_id: int) -> Submission:
    """
    Load a single submission.

    Raises
    ------
    :class:`opencall.exceptions.NoSuchSubmission`

    """
    try:
        return store.get_submission(submission_id)
    except store.NoSuchRecord as e:
        raise NoSuchSubmission(f'No submission with id {submission_id}') from e


def load_submissions(open_call_id: int) -> List[Submission]:
    """Load all submissions to an open call, most recent first."""
    load_stored_open_call(open_call_id)
    return store.get_submissions(open_call_id)


def load_submissions_for_artist(artist_id: str,
                                open_call_id: Optional[int] = None) \
        -> List[Submission]:
    """
    Load an artist's submissions, optionally limited to one open call.

    Parameters
    ----------
    artist_id : str
        Identifier of the artist as issued by the identity provider.
    open_call_id : int or None

    Returns
    -------
    list
        Items are :class:`.domain.submission.Submission` instances, ordered by
        open call and then by attempt.

    """
    return store.get_artist_submissions(artist_id, open_call_id)


def load_winners(open_call_id: int) -> List[Submission]:
    """Load the selected submissions of an open call, by attempt time."""
    winners = [s for s in load_submissions(open_call_id) if s.is_selected]
    return sorted(winners, key=lambda s: (s.submitted_at, s.submission_id))


def init_app(app: Flask) -> None:
    """Set default configuration parameters for an application instance."""
    for key in ('MAX_SUBMISSION_ATTEMPTS', 'FREE_SUBMISSION_ATTEMPTS',
                'SUBMISSION_FEE', 'QUOTA_RACE_RETRIES', 'SCORE_MIN',
                'SCORE_MAX', 'CORE_VERSION'):
        app.config.setdefault(key, getattr(config, key))
    app.config.setdefault('OPENCALL_DATABASE_URI',
                          config.OPENCALL_DATABASE_URI)
    app.config.setdefault('LOGLEVEL', config.LOGLEVEL)
    quota = (int(app.config['MAX_SUBMISSION_ATTEMPTS']),
             int(app.config['FREE_SUBMISSION_ATTEMPTS']))
    if quota != (config.STANDARD_MAX_ATTEMPTS, config.STANDARD_FREE_ATTEMPTS):
        warnings.warn(f'Submission quota is {quota[0]} attempts with'
                      f' {quota[1]} free, not the published'
                      f' {config.STANDARD_MAX_ATTEMPTS} with'
                      f' {config.STANDARD_FREE_ATTEMPTS} free.')
    logging.getLogger(__package__).setLevel(int(app.config['LOGLEVEL']))
    store.init_app(app)
