"""
Persistence for open calls, submissions, reviews and curation actions.

This module holds no business logic beyond consistent reads and writes. It
does, however, provide the two primitives that the workflow relies on for
correctness under concurrency:

1. :func:`store_submission` inserts a submission guarded by a unique
   constraint on (open call, artist, sequence index). If two writers observed
   the same prior count, only one insert succeeds; the other gets a
   :class:`.ConsistencyError` and its transaction is rolled back.
2. :func:`transition_open_call` is a conditional update: it changes the
   status only if the stored status and version are still the ones the
   caller observed, and reports whether it applied.

The caller determines the transaction scope, using the
:func:`.util.transaction` context manager. Functions that read outside of a
transaction are retried on transient failures.
"""

from typing import List, Optional, Dict, Iterable, Callable, Any
from datetime import datetime
from functools import wraps
from itertools import groupby
import logging

from retry import retry
from pytz import UTC
from flask import Flask
from sqlalchemy import update
from sqlalchemy.exc import IntegrityError, OperationalError

from ...domain.open_call import OpenCall
from ...domain.submission import Submission
from ...domain.review import Review
from ...domain.curation import CurationAction
from .models import Base
from .exceptions import StoreBaseException, NoSuchRecord, \
    TransactionFailed, Unavailable, ConsistencyError
from .util import transaction, current_session, db
from . import models, util

logger = logging.getLogger(__name__)


def handle_operational_errors(func: Callable) -> Callable:
    """Catch SQLAlchemy OperationalErrors and raise :class:`.Unavailable`."""
    @wraps(func)
    def inner(*args: Any, **kwargs: Any) -> Any:
        try:
            return func(*args, **kwargs)
        except OperationalError as e:
            raise Unavailable('Open call database unavailable') from e
    return inner


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    """Timestamps are stored as naive UTC."""
    if value is None or value.tzinfo is None:
        return value
    return value.astimezone(UTC).replace(tzinfo=None)


# --- OPEN CALLS ---

@handle_operational_errors
def store_open_call(open_call: OpenCall) -> OpenCall:
    """
    Persist a new open call.

    Open calls are created by hosts/admins outside of the curation workflow;
    this is provided for that collaborator and for bootstrapping.
    """
    session = current_session()
    row = models.OpenCall(
        title=open_call.title,
        deadline=_naive(open_call.deadline),
        num_winners=open_call.num_winners,
        status=open_call.status,
        submission_fee=open_call.submission_fee,
        admin_notes=open_call.notes,
        version=open_call.version
    )
    session.add(row)
    session.flush()
    return row.to_open_call()


@handle_operational_errors
def get_open_call(open_call_id: int, for_update: bool = False) -> OpenCall:
    """
    Get the stored state of an open call.

    Parameters
    ----------
    open_call_id : int
    for_update : bool
        If ``True``, lock the row for the rest of the caller's transaction
        (where the database supports it).

    Raises
    ------
    :class:`.NoSuchRecord`

    """
    query = current_session().query(models.OpenCall).populate_existing() \
        .filter(models.OpenCall.open_call_id == open_call_id)
    if for_update:
        query = query.with_for_update()
    row = query.one_or_none()
    if row is None:
        raise NoSuchRecord(f'Open call {open_call_id} not found')
    return row.to_open_call()


@handle_operational_errors
def transition_open_call(open_call: OpenCall, status: str,
                         notes: Optional[str] = None,
                         curated: Optional[datetime] = None) -> bool:
    """
    Change the status of an open call, if nobody else got there first.

    The update only applies to a row whose status and version still match
    ``open_call``. The version is incremented.

    Parameters
    ----------
    open_call : :class:`.domain.OpenCall`
        The state observed by the caller.
    status : str
        The new status.
    notes : str or None
        If provided, replaces the stored curator notes.
    curated : datetime or None
        If provided, records the moment curation was finalized.

    Returns
    -------
    bool
        ``True`` if exactly one row was updated.

    """
    values: Dict[str, Any] = {
        'status': status,
        'version': open_call.version + 1,
        'updated': _naive(datetime.now(UTC))
    }
    if notes is not None:
        values['admin_notes'] = notes
    if curated is not None:
        values['curated'] = _naive(curated)
    stmt = update(models.OpenCall) \
        .where(models.OpenCall.open_call_id == open_call.open_call_id) \
        .where(models.OpenCall.status == open_call.status) \
        .where(models.OpenCall.version == open_call.version) \
        .values(**values) \
        .execution_options(synchronize_session=False)
    result = current_session().execute(stmt)
    logger.debug('Transition open call %s from %s (v%s) to %s: %s rows',
                 open_call.open_call_id, open_call.status, open_call.version,
                 status, result.rowcount)
    return result.rowcount == 1


# --- SUBMISSIONS ---

@handle_operational_errors
def count_submissions(open_call_id: int, artist_id: str) -> int:
    """Count an artist's stored submissions to an open call."""
    return current_session().query(models.Submission) \
        .filter(models.Submission.open_call_id == open_call_id) \
        .filter(models.Submission.artist_id == str(artist_id)) \
        .count()


@handle_operational_errors
def store_submission(submission: Submission) -> Submission:
    """
    Insert a new submission.

    Raises
    ------
    :class:`.ConsistencyError`
        Another submission already holds this sequence index for the artist
        in this open call. The caller's transaction must be rolled back.

    """
    session = current_session()
    row = models.Submission(
        open_call_id=submission.open_call_id,
        artist_id=submission.artist_id,
        sequence_index=submission.sequence_index,
        payment_status=submission.payment_status,
        payment_amount=submission.payment_amount,
        is_selected=False,
        submission_data=submission.content.to_dict(),
        submitted_at=_naive(submission.submitted_at)
    )
    session.add(row)
    try:
        # Push the INSERT now, so that a conflict surfaces here rather than
        # at commit.
        session.flush()
    except IntegrityError as e:
        raise ConsistencyError(
            f'Attempt {submission.sequence_index} already exists for artist'
            f' {submission.artist_id} in open call {submission.open_call_id}'
        ) from e
    return row.to_submission()


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_submission(submission_id: int) -> Submission:
    """
    Get a single submission.

    Raises
    ------
    :class:`.NoSuchRecord`

    """
    row = current_session().get(models.Submission, submission_id)
    if row is None:
        raise NoSuchRecord(f'Submission {submission_id} not found')
    return row.to_submission()


@handle_operational_errors
def get_submissions_by_id(submission_ids: Iterable[int]) \
        -> Dict[int, Submission]:
    """Get submissions keyed by ID; missing IDs are simply absent."""
    rows = current_session().query(models.Submission) \
        .filter(models.Submission.submission_id.in_(list(submission_ids)))
    return {row.submission_id: row.to_submission() for row in rows}


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_submissions(open_call_id: int) -> List[Submission]:
    """Get all submissions to an open call, most recent first."""
    rows = current_session().query(models.Submission) \
        .filter(models.Submission.open_call_id == open_call_id) \
        .order_by(models.Submission.submitted_at.desc(),
                  models.Submission.submission_id.desc())
    return [row.to_submission() for row in rows]


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_artist_submissions(artist_id: str,
                           open_call_id: Optional[int] = None) \
        -> List[Submission]:
    """Get an artist's submissions, in the order they were made."""
    query = current_session().query(models.Submission) \
        .filter(models.Submission.artist_id == str(artist_id))
    if open_call_id is not None:
        query = query.filter(models.Submission.open_call_id == open_call_id)
    query = query.order_by(models.Submission.open_call_id,
                           models.Submission.sequence_index)
    return [row.to_submission() for row in query]


@handle_operational_errors
def select_submissions(open_call_id: int, submission_ids: List[int]) -> int:
    """
    Mark submissions as selected.

    Only unselected submissions belonging to ``open_call_id`` are touched.

    Returns
    -------
    int
        Number of submissions that were updated.

    """
    if not submission_ids:
        return 0
    stmt = update(models.Submission) \
        .where(models.Submission.open_call_id == open_call_id) \
        .where(models.Submission.submission_id.in_(submission_ids)) \
        .where(models.Submission.is_selected.is_(False)) \
        .values(is_selected=True) \
        .execution_options(synchronize_session=False)
    return current_session().execute(stmt).rowcount


# --- REVIEWS ---

@handle_operational_errors
def store_review(review: Review) -> Review:
    """Insert or replace a reviewer's review of a submission."""
    session = current_session()
    row = session.get(models.Review, (review.submission_id,
                                      review.reviewer_id))
    if row is None:
        row = models.Review(submission_id=review.submission_id,
                            reviewer_id=review.reviewer_id)
        session.add(row)
    row.update_from_review(review)
    session.flush()
    return row.to_review()


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_reviews(submission_id: int) -> List[Review]:
    """Get all reviews of a submission."""
    rows = current_session().query(models.Review) \
        .filter(models.Review.submission_id == submission_id) \
        .order_by(models.Review.created, models.Review.reviewer_id)
    return [row.to_review() for row in rows]


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_reviews_for_open_call(open_call_id: int) -> Dict[int, List[Review]]:
    """Get reviews of every reviewed submission to an open call."""
    rows = current_session().query(models.Review) \
        .join(models.Submission) \
        .filter(models.Submission.open_call_id == open_call_id) \
        .order_by(models.Review.submission_id)
    return {submission_id: [row.to_review() for row in group]
            for submission_id, group
            in groupby(rows, key=lambda row: row.submission_id)}


# --- CURATION ACTIONS ---

@handle_operational_errors
def store_curation_action(action: CurationAction) -> CurationAction:
    """Append an entry to the curation log."""
    session = current_session()
    row = models.CurationAction(
        open_call_id=action.open_call_id,
        submission_id=action.submission_id,
        curator_id=action.curator_id,
        curator_type=action.curator_type,
        action=action.action,
        notes=action.notes,
        created=_naive(action.created)
    )
    session.add(row)
    session.flush()
    return row.to_action()


@retry(Unavailable, tries=3, delay=1)
@handle_operational_errors
def get_curation_actions(open_call_id: int) -> List[CurationAction]:
    """Get the curation log for an open call, oldest first."""
    rows = current_session().query(models.CurationAction) \
        .filter(models.CurationAction.open_call_id == open_call_id) \
        .order_by(models.CurationAction.created,
                  models.CurationAction.action_id)
    return [row.to_action() for row in rows]


def init_app(app: Flask) -> None:
    """Register the SQLAlchemy extension to an application."""
    db.init_app(app)

    @app.teardown_request
    def teardown_request(exception: Optional[BaseException]) -> None:
        if exception:
            db.session.rollback()
        db.session.remove()


def create_all() -> None:
    """Create all tables in the database."""
    Base.metadata.create_all(db.engine)


def drop_all() -> None:
    """Drop all tables in the database."""
    Base.metadata.drop_all(db.engine)
