"""
Intake of new submissions to open calls.

Preconditions are checked in a fixed order, and nothing is written unless all
of them hold:

1. The open call is live and its deadline has not passed
   (:class:`.SubmissionClosed`).
2. The content is structurally complete (:class:`.ValidationError`).
3. The artist has an attempt left (:class:`.QuotaExceeded`) and, if that
   attempt carries a fee, payment has been confirmed
   (:class:`.PaymentRequired`).

Quota and insert share one transaction. If another submission from the same
artist claims the same attempt index first, our insert is rejected by the
store, the transaction is rolled back, and the whole attempt is evaluated
again against the new count. At the quota boundary that second evaluation is
what turns the late writer away with :class:`.QuotaExceeded`.
"""

from typing import Any, Mapping, Union
import logging

from . import config, quota
from .context import get_int
from .core import load_stored_open_call
from .domain.agent import Agent
from .domain.submission import Submission, SubmissionContent
from .domain.util import get_tzaware_utc_now
from .exceptions import SubmissionClosed, ValidationError, PaymentRequired, \
    ConcurrentModification
from .services import store

logger = logging.getLogger(__name__)

Content = Union[SubmissionContent, Mapping[str, Any]]


def validate_content(content: Content) -> SubmissionContent:
    """
    Check the structure of submission content.

    Parameters
    ----------
    content : :class:`.SubmissionContent` or dict

    Returns
    -------
    :class:`.SubmissionContent`

    Raises
    ------
    :class:`.ValidationError`
        If required fields are missing or blank, or fields have the wrong
        shape.

    """
    if isinstance(content, Mapping):
        content = SubmissionContent.from_dict(content)
    if not isinstance(content, SubmissionContent):
        raise ValidationError('Submission content must be a mapping')
    problems = content.problems()
    if problems:
        raise ValidationError('; '.join(problems))
    return content


def submit(open_call_id: int, artist: Agent, payment_confirmed: bool,
           content: Content) -> Submission:
    """
    Submit work to an open call.

    Parameters
    ----------
    open_call_id : int
    artist : :class:`.Agent`
        The submitting artist, as resolved by the identity provider.
    payment_confirmed : bool
        Whether the payment gateway confirmed the fee for this attempt.
    content : :class:`.SubmissionContent` or dict

    Returns
    -------
    :class:`.Submission`
        The stored submission, with its ID.

    Raises
    ------
    :class:`.NoSuchOpenCall`
    :class:`.SubmissionClosed`
    :class:`.ValidationError`
    :class:`.QuotaExceeded`
    :class:`.PaymentRequired`
    :class:`.ConcurrentModification`
        If the attempt kept losing insert races and could not be placed.

    """
    retries = get_int('QUOTA_RACE_RETRIES', config.QUOTA_RACE_RETRIES)
    for _ in range(retries + 1):
        try:
            return _submit(open_call_id, artist, payment_confirmed, content)
        except store.ConsistencyError as e:
            logger.warning('Lost submission race for artist %s in open call'
                           ' %s, retrying: %s', artist.native_id,
                           open_call_id, e)
    raise ConcurrentModification('Could not place submission; please retry')


def _submit(open_call_id: int, artist: Agent, payment_confirmed: bool,
            content: Content) -> Submission:
    with store.transaction():
        open_call = load_stored_open_call(open_call_id)
        now = get_tzaware_utc_now()
        if not open_call.is_accepting_submissions(now):
            raise SubmissionClosed(f'Open call {open_call_id} is not'
                                   f' accepting submissions')

        content = validate_content(content)

        attempt = quota.next_attempt(open_call_id, artist.native_id,
                                     open_call=open_call)
        if attempt.fee_required and not payment_confirmed:
            raise PaymentRequired(f'Attempt {attempt.index} requires payment'
                                  f' of {attempt.fee_amount:.2f}')

        submission = store.store_submission(Submission(
            open_call_id=open_call_id,
            artist_id=artist.native_id,
            sequence_index=attempt.index,
            content=content,
            payment_status=(Submission.PAID if attempt.fee_required
                            else Submission.FREE),
            payment_amount=attempt.fee_amount,
            is_selected=False,
            submitted_at=now
        ))
    logger.info('Accepted submission %s (attempt %i, %s) from artist %s to'
                ' open call %s', submission.submission_id, attempt.index,
                submission.payment_status, artist.native_id, open_call_id)
    return submission
