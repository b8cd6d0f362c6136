"""
Per-artist submission quota and pricing for an open call.

An artist may make up to :const:`.config.MAX_SUBMISSION_ATTEMPTS` submissions
to an open call. The first :const:`.config.FREE_SUBMISSION_ATTEMPTS` are
free; every further attempt carries the open call's submission fee.

:func:`next_attempt` only reads. To be safe against concurrent submissions it
must be called inside the same :func:`.store.transaction` as the insert that
uses its result; see :mod:`.intake`.
"""

from decimal import Decimal
from typing import Optional
import logging

from dataclasses import dataclass

from . import config
from .context import get_application_config, get_int
from .core import load_open_call
from .domain.open_call import OpenCall
from .exceptions import QuotaExceeded
from .services import store

logger = logging.getLogger(__name__)


@dataclass
class Attempt:
    """The next submission attempt available to an artist."""

    index: int
    fee_required: bool
    fee_amount: Decimal


@dataclass
class SubmissionPricing:
    """What an artist has used, and what the next submission will cost."""

    free_remaining: int
    paid_count: int
    total_submissions: int
    next_submission_cost: Decimal
    """``0`` if free, the fee if paid, ``-1`` once the quota is reached."""

    can_submit: bool


def max_attempts() -> int:
    return get_int('MAX_SUBMISSION_ATTEMPTS', config.MAX_SUBMISSION_ATTEMPTS)


def free_attempts() -> int:
    return get_int('FREE_SUBMISSION_ATTEMPTS', config.FREE_SUBMISSION_ATTEMPTS)


def fee_for(open_call: Optional[OpenCall]) -> Decimal:
    """Get the fee for a paid attempt at ``open_call``."""
    if open_call is not None and open_call.submission_fee is not None:
        return open_call.submission_fee
    return Decimal(str(get_application_config().get('SUBMISSION_FEE',
                                                    config.SUBMISSION_FEE)))


def attempt_after(count: int, fee: Decimal) -> Attempt:
    """
    Get the attempt that follows ``count`` prior submissions.

    Raises
    ------
    :class:`.QuotaExceeded`
        If ``count`` has reached the maximum number of attempts.

    """
    limit = max_attempts()
    if count >= limit:
        raise QuotaExceeded(f'Maximum submissions reached ({limit} total)')
    index = count + 1
    fee_required = index > free_attempts()
    return Attempt(index=index, fee_required=fee_required,
                   fee_amount=fee if fee_required else Decimal('0'))


def next_attempt(open_call_id: int, artist_id: str,
                 open_call: Optional[OpenCall] = None) -> Attempt:
    """
    Determine the index and fee of an artist's next submission attempt.

    Parameters
    ----------
    open_call_id : int
    artist_id : str
    open_call : :class:`.OpenCall`
        If the caller has already loaded the open call, it is used to
        determine the fee instead of loading it again.

    Returns
    -------
    :class:`.Attempt`

    Raises
    ------
    :class:`.QuotaExceeded`

    """
    if open_call is None:
        open_call = load_open_call(open_call_id)
    count = store.count_submissions(open_call_id, artist_id)
    logger.debug('Artist %s has %i submissions to open call %s', artist_id,
                 count, open_call_id)
    return attempt_after(count, fee_for(open_call))


def pricing_for(count: int, fee: Decimal) -> SubmissionPricing:
    """Summarize quota use after ``count`` prior submissions."""
    free = free_attempts()
    try:
        cost = attempt_after(count, fee).fee_amount
        can_submit = True
    except QuotaExceeded:
        cost = Decimal('-1')
        can_submit = False
    return SubmissionPricing(
        free_remaining=max(free - count, 0),
        paid_count=max(count - free, 0),
        total_submissions=count,
        next_submission_cost=cost,
        can_submit=can_submit
    )


def get_pricing(open_call_id: int, artist_id: str) -> SubmissionPricing:
    """Get the current quota use and next cost for an artist."""
    open_call = load_open_call(open_call_id)
    count = store.count_submissions(open_call_id, artist_id)
    return pricing_for(count, fee_for(open_call))


def describe_pricing(pricing: Optional[SubmissionPricing]) -> str:
    """Describe the next submission's cost for display."""
    if pricing is None:
        return "Submission pricing unavailable"
    if not pricing.can_submit:
        return f"Maximum submissions reached ({max_attempts()} total)"
    if pricing.next_submission_cost == 0:
        return "Free submission available"
    return f"${pricing.next_submission_cost:.2f} for additional submission"
