"""
Reviewer scores, aggregate scores and advisory ranking.

Each reviewer holds at most one review per submission; recording a review
again replaces that reviewer's earlier scores. Reviews by different
reviewers are independent rows, so they can be recorded concurrently.

Ranking is advisory input to curation. It is never applied as the winner set;
see :func:`.curation.finalize`.
"""

from numbers import Real
from typing import Any, Dict, List, Mapping, Optional, Union
import logging

from . import config
from .context import get_int
from .core import load_stored_open_call, load_submission
from .domain.agent import Agent
from .domain.review import Review, Scores, AggregateScore
from .domain.submission import Submission
from .exceptions import NotAuthorized, ValidationError
from .services import store

logger = logging.getLogger(__name__)

ScoreData = Union[Scores, Mapping[str, Any]]


def score_range() -> tuple:
    """Get the inclusive (min, max) range for scores."""
    return (get_int('SCORE_MIN', config.SCORE_MIN),
            get_int('SCORE_MAX', config.SCORE_MAX))


def validate_scores(scores: ScoreData) -> Scores:
    """
    Check that every dimension is scored within the configured scale.

    Raises
    ------
    :class:`.ValidationError`

    """
    if isinstance(scores, Mapping):
        missing = [dim for dim in Scores.DIMENSIONS if dim not in scores]
        if missing:
            raise ValidationError(f'Missing scores: {", ".join(missing)}')
        scores = Scores.from_dict(scores)
    low, high = score_range()
    for dimension in Scores.DIMENSIONS:
        value = getattr(scores, dimension)
        # Booleans are Real, but are not scores.
        if isinstance(value, bool) or not isinstance(value, Real):
            raise ValidationError(f'{dimension} must be a number')
        if not low <= value <= high:
            raise ValidationError(f'{dimension} must be between {low} and'
                                  f' {high}, got {value}')
    return scores


def record_review(submission_id: int, reviewer: Agent, scores: ScoreData,
                  public_notes: str = '', private_notes: str = '') -> Review:
    """
    Record (or replace) a reviewer's review of a submission.

    Parameters
    ----------
    submission_id : int
    reviewer : :class:`.Agent`
        Must hold the review capability.
    scores : :class:`.Scores` or dict
        One value per dimension in :const:`.Scores.DIMENSIONS`.
    public_notes : str
    private_notes : str
        Visible to curators only.

    Returns
    -------
    :class:`.Review`

    Raises
    ------
    :class:`.NotAuthorized`
    :class:`.ValidationError`
    :class:`.NoSuchSubmission`

    """
    if not reviewer.can_review:
        raise NotAuthorized(f'{reviewer.native_id} may not review submissions')
    scores = validate_scores(scores)
    with store.transaction():
        load_submission(submission_id)
        review = store.store_review(Review(
            submission_id=submission_id,
            reviewer_id=reviewer.native_id,
            scores=scores,
            public_notes=public_notes or '',
            private_notes=private_notes or ''
        ))
    logger.debug('Recorded review of submission %s by %s', submission_id,
                 reviewer.native_id)
    return review


def get_reviews(submission_id: int) -> List[Review]:
    """Get all reviews of a submission."""
    load_submission(submission_id)
    return store.get_reviews(submission_id)


def aggregate(submission_id: int) -> Optional[AggregateScore]:
    """
    Get the mean score of each dimension across all reviews of a submission.

    Returns
    -------
    :class:`.AggregateScore` or None
        ``None`` if the submission has not been reviewed yet.

    """
    return AggregateScore.from_reviews(submission_id,
                                       get_reviews(submission_id))


def aggregates_for(open_call_id: int) -> Dict[int, AggregateScore]:
    """Get aggregate scores of all reviewed submissions to an open call."""
    return {
        submission_id: AggregateScore.from_reviews(submission_id, reviews)
        for submission_id, reviews
        in store.get_reviews_for_open_call(open_call_id).items()
    }


def rank_submissions(submissions: List[Submission],
                     aggregates: Mapping[int, Optional[AggregateScore]]) \
        -> List[int]:
    """
    Order submissions by overall score.

    Highest aggregate overall score first; unreviewed submissions last. Ties
    go to the submission that was made first, then to the lowest ID.
    """
    def key(submission: Submission) -> tuple:
        score = aggregates.get(submission.submission_id)
        return (score is None,
                -score.overall if score is not None else 0,
                submission.submitted_at,
                submission.submission_id)
    return [s.submission_id for s in sorted(submissions, key=key)]


def rank(open_call_id: int) -> List[int]:
    """
    Rank the submissions to an open call.

    Returns
    -------
    list
        Submission IDs, best first. Advisory only.

    """
    load_stored_open_call(open_call_id)
    return rank_submissions(store.get_submissions(open_call_id),
                            aggregates_for(open_call_id))
