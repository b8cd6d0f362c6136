"""
Data structures for reviews and aggregate scores.

All reviewer input uses a single set of scoring dimensions on one canonical
scale (1 to 10 by default; see :mod:`opencall.config`). The legacy 1 to 5
"rating" is not stored separately; :func:`rating_to_overall` maps it onto the
``overall`` dimension.
"""

from typing import Optional, Dict, Iterable, Any, Mapping
from datetime import datetime

from dataclasses import dataclass, field, asdict

from .util import coerce_datetime

RATING_MIN = 1
RATING_MAX = 5


@dataclass
class Scores:
    """A reviewer's scores for one submission."""

    DIMENSIONS = ['technical_quality', 'artistic_merit', 'theme_relevance',
                  'overall']

    technical_quality: float
    artistic_merit: float
    theme_relevance: float
    overall: float

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'Scores':
        return cls(**{key: data.get(key) for key in cls.DIMENSIONS})

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass
class Review:
    """One reviewer's assessment of one submission."""

    submission_id: int
    reviewer_id: str
    scores: Scores
    public_notes: str = field(default_factory=str)
    private_notes: str = field(default_factory=str)
    """Visible to curators only."""

    created: Optional[datetime] = field(default=None)
    updated: Optional[datetime] = field(default=None)

    def __post_init__(self) -> None:
        """Coerce raw data."""
        self.reviewer_id = str(self.reviewer_id)
        if isinstance(self.scores, dict):
            self.scores = Scores.from_dict(self.scores)
        self.created = coerce_datetime(self.created)
        self.updated = coerce_datetime(self.updated)


@dataclass
class AggregateScore:
    """Per-dimension means across all reviews of a submission."""

    submission_id: int
    review_count: int
    technical_quality: float
    artistic_merit: float
    theme_relevance: float
    overall: float

    @classmethod
    def from_reviews(cls, submission_id: int,
                     reviews: Iterable[Review]) -> Optional['AggregateScore']:
        """
        Compute the arithmetic mean of each dimension.

        Returns ``None`` if there are no reviews, so that "not yet reviewed"
        is never confused with a score of zero.
        """
        reviews = list(reviews)
        if not reviews:
            return None
        n = len(reviews)
        means = {
            dim: sum(getattr(r.scores, dim) for r in reviews) / n
            for dim in Scores.DIMENSIONS
        }
        return cls(submission_id=submission_id, review_count=n, **means)


def rating_to_overall(rating: float, score_min: float = 1,
                      score_max: float = 10) -> float:
    """
    Map a legacy 1 to 5 rating onto the canonical overall scale.

    The mapping is linear and preserves the end points, so with the default
    scale ``1 -> 1``, ``3 -> 5.5`` and ``5 -> 10``.
    """
    if not RATING_MIN <= rating <= RATING_MAX:
        raise ValueError(f'Rating must be between {RATING_MIN} and'
                         f' {RATING_MAX}')
    span = (score_max - score_min) / (RATING_MAX - RATING_MIN)
    return score_min + (rating - RATING_MIN) * span
