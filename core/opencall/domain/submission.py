"""Data structures for submissions."""

from typing import Optional, List, Any, Mapping
from datetime import datetime
from decimal import Decimal

from dataclasses import dataclass, field, asdict

from .util import coerce_datetime, is_blank


@dataclass
class SubmissionContent:
    """
    The artwork entered into an open call.

    Media are referenced by URL only; the referenced bytes live in the blob
    store and are never inspected here.
    """

    REQUIRED = ['title', 'description', 'artist_statement']
    OPTIONAL = ['medium', 'year', 'dimensions']
    URL_LISTS = ['image_urls', 'external_links']

    title: str = field(default_factory=str)
    description: str = field(default_factory=str)
    artist_statement: str = field(default_factory=str)
    medium: Optional[str] = field(default=None)
    year: Optional[str] = field(default=None)
    dimensions: Optional[str] = field(default=None)
    image_urls: List[str] = field(default_factory=list)
    external_links: List[str] = field(default_factory=list)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> 'SubmissionContent':
        """Build content from raw form data, ignoring unknown keys."""
        known = cls.REQUIRED + cls.OPTIONAL + cls.URL_LISTS
        return cls(**{key: value for key, value in data.items()
                      if key in known})

    def problems(self) -> List[str]:
        """
        Get a list of structural problems with this content.

        Returns
        -------
        list
            Human-readable descriptions; empty if the content is complete.

        """
        problems = []
        for key in self.REQUIRED:
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                problems.append(f'{key} must be text')
            elif is_blank(value):
                problems.append(f'Missing {key}')
        for key in self.OPTIONAL:
            value = getattr(self, key)
            if value is not None and not isinstance(value, str):
                problems.append(f'{key} must be text')
        for key in self.URL_LISTS:
            value = getattr(self, key)
            if not isinstance(value, (list, tuple)):
                problems.append(f'{key} must be a list')
            elif any(not isinstance(url, str) or is_blank(url)
                     for url in value):
                problems.append(f'{key} must contain only non-empty URLs')
        return problems

    def to_dict(self) -> dict:
        return asdict(self)


@dataclass
class Submission:
    """
    One artist's entry to one open call.

    The attempt index is assigned at intake and never changes. The only
    field that changes after creation is :attr:`is_selected`, which is set
    (never cleared) when curation of the open call is finalized.
    """

    FREE = 'free'
    PAID = 'paid'
    UNPAID = 'unpaid'
    PAYMENT_STATUSES = (FREE, PAID, UNPAID)

    open_call_id: int
    artist_id: str
    sequence_index: int
    """1-based attempt number for this artist in this open call."""

    content: SubmissionContent = field(default_factory=SubmissionContent)
    payment_status: str = field(default=FREE)
    payment_amount: Decimal = field(default=Decimal('0'))
    is_selected: bool = field(default=False)
    submitted_at: Optional[datetime] = field(default=None)
    submission_id: Optional[int] = field(default=None)

    def __post_init__(self) -> None:
        """Coerce raw data and check the payment status."""
        self.artist_id = str(self.artist_id)
        if isinstance(self.content, dict):
            self.content = SubmissionContent.from_dict(self.content)
        self.payment_amount = Decimal(str(self.payment_amount))
        self.submitted_at = coerce_datetime(self.submitted_at)
        if self.payment_status not in self.PAYMENT_STATUSES:
            raise ValueError(f'Invalid payment status: {self.payment_status}')

    @property
    def is_free(self) -> bool:
        return self.payment_status == self.FREE
