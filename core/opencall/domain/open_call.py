"""Data structures for open calls."""

from datetime import datetime
from decimal import Decimal
from typing import Optional

from dataclasses import dataclass, field, replace

from .util import get_tzaware_utc_now, coerce_datetime


@dataclass
class OpenCall:
    """
    A time-bounded competition accepting submissions, with a winner quota.

    Open calls are created by hosts/admins outside of this core. The only
    field that the core changes is :attr:`status` (along with the notes and
    timestamp recorded when curation is finalized). Status only ever moves
    forward through :const:`STATUSES`.
    """

    LIVE = 'live'
    UNDER_CURATION = 'under_curation'
    CURATED = 'curated'
    STATUSES = (LIVE, UNDER_CURATION, CURATED)

    title: str
    deadline: datetime
    """Submissions are accepted strictly before this moment."""

    num_winners: int = field(default=1)
    """Upper bound on the number of submissions selected at finalization."""

    status: str = field(default=LIVE)
    submission_fee: Optional[Decimal] = field(default=None)
    """Fee for each paid attempt; if ``None`` the configured default applies."""

    open_call_id: Optional[int] = field(default=None)
    notes: Optional[str] = field(default=None)
    """Curator notes, persisted when curation is finalized."""

    created: Optional[datetime] = field(default=None)
    curated: Optional[datetime] = field(default=None)
    version: int = field(default=0)
    """Incremented on every status change; guards concurrent transitions."""

    def __post_init__(self) -> None:
        """Check types and invariants."""
        self.deadline = coerce_datetime(self.deadline)
        self.created = coerce_datetime(self.created)
        self.curated = coerce_datetime(self.curated)
        if self.submission_fee is not None:
            self.submission_fee = Decimal(str(self.submission_fee))
        if self.status not in self.STATUSES:
            raise ValueError(f'Invalid open call status: {self.status}')
        if int(self.num_winners) < 1:
            raise ValueError('An open call must allow at least one winner')

    @property
    def is_live(self) -> bool:
        return self.status == self.LIVE

    @property
    def is_under_curation(self) -> bool:
        return self.status == self.UNDER_CURATION

    @property
    def is_curated(self) -> bool:
        return self.status == self.CURATED

    def deadline_has_passed(self, now: Optional[datetime] = None) -> bool:
        """The deadline is inclusive of the closing moment."""
        return (now or get_tzaware_utc_now()) >= self.deadline

    def is_accepting_submissions(self, now: Optional[datetime] = None) \
            -> bool:
        """Live, and the deadline has not yet been reached."""
        return self.is_live and not self.deadline_has_passed(now)

    def effective_status(self, now: Optional[datetime] = None) -> str:
        """
        Get the status, accounting for a deadline that passed while live.

        A live open call moves to curation automatically at its deadline; the
        stored status may lag behind until the transition is persisted.
        """
        if self.is_live and self.deadline_has_passed(now):
            return self.UNDER_CURATION
        return self.status

    def can_transition_to(self, status: str) -> bool:
        """Only the immediately following status is reachable."""
        current = self.STATUSES.index(self.status)
        return self.STATUSES.index(status) == current + 1

    def with_effective_status(self, now: Optional[datetime] = None) \
            -> 'OpenCall':
        """Get a copy of this open call showing its effective status."""
        return replace(self, status=self.effective_status(now))
