"""Data structures for the curation audit trail and finalization."""

from typing import Optional, List
from datetime import datetime

from dataclasses import dataclass, field

from .open_call import OpenCall
from .submission import Submission
from .util import get_tzaware_utc_now, coerce_datetime


@dataclass
class CurationAction:
    """An append-only audit entry describing a curation decision."""

    SELECT_WINNER = 'select_winner'
    """A submission was selected as a winner."""

    FINALIZE_CURATION = 'finalize_curation'
    """Call-level entry carrying the curator's notes."""

    open_call_id: int
    curator_id: str
    action: str
    submission_id: Optional[int] = field(default=None)
    """``None`` for call-level actions."""

    curator_type: str = field(default='curator')
    notes: str = field(default_factory=str)
    created: datetime = field(default_factory=get_tzaware_utc_now)
    action_id: Optional[int] = field(default=None)

    def __post_init__(self) -> None:
        self.curator_id = str(self.curator_id)
        self.created = coerce_datetime(self.created)

    @property
    def is_call_level(self) -> bool:
        return self.submission_id is None


@dataclass
class FinalizeResult:
    """The outcome of a successful finalization."""

    open_call: OpenCall
    winners: List[Submission] = field(default_factory=list)
    audit_failures: int = field(default=0)
    """Number of audit entries that could not be written."""

    @property
    def winner_ids(self) -> List[int]:
        return [winner.submission_id for winner in self.winners]
