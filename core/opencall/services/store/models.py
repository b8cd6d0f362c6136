"""SQLAlchemy ORM classes for the open call store."""

from typing import Optional
from datetime import datetime
from decimal import Decimal
from pytz import UTC
from sqlalchemy import Column, DateTime, ForeignKey, Integer, Numeric, \
    String, Text, Boolean, JSON, Float, UniqueConstraint, CheckConstraint, \
    text
from sqlalchemy.orm import relationship, declarative_base

from ... import domain

Base = declarative_base()


def _utc(value: Optional[datetime]) -> Optional[datetime]:
    """Localize a naive timestamp read from the database."""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


class OpenCall(Base):    # type: ignore
    """Represents an open call."""

    __tablename__ = 'open_calls'

    open_call_id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)
    deadline = Column(DateTime, nullable=False)
    num_winners = Column(Integer, nullable=False, server_default=text("'1'"))
    status = Column(String(20), nullable=False, index=True,
                    server_default=text(f"'{domain.OpenCall.LIVE}'"))
    submission_fee = Column(Numeric(10, 2))
    admin_notes = Column(Text)
    """Curator notes recorded when curation is finalized."""

    created = Column(DateTime, default=lambda: datetime.now(UTC))
    updated = Column(DateTime, onupdate=lambda: datetime.now(UTC))
    curated = Column(DateTime)
    version = Column(Integer, nullable=False, server_default=text("'0'"))
    """Optimistic concurrency token; bumped on every status change."""

    __table_args__ = (
        CheckConstraint('num_winners > 0', name='ck_open_calls_num_winners'),
    )

    def to_open_call(self) -> domain.OpenCall:
        """Generate a representation of open call state from this row."""
        return domain.OpenCall(
            open_call_id=self.open_call_id,
            title=self.title,
            deadline=_utc(self.deadline),
            num_winners=self.num_winners,
            status=self.status,
            submission_fee=self.submission_fee,
            notes=self.admin_notes,
            created=_utc(self.created),
            curated=_utc(self.curated),
            version=self.version
        )


class Submission(Base):    # type: ignore
    """Represents an artist's submission to an open call."""

    __tablename__ = 'submissions'

    submission_id = Column(Integer, primary_key=True)
    open_call_id = Column(
        ForeignKey('open_calls.open_call_id', ondelete='CASCADE',
                   onupdate='CASCADE'),
        nullable=False,
        index=True
    )
    artist_id = Column(String(64), nullable=False, index=True)
    sequence_index = Column(Integer, nullable=False)
    """1-based attempt number for the artist in the open call."""

    payment_status = Column(String(8), nullable=False)
    payment_amount = Column(Numeric(10, 2), nullable=False,
                            server_default=text("'0'"))
    is_selected = Column(Boolean, nullable=False, default=False)
    submission_data = Column(JSON, nullable=False)
    submitted_at = Column(DateTime, nullable=False)

    open_call = relationship('OpenCall')

    # Two writers that observe the same prior count compete for the same
    # index; only one insert can succeed.
    __table_args__ = (
        UniqueConstraint('open_call_id', 'artist_id', 'sequence_index',
                         name='uq_submissions_attempt'),
        CheckConstraint('sequence_index > 0',
                        name='ck_submissions_sequence_index'),
    )

    def to_submission(self) -> domain.Submission:
        """Generate a representation of submission state from this row."""
        return domain.Submission(
            submission_id=self.submission_id,
            open_call_id=self.open_call_id,
            artist_id=self.artist_id,
            sequence_index=self.sequence_index,
            content=domain.SubmissionContent.from_dict(self.submission_data),
            payment_status=self.payment_status,
            payment_amount=Decimal(str(self.payment_amount)),
            is_selected=bool(self.is_selected),
            submitted_at=_utc(self.submitted_at)
        )


class Review(Base):    # type: ignore
    """A reviewer's scores for a submission; one row per reviewer."""

    __tablename__ = 'submission_reviews'

    submission_id = Column(
        ForeignKey('submissions.submission_id', ondelete='CASCADE'),
        primary_key=True
    )
    reviewer_id = Column(String(64), primary_key=True)
    technical_quality = Column(Float, nullable=False)
    artistic_merit = Column(Float, nullable=False)
    theme_relevance = Column(Float, nullable=False)
    overall = Column(Float, nullable=False)
    public_notes = Column(Text)
    private_notes = Column(Text)
    created = Column(DateTime, default=lambda: datetime.now(UTC))
    updated = Column(DateTime, default=lambda: datetime.now(UTC),
                     onupdate=lambda: datetime.now(UTC))

    submission = relationship('Submission')

    def update_from_review(self, review: domain.Review) -> None:
        for dimension in domain.Scores.DIMENSIONS:
            setattr(self, dimension, getattr(review.scores, dimension))
        self.public_notes = review.public_notes
        self.private_notes = review.private_notes

    def to_review(self) -> domain.Review:
        return domain.Review(
            submission_id=self.submission_id,
            reviewer_id=self.reviewer_id,
            scores=domain.Scores(
                technical_quality=self.technical_quality,
                artistic_merit=self.artistic_merit,
                theme_relevance=self.theme_relevance,
                overall=self.overall
            ),
            public_notes=self.public_notes or '',
            private_notes=self.private_notes or '',
            created=_utc(self.created),
            updated=_utc(self.updated)
        )


class CurationAction(Base):    # type: ignore
    """Append-only curation audit entry."""

    __tablename__ = 'submission_curation'

    action_id = Column(Integer, primary_key=True)
    open_call_id = Column(ForeignKey('open_calls.open_call_id'),
                          nullable=False, index=True)
    submission_id = Column(ForeignKey('submissions.submission_id'),
                           index=True)
    curator_id = Column(String(64), nullable=False)
    curator_type = Column(String(16), nullable=False)
    action = Column(String(32), nullable=False)
    notes = Column(Text)
    created = Column(DateTime, nullable=False)

    def to_action(self) -> domain.CurationAction:
        return domain.CurationAction(
            action_id=self.action_id,
            open_call_id=self.open_call_id,
            submission_id=self.submission_id,
            curator_id=self.curator_id,
            curator_type=self.curator_type,
            action=self.action,
            notes=self.notes or '',
            created=_utc(self.created)
        )
