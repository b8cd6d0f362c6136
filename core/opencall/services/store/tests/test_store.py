"""Tests for :mod:`opencall.services.store`."""

from unittest import TestCase, mock
from datetime import timedelta
from decimal import Decimal

from sqlalchemy.exc import OperationalError, IntegrityError

from ....domain.open_call import OpenCall
from ....domain.submission import Submission, SubmissionContent
from ....domain.review import Review, Scores
from ....domain.curation import CurationAction
from ....domain.util import get_tzaware_utc_now
from ....exceptions import SubmissionClosed
from ... import store
from .util import in_memory_db, new_open_call


def _submission(open_call_id, artist_id='artist1', index=1, **data):
    data.setdefault('submitted_at', get_tzaware_utc_now())
    return Submission(
        open_call_id=open_call_id,
        artist_id=artist_id,
        sequence_index=index,
        content=SubmissionContent(title='Dusk', description='Oil on linen',
                                  artist_statement='About light.'),
        payment_status=Submission.FREE if index == 1 else Submission.PAID,
        payment_amount=Decimal('0') if index == 1 else Decimal('2.00'),
        **data
    )


class TestOpenCalls(TestCase):
    """Storing open calls and changing their status."""

    def test_store_and_get(self):
        """The stored open call is returned as it was stored."""
        with in_memory_db():
            stored = new_open_call(num_winners=3,
                                   submission_fee=Decimal('5.50'))
            self.assertIsNotNone(stored.open_call_id)

            loaded = store.get_open_call(stored.open_call_id)
            self.assertEqual(loaded.title, 'Nocturnes')
            self.assertEqual(loaded.num_winners, 3)
            self.assertEqual(loaded.status, OpenCall.LIVE)
            self.assertEqual(loaded.submission_fee, Decimal('5.50'))
            self.assertEqual(loaded.version, 0)
            self.assertIsNotNone(loaded.deadline.tzinfo,
                                 "Timestamps are localized on load")

    def test_get_nonexistant(self):
        """A missing open call raises :class:`.NoSuchRecord`."""
        with in_memory_db():
            with self.assertRaises(store.NoSuchRecord):
                store.get_open_call(999)

    def test_transition(self):
        """The transition applies when status and version still match."""
        with in_memory_db():
            open_call = new_open_call()
            with store.transaction():
                self.assertTrue(store.transition_open_call(
                    open_call, OpenCall.UNDER_CURATION
                ))
            loaded = store.get_open_call(open_call.open_call_id)
            self.assertEqual(loaded.status, OpenCall.UNDER_CURATION)
            self.assertEqual(loaded.version, 1)

    def test_transition_from_stale_state(self):
        """The transition does not apply to a stale observation."""
        with in_memory_db():
            open_call = new_open_call()
            with store.transaction():
                store.transition_open_call(open_call,
                                           OpenCall.UNDER_CURATION)
            with store.transaction():
                self.assertFalse(store.transition_open_call(
                    open_call, OpenCall.UNDER_CURATION
                ), "Version 0 has already been superseded")

            loaded = store.get_open_call(open_call.open_call_id)
            self.assertEqual(loaded.version, 1)

    def test_transition_records_notes(self):
        """Notes and the curation timestamp are stored with the status."""
        with in_memory_db():
            open_call = new_open_call(status=OpenCall.UNDER_CURATION)
            now = get_tzaware_utc_now()
            with store.transaction():
                store.transition_open_call(open_call, OpenCall.CURATED,
                                           notes='Strong field', curated=now)
            loaded = store.get_open_call(open_call.open_call_id)
            self.assertEqual(loaded.status, OpenCall.CURATED)
            self.assertEqual(loaded.notes, 'Strong field')
            self.assertEqual(loaded.curated.replace(microsecond=0),
                             now.replace(microsecond=0))


class TestSubmissions(TestCase):
    """Storing and retrieving submissions."""

    def test_store_submission(self):
        """A stored submission keeps its content and payment details."""
        with in_memory_db():
            open_call = new_open_call()
            with store.transaction():
                stored = store.store_submission(
                    _submission(open_call.open_call_id, index=2)
                )
            loaded = store.get_submission(stored.submission_id)
            self.assertEqual(loaded.content.title, 'Dusk')
            self.assertEqual(loaded.payment_status, Submission.PAID)
            self.assertEqual(loaded.payment_amount, Decimal('2.00'))
            self.assertFalse(loaded.is_selected)
            self.assertEqual(
                store.count_submissions(open_call.open_call_id, 'artist1'), 1
            )

    def test_duplicate_attempt_index(self):
        """Only one submission can hold an attempt index."""
        with in_memory_db():
            open_call = new_open_call()
            with store.transaction():
                store.store_submission(_submission(open_call.open_call_id))

            with self.assertRaises(store.ConsistencyError):
                with store.transaction():
                    store.store_submission(
                        _submission(open_call.open_call_id)
                    )
            self.assertEqual(
                store.count_submissions(open_call.open_call_id, 'artist1'), 1,
                "The losing insert was rolled back"
            )

    def test_same_index_other_artist(self):
        """Attempt indices are per artist."""
        with in_memory_db():
            open_call = new_open_call()
            with store.transaction():
                store.store_submission(_submission(open_call.open_call_id))
                store.store_submission(_submission(open_call.open_call_id,
                                                   artist_id='artist2'))
            self.assertEqual(len(store.get_submissions(
                open_call.open_call_id
            )), 2)

    def test_get_submission_nonexistant(self):
        """A missing submission raises :class:`.NoSuchRecord`."""
        with in_memory_db():
            with self.assertRaises(store.NoSuchRecord):
                store.get_submission(42)

    def test_get_submissions_order(self):
        """Submissions to an open call are listed newest first."""
        with in_memory_db():
            open_call = new_open_call()
            earlier = get_tzaware_utc_now() - timedelta(hours=1)
            with store.transaction():
                first = store.store_submission(_submission(
                    open_call.open_call_id, submitted_at=earlier
                ))
                second = store.store_submission(_submission(
                    open_call.open_call_id, index=2
                ))
            listed = store.get_submissions(open_call.open_call_id)
            self.assertEqual([s.submission_id for s in listed],
                             [second.submission_id, first.submission_id])

    def test_select_submissions(self):
        """Only unselected submissions of the open call are selected."""
        with in_memory_db():
            open_call = new_open_call()
            other_call = new_open_call(title='Other')
            with store.transaction():
                mine = store.store_submission(
                    _submission(open_call.open_call_id)
                )
                theirs = store.store_submission(
                    _submission(other_call.open_call_id)
                )
            with store.transaction():
                count = store.select_submissions(
                    open_call.open_call_id,
                    [mine.submission_id, theirs.submission_id]
                )
            self.assertEqual(count, 1)
            with store.transaction():
                count = store.select_submissions(open_call.open_call_id,
                                                 [mine.submission_id])
            self.assertEqual(count, 0, "Already selected")
            self.assertTrue(store.get_submission(mine.submission_id)
                            .is_selected)
            self.assertFalse(store.get_submission(theirs.submission_id)
                             .is_selected)


class TestReviews(TestCase):
    """Storing reviews."""

    def test_upsert(self):
        """A reviewer's second review replaces the first."""
        with in_memory_db():
            open_call = new_open_call()
            with store.transaction():
                submission = store.store_submission(
                    _submission(open_call.open_call_id)
                )
            for overall in (4, 9):
                with store.transaction():
                    store.store_review(Review(
                        submission_id=submission.submission_id,
                        reviewer_id='rev1',
                        scores=Scores(technical_quality=5, artistic_merit=5,
                                      theme_relevance=5, overall=overall)
                    ))
            reviews = store.get_reviews(submission.submission_id)
            self.assertEqual(len(reviews), 1)
            self.assertEqual(reviews[0].scores.overall, 9)

            grouped = store.get_reviews_for_open_call(open_call.open_call_id)
            self.assertEqual(list(grouped), [submission.submission_id])


class TestCurationActions(TestCase):
    """Storing entries in the curation log."""

    def test_log_order(self):
        """Entries are listed oldest first."""
        with in_memory_db():
            open_call = new_open_call()
            now = get_tzaware_utc_now()
            with store.transaction():
                for delta, action in ((1, CurationAction.FINALIZE_CURATION),
                                      (0, CurationAction.SELECT_WINNER)):
                    store.store_curation_action(CurationAction(
                        open_call_id=open_call.open_call_id,
                        curator_id='cur1',
                        action=action,
                        created=now + timedelta(seconds=delta)
                    ))
            log = store.get_curation_actions(open_call.open_call_id)
            self.assertEqual([entry.action for entry in log],
                             [CurationAction.SELECT_WINNER,
                              CurationAction.FINALIZE_CURATION])
            self.assertTrue(log[1].is_call_level)


class TestTransaction(TestCase):
    """The :func:`.transaction` context manager."""

    def test_domain_errors_propagate(self):
        """Domain exceptions are re-raised as they are, after rollback."""
        with in_memory_db():
            open_call = new_open_call()
            with self.assertRaises(SubmissionClosed):
                with store.transaction():
                    store.store_submission(
                        _submission(open_call.open_call_id)
                    )
                    raise SubmissionClosed('closed')
            self.assertEqual(len(store.get_submissions(
                open_call.open_call_id
            )), 0)

    def test_other_errors_are_wrapped(self):
        """Other exceptions are wrapped in :class:`.TransactionFailed`."""
        with in_memory_db():
            with self.assertRaises(store.TransactionFailed):
                with store.transaction():
                    raise KeyError('foo')

    def test_conflict_at_commit(self):
        """An integrity violation reported at commit is a consistency error."""
        with in_memory_db():
            open_call = new_open_call()
            session = store.current_session()
            conflict = IntegrityError('INSERT INTO submission', {},
                                      Exception('UNIQUE constraint failed'))
            with mock.patch.object(session, 'commit', side_effect=conflict):
                with self.assertRaises(store.ConsistencyError):
                    with store.transaction():
                        store.store_submission(
                            _submission(open_call.open_call_id)
                        )
            self.assertEqual(len(store.get_submissions(
                open_call.open_call_id
            )), 0)


class TestOperationalErrors(TestCase):
    """Database connectivity problems."""

    def test_unavailable(self):
        """An :class:`.OperationalError` is raised as unavailability."""
        with in_memory_db():
            session = mock.MagicMock()
            session.query.side_effect = OperationalError('SELECT', {},
                                                         Exception('gone'))
            with mock.patch(f'{store.__name__}.current_session',
                            return_value=session):
                with self.assertRaises(store.Unavailable):
                    store.count_submissions(1, 'artist1')
