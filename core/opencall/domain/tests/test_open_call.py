"""Tests for :mod:`opencall.domain.open_call`."""

from unittest import TestCase
from datetime import datetime, timedelta

from pytz import UTC

from ..open_call import OpenCall


class TestOpenCall(TestCase):
    """Status and deadline behavior of :class:`.OpenCall`."""

    def setUp(self):
        """Create an open call that closes at noon."""
        self.deadline = datetime(2026, 3, 1, 12, 0, tzinfo=UTC)
        self.open_call = OpenCall(title='Nocturnes', deadline=self.deadline,
                                  num_winners=2)

    def test_defaults(self):
        """A new open call is live, with no version history."""
        self.assertTrue(self.open_call.is_live)
        self.assertEqual(self.open_call.version, 0)
        self.assertIsNone(self.open_call.submission_fee)

    def test_deadline_is_exclusive(self):
        """Submissions are accepted strictly before the deadline."""
        before = self.deadline - timedelta(seconds=1)
        self.assertTrue(self.open_call.is_accepting_submissions(before))
        self.assertFalse(self.open_call.is_accepting_submissions(
            self.deadline
        ))

    def test_effective_status(self):
        """A live open call is under curation once its deadline passes."""
        after = self.deadline + timedelta(minutes=5)
        self.assertEqual(self.open_call.effective_status(after),
                         OpenCall.UNDER_CURATION)
        shown = self.open_call.with_effective_status(after)
        self.assertTrue(shown.is_under_curation)
        self.assertTrue(self.open_call.is_live, "The original is unchanged")

    def test_curated_is_terminal(self):
        """Curated open calls can not move anywhere."""
        curated = OpenCall(title='Done', deadline=self.deadline,
                           status=OpenCall.CURATED)
        for status in OpenCall.STATUSES:
            self.assertFalse(curated.can_transition_to(status))
        self.assertEqual(curated.effective_status(), OpenCall.CURATED)

    def test_transitions_move_forward(self):
        """Only the following status is reachable."""
        self.assertTrue(
            self.open_call.can_transition_to(OpenCall.UNDER_CURATION)
        )
        self.assertFalse(self.open_call.can_transition_to(OpenCall.CURATED))
        self.assertFalse(self.open_call.can_transition_to(OpenCall.LIVE))

    def test_invalid(self):
        """Unknown status and winner counts below one are rejected."""
        with self.assertRaises(ValueError):
            OpenCall(title='Bad', deadline=self.deadline, status='paused')
        with self.assertRaises(ValueError):
            OpenCall(title='Bad', deadline=self.deadline, num_winners=0)

    def test_deadline_from_string(self):
        """ISO strings are parsed, and naive values are treated as UTC."""
        open_call = OpenCall(title='Parsed', deadline='2026-03-01T12:00:00')
        self.assertEqual(open_call.deadline, self.deadline)
