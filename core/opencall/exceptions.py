"""Exceptions raised by open call operations."""


class OpenCallError(Exception):
    """Base for domain rejections; nothing has been written when raised."""


class ValidationError(OpenCallError, ValueError):
    """Input is malformed, e.g. incomplete content or out-of-range scores."""


class SubmissionClosed(OpenCallError):
    """The open call is not live, or its deadline has passed."""


class PaymentRequired(OpenCallError):
    """The next attempt carries a fee that has not been confirmed."""


class QuotaExceeded(OpenCallError):
    """The artist has used all available attempts for this open call."""


class NotAuthorized(OpenCallError):
    """The caller lacks the capability required for the operation."""


class InvalidWinnerSet(OpenCallError):
    """Winners are duplicated or do not belong to the open call."""


class TooManyWinners(InvalidWinnerSet):
    """More winners were proposed than the open call allows."""


class NotCurating(OpenCallError):
    """The open call is not under curation."""


class AlreadyCurated(NotCurating):
    """The open call has already been finalized."""


class ConcurrentModification(OpenCallError):
    """
    Another writer changed the open call while this operation was in flight.

    No changes from the failed operation are visible; re-read and retry.
    """


class NoSuchOpenCall(OpenCallError):
    """An operation was performed on/for an open call that does not exist."""


class NoSuchSubmission(OpenCallError):
    """An operation was performed on/for a submission that does not exist."""


class AuditLogFailure(RuntimeError):
    """An audit entry could not be written; never propagated to callers."""
