"""Open call core configuration parameters."""

from os import environ
import warnings

LOGLEVEL = int(environ.get('LOGLEVEL', '20'))
"""
Logging verbosity.

See `https://docs.python.org/3/library/logging.html#levels`_.
"""

CORE_VERSION = "0.1.0"


# --- SUBMISSION QUOTA ---

STANDARD_MAX_ATTEMPTS = 6
STANDARD_FREE_ATTEMPTS = 1
"""Published quota: six attempts per artist and open call, the first free."""

MAX_SUBMISSION_ATTEMPTS = int(environ.get('MAX_SUBMISSION_ATTEMPTS',
                                          str(STANDARD_MAX_ATTEMPTS)))
"""Maximum number of submissions an artist may make to a single open call."""

FREE_SUBMISSION_ATTEMPTS = int(environ.get('FREE_SUBMISSION_ATTEMPTS',
                                           str(STANDARD_FREE_ATTEMPTS)))
"""Number of attempts (counting from the first) that carry no fee."""

SUBMISSION_FEE = environ.get('SUBMISSION_FEE', '2.00')
"""
Fee charged for each paid attempt, unless the open call sets its own.

Parsed as a :class:`decimal.Decimal`.
"""

QUOTA_RACE_RETRIES = int(environ.get('QUOTA_RACE_RETRIES', '3'))
"""
Number of times intake re-validates an attempt that lost an insert race.

A writer that loses the race for a sequence index is rolled back, and the
whole attempt (quota, payment) is evaluated again against a fresh count.
"""

if FREE_SUBMISSION_ATTEMPTS > MAX_SUBMISSION_ATTEMPTS:
    warnings.warn('FREE_SUBMISSION_ATTEMPTS exceeds MAX_SUBMISSION_ATTEMPTS;'
                  ' every attempt will be free.')

if (MAX_SUBMISSION_ATTEMPTS, FREE_SUBMISSION_ATTEMPTS) \
        != (STANDARD_MAX_ATTEMPTS, STANDARD_FREE_ATTEMPTS):
    warnings.warn('Submission quota differs from the published six attempts'
                  ' with one free.')


# --- REVIEW SCALE ---

SCORE_MIN = int(environ.get('SCORE_MIN', '1'))
"""Lowest score a reviewer may give on any dimension."""

SCORE_MAX = int(environ.get('SCORE_MAX', '10'))
"""Highest score a reviewer may give on any dimension."""


# --- DATABASE CONFIGURATION ---

OPENCALL_DATABASE_URI = environ.get('OPENCALL_DATABASE_URI', 'sqlite://')
"""Full database URI for the open call store."""

SQLALCHEMY_DATABASE_URI = OPENCALL_DATABASE_URI
"""Full database URI for the open call store."""

SQLALCHEMY_TRACK_MODIFICATIONS = False
"""Track modifications feature should always be disabled."""

if OPENCALL_DATABASE_URI.startswith('sqlite'):
    warnings.warn('Using SQLite for the open call store; concurrent writers'
                  ' are serialized by the database file lock.')
