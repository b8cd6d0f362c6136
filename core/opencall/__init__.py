"""
Submission and curation core for artist open calls.

An open call is a time-bounded competition: artists submit work while it is
live, reviewers score the submissions, and a curator selects up to
:attr:`.OpenCall.num_winners` of them when curation is finalized. This package
provides the operations that move submissions and open calls through that
workflow, and enforces the rules that must hold no matter how many clients
act at once.

Overview
========

Data structures are defined in :mod:`.domain`. They are plain `PEP 557 data
classes <https://www.python.org/dev/peps/pep-0557/>`_ and carry no
persistence logic.

:mod:`.intake` accepts new submissions with :func:`.intake.submit`. The per
artist quota and the fee for each attempt are computed by :mod:`.quota`:

.. code-block:: python

   from opencall import User, submit, get_pricing, describe_pricing
   artist = User(1234, email='jane@artist.org', roles=[User.ARTIST])
   pricing = get_pricing(open_call_id=7, artist_id=artist.native_id)
   describe_pricing(pricing)     # "Free submission available"
   submission = submit(7, artist, payment_confirmed=False, content={
       'title': 'Dusk', 'description': 'Oil on linen',
       'artist_statement': 'About light.'
   })


:mod:`.reviews` records reviewer scores and derives aggregate scores and an
advisory ranking. :mod:`.curation` moves an open call to curation and
finalizes it with a winner set. Every finalization writes an entry to the
curation trail (:mod:`.audit`) on a best-effort basis.

.. code-block:: python

   from opencall import finalize
   curator = User(42, roles=[User.CURATOR])
   result = finalize(7, [submission.submission_id], curator, notes='Bravo')
   result.winner_ids


Watch out for subclasses of :class:`.exceptions.OpenCallError`. They signal
that an operation was rejected, and that nothing was written. In particular,
:class:`.ConcurrentModification` means that another client changed the open
call first; re-read and retry.

Persistence is provided by :mod:`.services.store`, which uses Flask-SQLAlchemy.
Operations must be called within a Flask application context, for an
application that has been configured with :func:`init_app`.
"""

from flask import Flask

from .domain import Agent, User, System, agent_factory, OpenCall, \
    Submission, SubmissionContent, Review, Scores, AggregateScore, \
    rating_to_overall, CurationAction, FinalizeResult
from .core import load_open_call, load_submission, load_submissions, \
    load_submissions_for_artist, load_winners
from .quota import next_attempt, get_pricing, describe_pricing
from .intake import submit, validate_content
from .reviews import record_review, get_reviews, aggregate, rank
from .curation import begin_curation, finalize
from .audit import get_curation_log
from . import core, exceptions


def init_app(app: Flask) -> None:
    """Configure an application instance to use the open call core."""
    core.init_app(app)
