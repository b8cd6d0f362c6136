"""Core data structures for the open call submission and curation system."""

from .agent import Agent, User, System, agent_factory
from .open_call import OpenCall
from .submission import Submission, SubmissionContent
from .review import Review, Scores, AggregateScore, rating_to_overall
from .curation import CurationAction, FinalizeResult
