"""Data structures for agents supplied by the identity provider."""

import hashlib
from typing import Any, List

from dataclasses import dataclass, field

__all__ = ('Agent', 'User', 'System', 'agent_factory')


@dataclass
class Agent:
    """
    Base class for agents in the open call system.

    An agent is an actor/system that is responsible for an operation. Identity
    is resolved upstream; the core treats agents as verified input.
    """

    native_id: str
    """Identifier for the agent as issued by the identity provider."""

    def __post_init__(self) -> None:
        """Set derivative fields."""
        self.native_id = str(self.native_id)
        self.agent_type = self.__class__.get_agent_type()
        self.agent_identifier = self.get_agent_identifier()

    @classmethod
    def get_agent_type(cls) -> str:
        """Get the name of the instance's class."""
        return cls.__name__

    def get_agent_identifier(self) -> str:
        """
        Get the unique identifier for this agent instance.

        Based on both the agent type and native ID.
        """
        h = hashlib.new('sha1')
        h.update(b'%s:%s' % (self.agent_type.encode('utf-8'),
                             str(self.native_id).encode('utf-8')))
        return h.hexdigest()

    @property
    def can_review(self) -> bool:
        return False

    @property
    def can_curate(self) -> bool:
        return False

    def __eq__(self, other: Any) -> bool:
        """Equality comparison for agents based on type and identifier."""
        if not isinstance(other, self.__class__):
            return False
        return self.agent_identifier == other.agent_identifier


@dataclass
class User(Agent):
    """A (human) end user: an artist, reviewer, curator or admin."""

    ARTIST = 'artist'
    REVIEWER = 'reviewer'
    CURATOR = 'curator'
    ADMIN = 'admin'

    email: str = field(default_factory=str)
    username: str = field(default_factory=str)
    name: str = field(default_factory=str)
    roles: List[str] = field(default_factory=list)
    """Roles granted by the identity provider."""

    agent_type: str = field(default_factory=str)
    agent_identifier: str = field(default_factory=str)

    def has_role(self, *roles: str) -> bool:
        """Check whether the user holds any of ``roles``."""
        return bool(set(roles) & set(self.roles))

    @property
    def can_review(self) -> bool:
        """Reviewers, curators and admins may score submissions."""
        return self.has_role(self.REVIEWER, self.CURATOR, self.ADMIN)

    @property
    def can_curate(self) -> bool:
        """Curators and admins may move an open call through curation."""
        return self.has_role(self.CURATOR, self.ADMIN)

    @property
    def curator_type(self) -> str:
        """The capacity in which this user curates, for the audit trail."""
        return self.ADMIN if self.has_role(self.ADMIN) else self.CURATOR


@dataclass
class System(Agent):
    """An automated actor, e.g. a scheduled job."""

    agent_type: str = field(default_factory=str)
    agent_identifier: str = field(default_factory=str)


_agent_types = {
    User.get_agent_type(): User,
    System.get_agent_type(): System,
}


def agent_factory(**data: Any) -> Agent:
    """Instantiate a subclass of :class:`.Agent`."""
    agent_type = data.pop('agent_type')
    data.pop('agent_identifier', None)
    if agent_type not in _agent_types:
        raise ValueError(f'No such agent type: {agent_type}')
    return _agent_types[agent_type](**data)
