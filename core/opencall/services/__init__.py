"""External service integrations."""

from . import store
