"""Access to application configuration from within and outside a request."""

import os
from typing import Any, Mapping

from flask import current_app, has_app_context


def get_application_config() -> Mapping[str, Any]:
    """
    Get a configuration mapping from the current application, if available.

    Inside a Flask application context this is ``current_app.config``;
    otherwise we fall back to the process environment, so that the core can
    also be used from scripts and workers that never create an application.

    Returns
    -------
    dict-like
        Values from :mod:`opencall.config` are used as defaults by callers.

    """
    if has_app_context():
        return current_app.config
    return os.environ


def get_int(key: str, default: int) -> int:
    """Get an integer configuration parameter."""
    return int(get_application_config().get(key, default))
