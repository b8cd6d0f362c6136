"""Utility classes and functions for :mod:`.services.store`."""

import logging
from contextlib import contextmanager
from typing import Generator

from flask import Flask
from sqlalchemy.orm.session import Session
from sqlalchemy.exc import IntegrityError
from flask_sqlalchemy import SQLAlchemy

from ...exceptions import OpenCallError
from .exceptions import StoreBaseException, TransactionFailed, \
    ConsistencyError


class StoreSQLAlchemy(SQLAlchemy):
    """SQLAlchemy integration for the open call store."""

    def init_app(self, app: Flask) -> None:
        """Set default configuration."""
        app.config.setdefault(
            'SQLALCHEMY_DATABASE_URI',
            app.config.get('OPENCALL_DATABASE_URI', 'sqlite://')
        )
        app.config.setdefault('SQLALCHEMY_TRACK_MODIFICATIONS', False)
        super(StoreSQLAlchemy, self).init_app(app)


db: SQLAlchemy = StoreSQLAlchemy()


logger = logging.getLogger(__name__)


def current_session() -> Session:
    """Get/create :class:`.Session` for this context."""
    return db.session()


@contextmanager
def transaction() -> Generator:
    """
    Context manager for database transaction.

    Commits if the block completes. Otherwise the session is rolled back;
    store and domain exceptions are re-raised as-is, integrity violations
    (including those only reported at commit) become
    :class:`.ConsistencyError`, and anything else is wrapped in
    :class:`.TransactionFailed`.
    """
    session = current_session()
    try:
        yield session
        session.commit()
    except (StoreBaseException, OpenCallError) as e:
        logger.debug('Command failed, rolling back: %s', str(e))
        session.rollback()
        raise   # Propagate exceptions raised from this module.
    except IntegrityError as e:
        logger.debug('Integrity violation, rolling back: %s', str(e))
        session.rollback()
        raise ConsistencyError('Conflicting write') from e
    except Exception as e:
        logger.debug('Command failed, rolling back: %s', str(e))
        session.rollback()
        raise TransactionFailed('Failed to execute transaction') from e
