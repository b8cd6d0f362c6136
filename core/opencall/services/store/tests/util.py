from contextlib import contextmanager
from datetime import timedelta

from flask import Flask

from ....domain.open_call import OpenCall
from ....domain.util import get_tzaware_utc_now
from .. import init_app, create_all, drop_all, current_session, \
    store_open_call, transaction


@contextmanager
def in_memory_db(app=None):
    """Provide an in-memory sqlite database for testing purposes."""
    if app is None:
        app = Flask('foo')
    app.config['SQLALCHEMY_DATABASE_URI'] = 'sqlite://'
    app.config['SQLALCHEMY_TRACK_MODIFICATIONS'] = False
    init_app(app)
    with app.app_context():
        create_all()
        try:
            yield current_session()
        finally:
            drop_all()


def new_open_call(**data) -> OpenCall:
    """Persist an open call that is live for another week, unless told."""
    data.setdefault('title', 'Nocturnes')
    data.setdefault('deadline', get_tzaware_utc_now() + timedelta(days=7))
    with transaction():
        return store_open_call(OpenCall(**data))
