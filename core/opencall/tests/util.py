from contextlib import contextmanager
from datetime import timedelta
import os
import tempfile

from flask import Flask

from .. import init_app
from ..domain.agent import User
from ..domain.open_call import OpenCall
from ..domain.util import get_tzaware_utc_now
from ..services import store

CONTENT = {
    'title': 'Dusk over the harbour',
    'description': 'Oil on linen, 60 x 80 cm.',
    'artist_statement': 'A study of the last light on working boats.',
    'image_urls': ['https://blobs.example.org/works/dusk.jpg']
}


def artist(native_id='artist1'):
    return User(native_id, email=f'{native_id}@artists.example.org',
                roles=[User.ARTIST])


def reviewer(native_id='reviewer1'):
    return User(native_id, roles=[User.REVIEWER])


def curator(native_id='curator1'):
    return User(native_id, roles=[User.CURATOR])


def make_app(uri='sqlite://'):
    """Create an application using the open call core."""
    app = Flask('foo')
    app.config['OPENCALL_DATABASE_URI'] = uri
    init_app(app)
    return app


@contextmanager
def in_memory_db(app=None):
    """Provide an in-memory sqlite database for testing purposes."""
    if app is None:
        app = make_app()
    with app.app_context():
        store.create_all()
        try:
            yield app
        finally:
            store.drop_all()


@contextmanager
def file_db():
    """
    Provide an application backed by a temporary sqlite file.

    Unlike :func:`in_memory_db`, connections are not shared, so several
    threads can each work in their own application context.
    """
    fd, path = tempfile.mkstemp(suffix='.sqlite')
    os.close(fd)
    app = Flask('foo')
    app.config['OPENCALL_DATABASE_URI'] = f'sqlite:///{path}'
    # Pooled connections move between threads; writers wait for the lock.
    app.config['SQLALCHEMY_ENGINE_OPTIONS'] = {
        'connect_args': {'check_same_thread': False, 'timeout': 30}
    }
    init_app(app)
    with app.app_context():
        store.create_all()
    try:
        yield app
    finally:
        with app.app_context():
            store.drop_all()
            store.db.engine.dispose()
        os.remove(path)


def new_open_call(**data) -> OpenCall:
    """Persist an open call that is live for another week, unless told."""
    data.setdefault('title', 'Harbour Lights')
    data.setdefault('deadline', get_tzaware_utc_now() + timedelta(days=7))
    with store.transaction():
        return store.store_open_call(OpenCall(**data))


def close_open_call(open_call_id) -> None:
    """Move the deadline of an open call into the past."""
    with store.transaction():
        row = store.current_session().get(store.models.OpenCall,
                                          open_call_id)
        row.deadline = (get_tzaware_utc_now() - timedelta(minutes=1)) \
            .replace(tzinfo=None)
