
from ebgs.config import get_config

import json
import sqlalchemy as sa
import sqlalchemy.orm
import threading

_lock = threading.Lock()
_engine = None
_sessionmaker = None

def json_serializer(o):
    """Non-ASCII stays literal in stored JSON, so text predicates on JSON
    columns see the same characters on every backend.
    """
    return json.dumps(o, ensure_ascii=False)


def get_engine(*, admin=False, kwargs=None):
    """Returns the sqlalchemy.Engine instance.

    Args:
        admin: Connect to the `postgres` maintenance database instead of the
                EBGS database. Only for development tools.
        kwargs: Passed to `sqlalchemy.create_engine`. Only for development tools.
    """
    global _engine, _sessionmaker

    if kwargs is not None:
        assert _engine is None, 'Cannot specify kwargs after engine created. For dev only'
    else:
        kwargs = {}

    if admin:
        assert _engine is None, 'Cannot specify admin after engine created. Dev only'

    with _lock:
        if _engine is None:
            kwargs.setdefault('json_serializer', json_serializer)
            _engine = sa.create_engine(get_url(admin=admin), **kwargs)
            _sessionmaker = sqlalchemy.orm.sessionmaker(_engine)
    return _engine


def get_url(*, admin=False):
    """Returns the database URL from configuration.
    """
    cfg = get_config()
    if cfg['db'].get('url'):
        return cfg['db']['url']

    u = cfg['db']['user']
    p = cfg['db']['password']
    h = cfg['db']['host']
    po = cfg['db']['port']
    db = cfg['db']['db']
    if admin:
        db = 'postgres'
    return f'postgresql://{u}:{p}@{h}:{po}/{db}'


def get_session():
    """Returns a sqlalchemy.orm.Session object, to be used in a context manager.

    Autocommit is on, meaning that the session will be committed if no error is
    raised.
    """
    if _engine is None:
        # Ensure engine exists
        get_engine()
    return _sessionmaker.begin()
