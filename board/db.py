from contextlib import contextmanager

from flask_sqlalchemy import SQLAlchemy


db = SQLAlchemy()


@contextmanager
def transaction():
    """Unit of work over the request session.

    Commits when the block exits normally and rolls back when it raises,
    so callers never see a half-applied set of store mutations.
    """
    try:
        yield db.session
        db.session.commit()
    except Exception:
        db.session.rollback()
        raise
