from flask import current_app
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from . import live
from .errors import ConflictError, NotFoundError, StoreError
from .extensions import db


def commit(*collections, conflict=None):
    """Commit the session as one transaction, then publish the touched collections.

    ``conflict`` is the message for a ConflictError when a unique/check
    constraint rejects the write; without it every failure is a StoreError.
    """
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        if conflict:
            current_app.logger.info("Write rejected by constraint: %s", e.orig)
            raise ConflictError(conflict) from e
        current_app.logger.exception("Commit failed")
        raise StoreError() from e
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Commit failed")
        raise StoreError() from e

    live.publish(*collections)


def flush(conflict=None):
    """Flush pending changes inside the current transaction (ids, constraint checks)."""
    try:
        db.session.flush()
    except IntegrityError as e:
        db.session.rollback()
        if conflict:
            raise ConflictError(conflict) from e
        current_app.logger.exception("Flush failed")
        raise StoreError() from e
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Flush failed")
        raise StoreError() from e


def execute(statement, conflict=None):
    """Run a statement in the current transaction, mapping failures like ``flush``."""
    try:
        return db.session.execute(statement)
    except IntegrityError as e:
        db.session.rollback()
        if conflict:
            raise ConflictError(conflict) from e
        current_app.logger.exception("Statement failed")
        raise StoreError() from e
    except SQLAlchemyError as e:
        db.session.rollback()
        current_app.logger.exception("Statement failed")
        raise StoreError() from e


def get_or_404(model, ident, label=None):
    obj = db.session.get(model, ident)
    if obj is None:
        raise NotFoundError(f"{label or model.__name__} not found")
    return obj
