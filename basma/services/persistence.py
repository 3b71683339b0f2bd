"""Unit-of-work helpers around the SQLAlchemy session."""
from flask import current_app
from sqlalchemy.exc import DBAPIError, OperationalError

from .. import db
from ..exceptions import BackendUnavailableError, NotFoundError


def commit():
    """
    Commits the current session.

    Raises:
        BackendUnavailableError: the database dropped or refused the connection.
            The session is rolled back first so no partial write survives.
        IntegrityError: propagated untouched for callers that treat a unique
            constraint violation as a normal outcome (after rollback).
    """
    try:
        db.session.commit()
    except OperationalError as e:
        db.session.rollback()
        current_app.logger.error(f"Commit failed, backend unavailable: {e}")
        raise BackendUnavailableError() from e
    except DBAPIError as e:
        db.session.rollback()
        if e.connection_invalidated:
            current_app.logger.error(f"Commit failed, connection invalidated: {e}")
            raise BackendUnavailableError() from e
        raise


def get_or_404(model, object_id, resource=None):
    """Fetches a row by primary key or raises NotFoundError."""
    obj = db.session.get(model, object_id) if object_id is not None else None
    if obj is None:
        raise NotFoundError(resource or model.__name__, object_id)
    return obj


def upsert(model, conflict_keys, values):
    """
    Inserts a row or updates the one matching conflict_keys.

    Args:
        model: Mapped class.
        conflict_keys: Dict of the unique columns identifying the row.
        values: Dict of the columns to set.

    Returns:
        The inserted or updated instance (not yet committed).
    """
    instance = model.query.filter_by(**conflict_keys).first()
    if instance is None:
        instance = model(**conflict_keys, **values)
        db.session.add(instance)
    else:
        for key, value in values.items():
            setattr(instance, key, value)
    return instance
