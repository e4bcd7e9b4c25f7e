import logging
from datetime import date, datetime

from passlib.hash import pbkdf2_sha256
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from restaurant_backend import db
from restaurant_backend.services.errors import (
    ConflictError, InvalidRequestError, NotFoundError, StoreError
)

logger = logging.getLogger(__name__)

DATE_FORMAT = "%Y-%m-%d"
TIME_FORMAT = "%H:%M"


def parse_date(value, field="date"):
    """Accept a ``date``, a ``YYYY-MM-DD`` string or a full ISO timestamp."""
    if value is None or value == "":
        raise InvalidRequestError(f"{field} is required")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    try:
        return datetime.strptime(text, DATE_FORMAT).date()
    except ValueError:
        pass
    try:
        return datetime.fromisoformat(text).date()
    except ValueError:
        raise InvalidRequestError(f"{field} must use the YYYY-MM-DD format")


def parse_time(value, field="time"):
    """Normalise a time-of-day to zero padded ``HH:MM``."""
    if value is None or value == "":
        raise InvalidRequestError(f"{field} is required")
    try:
        return datetime.strptime(str(value).strip(), TIME_FORMAT).strftime(TIME_FORMAT)
    except ValueError:
        raise InvalidRequestError(f"{field} must use the HH:MM format")


def parse_party_size(value, field="partySize"):
    if value is None or value == "":
        raise InvalidRequestError(f"{field} is required")
    try:
        size = int(value)
    except (TypeError, ValueError):
        raise InvalidRequestError(f"{field} must be an integer")
    if size < 1:
        raise InvalidRequestError(f"{field} must be at least 1")
    return size


def get_or_404(Model, id, entity):
    """Fetch an item by ID or raise NotFoundError."""
    item = db.session.get(Model, id)
    if not item:
        raise NotFoundError(f"{entity.capitalize()} not found")
    return item


def commit_or_raise(entity, conflict_message=None):
    """Commit the session, rolling back and translating failures.

    Integrity violations become ConflictError, anything else the
    database raises becomes StoreError.
    """
    try:
        db.session.commit()
    except IntegrityError as e:
        db.session.rollback()
        logger.warning(f"Integrity error on {entity}: {e.orig}", extra={
            'event': 'integrity_error'
        })
        raise ConflictError(conflict_message or f"{entity.capitalize()} conflicts with an existing record")
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database error on {entity}: {e}", extra={
            'event': 'store_error'
        })
        raise StoreError(f"An error occurred while saving the {entity}.", details=str(e))


def update_fields(item, data):
    for key, value in data.items():
        if hasattr(item, key):
            setattr(item, key, value)
    return item


def hash_password(raw):
    return pbkdf2_sha256.hash(raw)


def verify_password(raw, hashed):
    return pbkdf2_sha256.verify(raw, hashed)
