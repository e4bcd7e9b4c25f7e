"""Reservation status machine and the table status it drives.

    (create) -> pending
    pending   -> confirmed | cancelled
    confirmed -> seated    | cancelled
    seated    -> completed | cancelled
    completed, cancelled are terminal

``Table.status`` is a projection of the reservations holding the table.
It is recomputed and written in the same transaction as every reservation
write: any seated reservation makes the table ``occupied``, any pending or
confirmed one makes it ``reserved``, otherwise it is ``available``. A table
an admin put under ``maintenance`` keeps that status.
"""
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from restaurant_backend import db
from restaurant_backend.models import (
    Table, Reservation, RESERVATION_STATUSES
)
from restaurant_backend.services.availability import (
    is_slot_taken, active_reservations_for
)
from restaurant_backend.services.errors import (
    ConflictError, InvalidRequestError, InvalidTransitionError, NotFoundError,
    StoreError
)
from restaurant_backend.services.helper import (
    commit_or_raise, get_or_404, parse_date, parse_time, parse_party_size
)

logger = logging.getLogger(__name__)

TRANSITIONS = {
    'pending': ('confirmed', 'cancelled'),
    'confirmed': ('seated', 'cancelled'),
    'seated': ('completed', 'cancelled'),
    'completed': (),
    'cancelled': (),
}

REQUIRED_FIELDS = (
    'customer_name', 'customer_email', 'customer_phone', 'table_number',
    'reservation_date', 'reservation_time', 'party_size',
)


def allowed_transitions(status):
    return TRANSITIONS.get(status, ())


def validate_transition(current, new_status):
    """Return True when ``new_status`` is a real move, False for a repeat.

    Repeating the current status is accepted as a no-op so retried
    requests (a second cancel, say) do not fail.
    """
    if new_status not in RESERVATION_STATUSES:
        raise InvalidRequestError(
            f"status must be one of: {', '.join(RESERVATION_STATUSES)}")
    if new_status == current:
        return False
    if new_status not in allowed_transitions(current):
        raise InvalidTransitionError(current, new_status)
    return True


def derive_table_status(table):
    if table.status == 'maintenance':
        return 'maintenance'
    statuses = {r.status for r in active_reservations_for(table.table_number)}
    if 'seated' in statuses:
        return 'occupied'
    if statuses:
        return 'reserved'
    return 'available'


def sync_table_status(table_number):
    """Write the derived status onto the table. The caller commits."""
    table = db.session.execute(
        select(Table).where(Table.table_number == table_number)
    ).scalar_one_or_none()
    if table is None:
        logger.warning(f"Reservation references missing table {table_number}", extra={
            'event': 'table_missing'
        })
        return None

    new_status = derive_table_status(table)
    if table.status != new_status:
        logger.info(f"Table {table_number}: {table.status} -> {new_status}", extra={
            'event': 'table_status_synced'
        })
        table.status = new_status
    return table


def _check_required(data):
    missing = [field for field in REQUIRED_FIELDS
               if data.get(field) in (None, "")]
    if missing:
        raise InvalidRequestError(
            f"Missing required fields: {', '.join(missing)}",
            details={'missing': missing})


def create_reservation(data, created_by=None):
    """Book a table for a slot and mark the table reserved.

    Raises NotFoundError for an unknown table, InvalidRequestError for
    bad input or a table that cannot take the party, and ConflictError
    when the slot is already held, including when a concurrent writer
    wins the race to the unique slot index.
    """
    _check_required(data)
    reservation_date = parse_date(data['reservation_date'], 'reservationDate')
    reservation_time = parse_time(data['reservation_time'], 'reservationTime')
    party_size = parse_party_size(data['party_size'])
    table_number = data['table_number']

    table = db.session.execute(
        select(Table).where(Table.table_number == table_number)
    ).scalar_one_or_none()
    if table is None:
        raise NotFoundError(f"Table {table_number} not found")
    if table.status == 'maintenance':
        raise InvalidRequestError(f"Table {table_number} is under maintenance")
    if party_size > table.capacity:
        raise InvalidRequestError(
            f"Table {table_number} seats {table.capacity}, party of {party_size} requested")

    if is_slot_taken(table_number, reservation_date, reservation_time):
        logger.warning(
            f"Slot taken: table {table_number} on {reservation_date} {reservation_time}",
            extra={'event': 'reservation_conflict'})
        raise ConflictError(
            f"Table {table_number} is already booked for {reservation_date} {reservation_time}")

    reservation = Reservation(
        customer_name=data['customer_name'],
        customer_email=data['customer_email'],
        customer_phone=data['customer_phone'],
        table_number=table_number,
        reservation_date=reservation_date,
        reservation_time=reservation_time,
        party_size=party_size,
        special_requests=data.get('special_requests'),
        created_by=created_by,
        status='pending',
    )

    try:
        db.session.add(reservation)
        db.session.flush()
    except IntegrityError:
        db.session.rollback()
        logger.warning(
            f"Concurrent booking lost: table {table_number} on {reservation_date} {reservation_time}",
            extra={'event': 'reservation_conflict'})
        raise ConflictError(
            f"Table {table_number} is already booked for {reservation_date} {reservation_time}")
    except SQLAlchemyError as e:
        db.session.rollback()
        logger.error(f"Database error on reservation: {e}", extra={
            'event': 'store_error'
        })
        raise StoreError("An error occurred while saving the reservation.", details=str(e))

    sync_table_status(table_number)
    commit_or_raise(
        "reservation",
        f"Table {table_number} is already booked for {reservation_date} {reservation_time}")

    logger.info(f"Reservation {reservation.id} created for table {table_number}", extra={
        'event': 'reservation_created'
    })
    return reservation


def update_reservation_status(reservation_id, new_status):
    """Move a reservation along the status machine and resync its table."""
    if not new_status:
        raise InvalidRequestError("status is required")
    reservation = get_or_404(Reservation, reservation_id, "reservation")

    if not validate_transition(reservation.status, new_status):
        logger.info(f"Reservation {reservation.id} already {new_status}", extra={
            'event': 'reservation_status_unchanged'
        })
        return reservation

    previous = reservation.status
    reservation.status = new_status
    sync_table_status(reservation.table_number)
    commit_or_raise("reservation")

    logger.info(f"Reservation {reservation.id}: {previous} -> {new_status}", extra={
        'event': 'reservation_status_changed'
    })
    return reservation


def cancel_reservation(reservation_id):
    return update_reservation_status(reservation_id, 'cancelled')
