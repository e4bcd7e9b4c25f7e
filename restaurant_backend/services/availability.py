"""Which tables are free for a slot.

Availability is derived on every call from the live reservation set, there
is no cached calendar. A table is offered when it seats the party, is not
under maintenance and no pending/confirmed/seated reservation holds it for
the exact (date, time) slot. The stored ``Table.status`` is not consulted
beyond the maintenance check.
"""
import logging

from sqlalchemy import select

from restaurant_backend import db
from restaurant_backend.models import (
    Table, Reservation, ACTIVE_RESERVATION_STATUSES
)
from restaurant_backend.services.helper import (
    parse_date, parse_time, parse_party_size
)

logger = logging.getLogger(__name__)


def booked_table_numbers(reservation_date, reservation_time):
    """Table numbers held by a non-terminal reservation in the slot."""
    stmt = select(Reservation.table_number).where(
        Reservation.reservation_date == reservation_date,
        Reservation.reservation_time == reservation_time,
        Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
    )
    return set(db.session.execute(stmt).scalars().all())


def is_slot_taken(table_number, reservation_date, reservation_time):
    return table_number in booked_table_numbers(reservation_date, reservation_time)


def find_available_tables(date, time, party_size):
    """Return the tables free for ``party_size`` guests at ``date`` ``time``.

    Raises InvalidRequestError when an argument is missing or
    ``party_size`` is below 1. Tables come back in store order.
    """
    reservation_date = parse_date(date)
    reservation_time = parse_time(time)
    party_size = parse_party_size(party_size)

    candidates = db.session.execute(
        select(Table).where(
            Table.capacity >= party_size,
            Table.status != 'maintenance',
        ).order_by(Table.id)
    ).scalars().all()

    taken = booked_table_numbers(reservation_date, reservation_time)
    available = [t for t in candidates if t.table_number not in taken]

    logger.info(
        f"Availability {reservation_date} {reservation_time} party={party_size}: "
        f"{len(available)}/{len(candidates)} tables free",
        extra={'event': 'availability_checked'}
    )
    return available


def active_reservations_for(table_number):
    """Non-terminal reservations on a table, across all slots."""
    return db.session.execute(
        select(Reservation).where(
            Reservation.table_number == table_number,
            Reservation.status.in_(ACTIVE_RESERVATION_STATUSES),
        )
    ).scalars().all()
