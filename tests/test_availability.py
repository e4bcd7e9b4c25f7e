from datetime import date

import pytest

from restaurant_backend import db
from restaurant_backend.models import Reservation
from restaurant_backend.services.availability import (
    active_reservations_for, booked_table_numbers, find_available_tables
)
from restaurant_backend.services.errors import InvalidRequestError


def numbers(tables):
    return [t.table_number for t in tables]


def add_reservation(table_number, status="pending", day=date(2024, 6, 1), time="18:00"):
    reservation = Reservation(
        customer_name="Guest",
        customer_email="guest@example.com",
        customer_phone="555-0100",
        table_number=table_number,
        reservation_date=day,
        reservation_time=time,
        party_size=2,
        status=status,
    )
    db.session.add(reservation)
    db.session.commit()
    return reservation


def test_free_table_is_offered(tables):
    assert "T01" in numbers(find_available_tables("2024-06-01", "18:00", 2))


def test_capacity_and_maintenance_filter(tables):
    # T04 seats 8 but is under maintenance
    assert numbers(find_available_tables("2024-06-01", "18:00", 5)) == ["T03"]
    assert find_available_tables("2024-06-01", "18:00", 7) == []


def test_results_keep_store_order(tables):
    assert numbers(find_available_tables("2024-06-01", "18:00", 1)) == ["T01", "T02", "T03"]


@pytest.mark.parametrize("status", ["pending", "confirmed", "seated"])
def test_active_reservation_blocks_slot(tables, status):
    add_reservation("T01", status=status)
    assert "T01" not in numbers(find_available_tables("2024-06-01", "18:00", 2))


@pytest.mark.parametrize("status", ["completed", "cancelled"])
def test_terminal_reservation_frees_slot(tables, status):
    add_reservation("T01", status=status)
    assert "T01" in numbers(find_available_tables("2024-06-01", "18:00", 2))


def test_other_slots_do_not_block(tables):
    add_reservation("T01", time="20:00")
    add_reservation("T01", day=date(2024, 6, 2))
    assert "T01" in numbers(find_available_tables("2024-06-01", "18:00", 2))


def test_stored_status_alone_does_not_exclude(tables):
    tables["T02"].status = "occupied"
    db.session.commit()
    assert "T02" in numbers(find_available_tables("2024-06-01", "18:00", 2))


def test_accepts_date_objects_and_unpadded_times(tables):
    add_reservation("T01", time="09:30")
    assert "T01" not in numbers(find_available_tables(date(2024, 6, 1), "9:30", 2))


@pytest.mark.parametrize("args", [
    (None, "18:00", 2),
    ("2024-06-01", "", 2),
    ("2024-06-01", "18:00", None),
    ("2024-06-01", "18:00", 0),
    ("2024-06-01", "18:00", "many"),
    ("01/06/2024", "18:00", 2),
    ("2024-06-01", "6pm", 2),
    ("2024-06-01garbage", "18:00", 2),
    ("2024-06-01 18:00 extra", "18:00", 2),
])
def test_invalid_requests(tables, args):
    with pytest.raises(InvalidRequestError):
        find_available_tables(*args)


def test_accepts_iso_timestamps(tables):
    add_reservation("T01")
    assert "T01" not in numbers(find_available_tables("2024-06-01T18:00:00", "18:00", 2))


def test_booked_table_numbers_and_active_lookup(tables):
    add_reservation("T01")
    add_reservation("T02", status="cancelled")
    add_reservation("T02", time="19:00", status="seated")

    assert booked_table_numbers(date(2024, 6, 1), "18:00") == {"T01"}
    assert [r.status for r in active_reservations_for("T02")] == ["seated"]
