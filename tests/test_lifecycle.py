import pytest
from sqlalchemy.exc import OperationalError

from restaurant_backend import db
from restaurant_backend.models import Reservation, Table
from restaurant_backend.services import lifecycle
from restaurant_backend.services.availability import find_available_tables
from restaurant_backend.services.errors import (
    ConflictError, InvalidRequestError, InvalidTransitionError, NotFoundError,
    StoreError
)
from restaurant_backend.services.lifecycle import (
    allowed_transitions, cancel_reservation, create_reservation,
    update_reservation_status, validate_transition
)


def table_status(number):
    db.session.expire_all()
    return Table.query.filter_by(table_number=number).one().status


def free_numbers():
    return [t.table_number for t in find_available_tables("2024-06-01", "18:00", 2)]


def test_full_lifecycle_keeps_table_in_sync(tables, reservation_data):
    reservation = create_reservation(reservation_data)
    assert reservation.status == "pending"
    assert reservation.id is not None
    assert reservation.created_at is not None
    assert table_status("T01") == "reserved"
    assert "T01" not in free_numbers()

    update_reservation_status(reservation.id, "confirmed")
    assert table_status("T01") == "reserved"

    update_reservation_status(reservation.id, "seated")
    assert table_status("T01") == "occupied"

    update_reservation_status(reservation.id, "completed")
    assert table_status("T01") == "available"
    assert "T01" in free_numbers()


def test_cancel_frees_table(tables, reservation_data):
    reservation = create_reservation(reservation_data)
    cancelled = cancel_reservation(reservation.id)
    assert cancelled.status == "cancelled"
    assert table_status("T01") == "available"
    assert "T01" in free_numbers()


def test_repeated_cancel_is_a_no_op(tables, reservation_data):
    reservation = create_reservation(reservation_data)
    cancel_reservation(reservation.id)

    # Someone books the freed slot, the repeat must not touch the table
    create_reservation(reservation_data)
    assert table_status("T01") == "reserved"

    again = update_reservation_status(reservation.id, "cancelled")
    assert again.status == "cancelled"
    assert table_status("T01") == "reserved"


def test_table_stays_held_while_other_reservations_are_active(tables, reservation_data):
    first = create_reservation(reservation_data)
    second = create_reservation({**reservation_data, "reservation_time": "20:00"})

    update_reservation_status(first.id, "confirmed")
    update_reservation_status(first.id, "seated")
    update_reservation_status(first.id, "completed")
    assert table_status("T01") == "reserved"

    cancel_reservation(second.id)
    assert table_status("T01") == "available"


def test_seated_wins_over_reserved(tables, reservation_data):
    early = create_reservation(reservation_data)
    create_reservation({**reservation_data, "reservation_time": "21:00"})
    update_reservation_status(early.id, "confirmed")
    update_reservation_status(early.id, "seated")
    assert table_status("T01") == "occupied"


def test_maintenance_override_is_kept(tables, reservation_data):
    reservation = create_reservation(reservation_data)
    tables["T01"].status = "maintenance"
    db.session.commit()

    cancel_reservation(reservation.id)
    assert table_status("T01") == "maintenance"


@pytest.mark.parametrize("current,new", [
    ("pending", "seated"),
    ("pending", "completed"),
    ("confirmed", "pending"),
    ("confirmed", "completed"),
    ("seated", "confirmed"),
    ("completed", "cancelled"),
    ("cancelled", "pending"),
])
def test_non_adjacent_moves_rejected(current, new):
    with pytest.raises(InvalidTransitionError) as excinfo:
        validate_transition(current, new)
    assert excinfo.value.current == current
    assert excinfo.value.requested == new


def test_transition_table():
    assert allowed_transitions("pending") == ("confirmed", "cancelled")
    assert allowed_transitions("seated") == ("completed", "cancelled")
    assert allowed_transitions("completed") == ()
    assert validate_transition("pending", "confirmed") is True
    assert validate_transition("seated", "seated") is False
    with pytest.raises(InvalidRequestError):
        validate_transition("pending", "archived")


def test_rejected_transition_leaves_state_alone(tables, reservation_data):
    reservation = create_reservation(reservation_data)
    with pytest.raises(InvalidTransitionError):
        update_reservation_status(reservation.id, "completed")
    assert db.session.get(Reservation, reservation.id).status == "pending"
    assert table_status("T01") == "reserved"


def test_unknown_reservation(tables):
    with pytest.raises(NotFoundError):
        update_reservation_status(999, "confirmed")
    with pytest.raises(NotFoundError):
        cancel_reservation(999)


def test_missing_status(tables, reservation_data):
    reservation = create_reservation(reservation_data)
    with pytest.raises(InvalidRequestError):
        update_reservation_status(reservation.id, "")


def test_create_requires_fields(tables, reservation_data):
    del reservation_data["customer_phone"]
    with pytest.raises(InvalidRequestError) as excinfo:
        create_reservation(reservation_data)
    assert excinfo.value.details == {"missing": ["customer_phone"]}


def test_create_rejects_unknown_table(tables, reservation_data):
    with pytest.raises(NotFoundError):
        create_reservation({**reservation_data, "table_number": "T99"})


def test_create_rejects_maintenance_and_oversized_party(tables, reservation_data):
    with pytest.raises(InvalidRequestError):
        create_reservation({**reservation_data, "table_number": "T04"})
    with pytest.raises(InvalidRequestError):
        create_reservation({**reservation_data, "party_size": 3})
    with pytest.raises(InvalidRequestError):
        create_reservation({**reservation_data, "party_size": 0})


def test_slot_can_only_be_booked_once(tables, reservation_data):
    create_reservation(reservation_data)
    with pytest.raises(ConflictError):
        create_reservation({**reservation_data, "customer_name": "Grace Hopper"})
    assert Reservation.query.count() == 1


def test_racing_writer_loses_on_unique_slot(tables, reservation_data, monkeypatch):
    create_reservation(reservation_data)

    # Second writer passed its availability check before the first one committed
    monkeypatch.setattr(lifecycle, "is_slot_taken", lambda *args: False)
    with pytest.raises(ConflictError):
        create_reservation({**reservation_data, "customer_name": "Grace Hopper"})

    assert Reservation.query.count() == 1
    assert table_status("T01") == "reserved"


def test_slot_reusable_after_cancellation(tables, reservation_data):
    first = create_reservation(reservation_data)
    cancel_reservation(first.id)
    second = create_reservation(reservation_data)
    assert second.id != first.id
    assert table_status("T01") == "reserved"


def test_store_failure_rolls_back(tables, reservation_data, monkeypatch):
    def boom():
        raise OperationalError("COMMIT", {}, Exception("disk I/O error"))

    monkeypatch.setattr(db.session, "commit", boom)
    with pytest.raises(StoreError):
        create_reservation(reservation_data)
    monkeypatch.undo()

    assert Reservation.query.count() == 0
    assert table_status("T01") == "available"


def test_flush_failure_becomes_store_error(tables, reservation_data, monkeypatch):
    def boom():
        raise OperationalError("INSERT", {}, Exception("database is locked"))

    monkeypatch.setattr(db.session, "flush", boom)
    with pytest.raises(StoreError):
        create_reservation(reservation_data)
    monkeypatch.undo()

    assert Reservation.query.count() == 0
    assert table_status("T01") == "available"
