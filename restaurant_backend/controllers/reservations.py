from flask.views import MethodView
from flask_jwt_extended import get_jwt_identity, jwt_required
from sqlalchemy import select

from restaurant_backend import db
from restaurant_backend.controllers import Blueprint, envelope
from restaurant_backend.models import Reservation
from restaurant_backend.schemas import (
    ReservationSchema, ReservationStatusSchema, ReservationQuerySchema
)
from restaurant_backend.services.helper import get_or_404
from restaurant_backend.services.lifecycle import (
    allowed_transitions, cancel_reservation, create_reservation,
    update_reservation_status
)

blp = Blueprint("Reservations", __name__, description="Reservation lifecycle")

NEWEST_FIRST = (Reservation.reservation_date.desc(), Reservation.reservation_time.desc())


@blp.route("/api/reservations")
class ReservationList(MethodView):
    @blp.arguments(ReservationQuerySchema, location="query")
    def get(self, filters):
        """List reservations, newest slot first."""
        stmt = select(Reservation)
        if "customer_email" in filters:
            stmt = stmt.where(Reservation.customer_email == filters["customer_email"])
        if "date" in filters:
            stmt = stmt.where(Reservation.reservation_date == filters["date"])
        if filters.get("status", "all") != "all":
            stmt = stmt.where(Reservation.status == filters["status"])

        reservations = db.session.execute(stmt.order_by(*NEWEST_FIRST)).scalars().all()
        return envelope([r.to_dict() for r in reservations])

    @jwt_required(optional=True)
    @blp.arguments(ReservationSchema)
    def post(self, reservation_data):
        """Book a table. Signed-in callers are recorded as the creator."""
        identity = get_jwt_identity()
        reservation = create_reservation(
            reservation_data, created_by=int(identity) if identity else None)
        return envelope(reservation.to_dict(), "Reservation created successfully", 201)


@blp.route("/api/reservations/<int:reservation_id>")
class ReservationResource(MethodView):
    def get(self, reservation_id):
        return envelope(get_or_404(Reservation, reservation_id, "reservation").to_dict())


@blp.route("/api/reservations/user/<string:email>")
class CustomerReservations(MethodView):
    def get(self, email):
        """All reservations made under a customer email."""
        reservations = db.session.execute(
            select(Reservation)
            .where(Reservation.customer_email == email)
            .order_by(*NEWEST_FIRST)
        ).scalars().all()
        return envelope([r.to_dict() for r in reservations])


@blp.route("/api/reservations/<int:reservation_id>/status")
class ReservationStatus(MethodView):
    @blp.arguments(ReservationStatusSchema)
    def put(self, status_data, reservation_id):
        reservation = update_reservation_status(reservation_id, status_data["status"])
        return envelope(reservation.to_dict())


@blp.route("/api/reservations/<int:reservation_id>/cancel")
class ReservationCancel(MethodView):
    def put(self, reservation_id):
        return envelope(cancel_reservation(reservation_id).to_dict())


@blp.route("/api/reservations/<int:reservation_id>/transitions")
class ReservationTransitions(MethodView):
    def get(self, reservation_id):
        """Statuses the reservation can move to next."""
        reservation = get_or_404(Reservation, reservation_id, "reservation")
        return envelope({
            "status": reservation.status,
            "next": list(allowed_transitions(reservation.status)),
        })
