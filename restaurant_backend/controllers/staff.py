import logging

from flask.views import MethodView
from flask_jwt_extended import jwt_required
from flask_smorest import abort
from sqlalchemy import select

from restaurant_backend import db
from restaurant_backend.controllers import Blueprint, check_admin_role, envelope
from restaurant_backend.controllers.auth import create_user_logic
from restaurant_backend.models import User
from restaurant_backend.schemas import StaffSchema, StaffUpdateSchema
from restaurant_backend.services.helper import (
    commit_or_raise, get_or_404, update_fields
)

logger = logging.getLogger(__name__)

blp = Blueprint("Staff", __name__, description="Staff management (admin only)")


def get_staff_member(user_id):
    user = get_or_404(User, user_id, "staff member")
    if user.role == "customer":
        abort(404, message="Staff member not found")
    return user


@blp.route("/api/staff")
class StaffList(MethodView):
    @jwt_required()
    def get(self):
        check_admin_role()
        staff = db.session.execute(
            select(User).where(User.role.in_(("staff", "admin"))).order_by(User.id)
        ).scalars().all()
        return envelope([member.to_dict() for member in staff])

    @jwt_required()
    @blp.arguments(StaffSchema)
    def post(self, staff_data):
        check_admin_role()
        role = staff_data.pop("role")
        staff = create_user_logic(staff_data, role)
        return envelope(staff.to_dict(), "Staff member created successfully", 201)


@blp.route("/api/staff/<int:user_id>")
class StaffResource(MethodView):
    @jwt_required()
    @blp.arguments(StaffUpdateSchema)
    def put(self, staff_data, user_id):
        """Update pay, rank, contact details or the active flag."""
        check_admin_role()
        staff = get_staff_member(user_id)
        update_fields(staff, staff_data)
        commit_or_raise("staff member")
        return envelope(staff.to_dict(), "Staff member updated successfully")

    @jwt_required()
    def delete(self, user_id):
        """Deactivate a staff member, the record is kept."""
        check_admin_role()
        staff = get_staff_member(user_id)
        staff.deactivate()
        commit_or_raise("staff member")
        logger.info(f"Staff member {staff.username} deactivated", extra={
            'event': 'staff_deactivated'
        })
        return envelope(staff.to_dict(), "Staff member deactivated")
