import logging

from flask.views import MethodView
from flask_jwt_extended import jwt_required
from sqlalchemy import select

from restaurant_backend import db
from restaurant_backend.controllers import Blueprint, check_admin_role, envelope
from restaurant_backend.models import Table
from restaurant_backend.schemas import (
    TableSchema, TableUpdateSchema, TableQuerySchema, AvailabilityQuerySchema
)
from restaurant_backend.services.availability import (
    find_available_tables, active_reservations_for
)
from restaurant_backend.services.errors import ConflictError, NotFoundError
from restaurant_backend.services.helper import (
    commit_or_raise, get_or_404, update_fields
)

logger = logging.getLogger(__name__)

blp = Blueprint("Tables", __name__, description="Table inventory and availability")


def get_table_by_number(table_number):
    table = db.session.execute(
        select(Table).where(Table.table_number == table_number)
    ).scalar_one_or_none()
    if not table:
        raise NotFoundError("Table not found")
    return table


def table_number_in_use(table_number, exclude_id=None):
    stmt = select(Table.id).where(Table.table_number == table_number)
    if exclude_id is not None:
        stmt = stmt.where(Table.id != exclude_id)
    return db.session.execute(stmt).first() is not None


def update_table_logic(table, table_data):
    """Apply a partial update, guarding the natural key."""
    new_number = table_data.get("table_number")
    if new_number is not None and new_number != table.table_number:
        if table_number_in_use(new_number, exclude_id=table.id):
            raise ConflictError(f"Table number {new_number} already exists")
        # Reservations reference the number, renaming would orphan them
        if active_reservations_for(table.table_number):
            raise ConflictError(
                f"Table {table.table_number} has active reservations and cannot be renumbered")

    update_fields(table, table_data)
    commit_or_raise("table", "Table number already exists")
    logger.info(f"Table {table.table_number} updated", extra={'event': 'table_updated'})
    return envelope(table.to_dict(), "Table updated successfully")


@blp.route("/api/tables")
class TableList(MethodView):
    @blp.arguments(TableQuerySchema, location="query")
    def get(self, filters):
        """List tables, optionally filtered by status and location."""
        stmt = select(Table).order_by(Table.id)
        if "status" in filters:
            stmt = stmt.where(Table.status == filters["status"])
        if "location" in filters:
            stmt = stmt.where(Table.location == filters["location"])
        tables = db.session.execute(stmt).scalars().all()
        return envelope([table.to_dict() for table in tables])

    @jwt_required()
    @blp.arguments(TableSchema)
    def post(self, table_data):
        """Create a table. Table numbers are unique."""
        check_admin_role()
        if table_number_in_use(table_data["table_number"]):
            raise ConflictError(f"Table number {table_data['table_number']} already exists")

        table = Table(**table_data)
        db.session.add(table)
        commit_or_raise("table", "Table number already exists")

        logger.info(f"Table {table.table_number} created", extra={'event': 'table_created'})
        return envelope(table.to_dict(), "Table created successfully", 201)


@blp.route("/api/tables/available")
class TableAvailability(MethodView):
    @blp.arguments(AvailabilityQuerySchema, location="query")
    def get(self, query):
        """Tables free for a party at a given date and time."""
        tables = find_available_tables(
            query["date"], query["time"], query["party_size"])
        return envelope([table.to_dict() for table in tables])


@blp.route("/api/tables/<int:table_id>")
class TableResource(MethodView):
    def get(self, table_id):
        table = get_or_404(Table, table_id, "table")
        return envelope(table.to_dict())

    @jwt_required()
    @blp.arguments(TableUpdateSchema)
    def put(self, table_data, table_id):
        """Update a table. Setting ``status`` directly is an admin override."""
        check_admin_role()
        table = get_or_404(Table, table_id, "table")
        return update_table_logic(table, table_data)

    @jwt_required()
    def delete(self, table_id):
        """Delete a table that no active reservation depends on."""
        check_admin_role()
        table = get_or_404(Table, table_id, "table")
        if active_reservations_for(table.table_number):
            raise ConflictError(
                f"Table {table.table_number} has active reservations and cannot be deleted")

        db.session.delete(table)
        commit_or_raise("table")
        logger.info(f"Table {table.table_number} deleted", extra={'event': 'table_deleted'})
        return envelope(message="Table deleted")


@blp.route("/api/tables/number/<string:table_number>")
class TableByNumber(MethodView):
    def get(self, table_number):
        return envelope(get_table_by_number(table_number).to_dict())

    @jwt_required()
    @blp.arguments(TableUpdateSchema)
    def put(self, table_data, table_number):
        check_admin_role()
        table = get_table_by_number(table_number)
        return update_table_logic(table, table_data)
