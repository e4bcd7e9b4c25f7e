from restaurant_backend import db
from datetime import datetime

from sqlalchemy import CheckConstraint, text


TABLE_LOCATIONS = ('indoors', 'outdoors', 'balcony', 'private')
TABLE_STATUSES = ('available', 'occupied', 'reserved', 'maintenance')

RESERVATION_STATUSES = ('pending', 'confirmed', 'seated', 'completed', 'cancelled')
# Statuses that still hold a table for their slot
ACTIVE_RESERVATION_STATUSES = ('pending', 'confirmed', 'seated')

USER_ROLES = ('customer', 'staff', 'admin')
STAFF_RANKS = ('junior', 'senior', 'manager', 'executive')

_ACTIVE_SLOT_CLAUSE = text(
    "status IN ('pending', 'confirmed', 'seated')"
)


def _iso(value):
    return value.isoformat() if value else None


class User(db.Model):
    __tablename__ = 'users'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(db.String(30), nullable=False, unique=True)
    email = db.Column(db.String(120), nullable=False, unique=True)
    password = db.Column(db.String(200), nullable=False)  # pbkdf2_sha256 hash
    role = db.Column(
        db.Enum(*USER_ROLES, name='user_role_enum'),
        nullable=False, default='customer')

    # Staff specific fields
    salary = db.Column(db.Float, nullable=False, default=0)
    rank = db.Column(
        db.Enum(*STAFF_RANKS, name='staff_rank_enum'),
        nullable=False, default='junior')
    join_date = db.Column(db.DateTime, default=datetime.utcnow)
    is_active = db.Column(db.Boolean, nullable=False, default=True)
    phone = db.Column(db.String(20), nullable=True)
    address = db.Column(db.String(255), nullable=True)

    created_at = db.Column(db.DateTime, default=datetime.utcnow)

    def deactivate(self):
        """Staff records are never removed, only switched off."""
        self.is_active = False

    def to_dict(self):
        return {
            "id": self.id,
            "username": self.username,
            "email": self.email,
            "role": self.role,
            "salary": self.salary,
            "rank": self.rank,
            "joinDate": _iso(self.join_date),
            "isActive": self.is_active,
            "phone": self.phone,
            "address": self.address,
            "createdAt": _iso(self.created_at),
        }


class Table(db.Model):
    __tablename__ = 'tables'

    id = db.Column(db.Integer, primary_key=True)
    # Natural key, reservations point at this rather than the id
    table_number = db.Column(db.String(20), nullable=False, unique=True)
    capacity = db.Column(db.Integer, nullable=False)
    location = db.Column(
        db.Enum(*TABLE_LOCATIONS, name='table_location_enum'),
        nullable=False, default='indoors')
    # Projection of reservation state, kept in sync by the lifecycle service
    status = db.Column(
        db.Enum(*TABLE_STATUSES, name='table_status_enum'),
        nullable=False, default='available')
    description = db.Column(db.String(200), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('capacity >= 1 AND capacity <= 20',
                        name='ck_table_capacity_range'),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "tableNumber": self.table_number,
            "capacity": self.capacity,
            "location": self.location,
            "status": self.status,
            "description": self.description,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }


class Reservation(db.Model):
    __tablename__ = 'reservations'

    id = db.Column(db.Integer, primary_key=True)
    customer_name = db.Column(db.String(100), nullable=False)
    customer_email = db.Column(db.String(120), nullable=False, index=True)
    customer_phone = db.Column(db.String(30), nullable=False)
    table_number = db.Column(db.String(20), nullable=False, index=True)
    reservation_date = db.Column(db.Date, nullable=False)
    reservation_time = db.Column(db.String(5), nullable=False)  # HH:MM
    party_size = db.Column(db.Integer, nullable=False)
    status = db.Column(
        db.Enum(*RESERVATION_STATUSES, name='reservation_status_enum'),
        nullable=False, default='pending')
    special_requests = db.Column(db.Text, nullable=True)
    created_by = db.Column(
        db.Integer, db.ForeignKey('users.id'), nullable=True)
    created_at = db.Column(db.DateTime, default=datetime.utcnow)
    updated_at = db.Column(
        db.DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    __table_args__ = (
        CheckConstraint('party_size >= 1', name='ck_party_size_positive'),
        # One live booking per table and slot, terminal rows are ignored
        db.Index(
            'uq_reservation_active_slot',
            'table_number', 'reservation_date', 'reservation_time',
            unique=True,
            sqlite_where=_ACTIVE_SLOT_CLAUSE,
            postgresql_where=_ACTIVE_SLOT_CLAUSE,
        ),
    )

    def to_dict(self):
        return {
            "id": self.id,
            "customerName": self.customer_name,
            "customerEmail": self.customer_email,
            "customerPhone": self.customer_phone,
            "tableNumber": self.table_number,
            "reservationDate": self.reservation_date.strftime("%Y-%m-%d"),
            "reservationTime": self.reservation_time,
            "partySize": self.party_size,
            "status": self.status,
            "specialRequests": self.special_requests,
            "createdBy": self.created_by,
            "createdAt": _iso(self.created_at),
            "updatedAt": _iso(self.updated_at),
        }
