from marshmallow import (
    Schema,
    fields,
    validate,
    post_load,
    pre_load,
    EXCLUDE
)

from restaurant_backend.models import (
    TABLE_LOCATIONS, TABLE_STATUSES, RESERVATION_STATUSES, STAFF_RANKS
)

# 24h clock, zero padded
TIME_PATTERN = r"^([01]\d|2[0-3]):[0-5]\d$"


class BaseSchema(Schema):
    class Meta:
        unknown = EXCLUDE


class TableNumberMixin:
    """Trims ``tableNumber`` before validation so blank values are rejected."""

    @pre_load
    def strip_table_number(self, data, **kwargs):
        value = data.get("tableNumber") if isinstance(data, dict) else None
        if isinstance(value, str):
            data = dict(data, tableNumber=value.strip())
        return data


class TableSchema(TableNumberMixin, BaseSchema):
    table_number = fields.Str(
        required=True, data_key="tableNumber",
        validate=validate.Length(min=1, max=20))
    capacity = fields.Int(required=True, validate=validate.Range(min=1, max=20))
    location = fields.Str(validate=validate.OneOf(TABLE_LOCATIONS))
    status = fields.Str(validate=validate.OneOf(TABLE_STATUSES))
    description = fields.Str(allow_none=True, validate=validate.Length(max=200))


class TableUpdateSchema(TableNumberMixin, BaseSchema):
    table_number = fields.Str(
        data_key="tableNumber", validate=validate.Length(min=1, max=20))
    capacity = fields.Int(validate=validate.Range(min=1, max=20))
    location = fields.Str(validate=validate.OneOf(TABLE_LOCATIONS))
    status = fields.Str(validate=validate.OneOf(TABLE_STATUSES))
    description = fields.Str(allow_none=True, validate=validate.Length(max=200))


class TableQuerySchema(BaseSchema):
    status = fields.Str(validate=validate.OneOf(TABLE_STATUSES))
    location = fields.Str(validate=validate.OneOf(TABLE_LOCATIONS))


class AvailabilityQuerySchema(BaseSchema):
    date = fields.Date(required=True, format="%Y-%m-%d")
    time = fields.Str(
        required=True,
        validate=validate.Regexp(TIME_PATTERN, error="time must use the HH:MM format"))
    party_size = fields.Int(
        required=True, data_key="partySize", validate=validate.Range(min=1))


class ReservationSchema(TableNumberMixin, BaseSchema):
    customer_name = fields.Str(
        required=True, data_key="customerName",
        validate=validate.Length(min=1, max=100))
    customer_email = fields.Email(required=True, data_key="customerEmail")
    customer_phone = fields.Str(
        required=True, data_key="customerPhone",
        validate=validate.Length(min=1, max=30))
    table_number = fields.Str(
        required=True, data_key="tableNumber",
        validate=validate.Length(min=1, max=20))
    reservation_date = fields.Date(
        required=True, data_key="reservationDate", format="%Y-%m-%d")
    reservation_time = fields.Str(
        required=True, data_key="reservationTime",
        validate=validate.Regexp(TIME_PATTERN, error="reservationTime must use the HH:MM format"))
    party_size = fields.Int(
        required=True, data_key="partySize", validate=validate.Range(min=1))
    special_requests = fields.Str(
        allow_none=True, data_key="specialRequests",
        validate=validate.Length(max=1000))


class ReservationStatusSchema(BaseSchema):
    status = fields.Str(
        required=True, validate=validate.OneOf(RESERVATION_STATUSES))


class ReservationQuerySchema(BaseSchema):
    date = fields.Date(format="%Y-%m-%d")
    status = fields.Str(
        validate=validate.OneOf(RESERVATION_STATUSES + ("all",)))
    customer_email = fields.Email(data_key="customerEmail")


class RegisterSchema(BaseSchema):
    username = fields.Str(
        required=True,
        validate=validate.Length(min=3, max=30, error="Username must be 3 to 30 characters"))
    email = fields.Email(required=True, validate=validate.Length(max=120))
    password = fields.Str(
        required=True,
        load_only=True,
        validate=validate.Length(min=6, error="Password must be at least 6 characters"))
    phone = fields.Str(validate=validate.Length(max=20))
    address = fields.Str(validate=validate.Length(max=255))

    @post_load
    def normalise(self, data, **kwargs):
        data["username"] = data["username"].strip()
        data["email"] = data["email"].strip().lower()
        return data


class LoginSchema(BaseSchema):
    email = fields.Email(required=True)
    password = fields.Str(required=True, load_only=True)

    @post_load
    def lower_email(self, data, **kwargs):
        data["email"] = data["email"].strip().lower()
        return data


class StaffSchema(RegisterSchema):
    role = fields.Str(
        load_default="staff", validate=validate.OneOf(["staff", "admin"]))
    salary = fields.Float(load_default=0, validate=validate.Range(min=0))
    rank = fields.Str(load_default="junior", validate=validate.OneOf(STAFF_RANKS))


class StaffUpdateSchema(BaseSchema):
    salary = fields.Float(validate=validate.Range(min=0))
    rank = fields.Str(validate=validate.OneOf(STAFF_RANKS))
    is_active = fields.Bool(data_key="isActive")
    phone = fields.Str(validate=validate.Length(max=20))
    address = fields.Str(validate=validate.Length(max=255))
