import logging

from flask.views import MethodView
from flask_jwt_extended import create_access_token
from flask_smorest import abort
from sqlalchemy import or_, select

from restaurant_backend import db
from restaurant_backend.controllers import Blueprint, envelope
from restaurant_backend.models import User
from restaurant_backend.schemas import RegisterSchema, LoginSchema
from restaurant_backend.services.helper import (
    commit_or_raise, hash_password, verify_password
)

logger = logging.getLogger(__name__)

blp = Blueprint("Auth", __name__, description="Account registration and login")


def issue_token(user):
    return create_access_token(
        identity=str(user.id), additional_claims={"role": user.role})


def account_exists(username, email):
    return db.session.execute(
        select(User.id).where(or_(User.username == username, User.email == email))
    ).first() is not None


def create_user_logic(user_data, role):
    """Hash the password and persist a new account."""
    if account_exists(user_data["username"], user_data["email"]):
        abort(400, message="User already exists")

    user_data["password"] = hash_password(user_data["password"])
    user_data["role"] = role
    user = User(**user_data)
    db.session.add(user)
    commit_or_raise("user", "User already exists")

    logger.info(f"{role.capitalize()} account {user.username} created", extra={
        'event': 'user_created'
    })
    return user


@blp.route("/api/auth/register")
class Register(MethodView):
    @blp.arguments(RegisterSchema)
    def post(self, user_data):
        """Create a customer account and sign it in."""
        user = create_user_logic(user_data, "customer")
        return envelope(
            {"user": user.to_dict(), "token": issue_token(user)},
            "User registered successfully", 201)


@blp.route("/api/auth/login")
class Login(MethodView):
    @blp.arguments(LoginSchema)
    def post(self, login_data):
        user = db.session.execute(
            select(User).where(User.email == login_data["email"])
        ).scalar_one_or_none()

        if not user or not verify_password(login_data["password"], user.password):
            abort(401, message="Invalid email or password")
        if not user.is_active:
            abort(403, message="Account is deactivated")

        return envelope(
            {"user": user.to_dict(), "token": issue_token(user)},
            "Login successful")
