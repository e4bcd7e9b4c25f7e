from flask_jwt_extended import get_jwt
from flask_smorest import Blueprint as SmorestBlueprint, abort
from webargs.flaskparser import FlaskParser


class ArgumentsParser(FlaskParser):
    # Invalid or missing arguments are a client error, answer 400 rather than 422
    DEFAULT_VALIDATION_STATUS = 400


class Blueprint(SmorestBlueprint):
    ARGUMENTS_PARSER = ArgumentsParser()


def envelope(data=None, message=None, status=200):
    """Wrap a payload in the ``{success, data, message}`` response shape."""
    body = {"success": True}
    if data is not None:
        body["data"] = data
    if message:
        body["message"] = message
    return body, status


def check_admin_role():
    """Check if the JWT contains the 'admin' role."""
    claims = get_jwt()
    if claims.get("role") != "admin":
        abort(403, message="Access forbidden: Admin role required.")
