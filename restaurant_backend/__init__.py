from flask import Flask, jsonify
from flask_smorest import Api
from flask_sqlalchemy import SQLAlchemy
from flask_jwt_extended import JWTManager
from flask_migrate import Migrate
from flask_cors import CORS
from config import Config

__version__ = "1.0.0"

db = SQLAlchemy()
migrate = Migrate()
jwt = JWTManager()


def _auth_error(message, error):
    return jsonify({
        "success": False,
        "message": message,
        "error": error
    }), 401


def create_app(config_class=Config):

    app = Flask(__name__)
    app.config.from_object(config_class)
    CORS(app)

    db.init_app(app)
    migrate.init_app(app, db)
    jwt.init_app(app)

    from .middleware import init_middleware
    from .commands import register_commands
    from .controllers.tables import blp as TableBlp
    from .controllers.reservations import blp as ReservationBlp
    from .controllers.auth import blp as AuthBlp
    from .controllers.staff import blp as StaffBlp

    @jwt.expired_token_loader
    def expired_token_callback(jwt_header, jwt_payload):
        return _auth_error("The token has expired.", "token_expired")

    @jwt.invalid_token_loader
    def invalid_token_callback(error):
        return _auth_error("Signature verification failed.", "invalid_token")

    @jwt.unauthorized_loader
    def missing_token_callback(error):
        return _auth_error("Request doesn't contain an access token.", "authorization_required")

    api = Api(app)
    api.register_blueprint(TableBlp)
    api.register_blueprint(ReservationBlp)
    api.register_blueprint(AuthBlp)
    api.register_blueprint(StaffBlp)

    # After Api() so these handlers replace the flask-smorest defaults
    init_middleware(app)
    register_commands(app)

    @app.route('/')
    def home():
        return jsonify({
            "success": True,
            "message": "Welcome to the Restaurant Management API!",
            "version": __version__
        })

    return app
