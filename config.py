import os
from dotenv import load_dotenv
from datetime import timedelta

basedir = os.path.abspath(os.path.dirname(__file__))
load_dotenv(os.path.join(basedir, '.env'))


class Config:
    PROPAGATE_EXCEPTIONS = False
    API_TITLE = "Restaurant Reservation API"
    API_VERSION = "v1"
    OPENAPI_VERSION = "3.0.3"
    OPENAPI_URL_PREFIX = "/"
    OPENAPI_SWAGGER_UI_PATH = "/swagger-ui"
    OPENAPI_SWAGGER_UI_URL = "https://cdn.jsdelivr.net/npm/swagger-ui-dist/"
    SECRET_KEY = os.environ.get('SECRET_KEY') or 'jsdnkjcnwhf3wyr8y34ferfbehrv'
    SQLALCHEMY_DATABASE_URI = os.environ.get('DATABASE_URL') or \
        'sqlite:///' + os.path.join(basedir, 'app.db')
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = os.getenv('JWT_SECRET_KEY', 'jwt-secret-key')
    JWT_ACCESS_TOKEN_EXPIRES = timedelta(hours=1)

    # 'development' surfaces internal error details in 500 responses
    APP_ENV = os.environ.get('APP_ENV', 'production')
    DEBUG = APP_ENV == 'development'

    LOG_DIR = os.environ.get('LOG_DIR') or os.path.join(basedir, 'logs')
    PORT = int(os.environ.get('PORT', 5000))
