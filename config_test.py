from config import Config


class TestConfig(Config):
    TESTING = True
    APP_ENV = 'testing'
    DEBUG = False
    SQLALCHEMY_DATABASE_URI = 'sqlite:///:memory:'  # Use in-memory SQLite for tests
    SQLALCHEMY_TRACK_MODIFICATIONS = False
    JWT_SECRET_KEY = 'test-secret-key'  # Use a different secret key for tests
    JWT_ACCESS_TOKEN_EXPIRES = 3600  # 1 hour
    LOG_DIR = None
