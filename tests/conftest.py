import pytest

from config_test import TestConfig
from restaurant_backend import create_app, db
from restaurant_backend.models import Table, User
from restaurant_backend.services.helper import hash_password


@pytest.fixture
def app():
    app = create_app(TestConfig)
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def tables(app):
    """T01..T03 in service, T04 under maintenance."""
    seeded = [
        Table(table_number="T01", capacity=2, location="indoors"),
        Table(table_number="T02", capacity=4, location="outdoors"),
        Table(table_number="T03", capacity=6, location="balcony"),
        Table(table_number="T04", capacity=8, location="private", status="maintenance"),
    ]
    db.session.add_all(seeded)
    db.session.commit()
    return {t.table_number: t for t in seeded}


@pytest.fixture
def reservation_data():
    return {
        "customer_name": "Ada Lovelace",
        "customer_email": "ada@example.com",
        "customer_phone": "+441234567890",
        "table_number": "T01",
        "reservation_date": "2024-06-01",
        "reservation_time": "18:00",
        "party_size": 2,
    }


@pytest.fixture
def reservation_payload():
    return {
        "customerName": "Ada Lovelace",
        "customerEmail": "ada@example.com",
        "customerPhone": "+441234567890",
        "tableNumber": "T01",
        "reservationDate": "2024-06-01",
        "reservationTime": "18:00",
        "partySize": 2,
        "specialRequests": "Window seat",
    }


@pytest.fixture
def admin_user(app):
    admin = User(
        username="boss",
        email="boss@example.com",
        password=hash_password("secret123"),
        role="admin",
        rank="executive",
    )
    db.session.add(admin)
    db.session.commit()
    return admin


@pytest.fixture
def admin_headers(client, admin_user):
    response = client.post("/api/auth/login", json={
        "email": "boss@example.com", "password": "secret123"
    })
    token = response.get_json()["data"]["token"]
    return {"Authorization": f"Bearer {token}"}
