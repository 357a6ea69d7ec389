from datetime import datetime

import pytest

from app import create_app
from models import db
from models.center import Center
from models.user import User
from services import wallet

# Monday; every lifecycle test pins "now" instead of reading the clock
NOW = datetime(2026, 3, 9, 8, 0)


@pytest.fixture
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "STRIPE_WEBHOOK_SECRET": "whsec_test_secret",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def make_user(app):
    counter = {"n": 0}

    def _make(balance=0, display_name="Asha Rao", email="asha@example.com"):
        counter["n"] += 1
        user = User(
            auth_uid=f"auth-uid-{counter['n']}",
            display_name=display_name,
            email=email,
            phone_number="+919800000000",
        )
        db.session.add(user)
        db.session.commit()
        if balance:
            wallet.record_deposit(user.id, balance, f"pay_seed_{user.id}")
        return user

    return _make


@pytest.fixture
def user(make_user):
    return make_user(balance=500)


@pytest.fixture
def centers(app):
    rows = [
        Center(id="CTR-2023-0001", name="Iron Temple Gym", address="12 MG Road",
               latitude=12.9716, longitude=77.5946),
        Center(id="CTR-2023-0002", name="Lotus Yoga Studio", address="4 Park Street"),
    ]
    db.session.add_all(rows)
    db.session.commit()
    return {c.id: c for c in rows}


def auth_headers(user):
    return {"X-Auth-Uid": user.auth_uid}
