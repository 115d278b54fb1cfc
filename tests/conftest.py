# tests/conftest.py

import pytest

from app import create_app
from models import db
from pnl import DatabasePnLSource


@pytest.fixture
def app():
    app = create_app({
        'TESTING': True,
        'SQLALCHEMY_DATABASE_URI': 'sqlite:///:memory:',
        'SECRET_KEY': 'test',
        'JOURNAL_ENABLE_DASHBOARD': False,
    })
    yield app
    with app.app_context():
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def pnl_db(app):
    with app.app_context():
        yield DatabasePnLSource()
