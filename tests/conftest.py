import os
import pytest

# Must be set before the app module reads its config
os.environ.setdefault('SQLALCHEMY_DATABASE_URI', 'sqlite:///:memory:')

from app import app
from models import db
from services.storage import SqlDocumentStore, JsonFileStore

TODAY = '2024-01-04'

@pytest.fixture
def client():
    app.config['TESTING'] = True
    app.config['WTF_CSRF_ENABLED'] = False # Disable CSRF for easier testing
    app.config['TRACKER_STORAGE'] = 'sql'
    app.config['TRACKER_TODAY'] = TODAY

    with app.test_client() as client:
        with app.app_context():
            db.create_all()
            yield client
            db.session.remove()
            db.drop_all()

@pytest.fixture(params=['sql', 'json'])
def store(request, tmp_path):
    app.config['TESTING'] = True
    app.config['TRACKER_TODAY'] = TODAY

    with app.app_context():
        db.create_all()
        if request.param == 'sql':
            yield SqlDocumentStore()
        else:
            yield JsonFileStore(tmp_path / 'data.json')
        db.session.remove()
        db.drop_all()

@pytest.fixture
def seeded_store(store):
    """Store holding a one-week period with two habits and a few marks."""
    from services.document import Document, Habit, TrackingPeriod
    from datetime import date

    document = store.load()
    document.habits = [Habit('Run', 3), Habit('Read', 7)]
    document.period = TrackingPeriod(date(2024, 1, 1), date(2024, 1, 7))
    document.days = {
        date(2024, 1, 1): {'Run', 'Read'},
        date(2024, 1, 2): {'Read'},
    }
    store.save(document)
    return store
