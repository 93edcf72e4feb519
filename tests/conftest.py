import pytest
from rackbracket.app import create_app, db
from rackbracket.store import EntityStore


@pytest.fixture
def app():
    app = create_app('testing')
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def store(app):
    return EntityStore()


@pytest.fixture
def players(app):
    """Create sixteen players and return their ids in creation order."""
    from rackbracket.models import Player
    rows = [Player(display_name=f'Player {index}', nickname=f'p{index}') for index in range(1, 17)]
    db.session.add_all(rows)
    db.session.commit()
    return [row.id for row in rows]
