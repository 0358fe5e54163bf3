import pytest

from hotel_api import create_app, db
from hotel_api.models import Role, Room, User


@pytest.fixture
def app():
    app = create_app('hotel_api.config.TestingConfig')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    with app.app_context():
        yield db.session


@pytest.fixture
def login(app, client):
    """Issue a token through POST /jwt and return the Authorization header."""
    def _login(email, role=Role.USER, name=None):
        response = client.post('/jwt', json={'email': email, 'name': name})
        assert response.status_code == 200
        if role == Role.ADMIN:
            with app.app_context():
                user = User.query.filter_by(email=email).one()
                user.role = Role.ADMIN
                db.session.commit()
        return {'Authorization': f"Bearer {response.get_json()['token']}"}
    return _login


@pytest.fixture
def make_room(app):
    def _make_room(name='Deluxe 201', price=100.0, rating=4.0, description=None):
        with app.app_context():
            room = Room(name=name, price=price, rating=rating, description=description)
            db.session.add(room)
            db.session.commit()
            return room.id
    return _make_room
