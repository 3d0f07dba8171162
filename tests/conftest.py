import pytest

from caltrack import create_app
from caltrack.extensions import db, sequencer
from caltrack.models.profile import Profile
from caltrack.models.user import User
from caltrack.utils.auth import hash_password


@pytest.fixture()
def app():
    app = create_app({
        "TESTING": True,
        "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
        "SQLALCHEMY_ENGINE_OPTIONS": {},
        "SQLALCHEMY_TRACK_MODIFICATIONS": False,
        "SECRET_KEY": "test-secret",
    })
    with app.app_context():
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()
    sequencer.reset()


@pytest.fixture()
def client(app):
    return app.test_client()


@pytest.fixture()
def make_user(app):
    def _make(email, display_name="", group_code=""):
        user = User(email=email, password=hash_password("secret"))
        db.session.add(user)
        db.session.flush()
        db.session.add(Profile(user_id=user.id, display_name=display_name, group_code=group_code))
        db.session.commit()
        return user.id
    return _make


@pytest.fixture()
def auth(client):
    """Register through the API and return (user_id, headers)."""
    def _auth(email, display_name=""):
        r = client.post("/api/auth/register", json={
            "email": email, "password": "secret", "display_name": display_name,
        })
        assert r.status_code == 201, r.data
        body = r.get_json()
        return body["user"]["id"], {"Authorization": f"Bearer {body['token']}"}
    return _auth
