# conftest.py
from uuid import uuid4

import pytest
from flask_jwt_extended import create_access_token

from marketplace import create_app
from marketplace.extensions import cache, db
from marketplace.models import FeatureFlag, Permission, Role, User
from marketplace.core.constants import UserStatus


@pytest.fixture(scope="session")
def app():
    """Create the test app on an in-memory SQLite database"""
    app = create_app("testing")

    with app.app_context():
        db.drop_all()
        db.create_all()
        yield app
        db.session.remove()
        db.drop_all()


@pytest.fixture(autouse=True)
def app_context(app):
    """Ensure we have app context for all tests"""
    with app.app_context():
        yield


@pytest.fixture(autouse=True)
def clean_database(app):
    """Empty every table and the cache after each test"""
    yield
    db.session.rollback()
    for table in reversed(db.metadata.sorted_tables):
        db.session.execute(table.delete())
    db.session.commit()
    db.session.expunge_all()
    cache.clear()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def default_roles(app):
    """System roles with their default permissions"""
    roles = Role.create_default_roles()
    return {role.name: role for role in roles}


def make_user(email=None, password="password123", roles=(), status=UserStatus.ACTIVE.value):
    user = User(email=email or f"user-{uuid4().hex[:8]}@example.com", name="Test User", status=status)
    user.password = password
    user.roles = list(roles)
    db.session.add(user)
    db.session.commit()
    return user


def make_role(name, permissions=(), display_name=None):
    """Create a role holding ``permissions`` ('resource:action' strings)"""
    role = Role(name=name, display_name=display_name or name.title())
    for name_ in permissions:
        resource, action = name_.split(":")
        permission = Permission.find_by_pair(resource, action)
        if permission is None:
            permission = Permission(resource=resource, action=action, display_name=name_)
            db.session.add(permission)
        role.permissions.append(permission)
    db.session.add(role)
    db.session.commit()
    return role


def headers_for(user):
    token = create_access_token(identity=str(user.id))
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def test_user(app):
    return make_user(email="test@example.com")


@pytest.fixture
def admin_user(app, default_roles):
    return make_user(email="admin@example.com", roles=[default_roles["admin"]])


@pytest.fixture
def customer_user(app, default_roles):
    return make_user(email="customer@example.com", roles=[default_roles["customer"]])


@pytest.fixture
def auth_headers(admin_user):
    """Bearer token for a user holding every default permission"""
    return headers_for(admin_user)


@pytest.fixture
def customer_headers(customer_user):
    return headers_for(customer_user)


@pytest.fixture
def make_flag(app):
    def _make_flag(key, **kwargs):
        kwargs.setdefault("display_name", key.replace("-", " ").title())
        flag = FeatureFlag(key=key, **kwargs)
        db.session.add(flag)
        db.session.commit()
        return flag

    return _make_flag


@pytest.fixture
def user_factory(app):
    return make_user


@pytest.fixture
def role_factory(app):
    return make_role


@pytest.fixture
def token_headers(app):
    return headers_for
