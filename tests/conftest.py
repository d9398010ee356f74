import itertools

import pytest
from flask_jwt_extended import create_access_token
from sqlalchemy import event

from config import TestConfig
from fitfeed import create_app, db
from fitfeed.models import Group, GroupMember, Post, User
from fitfeed.services.periods import utcnow
from fitfeed.services.posts import build_post_service


class SavepointTestConfig(TestConfig):
    # pysqlite only handles SAVEPOINT correctly when SQLAlchemy emits BEGIN itself
    SQLALCHEMY_ENGINE_OPTIONS = {"connect_args": {"isolation_level": None}}


@pytest.fixture
def app():
    app = create_app(SavepointTestConfig)
    with app.app_context():
        @event.listens_for(db.engine, "begin")
        def _begin(conn):
            conn.exec_driver_sql("BEGIN")

        yield app

        db.session.remove()
        db.drop_all()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def session(app):
    return db.session


_seq = itertools.count(1)


@pytest.fixture
def make_user(session):
    def _make(nickname=None, password="secret123"):
        n = next(_seq)
        nickname = nickname or f"user{n}"
        user = User(email=f"{nickname}@example.com", nickname=nickname)
        user.set_password(password)
        session.add(user)
        session.commit()
        return user

    return _make


@pytest.fixture
def make_group(session):
    def _make(*members, name=None):
        group = Group(name=name or f"group{next(_seq)}", owner_uuid=members[0].user_uuid)
        for m in members:
            group.members.append(GroupMember(user_uuid=m.user_uuid))
        session.add(group)
        session.commit()
        return group

    return _make


@pytest.fixture
def add_post(session):
    """Inserts a post row with an explicit created_at (naive UTC)."""
    def _add(user, created_at=None, is_public=True, title="workout"):
        post = Post(
            user_uuid=user.user_uuid,
            title=title,
            is_public=is_public,
            created_at=created_at or utcnow(),
        )
        session.add(post)
        session.flush()
        return post

    return _add


@pytest.fixture
def post_service(app, session):
    return build_post_service(session, app.config)


@pytest.fixture
def updater(post_service):
    return post_service.updater


@pytest.fixture
def auth_headers(app):
    def _headers(user):
        token = create_access_token(identity=user.user_uuid)
        return {"Authorization": f"Bearer {token}"}

    return _headers
