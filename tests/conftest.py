# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Generator, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("IDENTITY_JWT_KEY", "test-identity-key")
os.environ.setdefault("IDENTITY_WEBHOOK_SECRET", "whsec_dGVzdC13ZWJob29rLXNlY3JldA==")

from campus_threads.api.v1.dependencies import get_media_resolver_dep
from campus_threads.db.session import Base
from campus_threads.db.session import get_db as app_get_session
from campus_threads.main import app as fastapi_app
from campus_threads.models import User
from campus_threads.services.media import MediaResolver
from tests.factories import FakeBlobStorage, auth_headers, create_user

TEST_DB_URL = "sqlite://"


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )

    @event.listens_for(engine, "connect")
    def _enable_foreign_keys(dbapi_connection, _connection_record) -> None:
        cursor = dbapi_connection.cursor()
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(engine: Engine, session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()

        # Services commit, so each test gets a clean database by emptying every table.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture()
def storage() -> FakeBlobStorage:
    return FakeBlobStorage()


@pytest.fixture()
def resolver(storage: FakeBlobStorage) -> MediaResolver:
    return MediaResolver(storage, max_workers=4)


@pytest.fixture(autouse=True)
def override_dependencies(app: FastAPI, db_session: Session, resolver: MediaResolver) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    app.dependency_overrides[get_media_resolver_dep] = lambda: resolver
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)
        app.dependency_overrides.pop(get_media_resolver_dep, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


@pytest.fixture()
def alice(db_session: Session) -> User:
    return create_user(db_session, first_name="Alice", last_name="Ng", username="alice")


@pytest.fixture()
def bob(db_session: Session) -> User:
    return create_user(db_session, first_name="Bob", last_name="Okafor", username="bob")


@pytest.fixture()
def carol(db_session: Session) -> User:
    return create_user(db_session, first_name="Carol", last_name="Diaz", username="carol")


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return auth_headers(alice)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return auth_headers(bob)
