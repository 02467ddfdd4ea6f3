import os
from collections.abc import Generator
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine.base import Engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.orm.session import Session

os.environ.update({"JWT_SECRET_KEY": "supersecretkey", "LOG_COLOR": "false"})

from photoshelf.main import app  # noqa: E402
from photoshelf.models import Base, Gallery, User  # noqa: E402
from tests.helpers import make_token  # noqa: E402


@pytest.fixture(scope="function")
def engine(tmp_path: Path) -> Generator[Engine]:
    """SQLite database file per test, shared with the app's worker threads."""
    engine = create_engine(f"sqlite:///{tmp_path / 'photoshelf.db'}", connect_args={"check_same_thread": False})
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture(scope="function")
def db_session(engine: Engine) -> Generator[Session]:
    session = sessionmaker(bind=engine)()
    yield session
    session.close()


@pytest.fixture(scope="function")
def upload_dir(tmp_path: Path) -> Path:
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture(scope="function")
def upload_settings(upload_dir: Path):
    from photoshelf.upload.config import UploadSettings

    return UploadSettings(storage_dir=upload_dir)


@pytest.fixture(scope="function")
def storage(upload_settings):
    from photoshelf.upload.storage import LocalStorage

    return LocalStorage(upload_settings.storage_dir)


@pytest.fixture(scope="function")
def client(db_session: Session, upload_settings) -> Generator[TestClient]:
    """FastAPI test client bound to the per-test database and upload directory."""
    from photoshelf.dependencies import get_upload_settings
    from photoshelf.models.db import get_db

    def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_upload_settings] = lambda: upload_settings

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def user(db_session: Session) -> User:
    from photoshelf.repositories.user_repository import UserRepository

    return UserRepository(db_session).create_user("owner@example.com")


@pytest.fixture(scope="function")
def other_user(db_session: Session) -> User:
    from photoshelf.repositories.user_repository import UserRepository

    return UserRepository(db_session).create_user("stranger@example.com")


@pytest.fixture(scope="function")
def gallery(db_session: Session, user: User) -> Gallery:
    from photoshelf.repositories.gallery_repository import GalleryRepository

    return GalleryRepository(db_session).create_gallery(user.id, "Holidays")


@pytest.fixture(scope="function")
def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {make_token(user.id)}"}


@pytest.fixture(scope="function")
def authenticated_client(client: TestClient, auth_headers: dict[str, str]) -> Generator[TestClient]:
    """Test client sending the gallery owner's bearer token."""
    client.headers.update(auth_headers)
    yield client
    client.headers.clear()
