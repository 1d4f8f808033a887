"""Shared fixtures: an app wired to a temporary SQLite file and temporary media dirs."""

from pathlib import Path
from typing import Dict, Iterator

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from helpers import create_album, create_artist, upload_song
from music_library.api.config import Settings
from music_library.api.db import Database
from music_library.api.library import LibraryService
from music_library.api.main import create_app
from music_library.api.repository import Repository
from music_library.api.storage import Storage


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    return Settings(
        environment="testing",
        database_url=f"sqlite:///{tmp_path / 'library.db'}",
        upload_dir=tmp_path / "files",
        image_dir=tmp_path / "images",
        max_upload_bytes=64 * 1024,
    )


@pytest.fixture
def app(settings: Settings) -> FastAPI:
    return create_app(settings, configure_logs=False)


@pytest.fixture
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def database(settings: Settings) -> Iterator[Database]:
    db = Database(settings.database_url)
    db.create_schema()
    yield db
    db.dispose()


@pytest.fixture
def library_factory(database: Database, settings: Settings):
    """A callable building a `LibraryService` on an open session."""
    storage = Storage()

    def build(session) -> LibraryService:
        return LibraryService(Repository(session), storage, settings)

    return build


@pytest.fixture
def seeded(client: TestClient) -> Dict[str, int]:
    """One artist with one album holding one 1000-byte song."""
    artist_id = create_artist(client)
    album_id = create_album(client)
    song_id = upload_song(client, album_id)
    return {"artist_id": artist_id, "album_id": album_id, "song_id": song_id}
