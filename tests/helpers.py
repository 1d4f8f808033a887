"""Request helpers for seeding the catalog through the public API."""

from fastapi.testclient import TestClient

# 1000 bytes with a recognisable pattern so slices are easy to check.
SONG_BYTES = bytes(i % 251 for i in range(1000))
IMAGE_BYTES = b"\x89PNG\r\n\x1a\n" + b"\x00" * 32


def create_artist(client: TestClient, name: str = "Test Artist", desc: str = "", with_image: bool = True) -> int:
    files = {"file": ("cover.png", IMAGE_BYTES, "image/png")} if with_image else None
    resp = client.post("/api/create/artist", data={"name": name, "desc": desc}, files=files)
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]


def create_album(
    client: TestClient,
    name: str = "Test Album",
    artist: str = "Test Artist",
    year: str = "1999",
    desc: str = "",
) -> int:
    resp = client.post(
        "/api/create/album",
        data={"name": name, "artist": artist, "year": year, "desc": desc},
        files={"file": ("cover.png", IMAGE_BYTES, "image/png")},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]


def upload_song(
    client: TestClient,
    album_id: int,
    title: str = "First Song",
    filename: str = "first.mp3",
    content: bytes = SONG_BYTES,
) -> int:
    resp = client.post(
        "/api/songs/upload",
        data={"album_id": str(album_id), "song_title": title},
        files={"audio_file": (filename, content, "audio/mpeg")},
    )
    assert resp.status_code == 200, resp.text
    return resp.json()["id"]
