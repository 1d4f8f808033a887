"""JSON API under /api, including the HTMX alert variants."""

from helpers import IMAGE_BYTES, SONG_BYTES, create_album, create_artist, upload_song

HTMX = {"HX-Request": "true"}


class TestCreateArtist:
    def test_create(self, client, settings):
        resp = client.post(
            "/api/create/artist",
            data={"name": "Test Artist", "desc": "Loud"},
            files={"file": ("x.png", IMAGE_BYTES, "image/png")},
        )

        assert resp.status_code == 200
        body = resp.json()
        assert body["success"] is True
        assert body["message"] == "Artist created successfully"
        assert isinstance(body["id"], int)
        assert (settings.image_dir / "Test Artist.png").read_bytes() == IMAGE_BYTES

    def test_without_image(self, client):
        artist_id = create_artist(client, name="Plain", with_image=False)
        artists = client.get("/api/artists").json()
        assert [(a["id"], a["image_url"]) for a in artists] == [(artist_id, None)]

    def test_missing_name_field(self, client):
        assert client.post("/api/create/artist", data={"desc": "x"}).status_code == 422

    def test_blank_name(self, client):
        resp = client.post("/api/create/artist", data={"name": "   "})
        assert resp.status_code == 400
        assert resp.json() == {"error": True, "message": "Artist name is required", "status": 400}

    def test_duplicate_name(self, client):
        create_artist(client)
        resp = client.post("/api/create/artist", data={"name": "Test Artist"})
        assert resp.status_code == 400
        assert resp.json()["error"] is True

    def test_htmx_success_fragment(self, client):
        resp = client.post("/api/create/artist", data={"name": "Htmx"}, headers=HTMX)
        assert resp.status_code == 200
        assert resp.headers["content-type"].startswith("text/html")
        assert "alert-success" in resp.text
        assert "Artist created successfully" in resp.text


class TestCreateAlbum:
    def test_create(self, client, settings):
        artist_id = create_artist(client)
        album_id = create_album(client, name="Debut", year="2004", desc="First one")

        albums = client.get("/api/albums").json()
        assert len(albums) == 1
        album = albums[0]
        assert album["id"] == album_id
        assert album["name"] == "Debut"
        assert album["year"] == 2004
        assert album["description"] == "First one"
        assert album["artist"] == {"id": artist_id, "name": "Test Artist"}
        assert album["image_url"] == f"/images/Debut_{artist_id}.png"
        assert (settings.image_dir / f"Debut_{artist_id}.png").exists()

    def test_invalid_year(self, client):
        create_artist(client)
        resp = client.post("/api/create/album", data={"name": "A", "artist": "Test Artist", "year": "soon"})
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid year"

    def test_unknown_artist(self, client):
        resp = client.post("/api/create/album", data={"name": "A", "artist": "Nobody", "year": "2000"})
        assert resp.status_code == 404
        assert resp.json()["status"] == 404


class TestUploadSong:
    def test_upload_and_info(self, client, seeded):
        info = client.get(f"/api/song/{seeded['song_id']}").json()

        assert info["name"] == "First Song"
        assert info["filename"] == "first.mp3"
        assert info["mime_type"] == "audio/mpeg"
        assert info["file_size"] == len(SONG_BYTES)
        assert info["stream_url"] == f"/stream/{seeded['song_id']}"
        assert info["album"]["id"] == seeded["album_id"]
        assert info["album"]["artist"] == {"id": seeded["artist_id"], "name": "Test Artist"}

    def test_title_defaults_to_file_name(self, client, seeded):
        resp = client.post(
            "/api/songs/upload",
            data={"album_id": str(seeded["album_id"])},
            files={"audio_file": ("Night Drive.wav", b"RIFF", "audio/wav")},
        )
        assert resp.status_code == 200
        info = client.get(f"/api/song/{resp.json()['id']}").json()
        assert info["name"] == "Night Drive"
        assert info["mime_type"] == "audio/wav"

    def test_unsupported_format(self, client, seeded):
        resp = client.post(
            "/api/songs/upload",
            data={"album_id": str(seeded["album_id"]), "song_title": "Doc"},
            files={"audio_file": ("doc.pdf", b"%PDF", "application/pdf")},
        )
        assert resp.status_code == 400
        assert "unsupported file format" in resp.json()["message"]

    def test_invalid_album_id(self, client):
        resp = client.post(
            "/api/songs/upload",
            data={"album_id": "first"},
            files={"audio_file": ("a.mp3", b"x", "audio/mpeg")},
        )
        assert resp.status_code == 400
        assert resp.json()["message"] == "Invalid album ID"

    def test_unknown_album(self, client):
        resp = client.post(
            "/api/songs/upload",
            data={"album_id": "77"},
            files={"audio_file": ("a.mp3", b"x", "audio/mpeg")},
        )
        assert resp.status_code == 404

    def test_duplicate_title_in_album(self, client, seeded):
        resp = client.post(
            "/api/songs/upload",
            data={"album_id": str(seeded["album_id"]), "song_title": "First Song"},
            files={"audio_file": ("again.mp3", b"x", "audio/mpeg")},
        )
        assert resp.status_code == 400

    def test_too_large(self, client, seeded, settings):
        resp = client.post(
            "/api/songs/upload",
            data={"album_id": str(seeded["album_id"]), "song_title": "Huge"},
            files={"audio_file": ("huge.mp3", b"\0" * (settings.max_upload_bytes + 1), "audio/mpeg")},
        )
        assert resp.status_code == 413
        assert not (settings.upload_dir / "Huge-Test Album-Test Artist.mp3").exists()
        assert client.get("/api/stats").json()["songs"] == 1


def test_album_songs_in_upload_order(client, seeded):
    second = upload_song(client, seeded["album_id"], title="Second Song", filename="second.mp3")

    body = client.get(f"/api/album/{seeded['album_id']}/songs").json()

    assert body["album_id"] == seeded["album_id"]
    assert body["album"] == "Test Album"
    assert body["artist"] == "Test Artist"
    assert [s["id"] for s in body["songs"]] == [seeded["song_id"], second]
    assert body["songs"][1]["stream_url"] == f"/stream/{second}"


def test_song_info_unknown(client):
    resp = client.get("/api/song/5")
    assert resp.status_code == 404
    assert resp.json()["message"] == "Song not found"


def test_stats(client, seeded):
    assert client.get("/api/stats").json() == {"albums": 1, "artists": 1, "songs": 1}


class TestSearch:
    def test_json(self, client, seeded):
        body = client.get("/api/search", params={"q": "  test  "}).json()
        assert body["query"] == "test"
        assert [a["id"] for a in body["albums"]] == [seeded["album_id"]]
        assert [a["id"] for a in body["artists"]] == [seeded["artist_id"]]

    def test_no_match(self, client, seeded):
        body = client.get("/api/search", params={"q": "zzz"}).json()
        assert body["albums"] == [] and body["artists"] == []

    def test_htmx_fragment(self, client, seeded):
        resp = client.get("/api/search", params={"q": "album"}, headers=HTMX)
        assert resp.status_code == 200
        assert f'href="/album/{seeded["album_id"]}"' in resp.text
        assert "Test Album" in resp.text

    def test_htmx_empty_query(self, client):
        resp = client.get("/api/search", headers=HTMX)
        assert "Enter a search term" in resp.text


class TestChangeAlbum:
    def test_move(self, client, seeded, settings):
        target = create_album(client, name="Second Album", year="2001")

        resp = client.put(f"/api/song/{seeded['song_id']}/album", data={"album_id": str(target)})

        assert resp.status_code == 200
        assert resp.json()["id"] == seeded["song_id"]
        assert client.get(f"/api/song/{seeded['song_id']}").json()["album"]["id"] == target
        assert not (settings.upload_dir / "First Song-Test Album-Test Artist.mp3").exists()
        assert (settings.upload_dir / "First Song-Second Album-Test Artist.mp3").exists()
        assert client.get(f"/stream/{seeded['song_id']}").content == SONG_BYTES

    def test_unknown_album(self, client, seeded, settings):
        resp = client.put(f"/api/song/{seeded['song_id']}/album", data={"album_id": "404"})
        assert resp.status_code == 404
        assert client.get(f"/api/song/{seeded['song_id']}").json()["album"]["id"] == seeded["album_id"]


class TestDelete:
    def test_delete_album(self, client, seeded, settings):
        resp = client.delete(f"/api/delete/album/{seeded['album_id']}")

        assert resp.status_code == 200
        assert resp.json()["message"] == "Album deleted successfully"
        assert client.get("/api/stats").json() == {"albums": 0, "artists": 1, "songs": 0}
        assert client.get(f"/stream/{seeded['song_id']}").status_code == 404
        assert not any(settings.upload_dir.iterdir())

    def test_delete_album_with_get(self, client, seeded):
        assert client.get(f"/api/delete/album/{seeded['album_id']}").status_code == 200
        assert client.get(f"/api/album/{seeded['album_id']}/songs").status_code == 404

    def test_delete_artist(self, client, seeded, settings):
        resp = client.delete(f"/api/delete/artist/{seeded['artist_id']}")

        assert resp.status_code == 200
        assert client.get("/api/stats").json() == {"albums": 0, "artists": 0, "songs": 0}
        assert not any(settings.image_dir.iterdir())

    def test_delete_unknown(self, client):
        resp = client.delete("/api/delete/artist/12")
        assert resp.status_code == 404
        assert resp.json()["message"] == "Artist not found"

    def test_htmx_error_fragment(self, client):
        resp = client.delete("/api/delete/album/12", headers=HTMX)
        assert resp.status_code == 404
        assert resp.headers["content-type"].startswith("text/html")
        assert "alert-warning" in resp.text
        assert "Album not found" in resp.text


def test_health_and_response_headers(client):
    resp = client.get("/health", headers={"X-Request-ID": "req-123"})

    assert resp.status_code == 200
    assert resp.json() == {"status": "healthy"}
    assert resp.headers["x-request-id"] == "req-123"
    assert resp.headers["x-content-type-options"] == "nosniff"
    assert resp.headers["x-frame-options"] == "DENY"
    assert "strict-transport-security" not in resp.headers


def test_request_id_is_generated(client):
    assert client.get("/health").headers["x-request-id"]
