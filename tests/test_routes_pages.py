"""Server-rendered pages."""

import pytest

from helpers import create_artist


def assert_html(resp):
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/html")


def test_index_shows_counts(client, seeded):
    resp = client.get("/")
    assert_html(resp)
    assert '<span class="value">1</span> albums' in resp.text


@pytest.mark.parametrize(
    "path,marker",
    [
        ("/about", "self-hosted music library"),
        ("/create/artist", 'hx-post="/api/create/artist"'),
        ("/create/album", "Create an artist first"),
        ("/upload", "Create an album first"),
        ("/library", "No albums yet"),
    ],
)
def test_static_pages_on_empty_library(client, path, marker):
    resp = client.get(path)
    assert_html(resp)
    assert marker in resp.text


def test_library_lists_catalog(client, seeded):
    resp = client.get("/library")
    assert_html(resp)
    assert f'href="/album/{seeded["album_id"]}"' in resp.text
    assert f'href="/artist/{seeded["artist_id"]}"' in resp.text


def test_artist_page(client, seeded):
    resp = client.get(f"/artist/{seeded['artist_id']}")
    assert_html(resp)
    assert "<h1>Test Artist</h1>" in resp.text
    assert "Test Album" in resp.text
    assert "1 songs" in resp.text


def test_album_page(client, seeded):
    resp = client.get(f"/album/{seeded['album_id']}")
    assert_html(resp)
    assert "<h1>Test Album</h1>" in resp.text
    assert f'data-song-id="{seeded["song_id"]}"' in resp.text
    assert f'data-play-album="{seeded["album_id"]}"' in resp.text


def test_create_album_page_offers_artists(client):
    create_artist(client, name="Selectable")
    resp = client.get("/create/album")
    assert_html(resp)
    assert '<option value="Selectable">Selectable</option>' in resp.text


def test_upload_page_offers_albums(client, seeded):
    resp = client.get("/upload")
    assert_html(resp)
    assert f'<option value="{seeded["album_id"]}">Test Album (Test Artist)</option>' in resp.text


@pytest.mark.parametrize("path", ["/artist/99", "/album/99"])
def test_unknown_detail_page(client, path):
    assert client.get(path).status_code == 404


def test_static_assets_are_served(client):
    resp = client.get("/static/js/app.js")
    assert resp.status_code == 200


def test_uploaded_images_are_served(client, seeded):
    resp = client.get("/images/Test Artist.png")
    assert resp.status_code == 200
