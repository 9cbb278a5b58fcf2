import pytest
from rest_framework.test import APIClient

from tests.conftest import video


@pytest.fixture
def client(app_settings):
    return APIClient()


def test_index_says_hello(client):
    resp = client.get("/")

    assert resp.status_code == 200
    assert resp.content == b"Hello World!"


def test_upload_two_files(client):
    resp = client.post(
        "/uploads",
        {"file": [video("movie.mp4"), video("clip.mov")]},
        format="multipart",
    )

    assert resp.status_code == 200
    body = resp.json()
    assert body["message"] == "Videos converted to HLS format"
    assert [v["originalFileName"] for v in body["videos"]] == ["movie.mp4", "clip.mov"]
    first = body["videos"][0]
    assert first["videoUrl"] == (
        f"http://localhost:5000/uploads/converted/movie-{first['videoId']}/index.m3u8"
    )
    assert "files" not in body


def test_uploaded_playlist_is_served(client):
    body = client.post("/uploads", {"file": [video("movie.mp4")]}, format="multipart").json()
    path = body["videos"][0]["videoUrl"].replace("http://localhost:5000", "")

    resp = client.get(path)

    assert resp.status_code == 200
    assert b"".join(resp.streaming_content).startswith(b"#EXTM3U")


def test_uploaded_playlist_answers_head(client):
    body = client.post("/uploads", {"file": [video("movie.mp4")]}, format="multipart").json()
    path = body["videos"][0]["videoUrl"].replace("http://localhost:5000", "")

    resp = client.head(path)

    assert resp.status_code == 200
    assert int(resp["Content-Length"]) > 0


def test_original_upload_is_not_served(client, media_root):
    body = client.post("/uploads", {"file": [video("movie.mp4")]}, format="multipart").json()
    video_id = body["videos"][0]["videoId"]
    assert (media_root / "uploads" / f"movie-{video_id}.mp4").exists()

    resp = client.get(f"/uploads/movie-{video_id}.mp4")

    assert resp.status_code == 404


def test_only_text_fields_is_400(client, media_root):
    resp = client.post("/uploads", {"file": "not a file"}, format="multipart")

    assert resp.status_code == 400
    assert resp["Content-Type"].startswith("text/plain")
    assert resp.content == b"No valid files uploaded."
    assert list(media_root.iterdir()) == []


def test_missing_field_is_400(client):
    resp = client.post("/uploads", {"other": "x"}, format="multipart")

    assert resp.status_code == 400


def test_all_failed_is_500(client):
    resp = client.post("/uploads", {"file": [video("broken.mp4")]}, format="multipart")

    assert resp.status_code == 500
    assert resp.content == b"Error converting videos."


def test_partial_success_is_200(client):
    resp = client.post(
        "/uploads",
        {"file": [video("broken.mp4"), video("good.mp4")]},
        format="multipart",
    )

    assert resp.status_code == 200
    assert [v["originalFileName"] for v in resp.json()["videos"]] == ["good.mp4"]


def test_include_status_lists_every_file(client):
    resp = client.post(
        "/uploads?include_status=1",
        {"file": [video("broken.mp4"), video("good.mp4")]},
        format="multipart",
    )

    files = resp.json()["files"]
    assert [(f["originalFileName"], f["status"]) for f in files] == [
        ("broken.mp4", "transcode_failed"),
        ("good.mp4", "converted"),
    ]
    assert files[0]["exitCode"] == 1
    assert files[1]["exitCode"] == 0


def test_include_status_on_total_failure_is_json(client):
    resp = client.post(
        "/uploads?include_status=true",
        {"file": [video("broken.mp4")]},
        format="multipart",
    )

    assert resp.status_code == 500
    body = resp.json()
    assert body["videos"] == []
    assert body["files"][0]["status"] == "transcode_failed"


def test_missing_ffmpeg_is_500(client, app_settings, tmp_path):
    app_settings.FFMPEG_BIN = str(tmp_path / "missing-ffmpeg")

    resp = client.post("/uploads", {"file": [video("a.mp4")]}, format="multipart")

    assert resp.status_code == 500


def test_base_url_falls_back_to_request_host(client, app_settings):
    app_settings.HLS_PUBLIC_BASE_URL = ""

    resp = client.post("/uploads", {"file": [video("a.mp4")]}, format="multipart")

    assert resp.json()["videos"][0]["videoUrl"].startswith("http://testserver/uploads/converted/a-")
