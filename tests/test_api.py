"""HTTP-level tests for the FastAPI application."""

from urllib.parse import parse_qs, urlparse

import pytest

import shortcuts.app as app_module
from conftest import BOB_TOKEN, auth_headers
from shortcuts.analysis import pipeline
from shortcuts.common.token_cipher import TokenCipher
from shortcuts.errors import AICreditsExhaustedError, AIRateLimitError
from shortcuts.models import ShortSuggestion
from shortcuts.youtube import upload
from shortcuts.youtube.connections import YouTubeConnections


def _suggestions(count=10):
    return [
        ShortSuggestion(
            short_number=n,
            title=f"Clip {n}",
            hook_line=f"Hook {n}",
            description="Works well.",
            start_timestamp=f"{n}:00",
            end_timestamp=f"{n}:30",
            duration_seconds=30,
        )
        for n in range(1, count + 1)
    ]


@pytest.fixture
def stub_analysis(monkeypatch):
    monkeypatch.setattr(pipeline, "fetch_transcript", lambda vid: "[0:00] " + "words " * 20)
    monkeypatch.setattr(pipeline, "fetch_video_title", lambda vid: "A Great Talk")
    monkeypatch.setattr(pipeline, "request_shorts", lambda prompt, settings: _suggestions())


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


# --- auth ---------------------------------------------------------------------


def test_missing_authorization(client):
    resp = client.get("/api/videos")
    assert resp.status_code == 401
    assert resp.json() == {"error": "Missing authorization"}


@pytest.mark.parametrize("header", ["Bearer nope", "Basic abc", "Bearer "])
def test_invalid_authorization(client, header):
    resp = client.get("/api/videos", headers={"Authorization": header})
    assert resp.status_code == 401
    assert resp.json() == {"error": "Unauthorized"}


# --- analyze-video ------------------------------------------------------------


def test_analyze_video(client, fake_store, stub_analysis):
    video = fake_store.add_video(youtube_video_id="abcdefghijk")

    resp = client.post(
        "/api/analyze-video",
        json={"videoId": video.id, "youtubeVideoId": "abcdefghijk"},
        headers=auth_headers(),
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "videoId": video.id,
        "usedTranscript": True,
        "shortsCount": 10,
    }
    assert fake_store.videos[video.id]["status"] == "completed"


def test_analyze_video_without_body(client):
    resp = client.post("/api/analyze-video", headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing videoId or youtubeVideoId"}


def test_analyze_video_of_other_user(client, fake_store, stub_analysis):
    video = fake_store.add_video(youtube_video_id="abcdefghijk")

    resp = client.post(
        "/api/analyze-video",
        json={"videoId": video.id, "youtubeVideoId": "abcdefghijk"},
        headers=auth_headers(BOB_TOKEN),
    )

    assert resp.status_code == 404
    assert resp.json() == {"error": "Video not found"}


@pytest.mark.parametrize(
    "error, status_code, message, recorded",
    [
        (AIRateLimitError, 429, "Rate limited. Please try again in a moment.", "Rate limited. Try again later."),
        (AICreditsExhaustedError, 402, "AI credits exhausted. Please add credits.", "AI credits exhausted."),
    ],
)
def test_analyze_video_passes_provider_errors_through(
    client, fake_store, stub_analysis, monkeypatch, error, status_code, message, recorded
):
    def failing(prompt, settings):
        raise error()

    monkeypatch.setattr(pipeline, "request_shorts", failing)
    video = fake_store.add_video(youtube_video_id="abcdefghijk")

    resp = client.post(
        "/api/analyze-video",
        json={"videoId": video.id, "youtubeVideoId": "abcdefghijk"},
        headers=auth_headers(),
    )

    assert resp.status_code == status_code
    assert resp.json() == {"error": message}
    assert fake_store.videos[video.id]["status"] == "failed"
    assert fake_store.videos[video.id]["error_message"] == recorded


def test_legacy_function_route(client, fake_store, stub_analysis):
    video = fake_store.add_video(youtube_video_id="abcdefghijk")

    resp = client.post(
        "/functions/v1/analyze-video",
        json={"videoId": video.id},
        headers=auth_headers(),
    )

    assert resp.status_code == 200
    assert resp.json()["shortsCount"] == 10


# --- video submissions --------------------------------------------------------


def test_submit_video_and_analyze(client, fake_store, stub_analysis):
    resp = client.post(
        "/api/videos",
        json={"url": "https://www.youtube.com/watch?v=abcdefghijk"},
        headers=auth_headers(),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["video"]["status"] == "completed"
    assert body["video"]["title"] == "A Great Talk"
    assert [short["short_number"] for short in body["shorts"]] == list(range(1, 11))
    video_id = body["video"]["id"]
    assert fake_store.status_history[video_id] == ["processing", "processing", "completed"]


def test_submit_video_without_analysis(client, fake_store):
    resp = client.post(
        "/api/videos",
        json={"url": "https://youtu.be/abcdefghijk", "analyze": False},
        headers=auth_headers(),
    )

    assert resp.status_code == 201
    assert resp.json()["video"]["status"] == "pending"
    assert resp.json()["shorts"] == []


def test_submit_invalid_url(client, fake_store):
    resp = client.post("/api/videos", json={"url": "https://vimeo.com/1"}, headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json() == {"error": "Please enter a valid YouTube URL."}
    assert fake_store.videos == {}


def test_upload_video_file(client, fake_store):
    resp = client.post(
        "/api/videos/upload",
        files={"file": ("Launch Day.mp4", b"\x00\x00\x00\x18ftyp", "video/mp4")},
        headers=auth_headers(),
    )

    assert resp.status_code == 201
    body = resp.json()
    assert body["title"] == "Launch Day"
    assert body["status"] == "pending"
    assert body["file_url"].startswith("https://storage.example.com/videos/user-alice/")


def test_upload_rejects_non_video(client):
    resp = client.post(
        "/api/videos/upload",
        files={"file": ("notes.txt", b"hello", "text/plain")},
        headers=auth_headers(),
    )
    assert resp.status_code == 400


def test_list_videos_newest_first_and_owned_only(client, fake_store):
    older = fake_store.add_video(youtube_video_id="aaaaaaaaaaa")
    newer = fake_store.add_video(youtube_video_id="bbbbbbbbbbb")
    fake_store.add_video(user_id="user-bob", youtube_video_id="ccccccccccc")

    resp = client.get("/api/videos", headers=auth_headers())

    assert [video["id"] for video in resp.json()] == [newer.id, older.id]


def test_video_detail_and_export(client, fake_store, stub_analysis):
    video = fake_store.add_video(youtube_video_id="abcdefghijk")
    client.post("/api/analyze-video", json={"videoId": video.id}, headers=auth_headers())

    detail = client.get(f"/api/videos/{video.id}", headers=auth_headers()).json()
    assert detail["video"]["id"] == video.id
    assert len(detail["shorts"]) == 10

    resp = client.get(f"/api/videos/{video.id}/export", headers=auth_headers())
    assert resp.status_code == 200
    assert resp.headers["content-type"].startswith("text/plain")
    sections = resp.text.split("\n\n---\n\n")
    assert len(sections) == 10
    assert sections[0] == "#1 — Clip 1\nTimestamp: 1:00 – 1:30\nHook: Hook 1\nWorks well."


def test_video_detail_of_other_user(client, fake_store):
    video = fake_store.add_video(user_id="user-bob", youtube_video_id="abcdefghijk")
    resp = client.get(f"/api/videos/{video.id}", headers=auth_headers())
    assert resp.status_code == 404
    assert resp.json() == {"error": "Video not found"}


# --- youtube-upload -----------------------------------------------------------


def test_youtube_auth_url_carries_signed_state(client, settings):
    resp = client.get("/api/youtube-upload?action=auth-url", headers=auth_headers())

    assert resp.status_code == 200
    query = parse_qs(urlparse(resp.json()["authUrl"]).query)
    assert query["redirect_uri"] == ["https://api.example.com/api/youtube-upload?action=callback"]
    state = query["state"][0]
    assert state != "user-alice"
    assert TokenCipher(settings.token_key).read_state(state, ttl=600) == "user-alice"


def test_youtube_callback_saves_connection_and_redirects(client, fake_store, settings, monkeypatch):
    exchanged = {}

    def fake_exchange(google, code, redirect_uri):
        exchanged.update(code=code, redirect_uri=redirect_uri)
        return {"access_token": "at", "refresh_token": "rt", "expires_in": 3600}

    monkeypatch.setattr(app_module, "exchange_code", fake_exchange)
    monkeypatch.setattr(app_module, "fetch_channel", lambda token: {"id": "UC1", "title": "Alice TV"})
    state = TokenCipher(settings.token_key).sign_state("user-alice")

    resp = client.get(
        "/api/youtube-upload",
        params={"action": "callback", "code": "auth-code", "state": state},
        follow_redirects=False,
    )

    assert resp.status_code == 303
    assert resp.headers["location"] == "https://app.example.com/dashboard?yt=connected"
    assert exchanged == {
        "code": "auth-code",
        "redirect_uri": "https://api.example.com/api/youtube-upload?action=callback",
    }
    row = fake_store.connections["user-alice"]
    assert row["channel_title"] == "Alice TV"
    assert row["access_token"] != "at"


def test_youtube_callback_rejects_forged_state(client):
    resp = client.get(
        "/api/youtube-upload",
        params={"action": "callback", "code": "c", "state": "user-alice"},
        follow_redirects=False,
    )
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid or expired OAuth state"}


def test_youtube_callback_requires_code_and_state(client):
    resp = client.get("/api/youtube-upload?action=callback", follow_redirects=False)
    assert resp.status_code == 400
    assert resp.json() == {"error": "Missing code or state"}


def test_youtube_status(client, fake_store, settings):
    resp = client.get("/api/youtube-upload?action=status", headers=auth_headers())
    assert resp.json() == {"connected": False, "channel": None}

    connections = YouTubeConnections(fake_store, TokenCipher(settings.token_key), settings.google)
    connections.save("user-alice", {"access_token": "at"}, {"id": "UC1", "title": "Alice TV"})

    resp = client.post("/api/youtube-upload?action=status", headers=auth_headers())
    assert resp.json()["connected"] is True
    assert resp.json()["channel"]["channel_title"] == "Alice TV"


def test_youtube_upload_action(client, fake_store, settings, monkeypatch):
    connections = YouTubeConnections(fake_store, TokenCipher(settings.token_key), settings.google)
    connections.save("user-alice", {"access_token": "at", "expires_in": 3600}, None)
    video = fake_store.add_video(file_url="https://storage.example.com/videos/user-alice/x.mp4")
    uploaded = {}

    def fake_upload(path, metadata, token, content_type):
        uploaded.update(metadata=metadata, token=token)
        return {"id": "yt42"}

    monkeypatch.setattr(upload, "download_video_file", lambda url, dest: "video/mp4")
    monkeypatch.setattr(upload, "upload_video", fake_upload)

    resp = client.post(
        "/api/youtube-upload?action=upload",
        json={"videoId": video.id, "shortTitle": "Best moment"},
        headers=auth_headers(),
    )

    assert resp.status_code == 200
    assert resp.json() == {
        "success": True,
        "youtubeVideoId": "yt42",
        "youtubeUrl": "https://youtube.com/shorts/yt42",
    }
    assert uploaded["token"] == "at"
    assert uploaded["metadata"]["snippet"]["title"] == "Best moment"
    assert uploaded["metadata"]["snippet"]["description"] == "Created with ShortCuts"


def test_youtube_upload_requires_connection(client, fake_store):
    video = fake_store.add_video(file_url="https://storage.example.com/videos/x.mp4")
    resp = client.post(
        "/api/youtube-upload?action=upload",
        json={"videoId": video.id},
        headers=auth_headers(),
    )
    assert resp.status_code == 500
    assert resp.json() == {"error": "YouTube not connected"}


def test_youtube_invalid_action(client):
    resp = client.get("/api/youtube-upload?action=delete", headers=auth_headers())
    assert resp.status_code == 400
    assert resp.json() == {"error": "Invalid action"}


def test_youtube_actions_require_auth(client):
    resp = client.get("/api/youtube-upload?action=status")
    assert resp.status_code == 401
