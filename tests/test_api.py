import pytest
from fastapi.testclient import TestClient

from backend import config
from backend import main
from backend.main import app
from backend.models.schemas import CropWindow, Shot, ShotLabel
from backend.routers import video
from backend.services.errors import JobFailedError


class FakeAnalyzer:
    shots = [
        Shot(ts_start=0, ts_end=1.5, crop=CropWindow(x=10, y=20, w=300, h=400), label=ShotLabel.SPEAKING),
        Shot(ts_start=1.5, ts_end=2.1, crop=None, label=ShotLabel.NO_FACE),
    ]

    def __init__(self, settings=None):
        self.settings = settings

    def analyze(self, bucket, key, video_width=None, video_height=None, cancel_event=None):
        return self.shots


class FailingAnalyzer(FakeAnalyzer):
    def analyze(self, bucket, key, video_width=None, video_height=None, cancel_event=None):
        raise JobFailedError("job-1", "bad input")


@pytest.fixture
def client(tmp_path, monkeypatch):
    monkeypatch.setattr(config, "OUTPUT_DIR", tmp_path)
    monkeypatch.setattr(config, "USE_TASK_QUEUE", False)
    with TestClient(app) as test_client:
        yield test_client


def test_health(client):
    assert client.get("/health").json() == {"status": "healthy", "task_queue": "disabled"}


def test_health_reports_unreachable_queue(client, monkeypatch):
    monkeypatch.setattr(config, "USE_TASK_QUEUE", True)
    monkeypatch.setattr(main, "is_queue_available", lambda: False)
    assert client.get("/health").json()["task_queue"] == "unavailable"


def test_segment_endpoint(client):
    events = [
        {"timestamp_ms": 0, "face": {
            "confidence": 99, "smile": True,
            "bounding_box": {"Left": 0.4, "Top": 0.4, "Width": 0.1, "Height": 0.1},
        }},
        {"timestamp_ms": 300, "face": None},
    ]
    response = client.post("/api/video/segment", json={
        "events": events, "video_width": 1000, "video_height": 1000,
    })
    assert response.status_code == 200
    shots = response.json()["shots"]
    assert [s["label"] for s in shots] == ["Speaking/Smiling", "No Face"]
    assert shots[0]["crop"] == {"x": 350, "y": 350, "w": 200, "h": 200}
    assert shots[1]["ts_start"] == shots[0]["ts_end"]


def test_segment_endpoint_accepts_settings(client):
    events = [{"timestamp_ms": 0, "face": {
        "confidence": 80, "smile": True,
        "bounding_box": {"Left": 0.4, "Top": 0.4, "Width": 0.1, "Height": 0.1},
    }}]
    response = client.post("/api/video/segment", json={
        "events": events, "video_width": 1000, "video_height": 1000,
        "settings": {"confidence_threshold": 75, "min_shot_duration_sec": 1.0},
    })
    shot = response.json()["shots"][0]
    assert shot["label"] == "Speaking/Smiling"
    assert shot["ts_end"] == 1.0


def test_analyze_runs_in_background_and_saves_shots(client, monkeypatch):
    monkeypatch.setattr(video, "VideoAnalyzer", FakeAnalyzer)
    response = client.post("/api/video/analyze", json={"bucket": "b", "key": "videos/talk.mp4"})
    assert response.status_code == 200
    task_id = response.json()["task_id"]

    status = client.get(f"/api/video/task/{task_id}").json()
    assert status["status"] == "completed"
    assert len(status["result"]["shots"]) == 2

    saved = client.get("/api/video/shots/talk").json()
    assert saved["shots"][0]["crop"] == {"x": 10, "y": 20, "w": 300, "h": 400}


def test_failed_analysis_is_reported(client, monkeypatch):
    monkeypatch.setattr(video, "VideoAnalyzer", FailingAnalyzer)
    task_id = client.post("/api/video/analyze", json={"bucket": "b", "key": "x.mp4"}).json()["task_id"]
    status = client.get(f"/api/video/task/{task_id}").json()
    assert status["status"] == "failed"
    assert "bad input" in status["message"]


def test_cancel_finished_task_conflicts(client, monkeypatch):
    monkeypatch.setattr(video, "VideoAnalyzer", FakeAnalyzer)
    task_id = client.post("/api/video/analyze", json={"bucket": "b", "key": "y.mp4"}).json()["task_id"]
    assert client.post(f"/api/video/task/{task_id}/cancel").status_code == 409


def test_unknown_task_and_shots(client):
    assert client.get("/api/video/task/nope").status_code == 404
    assert client.get("/api/video/shots/nope").status_code == 404
