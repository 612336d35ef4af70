from __future__ import annotations

import base64
import importlib
import json
from pathlib import Path

from fastapi.testclient import TestClient

from conftest import make_jpeg


def _setup_api(tmp_path: Path, monkeypatch):
    monkeypatch.setenv("PHOTO_META_OUTPUT_PATH", str(tmp_path / "api" / "photo_metadata.json"))
    monkeypatch.setenv("PHOTO_META_SCRIPT_PATH", str(tmp_path / "api" / "process_photos.sh"))

    from photo_meta.api import http_api

    return importlib.reload(http_api)


def _b64(data: bytes) -> str:
    return base64.b64encode(data).decode("ascii")


def test_health(tmp_path: Path, monkeypatch) -> None:
    http_api = _setup_api(tmp_path, monkeypatch)
    client = TestClient(http_api.app)

    resp = client.get("/health")
    assert resp.status_code == 200
    assert resp.json() == {"status": "ok"}


def test_extract_returns_records_and_writes_file(tmp_path: Path, monkeypatch) -> None:
    http_api = _setup_api(tmp_path, monkeypatch)
    client = TestClient(http_api.app)

    images = [
        _b64(make_jpeg(datetime_original="2023:05:01 12:00:00")),
        "%%% not base64 %%%",
        _b64(b""),
    ]
    resp = client.post("/extract", json={"images": images})

    assert resp.status_code == 200
    body = resp.json()
    assert body["records"] == [{"datetimeoriginal": "2023:05:01 12:00:00"}, {}]
    assert json.loads(body["output"]) == body["records"]
    assert body["dispatch"]["written"] is True
    assert body["dispatch"]["launched"] is False
    written = tmp_path / "api" / "photo_metadata.json"
    assert json.loads(written.read_text()) == body["records"]


def test_extract_without_dispatch(tmp_path: Path, monkeypatch) -> None:
    http_api = _setup_api(tmp_path, monkeypatch)
    client = TestClient(http_api.app)

    resp = client.post("/extract", json={"images": [_b64(make_jpeg())], "dispatch": False})

    assert resp.status_code == 200
    assert resp.json()["dispatch"] is None
    assert not (tmp_path / "api" / "photo_metadata.json").exists()


def test_extract_route_runs_off_the_event_loop(tmp_path: Path, monkeypatch) -> None:
    import inspect

    http_api = _setup_api(tmp_path, monkeypatch)
    # FastAPI dispatches plain-def routes to its threadpool.
    assert not inspect.iscoroutinefunction(http_api.extract)

    client = TestClient(http_api.app)
    images = [_b64(make_jpeg(datetime_original=f"2023:05:0{i} 12:00:00")) for i in range(1, 4)]
    resp = client.post("/extract", json={"images": images, "dispatch": False})
    assert resp.status_code == 200
    assert [r["datetimeoriginal"] for r in resp.json()["records"]] == [
        "2023:05:01 12:00:00",
        "2023:05:02 12:00:00",
        "2023:05:03 12:00:00",
    ]
