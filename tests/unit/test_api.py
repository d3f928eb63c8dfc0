import asyncio
import json
from collections.abc import AsyncIterator, Sequence
from pathlib import Path
from unittest.mock import MagicMock, patch

import httpx
import pytest
from fastapi.testclient import TestClient

from credit_analyzer.api import routes_upload
from credit_analyzer.api.app import create_app
from credit_analyzer.api.sse import format_sse
from credit_analyzer.config.settings import Settings
from credit_analyzer.documents.models import UploadedFile
from credit_analyzer.processor.cleanup import CleanupTask
from credit_analyzer.processor.processor import AnalysisProcessor, build_processor
from credit_analyzer.progress.models import ProgressEvent, Step


def _settings(tmp_path: Path, **overrides: object) -> Settings:
    values: dict[str, object] = {
        "uploads_dir": tmp_path / "uploads",
        "temp_dir": tmp_path / "temp",
        "cleanup_delay_seconds": 0,
        "inference_retry_delay_seconds": 0,
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


def _ollama(
    version_ok: bool = True, models: Sequence[str] = ("qwen2.5vl:7b",)
) -> httpx.MockTransport:
    def handler(request: httpx.Request) -> httpx.Response:
        if request.url.path == "/api/version":
            if not version_ok:
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json={"version": "0.5.0"})
        if request.url.path == "/api/tags":
            return httpx.Response(200, json={"models": [{"name": m} for m in models]})
        return httpx.Response(404)

    return httpx.MockTransport(handler)


def _client(settings: Settings, processor: AnalysisProcessor) -> TestClient:
    app = create_app(settings, processor=processor, check_backend_on_startup=False)
    return TestClient(app)


def _sse_payloads(body: str) -> list[dict[str, object]]:
    return [
        json.loads(line[len("data: "):])
        for line in body.splitlines()
        if line.startswith("data: ")
    ]


class TestHealth:
    def test_ok_when_backend_reachable(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        processor = build_processor(settings, transport=_ollama())

        with _client(settings, processor) as client:
            response = client.get("/health")

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "OK"
        assert body["ollama"] == {
            "connected": True,
            "url": "http://localhost:11434",
            "modelAvailable": True,
        }
        assert body["timestamp"]

    def test_reports_missing_model(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        processor = build_processor(settings, transport=_ollama(models=()))

        with _client(settings, processor) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json()["ollama"]["modelAvailable"] is False

    def test_503_when_backend_unreachable(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        processor = build_processor(settings, transport=_ollama(version_ok=False))

        with _client(settings, processor) as client:
            response = client.get("/health")

        assert response.status_code == 503
        body = response.json()
        assert body["status"] == "ERROR"
        assert body["ollama"]["connected"] is False
        assert "Cannot connect to Ollama" in body["ollama"]["error"]


class TestUpload:
    @pytest.fixture()
    def settings(self, tmp_path: Path) -> Settings:
        return _settings(tmp_path, max_upload_files=2, max_upload_size_bytes=1024)

    @pytest.fixture()
    def client(self, settings: Settings) -> TestClient:
        return _client(settings, build_processor(settings, transport=_ollama()))

    def test_stores_files_with_unique_names(
        self, client: TestClient, settings: Settings
    ) -> None:
        response = client.post(
            "/api/upload",
            files=[
                ("documents", ("pl.pdf", b"%PDF-1.4", "application/pdf")),
                ("documents", ("ledger.csv", b"a,b\n", "text/csv")),
            ],
            data={"type": "profit-loss"},
        )

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["message"] == "Successfully uploaded 2 files"
        first = body["files"][0]
        assert first["originalName"] == "pl.pdf"
        assert first["filename"].endswith("-pl.pdf")
        assert first["mimetype"] == "application/pdf"
        assert first["size"] == 8
        assert first["type"] == "profit-loss"
        assert (settings.uploads_dir / first["filename"]).read_bytes() == b"%PDF-1.4"
        assert body["files"][0]["id"] != body["files"][1]["id"]

    def test_unknown_type_defaults_to_other(self, client: TestClient) -> None:
        response = client.post(
            "/api/upload",
            files=[("documents", ("a.pdf", b"%PDF", "application/pdf"))],
            data={"type": "tax-return"},
        )
        assert response.json()["files"][0]["type"] == "other"

    def test_no_files(self, client: TestClient) -> None:
        response = client.post("/api/upload", data={"type": "legal"})
        assert response.status_code == 400
        assert response.json() == {"error": "No files uploaded"}

    def test_invalid_type_rejected(self, client: TestClient, settings: Settings) -> None:
        response = client.post(
            "/api/upload",
            files=[("documents", ("photo.png", b"\x89PNG", "image/png"))],
        )
        assert response.status_code == 400
        assert response.json() == {"error": "Invalid file type"}
        assert list(settings.uploads_dir.iterdir()) == []

    def test_too_large_rejected_and_batch_discarded(
        self, client: TestClient, settings: Settings
    ) -> None:
        response = client.post(
            "/api/upload",
            files=[
                ("documents", ("ok.pdf", b"%PDF", "application/pdf")),
                ("documents", ("big.pdf", b"x" * 2048, "application/pdf")),
            ],
        )
        assert response.status_code == 400
        assert response.json() == {"error": "File too large"}
        assert list(settings.uploads_dir.iterdir()) == []

    def test_too_many_files_rejected(self, client: TestClient) -> None:
        files = [("documents", (f"{n}.pdf", b"%PDF", "application/pdf")) for n in range(3)]
        response = client.post("/api/upload", files=files)
        assert response.status_code == 400
        assert response.json() == {"error": "Too many files (max 2)"}

    def test_unexpected_write_error_discards_batch(
        self, client: TestClient, settings: Settings
    ) -> None:
        real_store = routes_upload._store
        calls = {"n": 0}

        async def store_then_fail(*args: object) -> UploadedFile:
            calls["n"] += 1
            if calls["n"] > 1:
                raise OSError("No space left on device")
            return await real_store(*args)  # type: ignore[arg-type]

        with patch("credit_analyzer.api.routes_upload._store", side_effect=store_then_fail):
            with pytest.raises(OSError, match="No space left"):
                client.post(
                    "/api/upload",
                    files=[
                        ("documents", ("ok.pdf", b"%PDF", "application/pdf")),
                        ("documents", ("second.pdf", b"%PDF", "application/pdf")),
                    ],
                )

        assert calls["n"] == 2
        assert list(settings.uploads_dir.iterdir()) == []

    def test_chunks_are_written_off_the_event_loop(self, client: TestClient) -> None:
        with patch(
            "credit_analyzer.api.routes_upload.asyncio.to_thread", wraps=asyncio.to_thread
        ) as to_thread:
            response = client.post(
                "/api/upload",
                files=[("documents", ("pl.pdf", b"%PDF-1.4", "application/pdf"))],
            )

        assert response.status_code == 200
        assert to_thread.call_args.args[1] == b"%PDF-1.4"


REFERENCE = {
    "id": "f1",
    "originalName": "pl.pdf",
    "filename": "uuid-pl.pdf",
    "mimetype": "application/pdf",
    "type": "profit-loss",
}


class FakeProcessor:
    """Stands in for AnalysisProcessor with a scripted event sequence."""

    def __init__(self, events: list[ProgressEvent]) -> None:
        self.events = events
        self.received: list[UploadedFile] = []
        self.gateway = MagicMock()

    async def run(self, files: Sequence[UploadedFile]) -> AsyncIterator[ProgressEvent]:
        self.received = list(files)
        for event in self.events:
            yield event

    def cleanup_task(self, files: Sequence[UploadedFile]) -> CleanupTask:
        return CleanupTask([], delay_seconds=0)


class TestAnalyze:
    def test_empty_file_list_rejected(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        processor = FakeProcessor([])

        with _client(settings, processor) as client:  # type: ignore[arg-type]
            response = client.post("/api/analyze", json={"files": []})

        assert response.status_code == 400
        assert response.json() == {"error": "No files provided for analysis"}

    @pytest.mark.parametrize("file_id", ["/srv/data", "../uploads", "..", ""])
    def test_unsafe_file_id_rejected(self, tmp_path: Path, file_id: str) -> None:
        processor = FakeProcessor([])
        reference = {**REFERENCE, "id": file_id}

        with _client(_settings(tmp_path), processor) as client:  # type: ignore[arg-type]
            response = client.post("/api/analyze", json={"files": [reference]})

        assert response.status_code == 400
        assert response.json() == {"error": "Invalid file id"}
        assert processor.received == []

    def test_duplicate_file_id_rejected(self, tmp_path: Path) -> None:
        processor = FakeProcessor([])
        other = {**REFERENCE, "filename": "uuid-bs.pdf", "originalName": "bs.pdf"}

        with _client(_settings(tmp_path), processor) as client:  # type: ignore[arg-type]
            response = client.post("/api/analyze", json={"files": [REFERENCE, other]})

        assert response.status_code == 400
        assert response.json() == {"error": "Duplicate file id"}
        assert processor.received == []

    def test_streams_events_as_sse(self, tmp_path: Path) -> None:
        settings = _settings(tmp_path)
        processor = FakeProcessor(
            [
                ProgressEvent(step=Step.INITIALIZATION, progress=5, message="Checking..."),
                ProgressEvent(step=Step.ERROR, progress=5, error="Cannot connect"),
                ProgressEvent(step=Step.PROCESSING, progress=10, message="never sent"),
            ]
        )

        with _client(settings, processor) as client:  # type: ignore[arg-type]
            response = client.post("/api/analyze", json={"files": [REFERENCE]})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/event-stream")
        assert response.headers["cache-control"] == "no-cache"
        assert _sse_payloads(response.text) == [
            {"step": "initialization", "progress": 5, "message": "Checking..."},
            {"step": "error", "progress": 5, "error": "Cannot connect"},
        ]
        assert processor.received[0].original_name == "pl.pdf"
        assert processor.received[0].type.value == "profit-loss"


class TestFormatSse:
    def test_frame_layout(self) -> None:
        assert format_sse({"step": "error", "progress": 0}) == (
            'data: {"step": "error", "progress": 0}\n\n'
        )
