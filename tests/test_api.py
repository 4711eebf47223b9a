import io
import os
import shutil

import pikepdf
import pytest
from fastapi.testclient import TestClient

from paperflow import app, config
from paperflow.api.deps import get_compression_service, get_stats_store
from paperflow.core.service import PdfCompressionService
from paperflow.utils.stats_store import CompressionStatsStore

from conftest import FakeGhostscript, make_pdf


@pytest.fixture
def stats_store():
    return CompressionStatsStore(ttl_seconds=60)


@pytest.fixture
def client(uploads_dir, stats_store):
    service = PdfCompressionService(uploads_dir=str(uploads_dir), ghostscript=FakeGhostscript(available=False))
    app.dependency_overrides[get_compression_service] = lambda: service
    app.dependency_overrides[get_stats_store] = lambda: stats_store
    yield TestClient(app)
    app.dependency_overrides.clear()


def _upload(path, name="report.pdf", content_type="application/pdf"):
    with open(path, "rb") as f:
        return {"file": (name, f.read(), content_type)}


def test_compress_streams_pdf(client, sample_pdf, uploads_dir, stats_store):
    response = client.post(
        "/api/v1/pdf/compress",
        files=_upload(sample_pdf),
        data={"image_compression": "HIGH", "remove_metadata": "true"}
    )

    assert response.status_code == 200
    assert response.headers["content-type"] == "application/pdf"
    assert "compressed-report.pdf" in response.headers["content-disposition"]
    compression_id = response.headers["x-compression-id"]
    assert response.headers["x-compression-stats-url"] == f"/api/v1/pdf/compression-stats/{compression_id}"
    assert float(response.headers["x-compression-ratio"]) > 0

    with pikepdf.open(io.BytesIO(response.content)) as pdf:
        assert len(pdf.pages) == 4
        assert str(pdf.docinfo["/Creator"]) == config.PDF_CREATOR

    record = stats_store.get(compression_id)
    assert record.compression_level.value == "high"
    assert record.compressed_size == len(response.content)

    # Upload and output are removed once the response is sent
    assert os.listdir(uploads_dir) == []


def test_compress_info_returns_json(client, sample_pdf, uploads_dir):
    response = client.post("/api/v1/pdf/compress?info=true", files=_upload(sample_pdf))

    assert response.status_code == 200
    body = response.json()
    assert body["message"] == "PDF compressed successfully"
    assert body["original_size"] == os.path.getsize(sample_pdf)
    assert body["compressed_size"] < body["original_size"]
    assert body["compression_ratio"] > 0
    assert body["compression_level"] == "medium"
    assert body["original_filename"] == "report.pdf"
    assert os.listdir(uploads_dir) == []


def test_stats_lookup(client, sample_pdf):
    response = client.post("/api/v1/pdf/compress?info=true", files=_upload(sample_pdf))
    compression_id = response.json()["compression_id"]

    stats = client.get(f"/api/v1/pdf/compression-stats/{compression_id}")
    assert stats.status_code == 200
    assert stats.json()["id"] == compression_id
    assert stats.json()["original_size"] == os.path.getsize(sample_pdf)


def test_stats_lookup_unknown_id(client):
    response = client.get("/api/v1/pdf/compression-stats/does-not-exist")
    assert response.status_code == 404


def test_invalid_level_rejected(client, sample_pdf, uploads_dir):
    response = client.post(
        "/api/v1/pdf/compress",
        files=_upload(sample_pdf),
        data={"image_compression": "ultra"}
    )
    assert response.status_code == 422
    assert os.listdir(uploads_dir) == []


def test_out_of_range_quality_rejected(client, sample_pdf):
    response = client.post(
        "/api/v1/pdf/compress",
        files=_upload(sample_pdf),
        data={"image_quality": "0"}
    )
    assert response.status_code == 422


def test_non_pdf_rejected(client, tmp_path):
    path = tmp_path / "notes.txt"
    path.write_text("hello")
    response = client.post("/api/v1/pdf/compress", files=_upload(path, name="notes.txt", content_type="text/plain"))
    assert response.status_code == 400


def test_unreadable_pdf_rejected(client, tmp_path, uploads_dir):
    path = tmp_path / "broken.pdf"
    path.write_bytes(b"definitely not a pdf")
    response = client.post("/api/v1/pdf/compress", files=_upload(path))
    assert response.status_code == 400
    assert os.listdir(uploads_dir) == []


def test_too_large_upload_rejected(client, sample_pdf, uploads_dir, monkeypatch):
    monkeypatch.setattr(config, "MAX_FILE_SIZE", 1024)
    response = client.post("/api/v1/pdf/compress", files=_upload(sample_pdf))
    assert response.status_code == 413
    assert os.listdir(uploads_dir) == []


class GrowingService:
    """Service whose output is always larger than its input."""

    def __init__(self, uploads_dir):
        self.uploads_dir = str(uploads_dir)

    def compress_pdf(self, file_path, options):
        output = os.path.join(self.uploads_dir, "compressed-grown.pdf")
        with open(file_path, "rb") as src, open(output, "wb") as dst:
            dst.write(src.read() + b"\n% padding" * 100)
        return output


@pytest.fixture
def growing_client(uploads_dir, stats_store):
    service = GrowingService(uploads_dir)
    app.dependency_overrides[get_compression_service] = lambda: service
    app.dependency_overrides[get_stats_store] = lambda: stats_store
    yield TestClient(app, raise_server_exceptions=False)
    app.dependency_overrides.clear()


def test_original_returned_when_output_grows(growing_client, uploads_dir, tmp_path):
    source = make_pdf(tmp_path / "small.pdf", pages=1)
    response = growing_client.post("/api/v1/pdf/compress", files=_upload(source))

    assert response.status_code == 200
    with open(source, "rb") as f:
        assert response.content == f.read()
    assert float(response.headers["x-compression-ratio"]) == 0.0
    assert os.listdir(uploads_dir) == []


def test_original_copy_uses_service_directory(growing_client, uploads_dir, tmp_path, monkeypatch):
    other_dir = tmp_path / "elsewhere"
    other_dir.mkdir()
    monkeypatch.setattr(config, "UPLOADS_DIR", str(other_dir))
    copies = []
    real_copyfile = shutil.copyfile

    def recording_copyfile(src, dst):
        copies.append(dst)
        return real_copyfile(src, dst)

    monkeypatch.setattr(shutil, "copyfile", recording_copyfile)
    source = make_pdf(tmp_path / "small.pdf", pages=1)
    response = growing_client.post("/api/v1/pdf/compress", files=_upload(source))

    assert response.status_code == 200
    assert len(copies) == 1
    assert os.path.dirname(copies[0]) == str(uploads_dir)


def test_files_removed_when_original_copy_fails(growing_client, uploads_dir, tmp_path, monkeypatch):
    def failing_copyfile(src, dst):
        with open(dst, "wb") as f:
            f.write(b"partial")
        raise OSError("No space left on device")

    monkeypatch.setattr(shutil, "copyfile", failing_copyfile)
    source = make_pdf(tmp_path / "small.pdf", pages=1)
    response = growing_client.post("/api/v1/pdf/compress", files=_upload(source))

    assert response.status_code == 500
    assert os.listdir(uploads_dir) == []


def test_files_removed_when_stats_cannot_be_stored(client, sample_pdf, uploads_dir, stats_store, monkeypatch):
    def failing_put(record):
        raise RuntimeError("stats store unavailable")

    monkeypatch.setattr(stats_store, "put", failing_put)
    response = TestClient(app, raise_server_exceptions=False).post(
        "/api/v1/pdf/compress", files=_upload(sample_pdf)
    )

    assert response.status_code == 500
    assert os.listdir(uploads_dir) == []


def test_analyze(client, tmp_path, uploads_dir):
    path = make_pdf(tmp_path / "doc.pdf", pages=1, metadata={"/Title": "Doc"}, padding=300 * 1024)
    response = client.post("/api/v1/pdf/compress/analyze", files=_upload(path))

    assert response.status_code == 200
    body = response.json()
    assert body["page_count"] == 1
    assert body["has_images"] is True
    assert body["estimated_image_size"].startswith("~")
    assert body["has_form_fields"] is False
    assert body["recommendations"] == ["Use medium compression level for good balance of quality and size"]
    assert body["estimated_savings"] == "20-30%"
    assert body["metadata"] == "Present"
    assert body["file_size"].endswith(" KB")
    assert os.listdir(uploads_dir) == []


def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.json()["status"] == "healthy"


def test_empty_upload_rejected(client, uploads_dir):
    response = client.post("/api/v1/pdf/compress", files={"file": ("empty.pdf", b"", "application/pdf")})
    assert response.status_code == 400
    assert os.listdir(uploads_dir) == []
