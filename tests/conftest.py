import os
import tempfile

# Keep uploads out of the working tree; must happen before paperflow is imported
os.environ.setdefault("UPLOADS_DIR", tempfile.mkdtemp(prefix="paperflow-tests-"))

import pikepdf
import pytest

from paperflow import config
from paperflow.core.exceptions import GhostscriptError
from paperflow.core.service import PdfCompressionService


def make_pdf(path, pages=3, metadata=None, padding=0):
    """
    Write a PDF with blank pages.

    padding adds an incompressible stream hung off the document catalog; it is
    reachable in the source but is not carried over when pages are rebuilt.
    """
    pdf = pikepdf.Pdf.new()
    for _ in range(pages):
        pdf.add_blank_page(page_size=(612, 792))
    for key, value in (metadata or {}).items():
        pdf.docinfo[key] = value
    if padding:
        pdf.Root.PaperFlowPadding = pdf.make_stream(os.urandom(padding))
    pdf.save(str(path))
    pdf.close()
    return str(path)


class FakeGhostscript:
    """Stands in for GhostscriptCompressor without running a subprocess."""

    def __init__(self, available=True, output_ratio=0.5, error=None):
        self.available = available
        self.output_ratio = output_ratio
        self.error = error
        self.version = "GPL Ghostscript 10.0 (fake)" if available else None
        self.probes = 0
        self.calls = []

    def is_available(self):
        self.probes += 1
        return self.available

    def compress(self, input_path, output_path, level):
        self.calls.append((input_path, output_path, level))
        if self.error is not None:
            raise self.error
        size = int(os.path.getsize(input_path) * self.output_ratio)
        with open(output_path, "wb") as f:
            f.write(b"%PDF-1.4\n" + b"0" * max(0, size - 9))


@pytest.fixture
def uploads_dir(tmp_path, monkeypatch):
    directory = tmp_path / "uploads"
    directory.mkdir()
    monkeypatch.setattr(config, "UPLOADS_DIR", str(directory))
    return directory


@pytest.fixture
def sample_pdf(tmp_path):
    return make_pdf(tmp_path / "sample.pdf", pages=4, padding=64 * 1024)


@pytest.fixture
def fake_gs():
    return FakeGhostscript()


@pytest.fixture
def failing_gs():
    return FakeGhostscript(error=GhostscriptError("boom", returncode=1, stderr="Error: /undefined"))


@pytest.fixture
def missing_gs():
    return FakeGhostscript(available=False)


@pytest.fixture
def make_service(uploads_dir):
    def factory(ghostscript):
        return PdfCompressionService(uploads_dir=str(uploads_dir), ghostscript=ghostscript)
    return factory
