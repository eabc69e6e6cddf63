"""
Test Configuration and Fixtures
"""
import io

import pytest
from reportlab.lib.pagesizes import letter
from reportlab.pdfgen import canvas

from pdf_analyzer import create_app
from pdf_analyzer.errors import AnalysisFailure
from pdf_analyzer.services.openai_service import ANALYSIS_STEPS, BaseAnalyzer
from pdf_analyzer.services.storage import FileUploadStore


class FakeAnalyzer(BaseAnalyzer):
    """Records calls and returns canned results instead of calling the API"""

    def __init__(self):
        self.calls = []
        self.error = None

    def analyze(self, text):
        self.calls.append(text)
        if self.error:
            raise AnalysisFailure(self.error)
        return {step: f"{step}: {len(text)} characters" for step in ANALYSIS_STEPS}


def make_pdf(pages):
    """Build a PDF with one page per item; None gives a blank page."""
    buf = io.BytesIO()
    c = canvas.Canvas(buf, pagesize=letter)
    for content in pages:
        if content:
            c.drawString(72, 720, content)
        c.showPage()
    c.save()
    return buf.getvalue()


@pytest.fixture()
def sample_pdf_bytes():
    """Three pages with known text content"""
    return make_pdf(["Cover page", "Chapter one content", "Chapter two content"])


@pytest.fixture()
def ten_page_pdf_bytes():
    return make_pdf([f"Page {n} content" for n in range(1, 11)])


@pytest.fixture()
def blank_pdf_bytes():
    """Valid PDF whose pages carry no text (like a scanned image-only file)"""
    return make_pdf([None, None, None])


@pytest.fixture()
def upload_dir(tmp_path):
    path = tmp_path / "uploads"
    path.mkdir()
    return path


@pytest.fixture()
def analyzer():
    return FakeAnalyzer()


@pytest.fixture()
def app(upload_dir, analyzer):
    """Create application for testing"""
    app = create_app('testing', analyzer=analyzer, store=FileUploadStore(str(upload_dir)))
    app.config['UPLOAD_FOLDER'] = str(upload_dir)
    yield app


@pytest.fixture()
def client(app):
    """Create test client"""
    return app.test_client()


@pytest.fixture()
def upload_pdf(client):
    """Post PDF bytes to /upload and return the response"""
    def _upload(data, filename='document.pdf', mimetype='application/pdf', **form):
        payload = {'file': (io.BytesIO(data), filename, mimetype)}
        payload.update({k: str(v) for k, v in form.items()})
        return client.post('/upload', data=payload, content_type='multipart/form-data')
    return _upload
