"""
API Blueprint - upload, analyze and cleanup endpoints
"""
from typing import Optional

from flask import Blueprint, current_app, jsonify, render_template, request

from pdf_analyzer.errors import AnalysisFailure, AnalyzerError, ExtractionFailure, InvalidUpload
from pdf_analyzer.services.openai_service import BaseAnalyzer
from pdf_analyzer.services.pdf_service import extract_pdf_text
from pdf_analyzer.services.storage import UploadStore

api_bp = Blueprint('api', __name__)

PDF_MIMETYPE = "application/pdf"


# ============ Helper Functions ============

def get_store() -> UploadStore:
    return current_app.extensions["upload_store"]


def get_analyzer() -> BaseAnalyzer:
    return current_app.extensions["analyzer"]


def parse_skip(value: Optional[str], default: int, field: str) -> int:
    """Blank or missing form values fall back to the default; 0 is kept."""
    raw = (value or "").strip()
    if not raw:
        return default
    try:
        number = int(raw)
    except ValueError:
        raise InvalidUpload(f"{field} must be an integer")
    if number < 0:
        raise InvalidUpload(f"{field} must not be negative")
    return number


def json_file_id() -> Optional[str]:
    """fileId from the JSON body; None when the body or the field is absent or empty."""
    if not request.get_data():
        return None
    data = request.get_json(silent=True, force=True)
    if not isinstance(data, dict):
        raise InvalidUpload("Request body must be a JSON object")
    file_id = data.get("fileId")
    if file_id is None or file_id == "":
        return None
    if not isinstance(file_id, str):
        raise InvalidUpload("fileId must be a string")
    return file_id


# ============ Routes ============

@api_bp.route("/", methods=["GET"])
def index():
    return render_template("index.html")


@api_bp.route("/upload", methods=["POST"])
def upload():
    file = request.files.get("file")
    if not file or not file.filename:
        raise InvalidUpload("No file uploaded")
    if file.mimetype != PDF_MIMETYPE:
        raise InvalidUpload("Only PDF files are allowed")

    skip_first = parse_skip(
        request.form.get("skipFirstPages"),
        current_app.config["DEFAULT_SKIP_FIRST_PAGES"],
        "skipFirstPages",
    )
    skip_last = parse_skip(
        request.form.get("skipLastPages"),
        current_app.config["DEFAULT_SKIP_LAST_PAGES"],
        "skipLastPages",
    )

    store = get_store()
    file_id = store.new_file_id()
    path = store.save_upload(file_id, file)
    current_app.logger.info("Uploaded file %s, skipping first %d and last %d pages",
                            file_id, skip_first, skip_last)

    try:
        result = extract_pdf_text(path, skip_first, skip_last)
        if not result.text.strip():
            raise ExtractionFailure(
                "Extracted text is empty. The PDF may contain only images or be copy-protected."
            )
        store.put_text(file_id, result.text)
    except Exception:
        store.discard_upload(file_id)
        raise

    current_app.logger.info("Extracted %d characters, %d words for %s",
                            len(result.text), result.word_count, file_id)
    return jsonify({
        "success": True,
        "fileId": file_id,
        "textLength": len(result.text),
        "wordCount": result.word_count,
    }), 200


@api_bp.route("/analyze", methods=["POST"])
def analyze():
    file_id = json_file_id()
    if not file_id:
        raise AnalyzerError("No file ID provided", status_code=400)

    text = get_store().get_text(file_id)
    if not text.strip():
        raise AnalysisFailure("No text to analyze", status_code=400)
    current_app.logger.info("Analyzing %s (%d characters)", file_id, len(text))

    results = get_analyzer().analyze(text)
    return jsonify({"success": True, "results": results}), 200


@api_bp.route("/cleanup", methods=["DELETE"])
def cleanup():
    file_id = json_file_id()
    store = get_store()
    if file_id is not None:
        store.delete(file_id)
    else:
        store.clear()
    return jsonify({"success": True}), 200
