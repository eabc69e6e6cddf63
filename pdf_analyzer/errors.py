"""
Error types surfaced to API clients.

Every error carries a human-readable message and the HTTP status it maps to.
The app-level error handler renders them as {"error": message}.
"""
from typing import Optional


class AnalyzerError(Exception):
    """Base class for all errors returned to the client"""
    status_code = 500

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.message = message
        if status_code is not None:
            self.status_code = status_code

    def __str__(self) -> str:
        return self.message


class InvalidUpload(AnalyzerError):
    """Wrong MIME type, missing file or bad form fields"""
    status_code = 400


class ExtractionFailure(AnalyzerError):
    """Corrupt PDF, invalid page-skip range or empty resulting text"""
    status_code = 500


class StorageFailure(AnalyzerError):
    """Filesystem read/write errors in the upload directory"""
    status_code = 500


class UploadNotFound(AnalyzerError):
    """No stored text for the requested file id"""
    status_code = 404


class AnalysisFailure(AnalyzerError):
    """External service error or empty analysis input"""
    status_code = 500
