"""Upload storage.

Uploads live in one flat directory: ``<file_id>`` holds the original PDF
until it has been extracted, ``<file_id>.txt`` holds the extracted text.
There is no registry; a record exists while its files exist.

Reads and deletes are not coordinated between requests. A cleanup that runs
while an analysis is reading the same record makes that read raise
UploadNotFound.
"""
from __future__ import annotations

import logging
import os
import re
import time
from abc import ABC, abstractmethod
from typing import BinaryIO

from pdf_analyzer.errors import StorageFailure, UploadNotFound

logger = logging.getLogger(__name__)

_FILE_ID_RE = re.compile(r"^[A-Za-z0-9_]+$")
TEXT_SUFFIX = ".txt"


def new_file_id() -> str:
    return f"upload_{int(time.time() * 1000)}_{os.urandom(4).hex()}"


def is_valid_file_id(file_id: str) -> bool:
    return bool(file_id) and bool(_FILE_ID_RE.match(file_id))


class UploadStore(ABC):
    """put/get/delete/clear over upload records keyed by file id."""

    def new_file_id(self) -> str:
        return new_file_id()

    @abstractmethod
    def save_upload(self, file_id: str, stream: BinaryIO) -> str:
        """Persist the uploaded PDF and return the path the extractor should read."""

    @abstractmethod
    def discard_upload(self, file_id: str) -> None:
        """Remove the uploaded PDF if it is still there; never raises."""

    @abstractmethod
    def put_text(self, file_id: str, text: str) -> None:
        ...

    @abstractmethod
    def get_text(self, file_id: str) -> str:
        ...

    @abstractmethod
    def delete(self, file_id: str) -> None:
        """Remove the upload and its text, whichever of them exist."""

    @abstractmethod
    def clear(self) -> None:
        """Remove every stored file."""


class FileUploadStore(UploadStore):
    def __init__(self, root: str):
        self.root = root
        os.makedirs(root, exist_ok=True)

    def upload_path(self, file_id: str) -> str:
        return os.path.join(self.root, file_id)

    def text_path(self, file_id: str) -> str:
        return os.path.join(self.root, file_id + TEXT_SUFFIX)

    def save_upload(self, file_id: str, stream: BinaryIO) -> str:
        path = self.upload_path(file_id)
        try:
            with open(path, "wb") as f:
                while True:
                    chunk = stream.read(64 * 1024)
                    if not chunk:
                        break
                    f.write(chunk)
        except OSError as e:
            self.discard_upload(file_id)
            raise StorageFailure(f"Could not save upload: {e}") from e
        logger.info("Saved upload %s", file_id)
        return path

    def discard_upload(self, file_id: str) -> None:
        path = self.upload_path(file_id)
        try:
            if os.path.exists(path):
                os.remove(path)
        except OSError as e:
            logger.error("Could not delete upload %s: %s", file_id, e)

    def put_text(self, file_id: str, text: str) -> None:
        path = self.text_path(file_id)
        try:
            with open(path, "w", encoding="utf-8") as f:
                f.write(text)
        except OSError as e:
            try:
                if os.path.exists(path):
                    os.remove(path)
            except OSError as cleanup_error:
                logger.error("Could not delete partial text for %s: %s", file_id, cleanup_error)
            raise StorageFailure(f"Could not save extracted text: {e}") from e
        logger.info("Text saved to %s", path)

    def get_text(self, file_id: str) -> str:
        if not is_valid_file_id(file_id):
            raise UploadNotFound("File not found")
        try:
            with open(self.text_path(file_id), "r", encoding="utf-8") as f:
                return f.read()
        except FileNotFoundError:
            raise UploadNotFound("File not found")
        except OSError as e:
            raise StorageFailure(f"Could not read extracted text: {e}") from e

    def delete(self, file_id: str) -> None:
        if not is_valid_file_id(file_id):
            logger.warning("Ignoring cleanup for invalid file id %r", file_id)
            return
        for path in (self.upload_path(file_id), self.text_path(file_id)):
            try:
                os.remove(path)
            except FileNotFoundError:
                pass
            except OSError as e:
                raise StorageFailure(f"Could not delete {os.path.basename(path)}: {e}") from e
        logger.info("Cleaned up files for %s", file_id)

    def clear(self) -> None:
        try:
            for name in os.listdir(self.root):
                path = os.path.join(self.root, name)
                if os.path.isfile(path):
                    os.remove(path)
        except OSError as e:
            raise StorageFailure(f"Could not clear upload directory: {e}") from e
        logger.info("Cleared upload directory %s", self.root)
