from __future__ import annotations

import contextlib
import io
import logging
import os
import tempfile
import typing as t

from pypdf import PdfReader
from werkzeug.datastructures import FileStorage
from werkzeug.utils import secure_filename

from .errors import ValidationError

logger = logging.getLogger(__name__)

PDF_MIME_TYPE = "application/pdf"
TEXT_MIME_TYPE = "text/plain"
TEXT_EXTENSIONS = (".txt", ".md")


class FileUtils:
    def __init__(self, upload_dir: str) -> None:
        self.upload_dir = upload_dir

    def read_bytes(self, path: str) -> bytes:
        with open(path, "rb") as f:
            return f.read()

    @contextlib.contextmanager
    def saved_upload(self, upload: FileStorage) -> t.Iterator[str]:
        """Save the upload into the upload dir and remove it on every exit path."""
        os.makedirs(self.upload_dir, exist_ok=True)
        suffix = os.path.splitext(secure_filename(upload.filename or ""))[1]
        fd, path = tempfile.mkstemp(prefix="syllabus_", suffix=suffix, dir=self.upload_dir)
        try:
            with os.fdopen(fd, "wb") as fh:
                upload.save(fh)
            yield path
        finally:
            try:
                os.remove(path)
            except OSError as e:
                logger.warning("Could not remove uploaded file %s: %s", path, e)

    def read_upload(self, upload: FileStorage) -> bytes:
        with self.saved_upload(upload) as path:
            return self.read_bytes(path)

    @staticmethod
    def looks_like_pdf(data: bytes) -> bool:
        return data.lstrip()[:5] == b"%PDF-"

    @staticmethod
    def page_count(data: bytes) -> int:
        try:
            return len(PdfReader(io.BytesIO(data)).pages)
        except Exception as e:  # pypdf has no single error type for corrupt files
            raise ValidationError("Uploaded syllabus is not a readable PDF.", str(e)) from e

    @staticmethod
    def is_text_upload(filename: str | None, mimetype: str | None) -> bool:
        if mimetype and mimetype.startswith("text/"):
            return True
        return bool(filename) and t.cast(str, filename).lower().endswith(TEXT_EXTENSIONS)

    def document_from_upload(self, upload: FileStorage | None) -> tuple[bytes | None, str | None]:
        """Return ``(pdf_bytes, extra_text)`` for an uploaded syllabus.

        PDFs are checked with pypdf and forwarded inline; plain-text files are
        decoded and returned as text. Anything else is rejected.
        """
        if upload is None or not upload.filename:
            return None, None
        data = self.read_upload(upload)
        if not data.strip():
            return None, None

        if self.looks_like_pdf(data):
            pages = self.page_count(data)
            logger.info("Received syllabus PDF %s (%d pages, %d bytes)", upload.filename, pages, len(data))
            return data, None

        if self.is_text_upload(upload.filename, upload.mimetype):
            try:
                return None, data.decode("utf-8-sig")
            except UnicodeDecodeError as e:
                raise ValidationError("Uploaded syllabus text file is not UTF-8.", str(e)) from e

        raise ValidationError("Unsupported syllabus file type. Upload a PDF or a plain-text file.")
