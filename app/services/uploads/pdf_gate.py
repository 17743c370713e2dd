import os
import tempfile
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from fastapi import HTTPException, UploadFile

logger = logging.getLogger(__name__)

# multipart boundaries and part headers on top of the file itself
MULTIPART_OVERHEAD = 64 * 1024


@dataclass
class StoredFile:
    filename: str
    path: str
    url: str
    size: int
    content_type: str


class PdfUploadGate:
    """accepts the weekly discount magazine as a single PDF slot per tenant.

    Every accepted upload replaces the previous file at the same path; there is
    no history. "single" is the only slot policy supported.
    """

    ALLOWED_CONTENT_TYPE = "application/pdf"

    # maximum file size (20MB)
    MAX_FILE_SIZE = 20 * 1024 * 1024

    CHUNK_SIZE = 1024 * 1024

    SUBDIRECTORY = "weekly-discounts"
    FILENAME = "magazine.pdf"
    PUBLIC_URL = "/api/v1/magazine/current"

    def __init__(self, upload_root: str = "uploads", slot_policy: str = "single",
                 max_file_size: Optional[int] = None):
        """Set up the gate; call ensure_directory() once at startup.

        Args:
            upload_root: Tenant upload root (UPLOAD_PATH)
            slot_policy: Storage policy, only "single" (overwrite) is supported
            max_file_size: Override of MAX_FILE_SIZE in bytes
        """
        if slot_policy != "single":
            raise ValueError(f"Unsupported upload slot policy: {slot_policy}")
        self.upload_dir = Path(upload_root) / self.SUBDIRECTORY
        self.destination = self.upload_dir / self.FILENAME
        self.max_file_size = max_file_size or self.MAX_FILE_SIZE

    def ensure_directory(self) -> None:
        self.upload_dir.mkdir(parents=True, exist_ok=True)

    def _too_large(self) -> HTTPException:
        return HTTPException(
            status_code=413,
            detail=f"Datei zu groß. Maximale Größe: {self.max_file_size // (1024 * 1024)}MB"
        )

    def check_content_length(self, content_length: Optional[str]) -> None:
        """reject oversized requests from the header, before the body is parsed.

        Chunked bodies carry no length up front and are refused with 411.
        """
        if not content_length:
            raise HTTPException(status_code=411, detail="Content-Length-Header erforderlich")
        try:
            length = int(content_length)
        except ValueError:
            raise HTTPException(status_code=400, detail="Ungültiger Content-Length-Header")
        if length > self.max_file_size + MULTIPART_OVERHEAD:
            raise self._too_large()

    def validate_pdf_file(self, file: UploadFile) -> None:
        """Validate declared type and size of an uploaded file.

        Raises:
            HTTPException: If the file is not a PDF or too large
        """
        if file.content_type != self.ALLOWED_CONTENT_TYPE:
            raise HTTPException(status_code=400, detail="Nur PDF-Dateien sind erlaubt")

        if file.size is not None and file.size > self.max_file_size:
            raise self._too_large()

    async def accept_upload(self, file: UploadFile) -> StoredFile:
        """Store an uploaded PDF at the fixed destination.

        The body is copied in chunks into a temp file next to the destination and
        moved over it only once it was accepted completely, so a rejected upload
        leaves the current file untouched.

        Returns:
            StoredFile describing the stored magazine

        Raises:
            HTTPException: If the file is rejected or cannot be stored
        """
        self.validate_pdf_file(file)
        self.ensure_directory()

        fd, tmp_name = tempfile.mkstemp(dir=self.upload_dir, prefix=".upload-", suffix=".pdf")
        total = 0
        try:
            with os.fdopen(fd, "wb") as out:
                while True:
                    chunk = await file.read(self.CHUNK_SIZE)
                    if not chunk:
                        break
                    total += len(chunk)
                    if total > self.max_file_size:
                        raise self._too_large()
                    out.write(chunk)
            os.replace(tmp_name, self.destination)
        except HTTPException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
        except Exception as e:
            Path(tmp_name).unlink(missing_ok=True)
            logger.error(f"Error storing magazine pdf: {str(e)}")
            raise HTTPException(status_code=500, detail="Datei konnte nicht gespeichert werden")

        logger.info(f"Stored magazine pdf ({total} bytes) at {self.destination}")
        return StoredFile(
            filename=self.FILENAME,
            path=str(self.destination),
            url=self.PUBLIC_URL,
            size=total,
            content_type=self.ALLOWED_CONTENT_TYPE,
        )

    def current_file(self) -> Optional[Path]:
        return self.destination if self.destination.is_file() else None
