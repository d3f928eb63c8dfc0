"""Converts uploaded files into page images or a descriptive stand-in text."""

from pathlib import Path

from credit_analyzer.documents.exceptions import (
    DecryptionFailure,
    DocumentError,
    ProcessingFailure,
)
from credit_analyzer.documents.models import (
    ACCEPTED_MIME_TYPES,
    PDF_MIME_TYPE,
    ProcessedDocument,
    UploadedFile,
    is_safe_document_id,
)
from credit_analyzer.logging.logger import Log
from credit_analyzer.pdf.base import BasePdfRenderer
from credit_analyzer.pdf.decryptor import PdfDecryptor
from credit_analyzer.pdf.exceptions import PdfDecryptionError


def describe_file(path: Path, mime_type: str) -> str:
    """Short descriptor used in place of parsed content for non-PDF files."""
    size = path.stat().st_size
    return f"File: {path.name}, Size: {size} bytes, Type: {mime_type}"


class DocumentNormalizer:
    """Turns one uploaded file into a ProcessedDocument.

    Every artifact for a document is written below ``temp_dir``: rendered
    pages go to ``<temp_dir>/<id>/`` and a decrypted copy, if one is needed,
    to ``<temp_dir>/<id>_unencrypted.pdf``.
    """

    def __init__(
        self,
        *,
        renderer: BasePdfRenderer,
        decryptor: PdfDecryptor,
        temp_dir: Path,
        dpi: int = 200,
    ) -> None:
        self._renderer = renderer
        self._decryptor = decryptor
        self._temp_dir = temp_dir
        self._dpi = dpi

    def normalize(self, path: Path, file: UploadedFile) -> ProcessedDocument:
        """Normalize the file stored at ``path``.

        Raises:
            DecryptionFailure: if an encrypted PDF cannot be unlocked.
            ProcessingFailure: on any other I/O or conversion error.
        """
        if not is_safe_document_id(file.id):
            raise ProcessingFailure(
                f"Failed to process {file.original_name}: invalid document id '{file.id}'"
            )
        try:
            if file.mime_type == PDF_MIME_TYPE:
                images = self._render_pdf(path, file.id)
                Log.info(f"Converted {file.original_name} to {len(images)} page images")
                return ProcessedDocument(
                    id=file.id,
                    original_name=file.original_name,
                    type=file.type,
                    mime_type=file.mime_type,
                    size=file.size,
                    images=tuple(images),
                    page_count=len(images),
                )
            if file.mime_type not in ACCEPTED_MIME_TYPES:
                raise ProcessingFailure(
                    f"Failed to process {file.original_name}: "
                    f"unsupported mime type '{file.mime_type}'"
                )
            return ProcessedDocument(
                id=file.id,
                original_name=file.original_name,
                type=file.type,
                mime_type=file.mime_type,
                size=file.size,
                text=describe_file(path, file.mime_type),
            )
        except DocumentError:
            raise
        except PdfDecryptionError as exc:
            raise DecryptionFailure(f"Failed to process {file.original_name}: {exc}") from exc
        except Exception as exc:
            raise ProcessingFailure(f"Failed to process {file.original_name}: {exc}") from exc

    @property
    def temp_dir(self) -> Path:
        return self._temp_dir

    def temp_paths_for(self, document_id: str) -> list[Path]:
        """All transient paths this normalizer may create for a document.

        Ids that could escape ``temp_dir`` own no paths.
        """
        if not is_safe_document_id(document_id):
            return []
        return [self._output_dir(document_id), self._decrypted_path(document_id)]

    def _render_pdf(self, path: Path, document_id: str) -> list[Path]:
        readable = self._decryptor.unlock(path, self._decrypted_path(document_id))
        return self._renderer.render(readable, self._output_dir(document_id), self._dpi)

    def _output_dir(self, document_id: str) -> Path:
        return self._temp_dir / document_id

    def _decrypted_path(self, document_id: str) -> Path:
        return self._temp_dir / f"{document_id}_unencrypted.pdf"
