from collections.abc import Sequence
from pathlib import Path

import pymupdf

from credit_analyzer.logging.logger import Log
from credit_analyzer.pdf.exceptions import PdfDecryptionError, PdfRenderError

COMMON_PASSWORDS: tuple[str, ...] = ("", "password", "123456", "admin", "user")


class PdfDecryptor:
    """Unlocks password-protected PDFs by probing a fixed list of passwords."""

    def __init__(self, passwords: Sequence[str] = COMMON_PASSWORDS) -> None:
        self._passwords = tuple(passwords)

    def unlock(self, pdf_path: Path, output_path: Path) -> Path:
        """Return a path to a PDF that opens without a password.

        Unencrypted files are returned as-is. For encrypted files the
        passwords are tried in order; the first that authenticates wins and
        a decrypted copy is written to ``output_path``.

        Raises:
            PdfDecryptionError: if no password unlocks the file.
            PdfRenderError: if the file cannot be opened as a PDF at all.
        """
        try:
            doc = pymupdf.open(pdf_path)  # type: ignore[no-untyped-call]
        except Exception as exc:
            raise PdfRenderError(f"Cannot open PDF {pdf_path.name}: {exc}") from exc

        with doc:
            if not doc.needs_pass:
                return pdf_path
            Log.info(f"PDF {pdf_path.name} is encrypted, probing common passwords")
            for attempt, password in enumerate(self._passwords, start=1):
                if not doc.authenticate(password):
                    continue
                output_path.parent.mkdir(parents=True, exist_ok=True)
                doc.save(str(output_path), encryption=pymupdf.PDF_ENCRYPT_NONE)
                Log.info(
                    f"Decrypted {pdf_path.name} with password #{attempt} "
                    f"of {len(self._passwords)}"
                )
                return output_path

        raise PdfDecryptionError("Could not decrypt PDF - password protected")
