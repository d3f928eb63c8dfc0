from pathlib import Path

import pymupdf

from credit_analyzer.pdf.base import BasePdfRenderer, page_image_path
from credit_analyzer.pdf.exceptions import PdfRenderError


class PyMuPdfRenderer(BasePdfRenderer):
    """Renders PDF pages to PNG using PyMuPDF."""

    def render(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            with pymupdf.open(pdf_path) as doc:  # type: ignore[no-untyped-call]
                if doc.needs_pass:
                    raise PdfRenderError(f"{pdf_path.name} is still encrypted")
                images: list[Path] = []
                for number, page in enumerate(doc, start=1):
                    target = page_image_path(output_dir, number)
                    page.get_pixmap(dpi=dpi).save(str(target))
                    images.append(target)
            return images
        except PdfRenderError:
            raise
        except Exception as exc:
            raise PdfRenderError(f"pymupdf rendering failed: {exc}") from exc
