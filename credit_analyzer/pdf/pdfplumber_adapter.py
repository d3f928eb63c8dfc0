from pathlib import Path

import pdfplumber

from credit_analyzer.pdf.base import BasePdfRenderer, page_image_path
from credit_analyzer.pdf.exceptions import PdfRenderError


class PdfPlumberRenderer(BasePdfRenderer):
    """Renders PDF pages to PNG using pdfplumber's page images."""

    def render(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        try:
            output_dir.mkdir(parents=True, exist_ok=True)
            images: list[Path] = []
            with pdfplumber.open(pdf_path) as pdf:
                for number, page in enumerate(pdf.pages, start=1):
                    target = page_image_path(output_dir, number)
                    page.to_image(resolution=dpi).save(target, format="PNG")
                    images.append(target)
            return images
        except Exception as exc:
            raise PdfRenderError(f"pdfplumber rendering failed: {exc}") from exc
