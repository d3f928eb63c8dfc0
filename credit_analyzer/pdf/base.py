from abc import ABC, abstractmethod
from pathlib import Path


class BasePdfRenderer(ABC):
    """Contract for all PDF page rendering adapters."""

    @abstractmethod
    def render(self, pdf_path: Path, output_dir: Path, dpi: int) -> list[Path]:
        """Render every page of an unencrypted PDF to a PNG file.

        Args:
            pdf_path: PDF to render. Must not require a password.
            output_dir: Directory receiving page-<n>.png files; created if missing.
            dpi: Rendering resolution.

        Returns:
            Image paths ordered by physical page number.

        Raises:
            PdfRenderError: if rendering fails for any reason.
        """


def page_image_path(output_dir: Path, page_number: int) -> Path:
    """Build path to a rendered page: {output_dir}/page-{n}.png"""
    return output_dir / f"page-{page_number}.png"
