from credit_analyzer.config.settings import Settings
from credit_analyzer.pdf.base import BasePdfRenderer
from credit_analyzer.pdf.pdfplumber_adapter import PdfPlumberRenderer
from credit_analyzer.pdf.pymupdf_adapter import PyMuPdfRenderer


class PdfRendererFactory:
    """Creates the correct PDF page renderer based on settings."""

    ADAPTERS: dict[str, type[BasePdfRenderer]] = {
        "pymupdf": PyMuPdfRenderer,
        "pdfplumber": PdfPlumberRenderer,
    }

    @classmethod
    def create(cls, settings: Settings) -> BasePdfRenderer:
        engine = settings.pdf_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown PDF engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()
