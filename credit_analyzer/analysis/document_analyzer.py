from collections.abc import Sequence

from credit_analyzer.analysis.models import DocumentAnalysisResult
from credit_analyzer.analysis.prompts import build_document_prompt
from credit_analyzer.documents.models import ProcessedDocument
from credit_analyzer.inference.base import BaseModelGateway
from credit_analyzer.inference.models import PageAnalysisResult
from credit_analyzer.logging.logger import Log

NO_PAGES_EXTRACTED = "Failed to extract information from document pages"
NO_CONTENT_EXTRACTED = "No content extracted"


def combine_page_analyses(pages: Sequence[PageAnalysisResult]) -> str:
    """Join successful page narratives in page order, skipping failed pages."""
    narratives = [
        f"Page {page.page}: {page.analysis}"
        for page in sorted(pages, key=lambda p: p.page)
        if page.success
    ]
    if not narratives:
        return NO_PAGES_EXTRACTED
    return "\n\n".join(narratives)


class DocumentAnalyzer:
    """Extracts a per-document narrative using the model gateway."""

    def __init__(self, gateway: BaseModelGateway) -> None:
        self._gateway = gateway

    async def analyze(self, document: ProcessedDocument) -> DocumentAnalysisResult:
        """Analyze one document. Never raises; failures land in ``error``."""
        try:
            if document.has_images:
                return await self._analyze_pages(document)
            return DocumentAnalysisResult(
                document_id=document.id,
                document_name=document.original_name,
                document_type=document.type,
                extracted_info=document.text or NO_CONTENT_EXTRACTED,
                text_analysis=True,
            )
        except Exception as exc:
            Log.error(f"Error analyzing document {document.original_name}: {exc}")
            return DocumentAnalysisResult(
                document_id=document.id,
                document_name=document.original_name,
                document_type=document.type,
                error=str(exc),
            )

    async def _analyze_pages(self, document: ProcessedDocument) -> DocumentAnalysisResult:
        prompt = build_document_prompt(document.type)
        pages = await self._gateway.infer_batch(document.images, prompt)
        succeeded = sum(1 for page in pages if page.success)
        Log.info(
            f"Analyzed {document.original_name}: "
            f"{succeeded}/{len(pages)} pages extracted"
        )
        return DocumentAnalysisResult(
            document_id=document.id,
            document_name=document.original_name,
            document_type=document.type,
            extracted_info=combine_page_analyses(pages),
            page_count=len(document.images),
            page_analyses=tuple(pages),
        )
