from collections.abc import Callable, Sequence
from datetime import datetime, timezone

from credit_analyzer.analysis.fallback import build_fallback_assessment
from credit_analyzer.analysis.models import (
    CreditAssessment,
    CreditReport,
    DocumentAnalysisResult,
    ReportMetadata,
)
from credit_analyzer.documents.models import DocumentType
from credit_analyzer.inference.base import BaseModelGateway
from credit_analyzer.inference.exceptions import ModelGatewayError
from credit_analyzer.logging.logger import Log


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


class CreditReportAggregator:
    """Combines per-document results into one CreditReport.

    A report is always produced: when the model's structured answer cannot
    be obtained or trusted the deterministic fallback assessment is used.
    """

    def __init__(
        self,
        gateway: BaseModelGateway,
        clock: Callable[[], datetime] = _utc_now,
    ) -> None:
        self._gateway = gateway
        self._clock = clock

    async def is_model_available(self) -> bool:
        return await self._gateway.is_model_available()

    async def install_model(self) -> str:
        """Pull the model. Raises InstallError, which is fatal for the batch."""
        return await self._gateway.install_model()

    async def aggregate(
        self,
        results: Sequence[DocumentAnalysisResult],
        document_types: Sequence[DocumentType],
    ) -> CreditReport:
        assessment = await self._assess(results, document_types)
        return CreditReport(
            assessment=assessment,
            document_analysis=tuple(results),
            metadata=ReportMetadata(
                total_documents=len(results),
                document_types=tuple(document_types),
                analysis_date=self._clock().isoformat(),
            ),
        )

    async def _assess(
        self,
        results: Sequence[DocumentAnalysisResult],
        document_types: Sequence[DocumentType],
    ) -> CreditAssessment:
        try:
            return await self._gateway.infer_report(
                [result.to_dict() for result in results],
                [doc_type.value for doc_type in document_types],
            )
        except ModelGatewayError as exc:
            Log.warning(f"Using fallback credit assessment: {exc}")
            return build_fallback_assessment(results)
