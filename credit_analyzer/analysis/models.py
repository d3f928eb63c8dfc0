import math
from dataclasses import dataclass, field
from enum import Enum

from credit_analyzer.documents.models import DocumentType
from credit_analyzer.inference.models import PageAnalysisResult

MIN_SCORE = 0
MAX_SCORE = 100


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive scores (2.5 -> 3, not 2)."""
    return int(math.floor(value + 0.5))


def clamp_score(value: float, low: int = MIN_SCORE, high: int = MAX_SCORE) -> int:
    return max(low, min(high, round_half_up(value)))


class CreditRating(str, Enum):
    """Four-level rating derived from the overall score."""

    EXCELLENT = "Excellent"
    GOOD = "Good"
    FAIR = "Fair"
    POOR = "Poor"

    @classmethod
    def from_score(cls, score: int) -> "CreditRating":
        if score >= 80:
            return cls.EXCELLENT
        if score >= 70:
            return cls.GOOD
        if score >= 60:
            return cls.FAIR
        return cls.POOR


@dataclass(frozen=True)
class DetailedAnalysis:
    """Sub-score breakdown, each metric in [0, 100]."""

    financial_health: int
    cash_flow: int
    debt_ratio: int
    profitability: int

    @classmethod
    def from_score(cls, score: int) -> "DetailedAnalysis":
        """Fixed fractions of the overall score."""
        return cls(
            financial_health=round_half_up(score * 0.9),
            cash_flow=round_half_up(score * 0.8),
            debt_ratio=round_half_up(score * 0.85),
            profitability=round_half_up(score * 0.75),
        )

    def to_dict(self) -> dict[str, int]:
        return {
            "financialHealth": self.financial_health,
            "cashFlow": self.cash_flow,
            "debtRatio": self.debt_ratio,
            "profitability": self.profitability,
        }


@dataclass(frozen=True)
class CreditAssessment:
    """Scored verdict produced by the model or by the fallback heuristic."""

    score: int
    rating: CreditRating
    summary: str
    strengths: tuple[str, ...] = ()
    risk_factors: tuple[str, ...] = ()
    recommendations: tuple[str, ...] = ()
    detailed_analysis: DetailedAnalysis = field(
        default_factory=lambda: DetailedAnalysis.from_score(0)
    )

    def __post_init__(self) -> None:
        if not MIN_SCORE <= self.score <= MAX_SCORE:
            raise ValueError(f"score must be within [0, 100], got {self.score}")
        if self.rating is not CreditRating.from_score(self.score):
            raise ValueError(
                f"rating {self.rating.value} is inconsistent with score {self.score}"
            )

    def to_dict(self) -> dict[str, object]:
        return {
            "score": self.score,
            "rating": self.rating.value,
            "summary": self.summary,
            "strengths": list(self.strengths),
            "riskFactors": list(self.risk_factors),
            "recommendations": list(self.recommendations),
            "detailedAnalysis": self.detailed_analysis.to_dict(),
        }


@dataclass(frozen=True)
class DocumentAnalysisResult:
    """Outcome of analyzing one processed document."""

    document_id: str
    document_name: str
    document_type: DocumentType
    extracted_info: str | None = None
    error: str | None = None
    page_count: int | None = None
    page_analyses: tuple[PageAnalysisResult, ...] | None = None
    text_analysis: bool = False

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "documentId": self.document_id,
            "documentName": self.document_name,
            "documentType": self.document_type.value,
        }
        if self.error is not None:
            data["error"] = self.error
        if self.extracted_info is not None:
            data["extractedInfo"] = self.extracted_info
        if self.page_count is not None:
            data["pageCount"] = self.page_count
        if self.page_analyses is not None:
            data["pageAnalyses"] = [page.to_dict() for page in self.page_analyses]
        if self.text_analysis:
            data["textAnalysis"] = True
        return data


@dataclass(frozen=True)
class ReportMetadata:
    total_documents: int
    document_types: tuple[DocumentType, ...]
    analysis_date: str

    def to_dict(self) -> dict[str, object]:
        return {
            "totalDocuments": self.total_documents,
            "documentTypes": [t.value for t in self.document_types],
            "analysisDate": self.analysis_date,
        }


@dataclass(frozen=True)
class CreditReport:
    """Final result of one analysis request."""

    assessment: CreditAssessment
    document_analysis: tuple[DocumentAnalysisResult, ...]
    metadata: ReportMetadata

    @property
    def score(self) -> int:
        return self.assessment.score

    @property
    def rating(self) -> CreditRating:
        return self.assessment.rating

    def to_dict(self) -> dict[str, object]:
        return {
            **self.assessment.to_dict(),
            "documentAnalysis": [result.to_dict() for result in self.document_analysis],
            "metadata": self.metadata.to_dict(),
        }
