"""Deterministic credit assessment used when the model's report is unusable."""

from collections.abc import Sequence

from credit_analyzer.analysis.models import (
    CreditAssessment,
    CreditRating,
    DetailedAnalysis,
    DocumentAnalysisResult,
    clamp_score,
)
from credit_analyzer.documents.models import CORE_FINANCIAL_TYPES

FALLBACK_MIN_SCORE = 30
FALLBACK_MAX_SCORE = 100
BASE_SCORE_WITH_STATEMENTS = 70
BASE_SCORE_WITHOUT_STATEMENTS = 50
MAX_ANALYSIS_BONUS = 20


def fallback_score(results: Sequence[DocumentAnalysisResult]) -> int:
    has_statements = _has_core_statements(results)
    base = BASE_SCORE_WITH_STATEMENTS if has_statements else BASE_SCORE_WITHOUT_STATEMENTS
    total = len(results)
    succeeded = sum(1 for result in results if result.success)
    bonus = (succeeded / total) * MAX_ANALYSIS_BONUS if total else 0.0
    return clamp_score(base + bonus, FALLBACK_MIN_SCORE, FALLBACK_MAX_SCORE)


def build_fallback_assessment(results: Sequence[DocumentAnalysisResult]) -> CreditAssessment:
    """Score the batch from document coverage alone.

    Only two facts feed the result: whether any core financial statement
    was submitted, and the share of documents analyzed without error.
    """
    has_statements = _has_core_statements(results)
    score = fallback_score(results)
    total = len(results)
    succeeded = sum(1 for result in results if result.success)
    return CreditAssessment(
        score=score,
        rating=CreditRating.from_score(score),
        summary=_summary(score, total, succeeded, has_statements),
        strengths=(
            "Complete documentation provided for review",
            "Organized approach to financial record keeping",
            "Transparent submission of required documents",
            "Comprehensive financial statements included"
            if has_statements
            else "Willingness to provide documentation",
        ),
        risk_factors=(
            "Limited AI analysis due to technical constraints",
            "Market volatility and economic uncertainty factors",
            "Need for more detailed financial trend analysis"
            if has_statements
            else "Missing key financial statements",
        ),
        recommendations=(
            "Maintain consistent and detailed financial reporting",
            "Implement regular cash flow monitoring and forecasting",
            "Diversify revenue streams to reduce business risk",
            "Build emergency reserves covering 3-6 months of expenses",
            "Continue providing comprehensive financial documentation"
            if has_statements
            else "Submit profit & loss statements and balance sheets for better assessment",
        ),
        detailed_analysis=DetailedAnalysis.from_score(score),
    )


def _has_core_statements(results: Sequence[DocumentAnalysisResult]) -> bool:
    return any(result.document_type in CORE_FINANCIAL_TYPES for result in results)


def _summary(score: int, total: int, succeeded: int, has_statements: bool) -> str:
    if score >= 70:
        strength = "strong"
    elif score >= 60:
        strength = "moderate"
    else:
        strength = "limited"
    coverage = (
        "Financial statements were provided for comprehensive analysis."
        if has_statements
        else "Additional financial statements would improve assessment accuracy."
    )
    return (
        f"Based on analysis of {total} documents ({succeeded} successfully processed), "
        f"the credit profile shows {strength} financial indicators. {coverage}"
    )
