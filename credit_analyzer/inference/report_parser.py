"""Parses and validates the model's structured credit report response."""

import json
import math
from typing import Any

from credit_analyzer.analysis.models import (
    CreditAssessment,
    CreditRating,
    DetailedAnalysis,
    clamp_score,
)
from credit_analyzer.inference.exceptions import MalformedReportError

_SUB_SCORE_KEYS = {
    "financialHealth": "financial_health",
    "cashFlow": "cash_flow",
    "debtRatio": "debt_ratio",
    "profitability": "profitability",
}


def parse_report(raw: str) -> CreditAssessment:
    """Turn a raw model response into a CreditAssessment.

    The score is clamped into [0, 100] and the rating is always recomputed
    from the score, so a model that disagrees with its own number cannot
    produce an inconsistent report.

    Raises:
        MalformedReportError: if the response is not a JSON object with a
            numeric score and non-empty rating and summary.
    """
    data = _parse_json(raw)
    score = _build_score(data.get("score"))
    _require_text(data, "rating")
    summary = _require_text(data, "summary")
    return CreditAssessment(
        score=score,
        rating=CreditRating.from_score(score),
        summary=summary,
        strengths=_build_text_list(data.get("strengths")),
        risk_factors=_build_text_list(data.get("riskFactors")),
        recommendations=_build_text_list(data.get("recommendations")),
        detailed_analysis=_build_detailed_analysis(data.get("detailedAnalysis"), score),
    )


def strip_code_fences(raw: str) -> str:
    cleaned = raw.strip()
    if cleaned.startswith("```"):
        lines = cleaned.splitlines()
        if lines and lines[0].startswith("```"):
            lines = lines[1:]
        if lines and lines[-1].strip() == "```":
            lines = lines[:-1]
        cleaned = "\n".join(lines).strip()
    return cleaned


def _parse_json(raw: str) -> dict[str, Any]:
    try:
        parsed = json.loads(strip_code_fences(raw))
    except json.JSONDecodeError as exc:
        raise MalformedReportError(f"Invalid JSON response: {exc}") from exc
    if not isinstance(parsed, dict):
        raise MalformedReportError("JSON response must be an object")
    return parsed


def _build_score(raw: Any) -> int:
    if not _is_number(raw):
        raise MalformedReportError("'score' must be a number")
    return clamp_score(raw)


def _require_text(data: dict[str, Any], key: str) -> str:
    value = data.get(key)
    if not isinstance(value, str) or not value.strip():
        raise MalformedReportError(f"'{key}' must be a non-empty string")
    return value.strip()


def _build_text_list(raw: Any) -> tuple[str, ...]:
    if not isinstance(raw, list):
        return ()
    return tuple(item.strip() for item in raw if isinstance(item, str) and item.strip())


def _build_detailed_analysis(raw: Any, score: int) -> DetailedAnalysis:
    defaults = DetailedAnalysis.from_score(score)
    if not isinstance(raw, dict):
        return defaults
    values: dict[str, int] = {}
    for wire_key, field_name in _SUB_SCORE_KEYS.items():
        value = raw.get(wire_key)
        if not _is_number(value):
            values[field_name] = getattr(defaults, field_name)
        else:
            values[field_name] = clamp_score(value)
    return DetailedAnalysis(**values)


def _is_number(value: Any) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    return math.isfinite(value)
