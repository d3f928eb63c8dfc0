import json

import pytest

from credit_analyzer.analysis.models import CreditRating
from credit_analyzer.inference.exceptions import MalformedReportError
from credit_analyzer.inference.report_parser import parse_report, strip_code_fences


def _report(**overrides: object) -> str:
    data: dict[str, object] = {
        "score": 85,
        "rating": "Excellent",
        "summary": "Healthy business.",
        "strengths": ["Strong margins"],
        "riskFactors": ["Customer concentration"],
        "recommendations": ["Diversify clients"],
        "detailedAnalysis": {
            "financialHealth": 88,
            "cashFlow": 80,
            "debtRatio": 70,
            "profitability": 90,
        },
    }
    data.update(overrides)
    return json.dumps(data)


class TestStripCodeFences:
    def test_plain_text_unchanged(self) -> None:
        assert strip_code_fences('  {"a": 1} ') == '{"a": 1}'

    def test_json_fence_removed(self) -> None:
        assert strip_code_fences('```json\n{"a": 1}\n```') == '{"a": 1}'

    def test_bare_fence_removed(self) -> None:
        assert strip_code_fences('```\n{"a": 1}\n```') == '{"a": 1}'


class TestParseReport:
    def test_valid_report(self) -> None:
        assessment = parse_report(_report())

        assert assessment.score == 85
        assert assessment.rating is CreditRating.EXCELLENT
        assert assessment.summary == "Healthy business."
        assert assessment.strengths == ("Strong margins",)
        assert assessment.risk_factors == ("Customer concentration",)
        assert assessment.recommendations == ("Diversify clients",)
        assert assessment.detailed_analysis.profitability == 90

    def test_score_is_clamped(self) -> None:
        assert parse_report(_report(score=140, rating="Excellent")).score == 100
        assert parse_report(_report(score=-5, rating="Poor")).score == 0

    def test_fractional_score_rounds_half_up(self) -> None:
        assert parse_report(_report(score=69.5)).score == 70

    def test_zero_score_is_valid(self) -> None:
        assessment = parse_report(_report(score=0, rating="Poor"))
        assert assessment.score == 0
        assert assessment.rating is CreditRating.POOR

    def test_rating_is_recomputed_from_score(self) -> None:
        assessment = parse_report(_report(score=65, rating="Excellent"))
        assert assessment.rating is CreditRating.FAIR

    def test_missing_detailed_analysis_defaults_from_score(self) -> None:
        assessment = parse_report(_report(score=80, detailedAnalysis=None))
        details = assessment.detailed_analysis
        assert (details.financial_health, details.cash_flow) == (72, 64)
        assert (details.debt_ratio, details.profitability) == (68, 60)

    def test_partial_detailed_analysis_fills_missing_keys(self) -> None:
        assessment = parse_report(_report(score=80, detailedAnalysis={"cashFlow": 150}))
        assert assessment.detailed_analysis.cash_flow == 100
        assert assessment.detailed_analysis.financial_health == 72

    def test_non_string_list_items_dropped(self) -> None:
        assessment = parse_report(_report(strengths=["ok", 3, None, "  "]))
        assert assessment.strengths == ("ok",)

    def test_missing_lists_default_to_empty(self) -> None:
        raw = json.dumps({"score": 50, "rating": "Poor", "summary": "Thin file."})
        assessment = parse_report(raw)
        assert assessment.strengths == ()
        assert assessment.recommendations == ()

    @pytest.mark.parametrize(
        "raw",
        [
            "not json at all",
            "[1, 2, 3]",
            _report(score="85"),
            _report(score=True),
            _report(score=None),
            _report(rating=""),
            _report(summary="   "),
        ],
    )
    def test_malformed_reports_raise(self, raw: str) -> None:
        with pytest.raises(MalformedReportError):
            parse_report(raw)
