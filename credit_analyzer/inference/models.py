from dataclasses import dataclass
from pathlib import Path


@dataclass(frozen=True)
class PageAnalysisResult:
    """Model output for a single rendered page.

    Exactly one of ``analysis`` and ``error`` is set.
    """

    page: int
    image_path: Path
    analysis: str | None = None
    error: str | None = None

    def __post_init__(self) -> None:
        if (self.analysis is None) == (self.error is None):
            raise ValueError("PageAnalysisResult needs exactly one of analysis or error")

    @property
    def success(self) -> bool:
        return self.error is None

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {
            "page": self.page,
            "imagePath": str(self.image_path),
            "success": self.success,
        }
        if self.analysis is not None:
            data["analysis"] = self.analysis
        if self.error is not None:
            data["error"] = self.error
        return data


@dataclass(frozen=True)
class GatewayConfig:
    """Connection and retry parameters for the inference backend."""

    base_url: str = "http://localhost:11434"
    model: str = "qwen2.5vl:7b"
    max_retries: int = 3
    retry_delay_seconds: float = 2.0
    connect_timeout_seconds: float = 5.0
    image_timeout_seconds: float = 120.0
    report_timeout_seconds: float = 180.0
    pull_timeout_seconds: float | None = None

    @property
    def max_attempts(self) -> int:
        return self.max_retries + 1
