from dataclasses import dataclass
from enum import Enum

from credit_analyzer.analysis.models import CreditReport


class Step(str, Enum):
    """Event ``step`` values seen by the caller."""

    INITIALIZATION = "initialization"
    PROCESSING = "processing"
    ANALYSIS = "analysis"
    FINALIZATION = "finalization"
    COMPLETE = "complete"
    RESULT = "result"
    ERROR = "error"

    @property
    def is_terminal(self) -> bool:
        return self in (Step.RESULT, Step.ERROR)


class Phase(Enum):
    """Percentage range reserved for each stage of a request."""

    INITIALIZATION = (0, 10)
    PROCESSING = (10, 70)
    ANALYSIS = (70, 95)
    FINALIZATION = (95, 100)

    @property
    def start(self) -> int:
        return self.value[0]

    @property
    def end(self) -> int:
        return self.value[1]


@dataclass(frozen=True)
class ProgressEvent:
    """One frame of the progress stream.

    Non-terminal events carry a ``message``; the terminal ``result`` event
    carries the report and the terminal ``error`` event an error string.
    """

    step: Step
    progress: int
    message: str | None = None
    result: CreditReport | None = None
    error: str | None = None

    @property
    def is_terminal(self) -> bool:
        return self.step.is_terminal

    def to_dict(self) -> dict[str, object]:
        data: dict[str, object] = {"step": self.step.value, "progress": self.progress}
        if self.message is not None:
            data["message"] = self.message
        if self.result is not None:
            data["result"] = self.result.to_dict()
        if self.error is not None:
            data["error"] = self.error
        return data
