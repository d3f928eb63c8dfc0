"""Single-consumer progress stream with an enforced terminal-event contract."""

from credit_analyzer.analysis.models import CreditReport, round_half_up
from credit_analyzer.logging.logger import Log
from credit_analyzer.progress.exceptions import ProgressStreamClosedError
from credit_analyzer.progress.models import Phase, ProgressEvent, Step


def phase_progress(phase: Phase, done: float, total: int) -> int:
    """Linearly place ``done`` of ``total`` units inside a phase's range."""
    if total <= 0:
        return phase.start
    fraction = min(max(done / total, 0.0), 1.0)
    return round_half_up(phase.start + fraction * (phase.end - phase.start))


class ProgressStream:
    """Builds the ordered events for one analysis request.

    Percentages never decrease: a value lower than the last emitted one is
    raised to it. Exactly one terminal event (``result`` or ``error``) may
    be produced, after which every emission raises.
    """

    def __init__(self) -> None:
        self._last_progress = 0
        self._terminated = False

    @property
    def terminated(self) -> bool:
        return self._terminated

    @property
    def last_progress(self) -> int:
        return self._last_progress

    def update(self, step: Step, progress: int, message: str) -> ProgressEvent:
        if step.is_terminal:
            raise ValueError(f"Use result() or error() for terminal step '{step.value}'")
        event = ProgressEvent(step=step, progress=self._advance(progress), message=message)
        Log.info(f"Progress: {step.value} - {event.progress}% - {message}")
        return event

    def result(self, report: CreditReport) -> ProgressEvent:
        progress = self._advance(100)
        self._terminate()
        return ProgressEvent(step=Step.RESULT, progress=progress, result=report)

    def error(self, message: str) -> ProgressEvent:
        self._terminate()
        return ProgressEvent(step=Step.ERROR, progress=self._last_progress, error=message)

    def _advance(self, progress: int) -> int:
        self._ensure_open()
        bounded = max(0, min(100, progress))
        self._last_progress = max(self._last_progress, bounded)
        return self._last_progress

    def _terminate(self) -> None:
        self._ensure_open()
        self._terminated = True

    def _ensure_open(self) -> None:
        if self._terminated:
            raise ProgressStreamClosedError("Progress stream already ended")
