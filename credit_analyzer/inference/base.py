from abc import ABC, abstractmethod
from collections.abc import Mapping, Sequence
from pathlib import Path

from credit_analyzer.analysis.models import CreditAssessment
from credit_analyzer.inference.models import PageAnalysisResult


class BaseModelGateway(ABC):
    """Contract for clients of a vision-and-text inference backend."""

    @abstractmethod
    async def check_connectivity(self) -> str:
        """Return the backend version.

        Raises:
            ConnectivityError: if the backend is unreachable.
        """

    @abstractmethod
    async def is_model_available(self) -> bool:
        """Return whether the configured model is installed. Never raises."""

    @abstractmethod
    async def install_model(self) -> str:
        """Pull the configured model and return the last reported status.

        Raises:
            InstallError: if the pull fails or the model is still missing.
        """

    @abstractmethod
    async def infer_image(self, image_path: Path, prompt: str) -> str:
        """Run one image through the model with bounded retries.

        Raises:
            InferenceFailure: after the last attempt fails.
        """

    @abstractmethod
    async def infer_batch(
        self, image_paths: Sequence[Path], prompt: str
    ) -> list[PageAnalysisResult]:
        """Infer each page in order; failures are recorded per page."""

    @abstractmethod
    async def infer_report(
        self,
        extracted_data: Sequence[Mapping[str, object]],
        document_types: Sequence[str],
    ) -> CreditAssessment:
        """Ask the model for the final structured assessment.

        Raises:
            InferenceFailure: on transport or HTTP errors.
            MalformedReportError: if the response is not a valid assessment.
        """
