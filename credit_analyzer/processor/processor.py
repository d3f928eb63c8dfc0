import asyncio
from collections.abc import AsyncIterator, Sequence
from pathlib import Path

import httpx

from credit_analyzer.analysis.aggregator import CreditReportAggregator
from credit_analyzer.analysis.document_analyzer import DocumentAnalyzer
from credit_analyzer.config.settings import Settings
from credit_analyzer.documents.exceptions import DocumentError
from credit_analyzer.documents.models import ProcessedDocument, UploadedFile
from credit_analyzer.documents.normalizer import DocumentNormalizer
from credit_analyzer.inference.base import BaseModelGateway
from credit_analyzer.inference.models import GatewayConfig
from credit_analyzer.inference.ollama_gateway import OllamaGateway
from credit_analyzer.logging.logger import Log
from credit_analyzer.pdf.decryptor import PdfDecryptor
from credit_analyzer.pdf.factory import PdfRendererFactory
from credit_analyzer.processor.cleanup import CleanupTask
from credit_analyzer.processor.exceptions import NoDocumentsProcessedError
from credit_analyzer.processor.file_loader import UploadStore
from credit_analyzer.progress.models import Phase, ProgressEvent, Step
from credit_analyzer.progress.stream import ProgressStream, phase_progress


class AnalysisProcessor:
    """Runs one analysis request end to end.

    Pipeline: connectivity check -> normalize each file -> ensure model ->
    analyze each document -> aggregate. Files, documents and pages are
    handled strictly one at a time.
    """

    def __init__(
        self,
        *,
        upload_store: UploadStore,
        normalizer: DocumentNormalizer,
        gateway: BaseModelGateway,
        analyzer: DocumentAnalyzer,
        aggregator: CreditReportAggregator,
        cleanup_delay_seconds: float = 5.0,
    ) -> None:
        self._upload_store = upload_store
        self._normalizer = normalizer
        self._gateway = gateway
        self._analyzer = analyzer
        self._aggregator = aggregator
        self._cleanup_delay_seconds = cleanup_delay_seconds

    @property
    def gateway(self) -> BaseModelGateway:
        return self._gateway

    async def run(self, files: Sequence[UploadedFile]) -> AsyncIterator[ProgressEvent]:
        """Yield progress events, always ending with one result or error event."""
        stream = ProgressStream()
        Log.info(f"Starting analysis of {len(files)} files")
        try:
            async for event in self._pipeline(files, stream):
                yield event
        except Exception as exc:
            Log.exception(f"Analysis failed: {exc}")
            yield stream.error(str(exc))

    def cleanup_task(self, files: Sequence[UploadedFile]) -> CleanupTask:
        """Removal of uploaded originals and every derived artifact."""
        paths: list[Path] = []
        for file in files:
            paths.append(self._upload_store.resolve(file))
            paths.extend(self._normalizer.temp_paths_for(file.id))
        return CleanupTask(
            paths,
            delay_seconds=self._cleanup_delay_seconds,
            roots=(self._upload_store.root, self._normalizer.temp_dir),
        )

    async def _pipeline(
        self, files: Sequence[UploadedFile], stream: ProgressStream
    ) -> AsyncIterator[ProgressEvent]:
        yield stream.update(Step.INITIALIZATION, 5, "Checking AI service connection...")
        await self._gateway.check_connectivity()

        yield stream.update(
            Step.PROCESSING, Phase.PROCESSING.start, "Starting document processing..."
        )
        documents: list[ProcessedDocument] = []
        total_files = len(files)
        for index, file in enumerate(files):
            done = phase_progress(Phase.PROCESSING, index + 1, total_files)
            yield stream.update(
                Step.PROCESSING,
                phase_progress(Phase.PROCESSING, index + 0.5, total_files),
                f"Processing {file.original_name}...",
            )
            path = self._upload_store.resolve(file)
            if not path.is_file():
                Log.warning(f"File not found: {path}")
                yield stream.update(Step.PROCESSING, done, f"File not found: {file.original_name}")
                continue
            try:
                document = await asyncio.to_thread(self._normalizer.normalize, path, file)
            except DocumentError as exc:
                Log.warning(f"Skipping {file.original_name}: {exc}")
                yield stream.update(
                    Step.PROCESSING, done, f"Error processing {file.original_name}: {exc}"
                )
                continue
            documents.append(document)
            yield stream.update(
                Step.PROCESSING, done, f"Completed processing {file.original_name}"
            )

        if not documents:
            raise NoDocumentsProcessedError("No documents could be processed successfully")

        yield stream.update(Step.ANALYSIS, Phase.ANALYSIS.start, "Analyzing documents with AI...")
        if not await self._aggregator.is_model_available():
            yield stream.update(
                Step.ANALYSIS,
                Phase.ANALYSIS.start,
                "Downloading AI model (this may take a few minutes)...",
            )
            await self._aggregator.install_model()

        results = []
        total_documents = len(documents)
        for index, document in enumerate(documents):
            yield stream.update(
                Step.ANALYSIS,
                phase_progress(Phase.ANALYSIS, index, total_documents),
                f"Analyzing {document.original_name}...",
            )
            results.append(await self._analyzer.analyze(document))

        yield stream.update(
            Step.FINALIZATION, Phase.FINALIZATION.start, "Generating credit recommendation..."
        )
        report = await self._aggregator.aggregate(results, [doc.type for doc in documents])

        yield stream.update(Step.COMPLETE, Phase.FINALIZATION.end, "Analysis complete!")
        yield stream.result(report)


def gateway_config_from_settings(settings: Settings) -> GatewayConfig:
    return GatewayConfig(
        base_url=settings.ollama_base_url,
        model=settings.ollama_model,
        max_retries=settings.inference_max_retries,
        retry_delay_seconds=settings.inference_retry_delay_seconds,
        connect_timeout_seconds=settings.inference_connect_timeout_seconds,
        image_timeout_seconds=settings.inference_image_timeout_seconds,
        report_timeout_seconds=settings.inference_report_timeout_seconds,
    )


def build_processor(
    settings: Settings,
    transport: httpx.AsyncBaseTransport | None = None,
) -> AnalysisProcessor:
    """Build an AnalysisProcessor with all required adapters."""
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    settings.temp_dir.mkdir(parents=True, exist_ok=True)

    gateway = OllamaGateway(gateway_config_from_settings(settings), transport=transport)
    normalizer = DocumentNormalizer(
        renderer=PdfRendererFactory.create(settings),
        decryptor=PdfDecryptor(),
        temp_dir=settings.temp_dir,
        dpi=settings.pdf_render_dpi,
    )
    return AnalysisProcessor(
        upload_store=UploadStore(uploads_root=settings.uploads_dir),
        normalizer=normalizer,
        gateway=gateway,
        analyzer=DocumentAnalyzer(gateway),
        aggregator=CreditReportAggregator(gateway),
        cleanup_delay_seconds=settings.cleanup_delay_seconds,
    )
