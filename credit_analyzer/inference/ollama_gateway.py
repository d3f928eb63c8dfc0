"""Client for the Ollama HTTP API: health, model management and generation."""

import asyncio
import base64
import json
from collections.abc import Awaitable, Callable, Mapping, Sequence
from pathlib import Path
from typing import Any

import httpx

from credit_analyzer.analysis.models import CreditAssessment
from credit_analyzer.inference.base import BaseModelGateway
from credit_analyzer.inference.exceptions import (
    ConnectivityError,
    InferenceFailure,
    InstallError,
)
from credit_analyzer.inference.models import GatewayConfig, PageAnalysisResult
from credit_analyzer.inference.prompt_loader import load_prompt_template
from credit_analyzer.inference.report_parser import parse_report
from credit_analyzer.logging.logger import Log

IMAGE_OPTIONS: dict[str, float | int] = {"temperature": 0.1, "top_p": 0.9, "num_predict": 2000}
REPORT_OPTIONS: dict[str, float | int] = {"temperature": 0.2, "top_p": 0.8, "num_predict": 3000}

PAGE_SUFFIX = (
    "\n\nThis is page {page} of {total}. Please analyze this page and extract "
    "relevant financial information. Be specific and detailed in your analysis."
)


class OllamaGateway(BaseModelGateway):
    """Sole client of the inference backend.

    Every call opens a short-lived ``httpx.AsyncClient``; pass ``transport``
    to route requests somewhere other than the network (tests use
    ``httpx.MockTransport``).
    """

    def __init__(
        self,
        config: GatewayConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
        report_prompt_path: Path | None = None,
    ) -> None:
        self._config = config
        self._transport = transport
        self._sleep = sleep
        self._report_template = load_prompt_template(report_prompt_path)

    @property
    def config(self) -> GatewayConfig:
        return self._config

    def _client(self, timeout: float | None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self._config.base_url,
            timeout=timeout,
            transport=self._transport,
        )

    async def check_connectivity(self) -> str:
        Log.info(f"Checking Ollama connection at {self._config.base_url}")
        try:
            async with self._client(self._config.connect_timeout_seconds) as client:
                response = await client.get("/api/version")
                response.raise_for_status()
                version = str(_json_object(response).get("version") or "unknown")
        except (httpx.HTTPError, ValueError) as exc:
            Log.error(f"Failed to connect to Ollama: {exc}")
            raise ConnectivityError(
                f"Cannot connect to Ollama at {self._config.base_url}. "
                "Please ensure Ollama is running and accessible."
            ) from exc
        Log.info(f"Connected to Ollama version {version}")
        return version

    async def is_model_available(self) -> bool:
        try:
            async with self._client(self._config.connect_timeout_seconds) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
                models = _json_object(response).get("models") or []
        except (httpx.HTTPError, ValueError) as exc:
            Log.warning(f"Error checking model availability: {exc}")
            return False
        available = any(self._matches_model(entry) for entry in models)
        Log.info(f"Model {self._config.model} {'is' if available else 'is not'} available")
        return available

    def _matches_model(self, entry: Any) -> bool:
        if not isinstance(entry, dict):
            return False
        name = str(entry.get("name", ""))
        family = self._config.model.split(":", 1)[0]
        return name == self._config.model or name.split(":", 1)[0] == family

    async def install_model(self) -> str:
        Log.info(f"Pulling model {self._config.model}")
        last_status = ""
        try:
            async with self._client(self._config.pull_timeout_seconds) as client:
                async with client.stream(
                    "POST", "/api/pull", json={"name": self._config.model}
                ) as response:
                    response.raise_for_status()
                    async for line in response.aiter_lines():
                        last_status = self._read_pull_line(line, last_status)
        except httpx.HTTPError as exc:
            raise InstallError(f"Failed to pull model {self._config.model}: {exc}") from exc

        if not await self.is_model_available():
            raise InstallError(
                f"Failed to pull model {self._config.model}: "
                "pull completed but model is not available"
            )
        Log.info(f"Model {self._config.model} pulled successfully")
        return last_status

    def _read_pull_line(self, line: str, last_status: str) -> str:
        if not line.strip():
            return last_status
        try:
            data = json.loads(line)
        except json.JSONDecodeError:
            return last_status
        if not isinstance(data, dict):
            return last_status
        if data.get("error"):
            raise InstallError(
                f"Failed to pull model {self._config.model}: {data['error']}"
            )
        status = data.get("status")
        if isinstance(status, str) and status and status != last_status:
            Log.info(f"Model pull status: {status}")
            return status
        return last_status

    async def infer_image(self, image_path: Path, prompt: str) -> str:
        attempts = self._config.max_attempts
        last_error: Exception | None = None
        for attempt in range(1, attempts + 1):
            try:
                return await self._generate_from_image(image_path, prompt)
            except Exception as exc:
                last_error = exc
                Log.warning(
                    f"Error analyzing image {image_path.name} "
                    f"(attempt {attempt}/{attempts}): {exc}"
                )
            if attempt < attempts:
                await self._sleep(self._config.retry_delay_seconds)
        raise InferenceFailure(
            f"Failed to analyze image after {attempts} attempts: {last_error}"
        ) from last_error

    async def _generate_from_image(self, image_path: Path, prompt: str) -> str:
        if not image_path.is_file():
            raise FileNotFoundError(f"Image file not found: {image_path}")
        image_bytes = await asyncio.to_thread(image_path.read_bytes)
        Log.debug(f"Analyzing image {image_path} ({len(image_bytes) // 1024}KB)")
        payload = {
            "model": self._config.model,
            "prompt": prompt,
            "images": [base64.b64encode(image_bytes).decode("ascii")],
            "stream": False,
            "options": IMAGE_OPTIONS,
        }
        return await self._generate(payload, self._config.image_timeout_seconds)

    async def _generate(self, payload: dict[str, Any], timeout: float) -> str:
        async with self._client(timeout) as client:
            response = await client.post("/api/generate", json=payload)
            if response.is_error:
                raise httpx.HTTPStatusError(
                    f"Ollama API error: {response.status_code} - {response.text}",
                    request=response.request,
                    response=response,
                )
            text = _json_object(response).get("response")
        if not isinstance(text, str) or not text:
            raise ValueError("Empty response from Ollama")
        return text

    async def infer_batch(
        self, image_paths: Sequence[Path], prompt: str
    ) -> list[PageAnalysisResult]:
        total = len(image_paths)
        Log.info(f"Starting analysis of {total} page images")
        results: list[PageAnalysisResult] = []
        for page, image_path in enumerate(image_paths, start=1):
            page_prompt = prompt + PAGE_SUFFIX.format(page=page, total=total)
            try:
                analysis = await self.infer_image(image_path, page_prompt)
            except InferenceFailure as exc:
                Log.error(f"Error analyzing page {page}/{total}: {exc}")
                result = PageAnalysisResult(page=page, image_path=image_path, error=str(exc))
            else:
                result = PageAnalysisResult(page=page, image_path=image_path, analysis=analysis)
            results.append(result)

        succeeded = sum(1 for result in results if result.success)
        Log.info(f"Completed analysis: {succeeded}/{total} pages successful")
        return results

    async def infer_report(
        self,
        extracted_data: Sequence[Mapping[str, object]],
        document_types: Sequence[str],
    ) -> CreditAssessment:
        prompt = self._report_template.format(
            document_types=", ".join(document_types),
            extracted_data=json.dumps(list(extracted_data), indent=2, ensure_ascii=False),
        )
        Log.debug(f"Credit report prompt:\n{prompt}")
        payload = {
            "model": self._config.model,
            "prompt": prompt,
            "stream": False,
            "options": REPORT_OPTIONS,
        }
        try:
            raw = await self._generate(payload, self._config.report_timeout_seconds)
        except (httpx.HTTPError, ValueError) as exc:
            raise InferenceFailure(f"Credit report request failed: {exc}") from exc
        Log.debug(f"Credit report raw response:\n{raw}")

        assessment = parse_report(raw)
        Log.info(f"Generated credit analysis: score {assessment.score}")
        return assessment


def _json_object(response: httpx.Response) -> dict[str, Any]:
    data = response.json()
    if not isinstance(data, dict):
        raise ValueError(f"Expected a JSON object from {response.request.url.path}")
    return data
