from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credit_analyzer.api.routes_analyze import router as analyze_router
from credit_analyzer.api.routes_health import router as health_router
from credit_analyzer.api.routes_upload import router as upload_router
from credit_analyzer.config.settings import Settings
from credit_analyzer.inference.base import BaseModelGateway
from credit_analyzer.inference.exceptions import ConnectivityError
from credit_analyzer.logging.logger import Log
from credit_analyzer.processor.processor import AnalysisProcessor, build_processor


async def check_backend(gateway: BaseModelGateway) -> None:
    """Report backend reachability at startup without blocking it."""
    try:
        await gateway.check_connectivity()
    except ConnectivityError as exc:
        Log.warning(f"Service initialization: {exc}")
        return
    if not await gateway.is_model_available():
        Log.warning("Model not found. It will be downloaded on first analysis.")


def create_app(
    settings: Settings | None = None,
    processor: AnalysisProcessor | None = None,
    check_backend_on_startup: bool = True,
) -> FastAPI:
    """Build the HTTP application around one shared AnalysisProcessor."""
    settings = settings or Settings()
    Log.configure(settings.log_level)
    settings.uploads_dir.mkdir(parents=True, exist_ok=True)
    processor = processor or build_processor(settings)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        Log.info(f"Service startup (env={settings.app_env})")
        if check_backend_on_startup:
            await check_backend(processor.gateway)
        try:
            yield
        finally:
            Log.info("Service shutdown")

    app = FastAPI(title="credit-analyzer", lifespan=lifespan)
    app.state.settings = settings
    app.state.processor = processor
    app.state.gateway = processor.gateway

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.include_router(health_router)
    app.include_router(upload_router)
    app.include_router(analyze_router)
    return app
