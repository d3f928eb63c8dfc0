from datetime import datetime, timezone

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from credit_analyzer.api.schemas import HealthResponse, OllamaStatus
from credit_analyzer.inference.base import BaseModelGateway
from credit_analyzer.inference.exceptions import ConnectivityError

router = APIRouter(tags=["health"])


@router.get("/health", response_model=HealthResponse)
async def health(request: Request) -> JSONResponse:
    gateway: BaseModelGateway = request.app.state.gateway
    url: str = request.app.state.settings.ollama_base_url
    timestamp = datetime.now(timezone.utc).isoformat()
    try:
        await gateway.check_connectivity()
    except ConnectivityError as exc:
        body = HealthResponse(
            status="ERROR",
            timestamp=timestamp,
            ollama=OllamaStatus(connected=False, url=url, error=str(exc)),
        )
        return JSONResponse(
            status_code=503, content=body.model_dump(by_alias=True, exclude_none=True)
        )
    body = HealthResponse(
        status="OK",
        timestamp=timestamp,
        ollama=OllamaStatus(
            connected=True, url=url, model_available=await gateway.is_model_available()
        ),
    )
    return JSONResponse(content=body.model_dump(by_alias=True, exclude_none=True))
