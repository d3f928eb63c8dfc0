from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse, StreamingResponse
from starlette.background import BackgroundTask

from credit_analyzer.api.schemas import AnalyzeRequest
from credit_analyzer.api.sse import sse_frames
from credit_analyzer.documents.models import is_safe_document_id
from credit_analyzer.processor.processor import AnalysisProcessor

router = APIRouter(prefix="/api", tags=["analyze"])

SSE_HEADERS = {
    "Cache-Control": "no-cache",
    "Connection": "keep-alive",
}


@router.post("/analyze", response_model=None)
async def analyze_documents(
    payload: AnalyzeRequest, request: Request
) -> StreamingResponse | JSONResponse:
    if not payload.files:
        return JSONResponse(status_code=400, content={"error": "No files provided for analysis"})
    ids = [reference.id for reference in payload.files]
    if not all(is_safe_document_id(file_id) for file_id in ids):
        return JSONResponse(status_code=400, content={"error": "Invalid file id"})
    if len(set(ids)) != len(ids):
        return JSONResponse(status_code=400, content={"error": "Duplicate file id"})

    processor: AnalysisProcessor = request.app.state.processor
    files = [reference.to_uploaded_file() for reference in payload.files]
    cleanup = processor.cleanup_task(files)
    return StreamingResponse(
        sse_frames(processor.run(files)),
        media_type="text/event-stream",
        headers=SSE_HEADERS,
        background=BackgroundTask(cleanup.run),
    )
