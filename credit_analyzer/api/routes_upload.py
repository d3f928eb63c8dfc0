import asyncio
import uuid
from pathlib import Path

from fastapi import APIRouter, File, Form, Request, UploadFile
from fastapi.responses import JSONResponse

from credit_analyzer.api.schemas import FileReference, UploadResponse
from credit_analyzer.config.settings import Settings
from credit_analyzer.documents.models import ACCEPTED_MIME_TYPES, DocumentType, UploadedFile
from credit_analyzer.logging.logger import Log

router = APIRouter(prefix="/api", tags=["upload"])

_CHUNK_SIZE = 1024 * 1024


class UploadRejectedError(Exception):
    """Raised when an uploaded file violates the type or size limits."""


def _error(status_code: int, message: str) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"error": message})


@router.post("/upload", response_model=UploadResponse)
async def upload_documents(
    request: Request,
    documents: list[UploadFile] | None = File(default=None),
    document_type: str = Form(default=DocumentType.OTHER.value, alias="type"),
) -> JSONResponse:
    settings: Settings = request.app.state.settings
    if not documents:
        return _error(400, "No files uploaded")
    if len(documents) > settings.max_upload_files:
        return _error(400, f"Too many files (max {settings.max_upload_files})")

    stored: list[UploadedFile] = []
    try:
        for document in documents:
            stored.append(await _store(document, settings, DocumentType.parse(document_type)))
    except UploadRejectedError as exc:
        _discard(stored)
        Log.warning(f"Upload rejected: {exc}")
        return _error(400, str(exc))
    except Exception:
        _discard(stored)
        raise

    Log.info(f"Successfully uploaded {len(stored)} files")
    body = UploadResponse(
        success=True,
        files=[FileReference.from_uploaded_file(file) for file in stored],
        message=f"Successfully uploaded {len(stored)} files",
    )
    return JSONResponse(content=body.model_dump(by_alias=True))


def _discard(stored: list[UploadedFile]) -> None:
    for file in stored:
        Path(file.path).unlink(missing_ok=True)


async def _store(
    upload: UploadFile, settings: Settings, document_type: DocumentType
) -> UploadedFile:
    original_name = Path(upload.filename or "document").name
    mime_type = upload.content_type or ""
    if mime_type not in ACCEPTED_MIME_TYPES:
        raise UploadRejectedError("Invalid file type")

    filename = f"{uuid.uuid4()}-{original_name}"
    target = settings.uploads_dir / filename
    size = 0
    try:
        with target.open("wb") as out:
            while chunk := await upload.read(_CHUNK_SIZE):
                size += len(chunk)
                if size > settings.max_upload_size_bytes:
                    raise UploadRejectedError("File too large")
                await asyncio.to_thread(out.write, chunk)
    except Exception:
        target.unlink(missing_ok=True)
        raise
    finally:
        await upload.close()

    return UploadedFile(
        id=str(uuid.uuid4()),
        original_name=original_name,
        filename=filename,
        path=str(target),
        size=size,
        mime_type=mime_type,
        type=document_type,
    )
