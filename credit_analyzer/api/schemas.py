from pydantic import BaseModel, ConfigDict, Field

from credit_analyzer.documents.models import DocumentType, UploadedFile


class FileReference(BaseModel):
    """A stored upload as returned by /api/upload and sent back to /api/analyze."""

    model_config = ConfigDict(populate_by_name=True)

    id: str
    original_name: str = Field(alias="originalName")
    filename: str
    path: str = ""
    size: int = 0
    mimetype: str
    type: str = DocumentType.OTHER.value

    @classmethod
    def from_uploaded_file(cls, file: UploadedFile) -> "FileReference":
        return cls(
            id=file.id,
            original_name=file.original_name,
            filename=file.filename,
            path=file.path,
            size=file.size,
            mimetype=file.mime_type,
            type=file.type.value,
        )

    def to_uploaded_file(self) -> UploadedFile:
        return UploadedFile(
            id=self.id,
            original_name=self.original_name,
            filename=self.filename,
            path=self.path,
            size=self.size,
            mime_type=self.mimetype,
            type=DocumentType.parse(self.type),
        )


class UploadResponse(BaseModel):
    success: bool
    files: list[FileReference]
    message: str


class AnalyzeRequest(BaseModel):
    files: list[FileReference] = Field(default_factory=list)


class OllamaStatus(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    connected: bool
    url: str
    model_available: bool | None = Field(default=None, alias="modelAvailable")
    error: str | None = None


class HealthResponse(BaseModel):
    status: str
    timestamp: str
    ollama: OllamaStatus
