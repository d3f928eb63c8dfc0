from pathlib import Path

from credit_analyzer.documents.models import UploadedFile


def stored_file_path(uploads_root: Path, filename: str) -> Path:
    """Build path to a stored upload: {uploads_root}/{basename(filename)}"""
    return uploads_root / Path(filename).name


class UploadStore:
    """Resolves where the upload endpoint stored a referenced file."""

    UPLOADS_ROOT = Path("uploads")

    def __init__(self, uploads_root: Path | None = None) -> None:
        self._uploads_root = uploads_root if uploads_root is not None else self.UPLOADS_ROOT

    @property
    def root(self) -> Path:
        return self._uploads_root

    def resolve(self, file: UploadedFile) -> Path:
        """Return the on-disk location of ``file``.

        Only the stored file name is trusted; any directory part sent by
        the caller is discarded.
        """
        return stored_file_path(self._uploads_root, file.filename)

    def exists(self, file: UploadedFile) -> bool:
        return self.resolve(file).is_file()
