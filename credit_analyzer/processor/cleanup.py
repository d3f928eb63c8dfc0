import asyncio
import shutil
from collections.abc import Iterable
from pathlib import Path

from credit_analyzer.logging.logger import Log


class CleanupTask:
    """Delayed, best-effort removal of a request's transient files.

    Intended to run after the response has been sent. Missing paths and
    deletion errors are logged and ignored; nothing is retried. When
    ``roots`` are given, only paths strictly inside one of them are
    removed.
    """

    def __init__(
        self,
        paths: Iterable[Path],
        delay_seconds: float = 5.0,
        roots: Iterable[Path] = (),
    ) -> None:
        self._paths = list(dict.fromkeys(paths))
        self._delay_seconds = delay_seconds
        self._roots = tuple(root.resolve() for root in roots)

    @property
    def paths(self) -> list[Path]:
        return list(self._paths)

    async def run(self) -> None:
        if self._delay_seconds > 0:
            await asyncio.sleep(self._delay_seconds)
        Log.info(f"Starting cleanup of {len(self._paths)} paths")
        for path in self._paths:
            if not self._is_contained(path):
                Log.warning(f"Cleanup refused path outside managed directories: {path}")
                continue
            await asyncio.to_thread(self._remove, path)
        Log.info("Cleanup completed")

    def _is_contained(self, path: Path) -> bool:
        if not self._roots:
            return True
        resolved = path.resolve()
        return any(root in resolved.parents for root in self._roots)

    @staticmethod
    def _remove(path: Path) -> None:
        try:
            if path.is_dir():
                shutil.rmtree(path)
            elif path.exists():
                path.unlink()
        except OSError as exc:
            Log.debug(f"Cleanup skipped {path}: {exc}")
