import json
from collections.abc import AsyncIterator

from credit_analyzer.progress.models import ProgressEvent


def format_sse(payload: dict[str, object]) -> str:
    """Encode one server-sent event frame."""
    return f"data: {json.dumps(payload, ensure_ascii=False)}\n\n"


async def sse_frames(events: AsyncIterator[ProgressEvent]) -> AsyncIterator[str]:
    """Serialize progress events, stopping right after the terminal event."""
    async for event in events:
        yield format_sse(event.to_dict())
        if event.is_terminal:
            break
