"""
Sequential bulk upload with running success/failure counters.

Files are processed one at a time in the given order. A failing file is
recorded and the batch moves on; the summary is reported at the end.
"""
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional, Sequence
import logging

logger = logging.getLogger(__name__)

ProgressCallback = Callable[[int, int], None]


@dataclass
class BulkUploadSummary:
    """Running counters and per-file outcome of a bulk upload."""
    total: int = 0
    success: int = 0
    failed: int = 0
    results: List[Any] = field(default_factory=list)
    errors: List[Dict[str, str]] = field(default_factory=list)

    def as_dict(self) -> Dict[str, Any]:
        return {
            "total": self.total,
            "success": self.success,
            "failed": self.failed,
            "errors": self.errors,
        }


async def run_bulk_upload(
    files: Sequence[Any],
    upload_one: Callable[[int, Any], Awaitable[Any]],
    on_progress: Optional[ProgressCallback] = None,
) -> BulkUploadSummary:
    """
    Upload files strictly sequentially.

    Args:
        files: Files to upload, in order
        upload_one: Coroutine function called as upload_one(position, file);
            its return value is collected on success
        on_progress: Optional callback receiving (current, total) before each file

    Returns:
        BulkUploadSummary: success/failed counters, results and errors
    """
    summary = BulkUploadSummary(total=len(files))

    for position, file in enumerate(files):
        if on_progress is not None:
            on_progress(position + 1, summary.total)

        filename = getattr(file, "filename", None) or f"file_{position}"
        try:
            result = await upload_one(position, file)
        except Exception as e:
            logger.error(f"Failed to upload {filename}: {str(e)}")
            summary.failed += 1
            summary.errors.append({"filename": filename, "error": str(e)})
            continue

        summary.success += 1
        summary.results.append(result)

    if summary.failed:
        logger.warning(f"Bulk upload finished: {summary.success} succeeded, {summary.failed} failed")
    else:
        logger.info(f"Bulk upload finished: {summary.success} succeeded")

    return summary
