import time
from datetime import datetime, timezone

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from accelerator.db import ContentRepository, ProgressStore, get_content, get_progress_store

router = APIRouter()

_started = time.monotonic()


@router.get("/health")
async def health(
    request: Request,
    content: ContentRepository = Depends(get_content),
    progress: ProgressStore = Depends(get_progress_store),
) -> JSONResponse:
    body = {
        "status": "ok",
        "timestamp": datetime.now(timezone.utc).isoformat(),
        "uptime": round(time.monotonic() - _started, 3),
        "environment": request.app.state.settings.environment,
    }

    missing = content.missing_files()
    if not progress.path.exists():
        missing.append(progress.path.name)
    if missing:
        body["status"] = "degraded"
        body["missingFiles"] = [{"file": name, "exists": False} for name in missing]

    return JSONResponse(status_code=500 if missing else 200, content=body)
