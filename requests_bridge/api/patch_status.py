# requests_bridge/api/patch_status.py
from fastapi import APIRouter, Request

router = APIRouter(prefix="/patch", tags=["patch"])


@router.get("/status")
def patch_status(request: Request):
    """
    Report how far the index.html patch got (read-only, never triggers a patch).
    """
    scheduler = request.app.state.patch_scheduler
    return scheduler.snapshot()
