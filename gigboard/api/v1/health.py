from fastapi import APIRouter, Request

from gigboard.core.config import get_settings

router = APIRouter()


@router.get("/health")
async def health(request: Request):
    return {
        "status": "ok",
        "service": get_settings().app_name,
        "request_id": getattr(request.state, "request_id", None),
    }
