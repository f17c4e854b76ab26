from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse
from regional_checkout.utils.rate_limit import rate_limit_health_info

router = APIRouter(prefix="/health", tags=["Health"])

@router.get("")
def health_root():
    return {"ok": True}

@router.get("/sessions")
def health_sessions(request: Request):
    store = getattr(request.app.state, "session_store", None)
    return JSONResponse({
        "sessions": store.describe() if store is not None else None,
        "rate_limit": rate_limit_health_info(request),
    })
