from fastapi import APIRouter, Request

router = APIRouter(prefix="/health", tags=["Health Check"])


@router.get("/check", summary="Health Check")
def healthcheck(request: Request):
    services = getattr(request.app.state, "services", None)
    sync_status = services.projection.monitor()["syncStatus"] if services else "not_started"
    return {"status": "ok", "projection": sync_status}
