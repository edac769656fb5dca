from fastapi import FastAPI, Request
from api.availability import router as availability_router
from api.bookings import router as bookings_router
from api.marketplace import router as marketplace_router
from api.planning import router as planning_router
from api.risk import router as risk_router
from api.healthcheck import router as healthcheck_router
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from fastapi.openapi.utils import get_openapi
from dotenv import load_dotenv
from pathlib import Path
from typing import Optional
import os

from config.paths import DEFAULT_SEED_PATH
from planning.container import PlanningServices, build_services
from utils.loader import load_seed
from utils.logger import logger as app_logger

load_dotenv()
# env
SEED_PATH = Path(os.getenv("SEED_PATH", str(DEFAULT_SEED_PATH)))
CORS_ALLOW_ORIGINS = [o for o in os.getenv("CORS_ALLOW_ORIGINS", "").split(",") if o]
ALLOWED_HOSTS = [h for h in os.getenv("ALLOWED_HOSTS", "").split(",") if h] or ["*"]
MAX_BODY_BYTES = int(os.getenv("MAX_BODY_BYTES", "0"))  # 0 = no limit


def default_services() -> PlanningServices:
    """In-memory repository filled from SEED_PATH when that file exists."""
    if SEED_PATH.exists():
        return build_services(load_seed(SEED_PATH))
    app_logger.warning(f"Seed file {SEED_PATH} not found; starting with an empty repository")
    return build_services()


def create_app(services: Optional[PlanningServices] = None) -> FastAPI:
    app = FastAPI(title="Planning API")
    app.state.services = services if services is not None else default_services()

    # middlewares
    if os.getenv("ENABLE_CORS") == "true":
        app.add_middleware(
            CORSMiddleware,
            allow_origins=CORS_ALLOW_ORIGINS,
            allow_credentials=True,
            allow_methods=["*"],
            allow_headers=["*"],
        )

    # allowed hosts
    app.add_middleware(TrustedHostMiddleware, allowed_hosts=ALLOWED_HOSTS)

    # basic request size guard (blocks large JSON bodies early)
    @app.middleware("http")
    async def limit_body_size(request: Request, call_next):
        if MAX_BODY_BYTES > 0:
            cl = request.headers.get("content-length")
            if cl and cl.isdigit() and int(cl) > MAX_BODY_BYTES:
                return JSONResponse(
                    status_code=413, content={"detail": "Payload too large"}
                )
        return await call_next(request)

    def custom_openapi():
        if app.openapi_schema:
            return app.openapi_schema
        app.openapi_schema = get_openapi(
            title=app.title,
            version=app.version,
            description="Setup and operator planning API",
            routes=app.routes,
        )
        return app.openapi_schema

    app.openapi = custom_openapi

    # Register routers
    app.include_router(availability_router, prefix="/api")
    app.include_router(bookings_router, prefix="/api")
    app.include_router(marketplace_router, prefix="/api")
    app.include_router(planning_router, prefix="/api")
    app.include_router(risk_router, prefix="/api")
    app.include_router(healthcheck_router, prefix="/api")

    app_logger.info("Planning API ready")
    return app


app = create_app()
