from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from prometheus_fastapi_instrumentator import Instrumentator
from slowapi import Limiter, _rate_limit_exceeded_handler
from slowapi.util import get_remote_address
from slowapi.errors import RateLimitExceeded
from slowapi.middleware import SlowAPIMiddleware

from .config import settings
from .logging import setup_logging, RequestIdMiddleware, structlog
from .workspace import Workspace, build_workspace
from .auth.router import router as auth_router
from .routes.technicians import router as technicians_router
from .routes.orders import router as orders_router
from .routes.settings import router as settings_router
from .routes.sync import router as sync_router


logger = structlog.get_logger(__name__)


def create_app(workspace: Optional[Workspace] = None) -> FastAPI:
    setup_logging()
    app = FastAPI(title=settings.app_name)
    app.state.workspace = workspace or build_workspace(settings)

    # Middlewares
    app.add_middleware(RequestIdMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    limiter = Limiter(key_func=get_remote_address, default_limits=[settings.rate_limit])
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)
    app.add_middleware(SlowAPIMiddleware)

    # Routers
    app.include_router(auth_router)
    app.include_router(technicians_router)
    app.include_router(orders_router)
    app.include_router(settings_router)
    app.include_router(sync_router)

    # Metrics
    if settings.enable_metrics:
        Instrumentator().instrument(app).expose(app)

    @app.get("/healthz")
    def health():
        return {"status": "ok"}

    @app.on_event("startup")
    async def _startup():
        # the start-up pull runs in the background; requests are served meanwhile
        app.state.workspace.sync.start()
        logger.info("startup_complete", environment=settings.environment)

    @app.on_event("shutdown")
    async def _shutdown():
        await app.state.workspace.sync.stop()

    return app


app = create_app()
