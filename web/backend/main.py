from contextlib import asynccontextmanager
from datetime import datetime, timezone

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from loguru import logger

from ytm_proxy import __version__
from ytm_proxy.context import get_app_context
from ytm_proxy.core.config import load_config
from ytm_proxy.services.exceptions import YTMusicProxyError

APP_NAME = "YouTube Music API Proxy"


@asynccontextmanager
async def lifespan(app: FastAPI):
    context = get_app_context()
    context.start()
    logger.info(f"{APP_NAME} serving at {context.config.server.base_url}")
    try:
        yield
    finally:
        context.shutdown()


app = FastAPI(title=APP_NAME, version=__version__, lifespan=lifespan)

# CORS origins come from [server] allowed_origins
allowed_origins = load_config().server.allowed_origins

app.add_middleware(
    CORSMiddleware,
    allow_origins=allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.exception_handler(YTMusicProxyError)
async def proxy_error_handler(request: Request, exc: YTMusicProxyError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error(f"{request.method} {request.url.path} failed: {exc}")
    return JSONResponse(status_code=exc.status_code, content={"error": str(exc)})


# Include routers
from web.backend.routers import music, notifications, player, settings, stream

app.include_router(music.router, prefix="/api", tags=["music"])
app.include_router(stream.router, prefix="/api", tags=["stream"])
app.include_router(player.router, prefix="/api", tags=["player"])
app.include_router(settings.router, prefix="/api", tags=["settings"])
app.include_router(notifications.router, prefix="/api", tags=["notifications"])


def _health() -> dict:
    return {
        "status": "healthy",
        "name": APP_NAME,
        "version": __version__,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }


@app.get("/health")
async def health_check():
    return _health()


@app.get("/api")
async def api_info():
    return _health()
