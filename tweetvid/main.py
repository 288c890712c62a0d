import uuid
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from rich.console import Console

from tweetvid.api import download, extract, health
from tweetvid.config.settings import Config, load_config
from tweetvid.core.errors import ApiError
from tweetvid.core.logging import setup_logging
from tweetvid.i18n import i18n
from tweetvid.infra.rate_limit import MemoryRateLimitBackend, RedisRateLimitBackend
from tweetvid.infra.redis import close_redis, init_redis
from tweetvid.services.dependencies import check_ytdlp
from tweetvid.services.ytdlp import ProcessRunner
from tweetvid.utils.locale import get_locale

console = Console()


@asynccontextmanager
async def lifespan(app: FastAPI):
    config: Config = app.state.config

    redis_client = await init_redis(config.redis)
    if redis_client is not None:
        app.state.rate_limit_backend = RedisRateLimitBackend(redis_client)

    status = await check_ytdlp(ProcessRunner(config.ytdlp), config.ytdlp)
    if status.version:
        console.print(f"[green]✓ yt-dlp {status.version}[/green]")
    else:
        console.print(f"[yellow]⚠ yt-dlp unavailable: {status.error}[/yellow]")

    console.print(f"🚀 Server running on http://{config.server.host}:{config.server.port}")
    console.print("📹 Twitter Video Downloader API ready")
    yield

    await close_redis()


def create_app(config: Optional[Config] = None) -> FastAPI:
    """Build the API around an explicit configuration"""
    config = config or load_config()
    setup_logging(config.logging)
    i18n.default_locale = config.i18n.default_locale

    app = FastAPI(
        title=config.api.title,
        version=config.api.version,
        docs_url="/docs" if config.api.debug else None,
        redoc_url=None,
        lifespan=lifespan,
    )
    app.state.config = config
    app.state.rate_limit_backend = MemoryRateLimitBackend()

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=config.api.cors_origins,
        allow_credentials="*" not in config.api.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def assign_request_id(request: Request, call_next):
        request.state.request_id = uuid.uuid4().hex[:12]
        response = await call_next(request)
        response.headers["X-Request-ID"] = request.state.request_id
        return response

    @app.exception_handler(ApiError)
    async def api_error_handler(request: Request, exc: ApiError):
        return JSONResponse(status_code=exc.status_code, content=exc.to_dict(), headers=exc.headers)

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(request: Request, exc: RequestValidationError):
        locale = get_locale(request.headers.get("accept-language"), config.i18n)
        details = "; ".join(
            f"{'.'.join(str(p) for p in err.get('loc', ()))}: {err.get('msg')}" for err in exc.errors()
        )
        return JSONResponse(
            status_code=400,
            content={"error": i18n.get("error.invalid_body", locale=locale), "details": details},
        )

    # Routes
    app.include_router(health.router, prefix="/api", tags=["Health"])
    app.include_router(extract.router, prefix="/api", tags=["Extract"])
    app.include_router(download.router, prefix="/api", tags=["Download"])

    return app


app = create_app()
