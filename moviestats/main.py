import logging
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from fastapi_mcp import FastApiMCP

from moviestats.core.config import configure_logging, settings
from moviestats.api.routes.health import router as health_router
from moviestats.api.routes.tmdb import relay_router as tmdb_relay_router
from moviestats.api.routes.tmdb import router as tmdb_router
from moviestats.services.tmdb import TMDBClient


configure_logging(settings.log_level)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    client = TMDBClient.from_settings(settings)
    app.state.tmdb_client = client
    logger.info(
        "tmdb client ready base_url=%s cache_ttl=%ss cache_max_entries=%s",
        client.base_url,
        client.cache_ttl,
        settings.cache_max_entries,
    )
    try:
        yield
    finally:
        await client.aclose()
        app.state.tmdb_client = None


app = FastAPI(title="MovieStats API", version="0.1.0", lifespan=lifespan)

local_cors_origin_regex = (
    r"^https?://(localhost|127\.0\.0\.1)(:\d+)?$"
    if settings.env in {"local", "test"}
    else None
)

@app.exception_handler(Exception)
async def debug_exception_handler(request: Request, exc: Exception):
    if settings.env in {"local", "test"}:
        return PlainTextResponse(
            "".join(traceback.format_exception(type(exc), exc, exc.__traceback__)),
            status_code=500,
        )
    logger.exception("Unhandled exception for %s %s", request.method, request.url.path)
    return PlainTextResponse("Internal Server Error", status_code=500)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list(),
    allow_origin_regex=local_cors_origin_regex,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

app.include_router(health_router)
app.include_router(tmdb_router)
app.include_router(tmdb_relay_router)

mcp = FastApiMCP(app)
mcp.mount_http()
