import logging
import logging.config

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from graphgarden.models.graph import PROTOCOL_VERSION
from graphgarden.routers.build import limiter, router as build_router
from graphgarden.routers.friends import router as friends_router
from graphgarden.routers.graph import router as graph_router

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "json": {
            "format": '{"time": "%(asctime)s", "level": "%(levelname)s", "logger": "%(name)s", "message": "%(message)s"}',
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "json",
        },
    },
    "root": {"level": "INFO", "handlers": ["console"]},
}

logging.config.dictConfig(LOGGING_CONFIG)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="GraphGarden",
    description="Turns a built static site into a link graph and keeps friend graphs in sync.",
    version=PROTOCOL_VERSION,
)

app.state.limiter = limiter
app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled exception for %s", request.url)
    return JSONResponse(status_code=500, content={"detail": "An unexpected error occurred."})


app.include_router(build_router)
app.include_router(graph_router)
app.include_router(friends_router)


@app.get("/", summary="Health check")
async def root() -> dict:
    return {"message": "Hello from GraphGarden", "protocol_version": PROTOCOL_VERSION}
