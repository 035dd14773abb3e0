import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request
from slowapi import Limiter
from slowapi.util import get_remote_address

from graphgarden.config import get_settings, load_config
from graphgarden.errors import ConfigError, GraphGardenError
from graphgarden.models.graph import PublicFile
from graphgarden.services.builder import build_site, write_public_file

logger = logging.getLogger(__name__)

limiter = Limiter(key_func=get_remote_address)
router = APIRouter()


@router.post(
    "/build",
    response_model=PublicFile,
    response_model_exclude_none=True,
    summary="Build the site's link graph",
    description=(
        "Walks the configured output directory, extracts internal and friend links "
        "from every included HTML page, and writes `.well-known/graphgarden.json`.  "
        "The build runs in the worker threadpool."
    ),
)
@limiter.limit("5/minute")
def build_endpoint(request: Request) -> PublicFile:
    settings = get_settings()
    try:
        config = load_config(settings.config_path)
    except ConfigError as exc:
        logger.error("Cannot load config: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    logger.info("Build request received", extra={"output_dir": config.output.dir})

    try:
        document = build_site(config)
    except GraphGardenError as exc:
        logger.warning("Build failed: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))

    write_public_file(document, Path(config.output.dir))
    return document
