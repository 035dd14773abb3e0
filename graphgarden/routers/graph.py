import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException
from fastapi.responses import Response

from graphgarden.config import get_settings, load_config
from graphgarden.errors import ConfigError
from graphgarden.services.builder import PUBLIC_FILE_PATH
from graphgarden.services.friends import COMPILED_FILE_PATH

logger = logging.getLogger(__name__)

router = APIRouter()


def _serve(relative: Path) -> Response:
    try:
        config = load_config(get_settings().config_path)
    except ConfigError as exc:
        logger.error("Cannot load config: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    path = Path(config.output.dir) / relative
    try:
        content = path.read_text(encoding="utf-8")
    except FileNotFoundError:
        raise HTTPException(status_code=404, detail=f"{relative.as_posix()} has not been generated yet.")
    return Response(content=content, media_type="application/json")


@router.get("/.well-known/graphgarden.json", summary="Published link graph")
async def public_file() -> Response:
    return _serve(PUBLIC_FILE_PATH)


@router.get("/.well-known/graphgarden.compiled.json", summary="Own graph plus friend graphs")
async def compiled_file() -> Response:
    return _serve(COMPILED_FILE_PATH)
