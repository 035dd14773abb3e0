import logging
from pathlib import Path

from fastapi import APIRouter, HTTPException, Request

from graphgarden.config import get_settings, load_config
from graphgarden.errors import ConfigError, DocumentDecodeError
from graphgarden.models.cache import FetchCache
from graphgarden.models.sync_response import FriendStatus, SyncResponse
from graphgarden.routers.build import limiter
from graphgarden.services.builder import read_public_file
from graphgarden.services.friends import compile_graph, load_compiled, sync_friends, write_compiled

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/friends/sync",
    response_model=SyncResponse,
    summary="Fetch friend graphs and compile them",
    description=(
        "Fetches `.well-known/graphgarden.json` from every configured friend, skips "
        "friends whose `generated_at` is unchanged since the last sync, and writes "
        "`.well-known/graphgarden.compiled.json`.  A failing friend is reported with "
        "status `error` and does not abort the others."
    ),
)
@limiter.limit("5/minute")
async def sync_endpoint(request: Request) -> SyncResponse:
    settings = get_settings()
    try:
        config = load_config(settings.config_path)
    except ConfigError as exc:
        logger.error("Cannot load config: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    output_dir = Path(config.output.dir)
    try:
        own = read_public_file(output_dir)
        cache = FetchCache.load(settings.cache_path)
        previous = load_compiled(output_dir)
    except FileNotFoundError:
        raise HTTPException(status_code=409, detail="Run /build before syncing friends.")
    except DocumentDecodeError as exc:
        logger.error("Cannot sync friends: %s", exc)
        raise HTTPException(status_code=500, detail=str(exc))

    report = await sync_friends(config.friends, cache, previous)
    cache.save(settings.cache_path)
    compiled = compile_graph(own, report.graphs)
    write_compiled(compiled, output_dir)

    return SyncResponse(
        compiled_at=compiled.compiled_at,
        friends_synced=len(report.graphs),
        friends=[FriendStatus(**result._asdict()) for result in report.results],
    )
