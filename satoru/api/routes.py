from typing import Any, Optional

from fastapi import APIRouter, Query, Path
from fastapi.responses import JSONResponse

from satoru.scrapers.satoru import satoru_scraper
from satoru.utils.logger import api_logger


# ===========================
# Router Instance
# ===========================
router = APIRouter()


# ===========================
# Response Helpers
# ===========================
def success_response(data: Any) -> JSONResponse:
    return JSONResponse(content={"success": True, "data": data})


def error_response(message: str, status_code: int = 500) -> JSONResponse:
    return JSONResponse(status_code=status_code, content={"success": False, "error": message})


# ===========================
# Catalogue Endpoints
# ===========================
@router.get("/search", summary="Search anime", description="Searches the catalogue by keyword")
async def search(
    query: Optional[str] = Query(None, description="Search keyword"),
    page: int = Query(1, ge=1, description="Result page")
):
    if not query or not query.strip():
        return error_response("Query parameter is required", status_code=400)

    api_logger.debug(f"Search: '{query}' (page {page})")
    result = await satoru_scraper.search(query, page)
    return success_response(result.to_json())


@router.get("/info/{anime_id}", summary="Anime info", description="Returns catalogue metadata for an anime")
async def get_anime_info(
    anime_id: str = Path(..., description="Anime identifier")
):
    info = await satoru_scraper.get_anime_info(anime_id)
    return success_response(info.to_json())


@router.get("/episodes/{anime_id}", summary="Episode list", description="Returns the episodes of an anime")
async def get_episodes(
    anime_id: str = Path(..., description="Anime identifier")
):
    episodes = await satoru_scraper.get_episodes(anime_id)
    return success_response(episodes.to_json())


# ===========================
# Playback Endpoints
# ===========================
@router.get("/servers/{episode_id}", summary="Episode servers", description="Returns the playback servers of an episode")
async def get_episode_servers(
    episode_id: str = Path(..., description="Episode identifier")
):
    servers = await satoru_scraper.get_episode_servers(episode_id)
    return success_response([server.to_json() for server in servers])


@router.get("/sources/{anime_id}/{episode_id}", summary="Video sources", description="Resolves every server of an episode into playable sources")
async def get_video_sources(
    anime_id: str = Path(..., description="Anime identifier"),
    episode_id: str = Path(..., description="Episode identifier")
):
    sources = await satoru_scraper.get_video_sources(anime_id, episode_id)
    return success_response([source.to_json() for source in sources])


@router.get("/id/{title}", summary="Anime id lookup", description="Finds the numeric anime id behind a title slug")
async def get_satoru_anime_id(
    title: str = Path(..., description="Anime title slug")
):
    anime_id = await satoru_scraper.get_satoru_anime_id(title)
    return success_response({"id": anime_id})


# ===========================
# Utility Endpoints
# ===========================
@router.get("/health", summary="Health check", description="Liveness probe")
async def health():
    return JSONResponse(content={"status": "ok"})
