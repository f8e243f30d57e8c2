import asyncio
from types import MappingProxyType
from typing import Awaitable, Callable, Dict, List, Mapping, Optional, TypeVar
from urllib.parse import quote

from satoru.config.settings import settings
from satoru.models.anime import AnimeInfo, EpisodeList, SearchPage, Server, VideoSource
from satoru.scrapers.extractors import (
    parse_anime_info, parse_episode_list, parse_episode_servers,
    parse_movie_id, parse_search_results, unwrap_ajax_html
)
from satoru.services.stream import StreamResolver
from satoru.utils.cache import TTLCache
from satoru.utils.exceptions import SatoruError, UpstreamDataError
from satoru.utils.helpers import create_cache_key
from satoru.utils.http_client import HTTPClient, http_client
from satoru.utils.logger import scraper_logger

T = TypeVar("T")

# ===========================
# Satoru Scraper Class
# ===========================
class SatoruScraper:

    def __init__(self, base_url: Optional[str] = None, client: Optional[HTTPClient] = None,
                 cache: Optional[TTLCache] = None, resolver: Optional[StreamResolver] = None,
                 cache_ttl: Optional[int] = None):
        self.base_url = (base_url or settings.SATORU_URL).rstrip("/")
        self.client = client or http_client
        self.cache = cache if cache is not None else TTLCache()
        self.resolver = resolver or StreamResolver(self.base_url, self.client)
        self.cache_ttl = cache_ttl if cache_ttl is not None else settings.CACHE_TTL
        self.headers: Mapping[str, str] = MappingProxyType({"User-Agent": settings.USER_AGENT})

    # ===========================
    # Request State
    # ===========================
    def watch_url(self, anime_id: str, episode_id: Optional[str] = None) -> str:
        url = f"{self.base_url}/watch/{quote(str(anime_id))}"
        if episode_id is not None:
            url += f"?ep={episode_id}"
        return url

    def request_headers(self, referer: Optional[str] = None) -> Mapping[str, str]:
        headers: Dict[str, str] = dict(self.headers)
        if referer:
            headers["Referer"] = referer
        return MappingProxyType(headers)

    async def _cached(self, key: str, operation: str, compute: Callable[[], Awaitable[T]]) -> T:
        async def guarded() -> T:
            try:
                return await compute()
            except SatoruError as e:
                scraper_logger.error(f"{operation} failed: {e.message}")
                raise

        return await self.cache.get_or_set(key, self.cache_ttl, guarded)

    # ===========================
    # Search
    # ===========================
    async def search(self, query: str, page: int = 1) -> SearchPage:
        async def compute() -> SearchPage:
            scraper_logger.debug(f"Searching: '{query}' (page {page})")
            html = await self.client.get_text(
                f"{self.base_url}/filter",
                headers=self.headers,
                params={"keyword": query, "page": page}
            )
            result = parse_search_results(html, current_page=page, base_url=self.base_url)
            scraper_logger.debug(f"Search '{query}': {len(result.results)} results")
            return result

        return await self._cached(create_cache_key("search", query, page), "Search", compute)

    # ===========================
    # Anime Info
    # ===========================
    async def get_anime_info(self, anime_id: str) -> AnimeInfo:
        async def compute() -> AnimeInfo:
            html = await self.client.get_text(self.watch_url(anime_id), headers=self.headers)
            return parse_anime_info(html, anime_id, base_url=self.base_url)

        return await self._cached(create_cache_key("info", anime_id), "Anime info", compute)

    # ===========================
    # Episodes
    # ===========================
    async def get_episodes(self, anime_id: str) -> EpisodeList:
        async def compute() -> EpisodeList:
            payload = await self.client.get_json(
                f"{self.base_url}/ajax/episode/list/{quote(str(anime_id))}",
                headers=self.headers
            )
            episodes = parse_episode_list(unwrap_ajax_html(payload, "episodes list", require_html=True))
            scraper_logger.debug(f"Anime {anime_id}: {episodes.total_episodes} episodes")
            return episodes

        return await self._cached(create_cache_key("episodes", anime_id), "Episodes", compute)

    async def get_episode_servers(self, episode_id: str,
                                  headers: Optional[Mapping[str, str]] = None) -> List[Server]:
        async def compute() -> List[Server]:
            payload = await self.client.get_json(
                f"{self.base_url}/ajax/episode/servers",
                headers=headers or self.headers,
                params={"episodeId": episode_id}
            )
            return parse_episode_servers(unwrap_ajax_html(payload, "servers"))

        return await self._cached(create_cache_key("servers", episode_id), "Episode servers", compute)

    # ===========================
    # Video Sources
    # ===========================
    async def get_video_sources(self, anime_id: str, episode_id: str) -> List[VideoSource]:
        async def compute() -> List[VideoSource]:
            headers = self.request_headers(referer=self.watch_url(anime_id, episode_id))

            servers = await self.get_episode_servers(episode_id, headers=headers)
            if not servers:
                raise UpstreamDataError("No servers found")

            tasks = [self.resolver.resolve(server.id, headers) for server in servers]
            results = await asyncio.gather(*tasks, return_exceptions=True)

            sources: List[VideoSource] = []
            for server, result in zip(servers, results):
                if isinstance(result, list):
                    sources.extend(result)
                elif isinstance(result, Exception):
                    scraper_logger.warning(f"Failed to get source from server {server.id}: {result}")
                elif isinstance(result, BaseException):
                    raise result

            scraper_logger.debug(f"Episode {episode_id}: {len(sources)} sources from {len(servers)} servers")
            return sources

        return await self._cached(create_cache_key("sources", anime_id, episode_id), "Video sources", compute)

    # ===========================
    # Anime Id Lookup
    # ===========================
    async def get_satoru_anime_id(self, title: str) -> int:
        try:
            html = await self.client.get_text(self.watch_url(title), headers=self.headers)
            return parse_movie_id(html)
        except SatoruError as e:
            scraper_logger.error(f"Anime id lookup failed for '{title}': {e.message}")
            raise


satoru_scraper = SatoruScraper()
