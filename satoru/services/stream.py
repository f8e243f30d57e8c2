import re
from typing import List, Mapping, Optional

from satoru.models.anime import VideoSource
from satoru.utils.exceptions import HttpStatusError, ResolutionError
from satoru.utils.http_client import HTTPClient, http_client
from satoru.utils.logger import stream_logger

# ===========================
# Patterns
# ===========================
HLS_MARKER = ".m3u8"
MASTER_PLAYLIST_PATTERN = re.compile(r"""(["'])([^"']*?master\.m3u8[^"']*?)\1""", re.IGNORECASE)


def find_master_playlist(page: str) -> Optional[str]:
    match = MASTER_PLAYLIST_PATTERN.search(page)
    if match and match.group(2):
        return match.group(2)
    return None


# ===========================
# Stream Resolver Class
# ===========================
class StreamResolver:
    """Turns a playback server id into playable sources.

    Single pass, three terminal outcomes: the source link is already an HLS
    manifest, the embed page behind the link names a ``master.m3u8`` in its
    static markup, or the link itself is returned as an embed.
    """

    def __init__(self, base_url: str, client: Optional[HTTPClient] = None):
        self.base_url = base_url.rstrip("/")
        self.client = client or http_client

    async def resolve(self, server_id: str, headers: Optional[Mapping[str, str]] = None) -> List[VideoSource]:
        stream_logger.debug(f"Resolving server {server_id}")

        link = await self._get_source_link(server_id, headers)

        if HLS_MARKER in link:
            stream_logger.debug(f"Server {server_id}: direct HLS")
            return [VideoSource.hls(link)]

        playlist_url = await self._probe_embed_page(link, headers)
        if playlist_url:
            stream_logger.debug(f"Server {server_id}: HLS found in embed page")
            return [VideoSource.hls(playlist_url)]

        stream_logger.debug(f"Server {server_id}: embed fallback")
        return [VideoSource.embed(link)]

    async def _get_source_link(self, server_id: str, headers: Optional[Mapping[str, str]]) -> str:
        payload = await self.client.get_json(
            f"{self.base_url}/ajax/episode/sources",
            headers=headers,
            params={"id": server_id}
        )

        link = payload.get("link") if isinstance(payload, dict) else None
        if not link or not isinstance(link, str):
            raise ResolutionError("no link", server_id=server_id)
        return link

    async def _probe_embed_page(self, link: str, headers: Optional[Mapping[str, str]]) -> Optional[str]:
        try:
            page = await self.client.get_text(link, headers=headers)
        except HttpStatusError as e:
            # error pages are still scanned; transport failures propagate
            stream_logger.debug(f"Embed page {link} answered {e.upstream_status}")
            page = e.body
        return find_master_playlist(page)
