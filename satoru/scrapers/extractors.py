import re
from typing import Any, Dict, List, Optional

from pydantic import ValidationError
from selectolax.parser import HTMLParser

from satoru.models.anime import AnimeInfo, Episode, EpisodeList, SearchPage, SearchResultItem, Server
from satoru.scrapers.selectors import FieldRule, extract_field, extract_fields
from satoru.utils.exceptions import NotFoundError, UpstreamDataError
from satoru.utils.helpers import format_url, parse_int, slugify
from satoru.utils.logger import scraper_logger

# ===========================
# Patterns
# ===========================
MOVIE_ID_PATTERN = re.compile(r"const movieId = (\d+);")


def _episode_number(value: str) -> Optional[int]:
    number = parse_int(value)
    if number is None or number < 0:
        return None
    return number


def _positive_int(value: str) -> Optional[int]:
    number = parse_int(value)
    return number if number else None


# ===========================
# Selection Rules
# ===========================
ANIME_INFO_RULES = [
    FieldRule("title", ".anime-info h1"),
    FieldRule("image_url", ".anime-info img", "src"),
    FieldRule("description", ".anime-info .description"),
    FieldRule("genres", ".anime-info .genres a", many=True),
    FieldRule("status", ".anime-info .status"),
    FieldRule("type", ".anime-info .type"),
    FieldRule("rating", ".anime-info .rating"),
    FieldRule("release_date", ".anime-info .released"),
]

EPISODE_RULES = [
    FieldRule("id", None, "data-id"),
    FieldRule("number", None, "data-number", default=0, cast=_episode_number),
    FieldRule("title", ".ep-name", "title"),
    FieldRule("japanese_title", ".ep-name", "data-jname"),
]

SERVER_RULES = [
    FieldRule("id", None, "data-id"),
    FieldRule("name", "a"),
    FieldRule("type", None, "data-type"),
]

SEARCH_ITEM_RULES = [
    FieldRule("title", ".film-name .dynamic-name"),
    FieldRule("id", ".film-poster-ahref", "data-id", default=None, cast=_positive_int),
    FieldRule("type", ".fd-infor .fdi-item"),
]

SEARCH_IMAGE_RULES = [
    FieldRule("image_url", ".film-poster-img", "data-src"),
    FieldRule("image_url", ".film-poster-img", "src"),
]

TOTAL_RESULTS_RULE = FieldRule("total_results", ".total-results", default=None, cast=_positive_int)


# ===========================
# AJAX Envelope
# ===========================
def unwrap_ajax_html(payload: Any, what: str, require_html: bool = False) -> str:
    if not isinstance(payload, dict) or not payload.get("status"):
        raise UpstreamDataError(f"Failed to get {what}")

    html = payload.get("html") or ""
    if require_html and not html:
        raise UpstreamDataError(f"Failed to get {what}")
    return html


# ===========================
# Anime Info
# ===========================
def parse_anime_info(page: str, anime_id: str, base_url: str = "") -> AnimeInfo:
    parser = HTMLParser(page)
    fields = extract_fields(parser, ANIME_INFO_RULES)
    fields["image_url"] = format_url(fields["image_url"], base_url)
    return AnimeInfo(id=anime_id, **fields)


# ===========================
# Episode List
# ===========================
def parse_episode_list(html: str) -> EpisodeList:
    parser = HTMLParser(html)
    episodes: List[Episode] = []

    for node in parser.css(".ep-item"):
        try:
            episodes.append(Episode(**extract_fields(node, EPISODE_RULES)))
        except ValidationError as e:
            scraper_logger.debug(f"Skipped episode item: {e.error_count()} invalid fields")

    return EpisodeList(episodes=episodes)


# ===========================
# Episode Servers
# ===========================
def parse_episode_servers(html: str) -> List[Server]:
    servers: List[Server] = []
    if not html:
        return servers

    parser = HTMLParser(html)

    for node in parser.css(".server-item"):
        fields = extract_fields(node, SERVER_RULES)
        if not fields["id"]:
            continue
        try:
            servers.append(Server(**fields))
        except ValidationError as e:
            scraper_logger.debug(f"Skipped server item: {e.error_count()} invalid fields")

    return servers


# ===========================
# Search Results
# ===========================
def _search_image(node, base_url: str) -> str:
    for rule in SEARCH_IMAGE_RULES:
        value = extract_field(node, rule)
        if value:
            return format_url(value, base_url)
    return ""


def parse_search_results(page: str, current_page: int = 1, base_url: str = "") -> SearchPage:
    parser = HTMLParser(page)
    results: List[SearchResultItem] = []

    for node in parser.css(".flw-item"):
        fields: Dict[str, Any] = extract_fields(node, SEARCH_ITEM_RULES)
        fields["image_url"] = _search_image(node, base_url)

        if not fields["title"] or not fields["image_url"] or not fields["id"]:
            continue

        fields["title"] = slugify(fields["title"])
        try:
            results.append(SearchResultItem(**fields))
        except ValidationError as e:
            scraper_logger.debug(f"Skipped search item: {e.error_count()} invalid fields")

    return SearchPage(
        results=results,
        current_page=current_page,
        has_next_page=len(parser.css(".pre-pagination .page-link")) > 0,
        total_results=extract_field(parser, TOTAL_RESULTS_RULE),
    )


# ===========================
# Anime Id Lookup
# ===========================
def parse_movie_id(page: str) -> int:
    match = MOVIE_ID_PATTERN.search(page)
    if not match:
        raise NotFoundError("Could not find anime ID")
    return int(match.group(1))
