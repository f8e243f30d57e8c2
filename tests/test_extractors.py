"""Tests for the selector-driven document extractors."""
import pytest
from selectolax.parser import HTMLParser

from satoru.models.anime import EpisodeList
from satoru.scrapers.extractors import (
    parse_anime_info, parse_episode_list, parse_episode_servers,
    parse_movie_id, parse_search_results, unwrap_ajax_html
)
from satoru.scrapers.selectors import FieldRule, extract_fields
from satoru.utils.exceptions import NotFoundError, UpstreamDataError

BASE_URL = "https://satoru.test"

ANIME_PAGE = """
<html><body>
<div class="anime-info">
  <img src="/images/aot.jpg">
  <h1> Attack on Titan </h1>
  <div class="description">Humanity fights the titans.</div>
  <div class="genres"><a>Action</a><a> Drama </a></div>
  <span class="status">Finished Airing</span>
  <span class="type">TV</span>
  <span class="rating">8.9</span>
  <span class="released">Apr 7, 2013</span>
</div>
</body></html>
"""

EPISODES_HTML = """
<div class="ss-list">
  <a class="ep-item" data-id="101" data-number="1">
    <div class="ep-name" title="To You, 2,000 Years From Now" data-jname="Ni-sen Nen Go no Kimi e"></div>
  </a>
  <a class="ep-item" data-id="102" data-number="two">
    <div class="ep-name" title="That Day"></div>
  </a>
  <a class="ep-item" data-number="-4"></a>
</div>
"""

SERVERS_HTML = """
<div class="ps_-block">
  <div class="server-item" data-id="s1" data-type="sub"><a> VidStream </a></div>
  <div class="server-item" data-type="sub"><a>Broken</a></div>
  <div class="server-item" data-id="s2"><a>MegaCloud</a></div>
</div>
"""

SEARCH_PAGE = """
<div class="film_list-wrap">
  <div class="flw-item">
    <div class="film-poster">
      <img class="film-poster-img" data-src="https://img.test/aot.jpg" src="/placeholder.png">
      <a class="film-poster-ahref" href="/watch/attack-on-titan-112" data-id="112"></a>
    </div>
    <div class="film-detail">
      <h3 class="film-name"><a class="dynamic-name">Attack on Titan: Final Season!</a></h3>
      <div class="fd-infor"><span class="fdi-item">TV</span><span class="fdi-item">24m</span></div>
    </div>
  </div>
  <div class="flw-item">
    <div class="film-poster">
      <img class="film-poster-img" src="/posters/movie.jpg">
      <a class="film-poster-ahref" data-id="7"></a>
    </div>
    <div class="film-detail">
      <h3 class="film-name"><a class="dynamic-name">Titan Movie</a></h3>
    </div>
  </div>
  <div class="flw-item">
    <div class="film-poster">
      <img class="film-poster-img" data-src="https://img.test/none.jpg">
      <a class="film-poster-ahref" data-id="not-a-number"></a>
    </div>
    <div class="film-detail"><h3 class="film-name"><a class="dynamic-name">No Id</a></h3></div>
  </div>
  <div class="flw-item">
    <div class="film-poster"><a class="film-poster-ahref" data-id="9"></a></div>
    <div class="film-detail"><h3 class="film-name"><a class="dynamic-name">No Image</a></h3></div>
  </div>
</div>
<ul class="pre-pagination"><li><a class="page-link" href="?page=2">2</a></li></ul>
<span class="total-results">42 results</span>
"""


class TestFieldRules:

    def test_missing_nodes_fall_back_to_defaults(self):
        rules = [
            FieldRule("title", "h1"),
            FieldRule("count", ".count", default=0, cast=int),
            FieldRule("tags", ".tag", many=True),
        ]
        assert extract_fields(HTMLParser("<div></div>"), rules) == {"title": "", "count": 0, "tags": []}

    def test_cast_failure_uses_default(self):
        rules = [FieldRule("count", ".count", default=0, cast=int)]
        assert extract_fields(HTMLParser("<b class='count'>many</b>"), rules) == {"count": 0}


class TestAnimeInfo:

    def test_full_page(self):
        info = parse_anime_info(ANIME_PAGE, "attack-on-titan-112", base_url=BASE_URL)

        assert info.id == "attack-on-titan-112"
        assert info.title == "Attack on Titan"
        assert info.image_url == "https://satoru.test/images/aot.jpg"
        assert info.description == "Humanity fights the titans."
        assert info.genres == ["Action", "Drama"]
        assert info.status == "Finished Airing"
        assert info.type == "TV"
        assert info.rating == "8.9"
        assert info.release_date == "Apr 7, 2013"

    def test_inline_markup_keeps_word_boundaries(self):
        page = (
            '<div class="anime-info"><h1>Attack on <i>Titan</i></h1>'
            '<div class="description">A story <b>about</b> walls.</div></div>'
        )
        info = parse_anime_info(page, "x")

        assert info.title == "Attack on Titan"
        assert info.description == "A story about walls."

    def test_empty_page_gives_defaults(self):
        info = parse_anime_info("<html></html>", "x")

        assert info.title == ""
        assert info.image_url == ""
        assert info.genres == []
        assert info.release_date == ""

    def test_json_uses_camel_case(self):
        data = parse_anime_info(ANIME_PAGE, "x", base_url=BASE_URL).to_json()
        assert data["imageUrl"] == "https://satoru.test/images/aot.jpg"
        assert data["releaseDate"] == "Apr 7, 2013"


class TestEpisodeList:

    def test_items_degrade_independently(self):
        result = parse_episode_list(EPISODES_HTML)

        assert isinstance(result, EpisodeList)
        assert result.total_episodes == 3
        first, second, third = result.episodes
        assert (first.id, first.number, first.title, first.japanese_title) == (
            "101", 1, "To You, 2,000 Years From Now", "Ni-sen Nen Go no Kimi e"
        )
        assert (second.id, second.number, second.japanese_title) == ("102", 0, "")
        assert (third.id, third.number, third.title) == ("", 0, "")

    def test_total_episodes_serialized(self):
        assert parse_episode_list(EPISODES_HTML).to_json()["totalEpisodes"] == 3


class TestEpisodeServers:

    def test_servers_without_id_are_dropped(self):
        servers = parse_episode_servers(SERVERS_HTML)

        assert [(s.id, s.name, s.type) for s in servers] == [
            ("s1", "VidStream", "sub"),
            ("s2", "MegaCloud", ""),
        ]

    def test_empty_html(self):
        assert parse_episode_servers("") == []

    def test_name_with_inline_markup(self):
        servers = parse_episode_servers('<div class="server-item" data-id="s1"><a>Vid <b>Stream</b></a></div>')
        assert servers[0].name == "Vid Stream"


class TestSearchResults:

    def test_rows_missing_required_fields_are_dropped(self):
        page = parse_search_results(SEARCH_PAGE, current_page=1, base_url=BASE_URL)

        assert [(r.id, r.title, r.image_url, r.type) for r in page.results] == [
            (112, "attack-on-titan-final-season", "https://img.test/aot.jpg", "TV"),
            (7, "titan-movie", "https://satoru.test/posters/movie.jpg", ""),
        ]
        assert page.current_page == 1
        assert page.has_next_page is True
        assert page.total_results == 42

    def test_slug_from_title_with_inline_markup(self):
        row = """
        <div class="flw-item">
          <img class="film-poster-img" data-src="https://img.test/aot.jpg">
          <a class="film-poster-ahref" data-id="112"></a>
          <h3 class="film-name"><a class="dynamic-name">Attack on <span>Titan</span>: Final</a></h3>
        </div>
        """
        page = parse_search_results(row)

        assert page.results[0].title == "attack-on-titan-final"

    def test_last_page_without_total(self):
        page = parse_search_results("<div></div>", current_page=3)

        assert page.results == []
        assert page.current_page == 3
        assert page.has_next_page is False
        assert page.total_results is None
        assert "totalResults" not in page.to_json()


class TestAjaxEnvelope:

    def test_status_false_is_upstream_error(self):
        with pytest.raises(UpstreamDataError):
            unwrap_ajax_html({"status": False, "html": "<div></div>"}, "servers")

    def test_non_object_payload_is_upstream_error(self):
        with pytest.raises(UpstreamDataError):
            unwrap_ajax_html(["unexpected"], "servers")

    def test_required_html(self):
        assert unwrap_ajax_html({"status": True}, "servers") == ""
        with pytest.raises(UpstreamDataError):
            unwrap_ajax_html({"status": True, "html": ""}, "episodes list", require_html=True)


class TestMovieId:

    def test_id_found_in_script(self):
        page = "<script>var x = 1; const movieId = 48291; init(movieId);</script>"
        assert parse_movie_id(page) == 48291

    def test_missing_id(self):
        with pytest.raises(NotFoundError):
            parse_movie_id("<script>const movieId = 'abc';</script>")
