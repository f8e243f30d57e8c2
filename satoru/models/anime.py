from typing import List, Optional

from pydantic import AliasGenerator, BaseModel, ConfigDict, Field, computed_field, model_validator
from pydantic.alias_generators import to_camel


# ===========================
# Base Record
# ===========================
class Record(BaseModel):

    model_config = ConfigDict(
        frozen=True,
        alias_generator=AliasGenerator(serialization_alias=to_camel),
    )

    def to_json(self) -> dict:
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


# ===========================
# Catalogue Records
# ===========================
class AnimeInfo(Record):
    id: str
    title: str = ""
    image_url: str = ""
    description: str = ""
    genres: List[str] = Field(default_factory=list)
    status: str = ""
    type: str = ""
    rating: str = ""
    release_date: str = ""


class Episode(Record):
    id: str = ""
    number: int = Field(default=0, ge=0)
    title: str = ""
    japanese_title: str = ""


class EpisodeList(Record):
    episodes: List[Episode] = Field(default_factory=list)

    @computed_field(alias="totalEpisodes")
    @property
    def total_episodes(self) -> int:
        return len(self.episodes)


class Server(Record):
    id: str = Field(min_length=1)
    name: str = ""
    type: str = ""


# ===========================
# Playback Records
# ===========================
class VideoSource(Record):
    url: str
    quality: str = "auto"
    is_hls: bool = Field(default=False, serialization_alias="isHLS")
    is_embed: bool = False

    @model_validator(mode="after")
    def check_single_kind(self):
        if self.is_hls == self.is_embed:
            raise ValueError("exactly one of is_hls / is_embed must be set")
        return self

    @classmethod
    def hls(cls, url: str, quality: str = "auto") -> "VideoSource":
        return cls(url=url, quality=quality, is_hls=True)

    @classmethod
    def embed(cls, url: str, quality: str = "auto") -> "VideoSource":
        return cls(url=url, quality=quality, is_embed=True)


# ===========================
# Search Records
# ===========================
class SearchResultItem(Record):
    id: int
    title: str
    image_url: str
    type: str = ""


class SearchPage(Record):
    results: List[SearchResultItem] = Field(default_factory=list)
    current_page: int = 1
    has_next_page: bool = False
    total_results: Optional[int] = None
