from datetime import datetime

from pydantic import BaseModel, Field

from ..config import settings
from ..interfaces import RankedResult


class SearchRequest(BaseModel):
    query: str = ""
    region: str | None = None
    limit: int = Field(
        default=settings.default_search_limit, ge=1, le=settings.max_search_limit
    )
    conversational: bool = False


class UploaderResponse(BaseModel):
    avatar_url: str | None
    display_name: str
    role: str


class VideoResultResponse(BaseModel):
    id: str
    video_url: str
    title: str
    description: str
    tags: list[str]
    region: str
    language: str
    status: str
    created_at: datetime
    similarity: float | None = None
    user: UploaderResponse | None = None

    @classmethod
    def from_result(cls, result: RankedResult) -> "VideoResultResponse":
        c = result.candidate
        return cls(
            id=c.id,
            video_url=c.video_url,
            title=c.title,
            description=c.description,
            tags=c.tags,
            region=c.region,
            language=c.language,
            status=c.status,
            created_at=c.created_at,
            similarity=result.similarity,
            user=UploaderResponse(
                avatar_url=c.uploader.avatar_url,
                display_name=c.uploader.display_name,
                role=c.uploader.role,
            )
            if c.uploader
            else None,
        )


class SearchResponse(BaseModel):
    results: list[VideoResultResponse]


class ParseSearchRequest(BaseModel):
    query: str = ""


class ParseSearchResponse(BaseModel):
    keyword: str


class GenerateTagsRequest(BaseModel):
    title: str = ""
    description: str = ""


class GenerateTagsResponse(BaseModel):
    tags: list[str]
