"""FastAPI routes for the sign search API."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, HTTPException, Request

from sign_search.api.schemas import (
    GenerateTagsRequest,
    GenerateTagsResponse,
    ParseSearchRequest,
    ParseSearchResponse,
    SearchRequest,
    SearchResponse,
    VideoResultResponse,
)

from ..config import settings
from ..exceptions import TagGenerationError
from ..log import configure_logging
from ..providers.provider import get_provider
from ..service import SignSearchService
from ..storage.database import init_db
from ..storage.repository import VideoRepository

logger = logging.getLogger(__name__)


def _create_service() -> SignSearchService:
    """Create a SignSearchService with default dependencies."""
    return SignSearchService(
        repository=VideoRepository(embedding_dimension=settings.embedding_dimension),
        provider=get_provider(),
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    configure_logging(settings.log_level)
    init_db()
    # Missing credentials fail here, at startup, not on the first request
    app.state.service = _create_service()
    yield


app = FastAPI(
    title="Sign Search API",
    description="Sign language video discovery with vector search and Gemini re-ranking",
    version="0.1.0",
    lifespan=lifespan,
)


def get_service(request: Request) -> SignSearchService:
    return request.app.state.service


@app.get("/")
async def root():
    """API root endpoint."""
    return {"message": "Sign Search API", "version": "0.1.0"}


@app.post("/search", response_model=SearchResponse)
def search(request: SearchRequest, service: SignSearchService = Depends(get_service)):
    """
    Search verified videos.

    An empty query lists the newest videos in the region. Runtime failures
    of the embedding, store or model calls only reduce the result count.
    """
    results = service.search(
        request.query,
        region=request.region,
        limit=request.limit,
        conversational=request.conversational,
    )
    return SearchResponse(results=[VideoResultResponse.from_result(r) for r in results])


@app.post("/parse-search", response_model=ParseSearchResponse)
def parse_search(
    request: ParseSearchRequest, service: SignSearchService = Depends(get_service)
):
    """Extract the search keyword from a natural language question."""
    if not request.query.strip():
        raise HTTPException(status_code=400, detail="Search query is required")
    return ParseSearchResponse(keyword=service.parse_query(request.query))


@app.post("/generate-tags", response_model=GenerateTagsResponse)
def generate_tags(
    request: GenerateTagsRequest, service: SignSearchService = Depends(get_service)
):
    """Suggest tags for a video from its title and description."""
    if not request.title.strip() or not request.description.strip():
        raise HTTPException(status_code=400, detail="Title and description are required")
    try:
        tags = service.suggest_tags(request.title, request.description)
    except TagGenerationError as e:
        logger.error("Tag generation failed: %s", e)
        raise HTTPException(status_code=500, detail="Failed to generate tags")
    return GenerateTagsResponse(tags=tags)
