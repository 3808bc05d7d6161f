"""
PasteShare — Browse and Diff Route Handlers
===========================================

What:  Paginated public listing (query-string and path-encoded forms),
       the front-page listing, and the diff of two pastes.
How:   Builds a BrowseQuery, delegates to PasteService, returns JSON.

Example client usage:
    GET /api/pastes?author=alice&page=2
    GET /api/browse/author/alice/page/2        (same listing)
    GET /api/diff/41/42
"""

import logging

from fastapi import APIRouter, Depends, Query, Request, Response
from sqlalchemy.ext.asyncio import AsyncSession

from pasteshare.config import settings
from pasteshare.database import get_db_session
from pasteshare.schemas.browse import BrowseQuery, BrowseResponse, parse_page_number
from pasteshare.schemas.paste import DiffResponse, ErrorResponse
from pasteshare.services.paste_service import parse_paste_id, paste_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Browse"])


@router.get(
    "/pastes",
    response_model=BrowseResponse,
    responses={400: {"description": "Invalid page number", "model": ErrorResponse}},
    summary="Browse public pastes",
)
async def list_pastes(
    request: Request,
    response: Response,
    page: str = Query(default="1", description="1-based page number"),
    db: AsyncSession = Depends(get_db_session),
) -> BrowseResponse:
    """
    Every query parameter other than `page` is a search term. author,
    channel and language filter the listing; other keys are carried through
    to the response unchanged, as in the path-encoded form.
    """
    search = {
        key: value for key, value in request.query_params.items() if key != "page"
    }
    query = BrowseQuery(
        page=parse_page_number(page),
        page_size=settings.browse_page_size,
        search=search,
    )
    result = await paste_service.browse(db, query)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/browse/{args:path}",
    response_model=BrowseResponse,
    responses={400: {"description": "Invalid browse arguments", "model": ErrorResponse}},
    summary="Browse public pastes with path-encoded options",
)
async def browse_path(
    args: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> BrowseResponse:
    segments = [segment for segment in args.strip("/").split("/") if segment]
    query = BrowseQuery.from_path(segments, page_size=settings.browse_page_size)
    result = await paste_service.browse(db, query)
    response.headers["X-Total-Count"] = str(result.total)
    return result


@router.get(
    "/home",
    response_model=BrowseResponse,
    summary="Most recent public pastes for the front page",
)
async def home(db: AsyncSession = Depends(get_db_session)) -> BrowseResponse:
    return await paste_service.browse(db, BrowseQuery(page_size=settings.home_page_size))


@router.get(
    "/diff/{left_id}/{right_id}",
    response_model=DiffResponse,
    responses={
        400: {"description": "Invalid paste id", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
    },
    summary="Line diff between two pastes",
)
async def diff_pastes(
    left_id: str,
    right_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> DiffResponse:
    return await paste_service.diff(db, parse_paste_id(left_id), parse_paste_id(right_id))
