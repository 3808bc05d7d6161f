"""
PasteShare — Paste Route Handlers
=================================

What:  Submit, annotate, view and fetch raw pastes.
How:   Parses path ids and form bodies, delegates to PasteService, returns JSON.

Caching Strategy:
    - POST routes: never cached
    - GET /api/pastes/{id}: short cache; the paste is immutable but its
      annotation thread can grow
    - GET /api/pastes/{id}/raw: long cache, paste content never changes
"""

import logging

from fastapi import APIRouter, Depends, Request, Response
from fastapi.responses import PlainTextResponse
from sqlalchemy.ext.asyncio import AsyncSession

from pasteshare.database import get_db_session
from pasteshare.schemas.paste import (
    CreatedPasteResponse,
    ErrorResponse,
    PasteAggregate,
    PasteSubmission,
)
from pasteshare.services.paste_service import parse_paste_id, paste_service

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Pastes"])


@router.post(
    "/pastes",
    status_code=201,
    response_model=CreatedPasteResponse,
    responses={
        400: {"description": "Missing content", "model": ErrorResponse},
        429: {"description": "Too many submissions", "model": ErrorResponse},
    },
    summary="Submit a new paste",
)
async def create_paste(
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> CreatedPasteResponse:
    """
    Form fields: Content (required), Title, Author, Language, Channel,
    Private ("on" for a private paste).
    """
    form = await request.form()
    submission = PasteSubmission.from_form(form)
    result = await paste_service.create_paste(db, submission)
    response.headers["Location"] = result.url
    return result


@router.post(
    "/pastes/{paste_id}/annotations",
    status_code=201,
    response_model=CreatedPasteResponse,
    responses={
        400: {"description": "Invalid paste id or missing content", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
    },
    summary="Annotate an existing paste",
)
async def annotate_paste(
    paste_id: str,
    request: Request,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> CreatedPasteResponse:
    """
    The annotation joins the thread of the paste's root and inherits its
    private flag. The returned url addresses the annotation as
    /api/pastes/<root>#a<ordinal>.
    """
    parent_id = parse_paste_id(paste_id)
    form = await request.form()
    submission = PasteSubmission.from_form(form)
    result = await paste_service.create_paste(db, submission, parent_id=parent_id)
    response.headers["Location"] = result.url
    return result


@router.get(
    "/pastes/{paste_id}",
    response_model=PasteAggregate,
    responses={
        400: {"description": "Invalid paste id", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
    },
    summary="Get a paste with its annotations",
)
async def view_paste(
    paste_id: str,
    response: Response,
    db: AsyncSession = Depends(get_db_session),
) -> PasteAggregate:
    result = await paste_service.get_paste_data(db, parse_paste_id(paste_id))
    response.headers["Cache-Control"] = "private, max-age=60"
    return result


@router.get(
    "/pastes/{paste_id}/raw",
    response_class=PlainTextResponse,
    responses={
        400: {"description": "Invalid paste id", "model": ErrorResponse},
        404: {"description": "Paste not found", "model": ErrorResponse},
    },
    summary="Get the verbatim content of a paste",
)
async def raw_paste(
    paste_id: str,
    db: AsyncSession = Depends(get_db_session),
) -> PlainTextResponse:
    content = await paste_service.get_raw(db, parse_paste_id(paste_id))
    return PlainTextResponse(
        content,
        headers={"Cache-Control": "private, max-age=3600"},
    )
