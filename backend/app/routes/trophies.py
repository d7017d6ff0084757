"""
Trophy API - Trophy Route Handlers
====================================

What:  GET /api/trophies (list), POST /api/trophies (create),
       DELETE /api/trophies/{trophy_id} (delete).
Why:   The whole public surface of the trophy collection.
How:   Validates input, delegates to TrophyStore, returns JSON. Errors are
       raised as application exceptions and rendered by the handlers in main.py.
"""

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, Request

from app.schemas.trophy import MessageResponse, TrophyCreate, TrophyResponse
from app.services.trophy_store import TrophyStore
from app.services.validation import validate_trophy_input

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api", tags=["Trophies"])


def get_trophy_store(request: Request) -> TrophyStore:
    """FastAPI dependency: a store bound to the app's Database handle."""
    return TrophyStore(request.app.state.database)


@router.get(
    "/trophies",
    response_model=List[TrophyResponse],
    responses={500: {"description": "Server error", "model": MessageResponse}},
    summary="List all trophies, newest first",
)
async def list_trophies(
    store: TrophyStore = Depends(get_trophy_store),
) -> List[TrophyResponse]:
    trophies = await store.list_all()
    return [TrophyResponse.model_validate(t) for t in trophies]


@router.post(
    "/trophies",
    status_code=201,
    response_model=TrophyResponse,
    responses={
        400: {"description": "Name or imageUrl missing", "model": MessageResponse},
        500: {"description": "Server error", "model": MessageResponse},
    },
    summary="Create a trophy",
)
async def create_trophy(
    payload: Optional[TrophyCreate] = None,
    store: TrophyStore = Depends(get_trophy_store),
) -> TrophyResponse:
    """
    Create a trophy from `{name, description?, imageUrl}`.

    `payload` is optional at the FastAPI level so that an empty body reaches
    validate_trophy_input and gets the same 400 message as a missing field.
    """
    data = validate_trophy_input(payload)
    trophy = await store.insert(
        name=data.name,
        description=data.description,
        image_url=data.image_url,
    )
    return TrophyResponse.model_validate(trophy)


@router.delete(
    "/trophies/{trophy_id}",
    response_model=MessageResponse,
    responses={
        400: {"description": "Malformed trophy id", "model": MessageResponse},
        404: {"description": "Trophy not found", "model": MessageResponse},
        500: {"description": "Server error", "model": MessageResponse},
    },
    summary="Delete a trophy by id",
)
async def delete_trophy(
    trophy_id: str,
    store: TrophyStore = Depends(get_trophy_store),
) -> MessageResponse:
    # str (not UUID) so malformed ids get our 400 instead of FastAPI's 422
    await store.delete_by_id(trophy_id)
    return MessageResponse(message="Deleted Trophy")
