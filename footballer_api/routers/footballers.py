"""
Footballers Router
==================

CRUD and listing endpoints for footballer records:
- List with full-text name search, club and position filters, sorting and paging
- Create / show / partial update / delete

Updates use optimistic concurrency: the write only lands if the stored
version is still the one read at the start of the request.
"""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException, Query, Response, status

from footballer_api.config import settings
from footballer_api.dependencies import get_admin_api_key, get_models
from footballer_api.errors import EditConflictError, PersistenceError, RecordNotFoundError
from footballer_api.filters import Filters, read_csv, read_int, read_string, validate_filters
from footballer_api.models import FOOTBALLER_SORT_SAFELIST, Footballer
from footballer_api.schemas import (
    FootballerCreate, FootballerUpdate, FootballerRead,
    FootballerEnvelope, FootballerListEnvelope, MessageEnvelope
)
from footballer_api.services import Models, validate_footballer
from footballer_api.validator import Validator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/footballers", tags=["Footballers"])


# =============================================================================
# ERROR RESPONSES
# =============================================================================

def not_found() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_404_NOT_FOUND,
        detail="the requested resource could not be found"
    )


def edit_conflict() -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_409_CONFLICT,
        detail="unable to update the record due to an edit conflict, please try again"
    )


def failed_validation(v: Validator) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        detail=v.errors
    )


def server_error(error: Exception) -> HTTPException:
    # Storage detail stays in the log
    logger.error(f"Persistence failure: {error}", exc_info=error)
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail="the server encountered a problem and could not process your request"
    )


def read_id_param(raw_id: str) -> int:
    """Parse a path id; anything that is not a positive integer is not found."""
    try:
        footballer_id = int(raw_id)
    except ValueError:
        raise not_found() from None
    if footballer_id < 1:
        raise not_found()
    return footballer_id


# =============================================================================
# ENDPOINTS
# =============================================================================

@router.get("", response_model=FootballerListEnvelope)
async def list_footballers(
    names: Optional[str] = Query(None, description="Full-text search on name"),
    club: Optional[str] = Query(None, description="Exact club, case-insensitive"),
    positions: Optional[str] = Query(None, description="Comma-separated positions; all must be present"),
    page: Optional[str] = Query(None, description="Page number, starting at 1"),
    page_size: Optional[str] = Query(None, description="Results per page (max 100)"),
    sort: Optional[str] = Query(None, description="Sort key, prefix with '-' for descending"),
    models: Models = Depends(get_models)
) -> FootballerListEnvelope:
    """
    List footballers.

    **Examples:**
    - `/footballers?names=messi` - Name search
    - `/footballers?positions=ST,RW` - Footballers who played both ST and RW
    - `/footballers?sort=-goals&page=2&page_size=10` - Top scorers, second page
    """
    qs = {
        "names": names, "club": club, "positions": positions,
        "page": page, "page_size": page_size, "sort": sort,
    }
    v = Validator()

    name_filter = read_string(qs, "names", "")
    club_filter = read_string(qs, "club", "")
    position_filter = read_csv(qs, "positions", [])

    filters = Filters(
        page=read_int(qs, "page", 1, v),
        page_size=read_int(qs, "page_size", settings.default_page_size, v),
        sort=read_string(qs, "sort", "id"),
        sort_safelist=FOOTBALLER_SORT_SAFELIST,
    )

    validate_filters(v, filters)
    if not v.valid():
        raise failed_validation(v)

    try:
        footballers, metadata = await models.footballers.get_all(
            name_filter, club_filter, position_filter, filters
        )
    except PersistenceError as e:
        raise server_error(e)

    return FootballerListEnvelope(
        footballers=[FootballerRead.model_validate(f) for f in footballers],
        metadata=metadata
    )


@router.post(
    "",
    response_model=FootballerEnvelope,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(get_admin_api_key)]
)
async def create_footballer(
    payload: FootballerCreate,
    response: Response,
    models: Models = Depends(get_models)
) -> FootballerEnvelope:
    """
    Create a footballer.

    **Requires API key authentication** via `X-API-Key` header.

    **Example request:**
    ```json
    {
        "name": "Lionel Messi",
        "titles": 44,
        "started_play_year": 2004,
        "year": 2024,
        "club": "Inter Miami",
        "played_clubs": 3,
        "position": ["RW", "CF"],
        "goals": 838
    }
    ```
    """
    footballer = Footballer(**payload.model_dump())

    v = Validator()
    validate_footballer(v, footballer)
    if not v.valid():
        raise failed_validation(v)

    try:
        await models.footballers.insert(footballer)
    except PersistenceError as e:
        raise server_error(e)

    response.headers["Location"] = f"/v1/footballers/{footballer.id}"
    return FootballerEnvelope(footballer=FootballerRead.model_validate(footballer))


@router.get("/{footballer_id}", response_model=FootballerEnvelope)
async def show_footballer(
    footballer_id: str,
    models: Models = Depends(get_models)
) -> FootballerEnvelope:
    """Get a single footballer."""
    try:
        footballer = await models.footballers.get(read_id_param(footballer_id))
    except RecordNotFoundError:
        raise not_found()
    except PersistenceError as e:
        raise server_error(e)

    return FootballerEnvelope(footballer=FootballerRead.model_validate(footballer))


@router.patch(
    "/{footballer_id}",
    response_model=FootballerEnvelope,
    dependencies=[Depends(get_admin_api_key)]
)
async def update_footballer(
    footballer_id: str,
    payload: FootballerUpdate,
    expected_version: Optional[str] = Header(None, alias="X-Expected-Version"),
    models: Models = Depends(get_models)
) -> FootballerEnvelope:
    """
    Partially update a footballer.

    Only fields present (and not null) in the body are changed. Send
    `X-Expected-Version` to fail fast when the record moved on since you
    last read it; a concurrent write between read and update is rejected
    with 409 either way.
    """
    try:
        footballer = await models.footballers.get(read_id_param(footballer_id))
    except RecordNotFoundError:
        raise not_found()
    except PersistenceError as e:
        raise server_error(e)

    if expected_version is not None and expected_version != str(footballer.version):
        raise edit_conflict()

    for field, value in payload.changes().items():
        setattr(footballer, field, value)

    v = Validator()
    validate_footballer(v, footballer)
    if not v.valid():
        raise failed_validation(v)

    try:
        await models.footballers.update(footballer)
    except EditConflictError:
        raise edit_conflict()
    except PersistenceError as e:
        raise server_error(e)

    return FootballerEnvelope(footballer=FootballerRead.model_validate(footballer))


@router.delete(
    "/{footballer_id}",
    response_model=MessageEnvelope,
    dependencies=[Depends(get_admin_api_key)]
)
async def delete_footballer(
    footballer_id: str,
    models: Models = Depends(get_models)
) -> MessageEnvelope:
    """Delete a footballer. No version check."""
    try:
        await models.footballers.delete(read_id_param(footballer_id))
    except RecordNotFoundError:
        raise not_found()
    except PersistenceError as e:
        raise server_error(e)

    return MessageEnvelope(message="footballer successfully deleted")
