"""Meeting gateway endpoints.

All endpoints require a bearer token verified by IdentityResolver. Listing
is ordered by meeting date (newest first); creation stamps the caller as
owner; deletion only succeeds for the owner. Deletion accepts the id as a
path segment or as the ``id`` query parameter.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Query, Request, Response, status
from fastapi.responses import JSONResponse

from src.meeting_ai.ai.schemas import ErrorResponse
from src.meeting_ai.api.deps import get_current_identity, get_meeting_gateway
from src.meeting_ai.core.exceptions import MethodNotSupported
from src.meeting_ai.core.security import Identity
from src.meeting_ai.meetings.gateway import MeetingGateway
from src.meeting_ai.meetings.schemas import DeleteOutcome, MeetingCreate, MeetingRecord

router = APIRouter(prefix="/api/v1/meetings", tags=["meetings"])


@router.get("", response_model=list[MeetingRecord], responses={401: {"model": ErrorResponse}})
async def list_meetings(
    identity: Identity = Depends(get_current_identity),
    gateway: MeetingGateway = Depends(get_meeting_gateway),
):
    """List accessible meetings, newest meeting date first."""
    return await gateway.list_meetings(identity)


@router.post(
    "",
    response_model=MeetingRecord,
    status_code=status.HTTP_201_CREATED,
    responses={401: {"model": ErrorResponse}},
)
async def create_meeting(
    body: MeetingCreate,
    identity: Identity = Depends(get_current_identity),
    gateway: MeetingGateway = Depends(get_meeting_gateway),
):
    """Create a meeting owned by the caller."""
    return await gateway.create_meeting(identity, body)


async def _delete(identity: Identity, gateway: MeetingGateway, meeting_id: str | None) -> Response:
    outcome = await gateway.delete_meeting(identity, meeting_id)
    if outcome is DeleteOutcome.DELETED:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return JSONResponse(
        status_code=status.HTTP_404_NOT_FOUND,
        content={"error": "Meeting not found"},
    )


@router.delete(
    "",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={400: {"model": ErrorResponse}, 404: {"model": ErrorResponse}},
)
async def delete_meeting_by_query(
    meeting_id: str | None = Query(default=None, alias="id"),
    identity: Identity = Depends(get_current_identity),
    gateway: MeetingGateway = Depends(get_meeting_gateway),
):
    """Delete the caller's meeting given as ``?id=``."""
    return await _delete(identity, gateway, meeting_id)


@router.delete(
    "/{meeting_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def delete_meeting(
    meeting_id: str,
    identity: Identity = Depends(get_current_identity),
    gateway: MeetingGateway = Depends(get_meeting_gateway),
):
    """Delete the caller's meeting by id."""
    return await _delete(identity, gateway, meeting_id)


@router.api_route("", methods=["PUT", "PATCH"], include_in_schema=False)
@router.api_route("/{meeting_id}", methods=["GET", "PUT", "PATCH", "POST"], include_in_schema=False)
async def unsupported_method(request: Request):
    raise MethodNotSupported(request.method)
