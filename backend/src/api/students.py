"""
Student-facing API endpoints.

Provides endpoints for:
- Listing the events the authenticated student is registered for
"""

from fastapi import APIRouter, Depends, HTTPException, status

from backend.src.api.events import get_event_service
from backend.src.middleware.auth import require_student
from backend.src.schemas.event import EventListResponse, EventResponse
from backend.src.services.event_service import EventService
from backend.src.services.registration_guard import StudentIdentity
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/students",
    tags=["Students"],
)


@router.get(
    "/me/registrations",
    response_model=EventListResponse,
    summary="List my registrations",
    description="Events the authenticated student is registered for, ordered by date",
)
async def list_my_registrations(
    student: StudentIdentity = Depends(require_student),
    event_service: EventService = Depends(get_event_service),
) -> EventListResponse:
    try:
        now = event_service.clock()
        events = event_service.list_registrations(student.student_id)
        items = [
            EventResponse(**event_service.build_event_response(e, now))
            for e in events
        ]
        return EventListResponse(count=len(items), events=items)

    except Exception as e:
        logger.error(
            f"Error listing registrations for {student.student_id}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list registrations",
        )
