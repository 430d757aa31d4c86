"""
Events API endpoints for managing campus events.

Provides endpoints for:
- Listing events (optionally filtered by computed status)
- Getting event details
- Creating, updating, cancelling and deleting events (admin)
- Registering for an event (student)
- Listing participants (admin)
- Removing participants (admin)

Design:
- Uses dependency injection for services
- Comprehensive error handling with meaningful HTTP status codes
- All endpoints use GUID format (evt_xxx) for identifiers
- Registration rejections propagate to the app-level handler, which answers
  400 with {"error": kind, "message": ...}
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.middleware.auth import AuthContext, require_admin, require_student
from backend.src.schemas.event import (
    EventCreate,
    EventUpdate,
    EventResponse,
    EventDetailResponse,
    EventListResponse,
    EventStatus,
    MessageResponse,
    ParticipantResponse,
    RegistrationErrorResponse,
    RegistrationResponse,
)
from backend.src.services.event_service import EventService
from backend.src.services.exceptions import (
    NotFoundError,
    RegistrationError,
    StoreError,
    ValidationError,
)
from backend.src.services.registration_guard import StudentIdentity
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/events",
    tags=["Events"],
)


# ============================================================================
# Dependencies
# ============================================================================


def get_event_service(db: Session = Depends(get_db)) -> EventService:
    """Create EventService instance with database session."""
    return EventService(db=db)


def _store_error(e: StoreError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        detail=e.message,
    )


# ============================================================================
# Public Endpoints
# ============================================================================


@router.get(
    "",
    response_model=EventListResponse,
    summary="List events",
    description="List all events ordered by date, optionally filtered by status",
)
async def list_events(
    status_filter: Optional[EventStatus] = Query(
        default=None, alias="status", description="Filter by computed status"
    ),
    event_service: EventService = Depends(get_event_service),
) -> EventListResponse:
    """
    List all events.

    Query Parameters:
        status: upcoming | ongoing | completed | cancelled

    Example:
        GET /api/events?status=upcoming
    """
    try:
        now = event_service.clock()
        events = event_service.list(
            status=status_filter.value if status_filter else None
        )
        items = [
            EventResponse(**event_service.build_event_response(e, now))
            for e in events
        ]

        logger.info(
            f"Listed {len(items)} events",
            extra={"status_filter": status_filter.value if status_filter else None},
        )
        return EventListResponse(count=len(items), events=items)

    except Exception as e:
        logger.error(f"Error listing events: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list events",
        )


@router.get(
    "/{guid}",
    response_model=EventResponse,
    summary="Get event details",
)
async def get_event(
    guid: str,
    event_service: EventService = Depends(get_event_service),
) -> EventResponse:
    """
    Get a single event by GUID.

    Path Parameters:
        guid: Event GUID (evt_xxx format)
    """
    try:
        event = event_service.get_by_guid(guid)
        return EventResponse(**event_service.build_event_response(event))

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except Exception as e:
        logger.error(f"Error getting event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to get event",
        )


# ============================================================================
# Admin Endpoints
# ============================================================================


@router.get(
    "/{guid}/participants",
    response_model=List[ParticipantResponse],
    summary="List participants",
)
async def list_participants(
    guid: str,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> List[ParticipantResponse]:
    """
    List the students registered for an event, in registration order.

    Raises:
        404: Event not found
    """
    try:
        return [
            ParticipantResponse.model_validate(p)
            for p in event_service.list_participants(guid)
        ]

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except Exception as e:
        logger.error(f"Error listing participants of {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list participants",
        )


@router.post(
    "",
    response_model=EventDetailResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Create a new event",
)
async def create_event(
    event_data: EventCreate,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Create a new event.

    Request Body:
        title: Event title (required)
        event_date: Date of the event (required, not in the past)
        location: Venue (required)
        description: Event description
        time: Display time (HH:MM or HH:MM AM/PM)
        max_participants: Capacity (default: 100)
        registration_deadline: Must be before event_date
        status: Initial status ("cancelled" creates a cancelled event)

    Returns:
        Created event details (201 Created)

    Raises:
        400: Date in the past or invalid deadline
        422: Validation error
    """
    try:
        event = event_service.create(
            title=event_data.title,
            event_date=event_data.event_date,
            location=event_data.location,
            description=event_data.description,
            time=event_data.time,
            max_participants=event_data.max_participants,
            registration_deadline=event_data.registration_deadline,
            status=event_data.status.value if event_data.status else None,
            created_by=admin.subject,
        )

        return EventDetailResponse(
            **event_service.build_event_detail_response(event)
        )

    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except Exception as e:
        logger.error(f"Error creating event: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to create event",
        )


@router.put(
    "/{guid}",
    response_model=EventDetailResponse,
    summary="Update an event",
)
async def update_event(
    guid: str,
    event_data: EventUpdate,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Partially update an event. Only provided fields are changed.

    Raises:
        400: Capacity below participant count, or deadline not before date
        404: Event not found
    """
    try:
        updates = event_data.model_dump(exclude_unset=True)
        event = event_service.update(guid, **updates)
        return EventDetailResponse(
            **event_service.build_event_detail_response(event)
        )

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except ValidationError as e:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(e),
        )
    except StoreError as e:
        raise _store_error(e)
    except Exception as e:
        logger.error(f"Error updating event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to update event",
        )


@router.patch(
    "/{guid}/cancel",
    response_model=EventDetailResponse,
    summary="Cancel an event",
)
async def cancel_event(
    guid: str,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Cancel an event. A cancelled event stays cancelled regardless of its date.
    """
    try:
        event = event_service.cancel(guid)
        return EventDetailResponse(
            **event_service.build_event_detail_response(event)
        )

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except StoreError as e:
        raise _store_error(e)
    except Exception as e:
        logger.error(f"Error cancelling event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to cancel event",
        )


@router.delete(
    "/{guid}",
    response_model=MessageResponse,
    summary="Delete an event",
)
async def delete_event(
    guid: str,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> MessageResponse:
    """
    Permanently delete an event and its participant list.
    """
    try:
        event_service.delete(guid)
        return MessageResponse(message="Event deleted successfully")

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except StoreError as e:
        raise _store_error(e)
    except Exception as e:
        logger.error(f"Error deleting event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to delete event",
        )


@router.delete(
    "/{guid}/participants/{student_id}",
    response_model=EventDetailResponse,
    summary="Remove a participant",
)
async def remove_participant(
    guid: str,
    student_id: str,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Remove one student from an event's participant list.

    Raises:
        404: Event not found, or student not registered
    """
    try:
        event = event_service.remove_participant(guid, student_id)
        return EventDetailResponse(
            **event_service.build_event_detail_response(event)
        )

    except NotFoundError as e:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=str(e),
        )
    except StoreError as e:
        raise _store_error(e)
    except Exception as e:
        logger.error(
            f"Error removing participant {student_id} from {guid}: {str(e)}",
            exc_info=True,
        )
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove participant",
        )


@router.delete(
    "/{guid}/participants",
    response_model=EventDetailResponse,
    summary="Remove all participants",
)
async def remove_all_participants(
    guid: str,
    admin: AuthContext = Depends(require_admin),
    event_service: EventService = Depends(get_event_service),
) -> EventDetailResponse:
    """
    Clear an event's participant list. Capacity and status are unchanged.
    """
    try:
        event = event_service.remove_all_participants(guid)
        return EventDetailResponse(
            **event_service.build_event_detail_response(event)
        )

    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except StoreError as e:
        raise _store_error(e)
    except Exception as e:
        logger.error(f"Error clearing participants of {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to remove participants",
        )


# ============================================================================
# Student Endpoints
# ============================================================================


@router.post(
    "/{guid}/register",
    response_model=RegistrationResponse,
    status_code=status.HTTP_201_CREATED,
    summary="Register for an event",
    responses={400: {"model": RegistrationErrorResponse}},
)
async def register_for_event(
    guid: str,
    student: StudentIdentity = Depends(require_student),
    event_service: EventService = Depends(get_event_service),
) -> RegistrationResponse:
    """
    Register the authenticated student for an event.

    Raises:
        400: EventEnded, EventCancelled, EventOngoing, EventFull or
             AlreadyRegistered (body: {"error": kind, "message": ...})
        404: Event not found
        500: Conflicting writes persisted through every retry

    Example:
        POST /api/events/evt_xxx/register

        Response (400):
        {
          "error": "EventFull",
          "message": "Event is full. Registration closed."
        }
    """
    try:
        event, participant = event_service.register(guid, student)
        return RegistrationResponse(
            event=EventResponse(**event_service.build_event_response(event)),
            participant=ParticipantResponse.model_validate(participant),
        )

    except RegistrationError:
        raise
    except NotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Event {guid} not found",
        )
    except StoreError as e:
        raise _store_error(e)
    except Exception as e:
        logger.error(f"Error registering for event {guid}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to register for event",
        )
