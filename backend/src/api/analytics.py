"""
Analytics API endpoints for the admin dashboard.

Provides endpoints for:
- Dashboard totals and per-status counts
- Most popular events
- Registration state of upcoming events
- Most recent registrations
- Student engagement
- Monthly activity for a calendar year

All endpoints are read-only and require an administrator token.
"""

from typing import Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from backend.src.db.database import get_db
from backend.src.middleware.auth import AuthContext, require_admin
from backend.src.schemas.analytics import (
    DashboardStatsResponse,
    PopularEvent,
    PopularEventsResponse,
    RecentRegistration,
    RecentRegistrationsResponse,
    MonthlyStatsResponse,
    StudentEngagementResponse,
    UpcomingEventStats,
    UpcomingEventsResponse,
)
from backend.src.services.analytics_service import AnalyticsService
from backend.src.utils.logging_config import get_logger


logger = get_logger("api")

router = APIRouter(
    prefix="/analytics",
    tags=["Analytics"],
)


def get_analytics_service(db: Session = Depends(get_db)) -> AnalyticsService:
    """Create AnalyticsService instance with database session."""
    return AnalyticsService(db=db)


@router.get(
    "/dashboard",
    response_model=DashboardStatsResponse,
    summary="Dashboard statistics",
)
async def get_dashboard(
    admin: AuthContext = Depends(require_admin),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> DashboardStatsResponse:
    """
    Get totals for the admin dashboard.

    Example:
        GET /api/analytics/dashboard

        Response:
        {
          "total_events": 12,
          "total_registrations": 310,
          "active_students": 187,
          "events_by_status": {"upcoming": 5, "ongoing": 1, "completed": 5, "cancelled": 1}
        }
    """
    try:
        return DashboardStatsResponse(**analytics_service.get_dashboard_stats())
    except Exception as e:
        logger.error(f"Error computing dashboard stats: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute dashboard statistics",
        )


@router.get(
    "/popular-events",
    response_model=PopularEventsResponse,
    summary="Most registered events",
)
async def get_popular_events(
    limit: int = Query(default=5, ge=1, le=100),
    admin: AuthContext = Depends(require_admin),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> PopularEventsResponse:
    try:
        events = [PopularEvent(**e) for e in analytics_service.get_popular_events(limit)]
        return PopularEventsResponse(count=len(events), events=events)
    except Exception as e:
        logger.error(f"Error computing popular events: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute popular events",
        )


@router.get(
    "/upcoming-events",
    response_model=UpcomingEventsResponse,
    summary="Upcoming events with registration state",
)
async def get_upcoming_events(
    admin: AuthContext = Depends(require_admin),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> UpcomingEventsResponse:
    try:
        events = [
            UpcomingEventStats(**e)
            for e in analytics_service.get_upcoming_events_stats()
        ]
        return UpcomingEventsResponse(count=len(events), events=events)
    except Exception as e:
        logger.error(f"Error computing upcoming event stats: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute upcoming events",
        )


@router.get(
    "/recent-registrations",
    response_model=RecentRegistrationsResponse,
    summary="Most recent registrations",
)
async def get_recent_registrations(
    limit: int = Query(default=10, ge=1, le=100),
    admin: AuthContext = Depends(require_admin),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> RecentRegistrationsResponse:
    try:
        registrations = [
            RecentRegistration(**r)
            for r in analytics_service.get_recent_registrations(limit)
        ]
        return RecentRegistrationsResponse(
            count=len(registrations), registrations=registrations
        )
    except Exception as e:
        logger.error(f"Error listing recent registrations: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to list recent registrations",
        )


@router.get(
    "/students/engagement",
    response_model=StudentEngagementResponse,
    summary="Student engagement",
)
async def get_student_engagement(
    admin: AuthContext = Depends(require_admin),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> StudentEngagementResponse:
    try:
        return StudentEngagementResponse(**analytics_service.get_student_engagement())
    except Exception as e:
        logger.error(f"Error computing student engagement: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute student engagement",
        )


@router.get(
    "/monthly",
    response_model=MonthlyStatsResponse,
    summary="Monthly activity",
)
async def get_monthly_stats(
    year: Optional[int] = Query(default=None, ge=2000, le=9998, description="Calendar year (default: current)"),
    admin: AuthContext = Depends(require_admin),
    analytics_service: AnalyticsService = Depends(get_analytics_service),
) -> MonthlyStatsResponse:
    """
    Events created and registrations made in each month of a year.

    Example:
        GET /api/analytics/monthly?year=2026
    """
    try:
        return MonthlyStatsResponse(**analytics_service.get_monthly_stats(year))
    except Exception as e:
        logger.error(f"Error computing monthly stats for {year}: {str(e)}", exc_info=True)
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to compute monthly statistics",
        )
