"""API routes for onboarding progress."""
from fastapi import APIRouter, Depends, Request
from sqlalchemy.ext.asyncio import AsyncSession

from kinisi.api.routes.dependencies import get_current_user_id
from kinisi.db.database import get_db
from kinisi.schemas.base import APIResponse, ResponseMeta
from kinisi.schemas.scheduling import OnboardingStatusResponse
from kinisi.services.program_service import ProgramScheduleService

router = APIRouter()


@router.get("/status", response_model=APIResponse[OnboardingStatusResponse])
async def get_onboarding_status(
    request: Request,
    db: AsyncSession = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
):
    """Current onboarding step (1-4) plus the flags it was derived from."""
    service = ProgramScheduleService(db)
    status, program = await service.onboarding_status(user_id)

    return APIResponse(
        data=OnboardingStatusResponse(
            step=status.step,
            survey_completed=status.survey_completed,
            assessment_approved=status.assessment_approved,
            program_approved=status.program_approved,
            program_scheduled=status.program_scheduled,
            schedule_complete=status.schedule_complete,
            onboarding_complete=status.onboarding_complete,
            program_id=program.id if program else None,
        ),
        meta=ResponseMeta(request_id=getattr(request.state, "request_id", None)),
    )
