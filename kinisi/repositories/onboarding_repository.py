from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from kinisi.models.onboarding import Assessment, SurveyResponse


class OnboardingRepository:
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get_latest_survey_response(self, user_id: str) -> SurveyResponse | None:
        result = await self._session.execute(
            select(SurveyResponse)
            .where(SurveyResponse.user_id == user_id)
            .order_by(SurveyResponse.created_at.desc(), SurveyResponse.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_latest_assessment(self, user_id: str) -> Assessment | None:
        result = await self._session.execute(
            select(Assessment)
            .where(Assessment.user_id == user_id)
            .order_by(Assessment.created_at.desc(), Assessment.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
