from __future__ import annotations
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select
from kinisi.models.program import ExerciseProgram
from kinisi.repositories.base import Repository


class ProgramRepository(Repository[ExerciseProgram, str]):
    def __init__(self, session: AsyncSession):
        self._session = session

    async def get(self, id: str) -> ExerciseProgram | None:
        return await self._session.get(ExerciseProgram, id)

    async def create(self, entity: ExerciseProgram) -> ExerciseProgram:
        self._session.add(entity)
        await self._session.flush()
        return entity

    async def update(self, id: str, updates: dict) -> ExerciseProgram | None:
        program = await self.get(id)
        if program:
            for key, value in updates.items():
                setattr(program, key, value)
            await self._session.flush()
            await self._session.refresh(program)
        return program

    async def get_latest_for_user(self, user_id: str) -> ExerciseProgram | None:
        result = await self._session.execute(
            select(ExerciseProgram)
            .where(ExerciseProgram.user_id == user_id)
            .order_by(ExerciseProgram.created_at.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()
