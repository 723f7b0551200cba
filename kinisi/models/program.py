import uuid
from datetime import datetime

from sqlalchemy import JSON, Column, Date, DateTime, String

from kinisi.db.database import Base


def _new_id() -> str:
    return str(uuid.uuid4())


class ProgramStatus:
    DRAFT = "draft"
    APPROVED = "approved"
    ACTIVE = "active"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ExerciseProgram(Base):
    __tablename__ = "exercise_programs"

    id = Column(String(36), primary_key=True, default=_new_id)
    user_id = Column(String(64), nullable=False, index=True)
    status = Column(String(20), nullable=False, default=ProgramStatus.DRAFT)
    program_json = Column(JSON, nullable=True)
    start_date = Column(Date, nullable=True)
    scheduling_preferences = Column(JSON, nullable=True)
    last_scheduled_at = Column(DateTime, nullable=True)
    created_at = Column(DateTime, default=datetime.utcnow)
    updated_at = Column(DateTime, default=datetime.utcnow, onupdate=datetime.utcnow)

    @property
    def is_approved(self) -> bool:
        return self.status in (ProgramStatus.APPROVED, ProgramStatus.ACTIVE, ProgramStatus.COMPLETED)
