"""ORM models."""
from kinisi.models.onboarding import Assessment, SurveyResponse
from kinisi.models.program import ExerciseProgram, ProgramStatus

__all__ = [
    "Assessment",
    "ExerciseProgram",
    "ProgramStatus",
    "SurveyResponse",
]
