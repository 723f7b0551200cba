"""Repositories package."""
from kinisi.repositories.base import Repository
from kinisi.repositories.onboarding_repository import OnboardingRepository
from kinisi.repositories.program_repository import ProgramRepository

__all__ = [
    "Repository",
    "OnboardingRepository",
    "ProgramRepository",
]
