"""Kinisi onboarding backend: program scheduling and onboarding progress."""
