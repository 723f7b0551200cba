"""
Middleware package for the application.
"""

from kinisi.middleware.request_id import RequestIDMiddleware

__all__ = ["RequestIDMiddleware"]
