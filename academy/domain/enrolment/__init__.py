"""Enrolment domain - family sign-up and checkout"""

from .router import router

__all__ = ["router"]
