"""REST API for Regflow."""

from regflow.api.app import app, create_app
from regflow.api.models import (
    APIResponse,
    CourseCreate,
    CourseResponse,
    CourseUpdate,
    RegistrationResponse,
)

__all__ = [
    "APIResponse",
    "CourseCreate",
    "CourseResponse",
    "CourseUpdate",
    "RegistrationResponse",
    "app",
    "create_app",
]
