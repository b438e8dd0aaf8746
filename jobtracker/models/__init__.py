from .application import (
    Application,
    ApplicationDraft,
    ApplicationStatus,
    CvVersion,
    InvalidFieldError,
    Location,
    Platform,
)
from .stats import ApplicationStats, ViewQuery

__all__ = [
    "Application",
    "ApplicationDraft",
    "ApplicationStatus",
    "CvVersion",
    "InvalidFieldError",
    "Location",
    "Platform",
    "ApplicationStats",
    "ViewQuery",
]
