from __future__ import annotations

import logging
import time
import uuid
from datetime import date, datetime
from enum import Enum
from typing import Any

from pydantic import BaseModel, field_validator
from pydantic.alias_generators import to_camel

logger = logging.getLogger(__name__)


class ApplicationStatus(str, Enum):
    APPLIED = "Applied"
    SCREENING = "Screening"
    INTERVIEW_SCHEDULED = "Interview Scheduled"
    INTERVIEWED = "Interviewed"
    TECHNICAL_TEST = "Technical Test"
    OFFER = "Offer"
    REJECTED = "Rejected"
    WITHDRAWN = "Withdrawn"
    FOLLOW_UP_NEEDED = "Follow-up Needed"


class Platform(str, Enum):
    LINKEDIN = "LinkedIn"
    UPWORK = "Upwork"
    INDEED = "Indeed"
    COMPANY_WEBSITE = "Company Website"
    REFERRAL = "Referral"
    RECRUITER_CONTACT = "Recruiter Contact"
    OTHER = "Other"


class Location(str, Enum):
    REMOTE = "Remote"
    HYBRID = "Hybrid"
    ONSITE_LAGOS = "On-site - Lagos"
    ONSITE_IBADAN = "On-site - Ibadan"
    ONSITE_ABUJA = "On-site - Abuja"
    INTERNATIONAL_REMOTE = "International Remote"
    OTHER = "Other"


class CvVersion(str, Enum):
    SUPPORT = "Support"
    INFRASTRUCTURE = "Infrastructure"
    CUSTOM = "Custom"


# No follow-up reminders once an application reaches one of these.
TERMINAL_STATUSES = frozenset(
    {ApplicationStatus.REJECTED.value, ApplicationStatus.WITHDRAWN.value, ApplicationStatus.OFFER.value}
)

DEFAULT_PLATFORM = Platform.LINKEDIN.value

_TEXT_FIELDS = (
    "company",
    "position",
    "location",
    "status",
    "salary",
    "job_url",
    "contact_person",
    "notes",
    "cv_version",
)
_DATE_FIELDS = ("date_applied", "follow_up_date", "last_update")


class InvalidFieldError(ValueError):
    """Raised when a field name is unknown or not editable."""


def generate_id() -> str:
    """Millisecond clock plus a random tiebreaker for records created in the same instant."""
    return f"{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


def parse_date(value: Any) -> date | None:
    """Best-effort conversion of stored/imported values to a date; unusable input reads as unset."""
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    text = str(value).strip()
    if not text:
        return None
    try:
        return date.fromisoformat(text[:10])
    except ValueError:
        logger.warning("Ignoring unparseable date value %r", value)
        return None


class ApplicationDraft(BaseModel):
    """An application being composed; not yet part of the collection."""

    company: str = ""
    position: str = ""
    location: str = ""
    platform: str | None = None
    date_applied: date | None = None
    status: str = ApplicationStatus.APPLIED.value
    salary: str = ""
    job_url: str = ""
    contact_person: str = ""
    notes: str = ""
    cv_version: str = ""
    follow_up_date: date | None = None
    last_update: date | None = None

    model_config = {"alias_generator": to_camel, "populate_by_name": True}

    @field_validator(*_TEXT_FIELDS, mode="before")
    @classmethod
    def _coerce_text(cls, value: Any) -> Any:
        if value is None:
            return ""
        if isinstance(value, Enum):
            return value.value
        if isinstance(value, (int, float)):
            return str(value)
        return value

    @field_validator("platform", mode="before")
    @classmethod
    def _coerce_platform(cls, value: Any) -> Any:
        if isinstance(value, Enum):
            return value.value
        if value == "":
            return None
        return value

    @field_validator(*_DATE_FIELDS, mode="before")
    @classmethod
    def _coerce_date(cls, value: Any) -> date | None:
        return parse_date(value)

    @property
    def resolved_platform(self) -> str:
        """Platform with the LinkedIn default applied for records that predate the field."""
        return self.platform or DEFAULT_PLATFORM

    def is_creatable(self) -> bool:
        return bool(self.company.strip()) and bool(self.position.strip())


class Application(ApplicationDraft):
    id: str = ""

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value: Any) -> Any:
        # Older exports stored numeric ids.
        if isinstance(value, (int, float)):
            return str(int(value))
        if value is None:
            return ""
        return value

    def is_follow_up_due(self, today: date | None = None) -> bool:
        if self.follow_up_date is None:
            return False
        today = today or date.today()
        return self.follow_up_date <= today and self.status not in TERMINAL_STATUSES

    def with_field(self, field: str, value: Any, today: date | None = None) -> Application:
        """Return a copy with one field replaced and ``last_update`` re-stamped."""
        name = resolve_field_name(field)
        today = today or date.today()
        stamp = today if self.last_update is None else max(today, self.last_update)
        if name in _DATE_FIELDS and value not in (None, "") and parse_date(value) is None:
            raise InvalidFieldError(f"{value!r} is not a valid date for {field!r}")
        data = self.model_dump()
        data[name] = value
        data["last_update"] = stamp
        updated = Application.model_validate(data)
        check_choice(name, getattr(updated, name))
        return updated


EDITABLE_FIELDS = frozenset(ApplicationDraft.model_fields) - {"last_update"}
_ALIASES = {to_camel(name): name for name in EDITABLE_FIELDS}


# Allowed values for fields set through add/edit, and whether empty is allowed.
# Loaded and imported records are not checked.
_CHOICES = {
    "status": (frozenset(s.value for s in ApplicationStatus), False),
    "location": (frozenset(loc.value for loc in Location), True),
    "platform": (frozenset(p.value for p in Platform), True),
    "cv_version": (frozenset(cv.value for cv in CvVersion), False),
}


def check_choice(name: str, value: Any) -> None:
    """Raise InvalidFieldError if ``value`` is outside the fixed set for ``name``."""
    if name not in _CHOICES:
        return
    allowed, empty_ok = _CHOICES[name]
    if not value:
        if empty_ok:
            return
    elif value in allowed:
        return
    raise InvalidFieldError(f"{value!r} is not a valid {to_camel(name)}")


def check_choices(record: ApplicationDraft) -> None:
    for name in _CHOICES:
        check_choice(name, getattr(record, name))


def resolve_field_name(field: str) -> str:
    """Map a JSON (camelCase) or Python field name to the editable attribute name."""
    if field in EDITABLE_FIELDS:
        return field
    if field in _ALIASES:
        return _ALIASES[field]
    raise InvalidFieldError(f"Field {field!r} cannot be edited")


def new_draft(today: date | None = None) -> ApplicationDraft:
    """Blank draft with the defaults the add form starts from."""
    today = today or date.today()
    return ApplicationDraft(
        platform=DEFAULT_PLATFORM,
        date_applied=today,
        status=ApplicationStatus.APPLIED.value,
        cv_version=CvVersion.SUPPORT.value,
        last_update=today,
    )
