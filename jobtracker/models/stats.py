from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, Field
from pydantic.alias_generators import to_camel

SortKey = Literal["dateApplied", "company", "status", "followUpDate"]
SortOrder = Literal["asc", "desc"]

ALL = "All"


class ViewQuery(BaseModel):
    """Filter, search and sort state of the applications table."""

    filter_status: str = ALL
    filter_platform: str = ALL
    search_term: str = ""
    sort_by: SortKey = "dateApplied"
    sort_order: SortOrder = "desc"

    model_config = {"alias_generator": to_camel, "populate_by_name": True}


class PlatformBreakdown(BaseModel):
    linkedin: int = Field(0, alias="LinkedIn")
    upwork: int = Field(0, alias="Upwork")
    indeed: int = Field(0, alias="Indeed")
    company_website: int = Field(0, alias="Company Website")
    other: int = Field(0, alias="Other")

    model_config = {"populate_by_name": True}


class ApplicationStats(BaseModel):
    total: int = 0
    by_status: dict[str, int] = Field(default_factory=dict)
    applied: int = 0
    screening: int = 0
    interview: int = Field(0, description="Interview Scheduled + Interviewed")
    offer: int = 0
    rejected: int = 0
    this_week: int = Field(0, description="Applied within the last 7 days")
    this_month: int = Field(0, description="Applied since the same day last month")
    by_platform: PlatformBreakdown = PlatformBreakdown()
    response_rate: int = Field(0, ge=0, le=100, description="Percent past the Applied stage")

    model_config = {"alias_generator": to_camel, "populate_by_name": True}
