"""Derived views over the application collection: filtering, sorting, stats, follow-ups.

Everything here is a pure function of the collection, the view state and
``today``; nothing touches the store or persistence.
"""

from __future__ import annotations

import calendar
import math
from collections import Counter
from collections.abc import Iterable, Sequence
from datetime import date, timedelta

from jobtracker.models.application import Application, ApplicationStatus, Platform
from jobtracker.models.stats import ALL, ApplicationStats, PlatformBreakdown, ViewQuery

# Statuses that have not produced any reply from the employer yet.
_NO_RESPONSE_STATUSES = frozenset(
    {
        ApplicationStatus.APPLIED.value,
        ApplicationStatus.REJECTED.value,
        ApplicationStatus.WITHDRAWN.value,
    }
)

_INTERVIEW_STATUSES = frozenset(
    {ApplicationStatus.INTERVIEW_SCHEDULED.value, ApplicationStatus.INTERVIEWED.value}
)

# Platforms with their own stats bucket; the rest fall under "other".
_PLATFORM_BUCKETS = {
    Platform.LINKEDIN.value: "linkedin",
    Platform.UPWORK.value: "upwork",
    Platform.INDEED.value: "indeed",
    Platform.COMPANY_WEBSITE.value: "company_website",
}


def _matches_search(app: Application, needle: str) -> bool:
    return any(needle in text.lower() for text in (app.company, app.position, app.notes))


def filter_applications(
    applications: Iterable[Application], query: ViewQuery
) -> list[Application]:
    needle = query.search_term.lower()
    result = []
    for app in applications:
        if query.filter_status != ALL and app.status != query.filter_status:
            continue
        if query.filter_platform != ALL and app.resolved_platform != query.filter_platform:
            continue
        if needle and not _matches_search(app, needle):
            continue
        result.append(app)
    return result


def _sort_key(sort_by: str):
    if sort_by == "company":
        return lambda app: app.company.casefold()
    if sort_by == "status":
        return lambda app: app.status
    if sort_by == "followUpDate":
        return lambda app: app.follow_up_date or date.min
    return lambda app: app.date_applied or date.min


def sort_applications(
    applications: Iterable[Application], sort_by: str = "dateApplied", sort_order: str = "desc"
) -> list[Application]:
    # sorted() stays stable with reverse=True, so equal keys keep collection order.
    return sorted(applications, key=_sort_key(sort_by), reverse=sort_order == "desc")


def query_view(applications: Iterable[Application], query: ViewQuery | None = None) -> list[Application]:
    """Filtered, searched and sorted rows for the table."""
    query = query or ViewQuery()
    return sort_applications(
        filter_applications(applications, query), query.sort_by, query.sort_order
    )


def one_month_before(day: date) -> date:
    """Same day of the previous month, clamped to that month's length."""
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def status_counts(applications: Iterable[Application]) -> dict[str, int]:
    """Count per status; every known status is present, unknown ones are kept as-is."""
    counts = {status.value: 0 for status in ApplicationStatus}
    counts.update(Counter(app.status for app in applications))
    return counts


def response_rate(applications: Sequence[Application]) -> int:
    if not applications:
        return 0
    responded = sum(1 for app in applications if app.status not in _NO_RESPONSE_STATUSES)
    # Half-up rounding, not round()'s banker's rounding.
    return math.floor(100 * responded / len(applications) + 0.5)


def compute_stats(applications: Sequence[Application], today: date | None = None) -> ApplicationStats:
    today = today or date.today()
    week_ago = today - timedelta(days=7)
    month_ago = one_month_before(today)

    by_status = status_counts(applications)
    platforms = Counter(
        _PLATFORM_BUCKETS.get(app.resolved_platform, "other") for app in applications
    )
    applied_dates = [app.date_applied for app in applications if app.date_applied is not None]

    return ApplicationStats(
        total=len(applications),
        by_status=by_status,
        applied=by_status[ApplicationStatus.APPLIED.value],
        screening=by_status[ApplicationStatus.SCREENING.value],
        interview=sum(by_status[status] for status in _INTERVIEW_STATUSES),
        offer=by_status[ApplicationStatus.OFFER.value],
        rejected=by_status[ApplicationStatus.REJECTED.value],
        this_week=sum(1 for d in applied_dates if d >= week_ago),
        this_month=sum(1 for d in applied_dates if d >= month_ago),
        by_platform=PlatformBreakdown(**platforms),
        response_rate=response_rate(applications),
    )


def follow_ups_due(applications: Iterable[Application], today: date | None = None) -> list[Application]:
    """Applications whose follow-up date has arrived and that are still open."""
    today = today or date.today()
    return [app for app in applications if app.is_follow_up_due(today)]
