"""
Sort/filter engine for job lists.

Works on any JobSummary (including JobResult) and always returns a new list;
the source sequence is never reordered.
"""

from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any

from ci_common.models import JobSummary


class SortKey(Enum):
    """Columns a job list can be sorted by."""

    STATUS = "status"
    ID = "id"
    PROJECT = "project"
    DETAILS = "details"
    PRIORITY = "priority"
    PROGRESS = "progress"
    PASS_RATE = "pass_rate"
    ENQUEUED_AT = "enqueued_at"
    STARTED_AT = "started_at"
    RUNNER = "runner"


@dataclass(frozen=True)
class JobQuery:
    """
    A declarative sort/filter request.

    project=None means no filter; a string keeps only jobs of that exact
    project, so a real project named like a UI label ("All Projects") still
    filters correctly.
    """

    project: str | None = None
    sort_key: SortKey = SortKey.ENQUEUED_AT
    ascending: bool = False


def _missing_last(value: Any) -> tuple[bool, Any]:
    return (value is None, value if value is not None else 0)


def _invalid_first(value: float | None) -> tuple[bool, float]:
    return (value is not None, value if value is not None else 0.0)


_SORT_VALUES: dict[SortKey, Callable[[JobSummary], Any]] = {
    SortKey.STATUS: lambda job: job.status or "",
    SortKey.ID: lambda job: job.id or "",
    SortKey.PROJECT: lambda job: job.project or "",
    SortKey.DETAILS: lambda job: job.brief_details or "",
    SortKey.RUNNER: lambda job: job.runner_id or "",
    SortKey.PRIORITY: lambda job: _missing_last(job.priority),
    SortKey.PROGRESS: lambda job: _invalid_first(job.progress_fraction),
    SortKey.PASS_RATE: lambda job: _invalid_first(job.pass_rate_value),
}

_TIMESTAMPS: dict[SortKey, Callable[[JobSummary], datetime | None]] = {
    SortKey.ENQUEUED_AT: lambda job: job.enqueued_at,
    SortKey.STARTED_AT: lambda job: job.started_at,
}


def filter_jobs(jobs: Iterable[JobSummary], project: str | None = None) -> list[JobSummary]:
    """Keep jobs of exactly the given project; None keeps everything."""
    if project is None:
        return list(jobs)
    return [job for job in jobs if job.project == project]


def sort_jobs(
    jobs: Iterable[JobSummary], key: SortKey, ascending: bool = True
) -> list[JobSummary]:
    """
    Sort jobs by one column.

    Sorting is stable. Direction flips every comparison except for
    timestamps, where jobs without a timestamp go last in both directions.
    """
    jobs = list(jobs)
    if key in _TIMESTAMPS:
        value = _TIMESTAMPS[key]
        known = [job for job in jobs if value(job) is not None]
        unknown = [job for job in jobs if value(job) is None]
        return sorted(known, key=value, reverse=not ascending) + unknown
    return sorted(jobs, key=_SORT_VALUES[key], reverse=not ascending)


def apply_query(jobs: Iterable[JobSummary], query: JobQuery) -> list[JobSummary]:
    """Filter, then sort, per query."""
    return sort_jobs(filter_jobs(jobs, query.project), query.sort_key, query.ascending)


def project_choices(jobs: Iterable[JobSummary]) -> list[str]:
    """Distinct project names in first-seen order."""
    return list(dict.fromkeys(job.project for job in jobs))


def resolve_project_filter(
    project: str | None, jobs: Sequence[JobSummary]
) -> str | None:
    """Drop a project filter that matches none of the fetched jobs."""
    if project is None or project not in project_choices(jobs):
        return None
    return project
