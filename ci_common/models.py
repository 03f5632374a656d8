"""
Data models for job-queue results.

These models are immutable snapshots of what the job-queue service reported
at fetch time. They are built with from_dict(), which never fails on missing
or malformed fields; every gap is filled with a documented default.
"""

import math
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from .decode import (
    as_float,
    as_int,
    as_mapping,
    as_str,
    as_str_list,
    as_timestamp,
    decode_field,
)

FINISHED_STATUSES = frozenset({"PASSED", "FAILED", "SKIPPED", "ERROR", "CANCELLED"})

_ID_KEYS = ("job_id", "id")


def _isoformat(value: datetime | None) -> str | None:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class JobSummary:
    """
    Represents one queued, running or finished job as listed by the service.

    Status values are free-form ("PENDING", "RUNNING", "PASSED", ...) and are
    compared case-insensitively through status_key.
    """

    id: str = "N/A"
    project: str = "N/A"
    status: str = "UNKNOWN"
    details: dict[str, Any] | None = None
    enqueued_at: datetime | None = None
    started_at: datetime | None = None
    finished_at: datetime | None = None
    runner_id: str | None = None  # Taken from details["runner_id"]
    priority: int | None = None  # Lower number = more urgent
    progress: str | None = None  # e.g. "22/102"
    pass_rate: str | None = None  # e.g. "95%"

    @classmethod
    def _summary_fields(cls, data: dict[str, Any]) -> dict[str, Any]:
        details = decode_field(data, "details", as_mapping)
        return {
            "id": decode_field(data, _ID_KEYS, as_str, "N/A"),
            "project": decode_field(data, "project", as_str, "N/A"),
            "status": decode_field(data, "status", as_str, "UNKNOWN"),
            "details": details,
            "enqueued_at": decode_field(data, "enqueued_at", as_timestamp),
            "started_at": decode_field(data, "started_at", as_timestamp),
            "finished_at": decode_field(data, "ended_at", as_timestamp),
            "runner_id": decode_field(details or {}, "runner_id", as_str),
            "priority": decode_field(data, "priority", as_int),
            "progress": decode_field(data, "progress", as_str),
            "pass_rate": decode_field(data, "passrate", as_str),
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobSummary":
        """Create a job summary from a raw JSON object."""
        return cls(**cls._summary_fields(data))

    @property
    def status_key(self) -> str:
        return self.status.upper()

    @property
    def is_finished(self) -> bool:
        return self.status_key in FINISHED_STATUSES

    @property
    def brief_details(self) -> str:
        """Short one-line description taken from the details map."""
        if self.details is None:
            return "No details"
        for key in ("name", "suite", "description"):
            value = self.details.get(key)
            if value is not None:
                return str(value)
        if self.details:
            first = next(iter(self.details.values()))
            if first is not None:
                return str(first)
        return "Details available"

    @property
    def progress_fraction(self) -> float | None:
        """
        Completed fraction parsed from "<completed>/<total>".

        Returns None when progress is absent, malformed or has a zero total.
        """
        if self.progress is None or "/" not in self.progress:
            return None
        parts = self.progress.split("/")
        if len(parts) != 2:
            return None
        try:
            completed = int(parts[0])
            total = int(parts[1])
        except ValueError:
            return None
        if total == 0:
            return None
        return completed / total

    @property
    def pass_rate_value(self) -> float | None:
        """Numeric pass rate parsed from "<number>%", or None."""
        if self.pass_rate is None or not self.pass_rate.endswith("%"):
            return None
        try:
            value = float(self.pass_rate[:-1])
        except ValueError:
            return None
        return value if math.isfinite(value) else None

    @property
    def display_progress(self) -> str:
        return self.progress if self.progress is not None else "N/A"

    @property
    def display_pass_rate(self) -> str:
        return self.pass_rate if self.pass_rate is not None else "N/A"

    def to_dict(self) -> dict[str, Any]:
        """Convert job to dictionary format (for JSON output)."""
        return {
            "job_id": self.id,
            "project": self.project,
            "status": self.status,
            "details": self.details,
            "enqueued_at": _isoformat(self.enqueued_at),
            "started_at": _isoformat(self.started_at),
            "ended_at": _isoformat(self.finished_at),
            "runner_id": self.runner_id,
            "priority": self.priority,
            "progress": self.progress,
            "passrate": self.pass_rate,
        }


@dataclass(frozen=True)
class QueueStatus:
    """Aggregate counters for one project's queue."""

    project: str = "Unknown Project"
    pending_jobs: int = 0
    active_runners: int = 0
    running_suites: int = 0
    highest_priority: int | None = None  # Most urgent pending job, if any
    last_activity: datetime | None = None

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "QueueStatus":
        """Create a queue status from a raw JSON object."""
        return cls(
            project=decode_field(data, "project", as_str, "Unknown Project"),
            pending_jobs=decode_field(data, "pending_jobs", as_int, 0),
            active_runners=decode_field(data, "active_runners", as_int, 0),
            running_suites=decode_field(data, "running_suites", as_int, 0),
            highest_priority=decode_field(data, "highest_priority", as_int),
            last_activity=decode_field(data, "last_activity", as_timestamp),
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "project": self.project,
            "pending_jobs": self.pending_jobs,
            "active_runners": self.active_runners,
            "running_suites": self.running_suites,
            "highest_priority": self.highest_priority,
            "last_activity": _isoformat(self.last_activity),
        }


@dataclass(frozen=True)
class JobResult(JobSummary):
    """
    Full execution record of one job run.

    The tree field stays empty until ci_results.tree.attach_tree() builds it
    from metadata["test_cases"].
    """

    logs: str | None = None  # Inline text or an http(s) URL
    messages: tuple[str, ...] = ()
    duration_seconds: float = 0.0
    screenshots: tuple[str, ...] = ()
    videos: tuple[str, ...] = ()
    metadata: dict[str, Any] | None = None
    tree: tuple[Any, ...] = field(default=(), compare=False)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> "JobResult":
        """Create a job result from a raw JSON object."""
        return cls(
            **cls._summary_fields(data),
            logs=decode_field(data, "logs", as_str),
            messages=decode_field(data, "messages", as_str_list, ()),
            duration_seconds=decode_field(data, "duration_seconds", as_float, 0.0),
            screenshots=decode_field(data, "screenshots", as_str_list, ()),
            videos=decode_field(data, "videos", as_str_list, ()),
            metadata=decode_field(data, "metadata", as_mapping),
        )

    @property
    def logs_url(self) -> str | None:
        """The logs value when it points at a remote log file."""
        if self.logs and self.logs.startswith(("http://", "https://")):
            return self.logs
        return None

    @property
    def inline_logs(self) -> str | None:
        """The logs value when it carries the log text itself."""
        if self.logs and self.logs_url is None:
            return self.logs
        return None

    @property
    def raw_test_cases(self) -> list[Any]:
        """metadata["test_cases"] when it is a list, else an empty list."""
        test_cases = (self.metadata or {}).get("test_cases")
        return test_cases if isinstance(test_cases, list) else []

    def to_dict(self) -> dict[str, Any]:
        result = super().to_dict()
        result.update(
            {
                "logs": self.logs,
                "messages": list(self.messages),
                "duration_seconds": self.duration_seconds,
                "screenshots": list(self.screenshots),
                "videos": list(self.videos),
                "metadata": self.metadata,
            }
        )
        return result
