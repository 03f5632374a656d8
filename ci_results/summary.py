"""
Display-ready summaries of a job result's metadata and test cases.
"""

from dataclasses import dataclass
from typing import Any

from ci_common.decode import as_float, decode_field
from ci_common.models import JobResult

from .tree import STEPS_KEY, TestCaseNode

SUITE_SUMMARY_ORDER = ("total_tests", "passed", "failed", "critical", "retest", "skipped")

# Details shown in dedicated summary rows, or internal to the job list
_SHOWN_DETAIL_KEYS = frozenset(
    {"suite_name", "suite", "build_version", "platform", "environment", "runner_id"}
)


def format_detail_key(key: str) -> str:
    """Turn a snake_case key into a title ("build_version" -> "Build Version")."""
    return " ".join(word[:1].upper() + word[1:] for word in key.split("_"))


def _metadata_map(result: JobResult, key: str) -> dict[str, Any]:
    value = (result.metadata or {}).get(key)
    return value if isinstance(value, dict) else {}


def suite_summary(result: JobResult) -> list[tuple[str, Any]]:
    """Suite execution counters, well-known counters first."""
    summary = _metadata_map(result, "suite_execution_summary")
    ordered = [(key, summary[key]) for key in SUITE_SUMMARY_ORDER if key in summary]
    ordered.extend(
        (key, value) for key, value in summary.items() if key not in SUITE_SUMMARY_ORDER
    )
    return ordered


def environment_snapshot(result: JobResult) -> list[tuple[str, str]]:
    return [
        (key, str(value) if value is not None else "N/A")
        for key, value in _metadata_map(result, "environment_snapshot").items()
    ]


def extra_details(result: JobResult) -> list[tuple[str, Any]]:
    """
    Details not already shown elsewhere on the result summary.

    Skips the dedicated keys, anything repeated in the environment snapshot,
    and scalar values that are empty or "N/A". Nested maps and lists are kept.
    """
    snapshot = _metadata_map(result, "environment_snapshot")
    extras = []
    for key, value in (result.details or {}).items():
        if key in _SHOWN_DETAIL_KEYS or key in snapshot:
            continue
        if isinstance(value, (dict, list)):
            extras.append((key, value))
            continue
        text = "N/A" if value is None else str(value)
        if text and text != "N/A":
            extras.append((key, value))
    return extras


@dataclass(frozen=True)
class StepSummary:
    action: str
    status: str


@dataclass(frozen=True)
class TestCaseSummary:
    """Display fields of one test case."""

    __test__ = False

    id: str
    title: str
    status: str
    duration_seconds: float
    logs: str
    steps: tuple[StepSummary, ...] = ()


def describe_test_case(node: TestCaseNode) -> TestCaseSummary:
    fields = node.fields
    name = fields.get("name")
    name = str(name) if name is not None else "Unknown Test Case"
    status = fields.get("status")
    logs = fields.get("logs")
    raw_steps = fields.get(STEPS_KEY)

    steps = []
    for step in raw_steps if isinstance(raw_steps, list) else []:
        if not isinstance(step, dict):
            continue
        action = step.get("action")
        step_status = step.get("status")
        steps.append(
            StepSummary(
                action=str(action) if action is not None else "No action description",
                status=str(step_status) if step_status is not None else "UNKNOWN",
            )
        )

    return TestCaseSummary(
        id=node.id,
        title=f"{node.id}: {name}",
        status=str(status) if status is not None else "UNKNOWN",
        duration_seconds=decode_field(fields, "duration_ms", as_float, 0.0) / 1000.0,
        logs=str(logs) if logs is not None else "",
        steps=tuple(steps),
    )
