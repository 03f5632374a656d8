"""
Console for browsing job-queue results.

Fetches queues, jobs and results from the job-queue service and prints them
as text tables or JSON.
"""

import json
import logging
import os
import sys
from datetime import datetime

import click

from ci_common.fetch_state import FetchState
from ci_common.models import JobResult, JobSummary
from ci_results.actions import available_actions
from ci_results.artifacts import artifact_kind, associate_result
from ci_results.job_view import JobQuery, SortKey, apply_query, resolve_project_filter
from ci_results.summary import (
    describe_test_case,
    environment_snapshot,
    extra_details,
    format_detail_key,
    suite_summary,
)
from ci_results.tree import CategoryNode, TreeNode, TreeView

from .client import (
    DEFAULT_SERVER_URL,
    FETCH_TIMEOUT,
    abort_job,
    cancel_job,
    fetch_job_result,
    fetch_jobs,
    fetch_project_results,
    fetch_queue_statuses,
    prioritize_job,
    rerun_job,
)

SORT_CHOICES = [key.value for key in SortKey]


def get_server_url() -> str:
    """
    Get the job-queue API URL from environment variable or use default.

    Environment variables:
    - CI_SERVER_URL: Base URL of the job-queue REST API
    """
    return os.environ.get("CI_SERVER_URL", DEFAULT_SERVER_URL)


def get_timeout() -> float:
    """Request timeout in seconds from CI_REQUEST_TIMEOUT, or the default."""
    raw = os.environ.get("CI_REQUEST_TIMEOUT")
    if not raw:
        return FETCH_TIMEOUT
    try:
        timeout = float(raw)
    except ValueError:
        return FETCH_TIMEOUT
    return timeout if timeout > 0 else FETCH_TIMEOUT


def format_time(value: datetime | None) -> str:
    """Format a timestamp to human-readable form."""
    if value is None:
        return "N/A"
    return value.strftime("%Y-%m-%d %H:%M:%S")


def _exit_on_error(state: FetchState, what: str) -> None:
    if state.is_error:
        click.echo(f"Error loading {what}: {state.error}", err=True)
        click.echo(
            f"Please ensure the server is running and the API URL ({get_server_url()}) "
            "is correct.",
            err=True,
        )
        sys.exit(1)


def _print_jobs(jobs: list[JobSummary], json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps([job.to_dict() for job in jobs], indent=2))
        return
    if not jobs:
        click.echo("No jobs found.")
        return

    click.echo(
        f"{'STATUS':<10} {'JOB ID':<15} {'PROJECT':<16} {'DETAILS':<24} {'PRI':>4} "
        f"{'PROGRESS':>9} {'PASS':>7} {'ENQUEUED':<20} {'STARTED':<20} {'RUNNER':<12} ACTIONS"
    )
    click.echo("-" * 160)
    for job in jobs:
        job_id = job.id if len(job.id) <= 12 else f"{job.id[:12]}..."
        priority = str(job.priority) if job.priority is not None else "-"
        actions = ",".join(action.value for action in available_actions(job))
        click.echo(
            f"{job.status:<10} {job_id:<15} {job.project[:16]:<16} "
            f"{job.brief_details[:24]:<24} {priority:>4} {job.display_progress:>9} "
            f"{job.display_pass_rate:>7} {format_time(job.enqueued_at):<20} "
            f"{format_time(job.started_at):<20} {(job.runner_id or '-'):<12} {actions}"
        )


def _node_to_dict(node: TreeNode) -> dict:
    if isinstance(node, CategoryNode):
        return {"category": node.name, "children": [_node_to_dict(c) for c in node.children]}
    return {"test_case": node.fields}


@click.group()
@click.option("--verbose", "-v", is_flag=True, help="Enable debug logging")
def cli(verbose: bool):
    """CI Console - Browse queues, jobs and test results."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )


# ============================================================================
# Listing Commands
# ============================================================================


@cli.command("queues")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def queues(json_output: bool):
    """Show the queue overview for every project."""
    state = FetchState.capture(
        fetch_queue_statuses, server_url=get_server_url(), timeout=get_timeout()
    )
    _exit_on_error(state, "queues")

    statuses = state.data or []
    if json_output:
        click.echo(json.dumps([status.to_dict() for status in statuses], indent=2))
        return
    if state.is_empty:
        click.echo("No queue data available.")
        return

    click.echo(
        f"{'PROJECT':<24} {'PENDING':>8} {'RUNNING':>8} {'RUNNERS':>8} {'TOP PRI':>8}  LAST ACTIVITY"
    )
    click.echo("-" * 90)
    for status in statuses:
        top = str(status.highest_priority) if status.highest_priority is not None else "-"
        click.echo(
            f"{status.project[:24]:<24} {status.pending_jobs:>8} {status.running_suites:>8} "
            f"{status.active_runners:>8} {top:>8}  {format_time(status.last_activity)}"
        )


@cli.command("jobs")
@click.option("--project", default=None, help="Only show jobs of this project")
@click.option(
    "--sort", "sort_key", type=click.Choice(SORT_CHOICES), default=SortKey.ENQUEUED_AT.value,
    help="Column to sort by",
)
@click.option("--asc/--desc", "ascending", default=False, help="Sort direction")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def jobs(project: str | None, sort_key: str, ascending: bool, json_output: bool):
    """List jobs, filtered and sorted."""
    state = FetchState.capture(fetch_jobs, server_url=get_server_url(), timeout=get_timeout())
    _exit_on_error(state, "jobs")

    all_jobs = state.data or []
    query = JobQuery(
        project=resolve_project_filter(project, all_jobs),
        sort_key=SortKey(sort_key),
        ascending=ascending,
    )
    _print_jobs(apply_query(all_jobs, query), json_output)


@cli.command("results")
@click.argument("project")
@click.option(
    "--sort", "sort_key", type=click.Choice(SORT_CHOICES), default=SortKey.STARTED_AT.value,
    help="Column to sort by",
)
@click.option("--asc/--desc", "ascending", default=False, help="Sort direction")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def results(project: str, sort_key: str, ascending: bool, json_output: bool):
    """List recorded results of a project."""
    state = FetchState.capture(
        fetch_project_results, project, server_url=get_server_url(), timeout=get_timeout()
    )
    _exit_on_error(state, f"results for {project}")

    query = JobQuery(sort_key=SortKey(sort_key), ascending=ascending)
    _print_jobs(apply_query(state.data or [], query), json_output)


# ============================================================================
# Result Detail
# ============================================================================


def _print_rows(title: str, rows: list[tuple[str, object]]) -> None:
    if not rows:
        return
    click.echo(f"\n{title}")
    for key, value in rows:
        click.echo(f"  {format_detail_key(key) + ':':<24} {value}")


def _print_result(result: JobResult, collapse: bool) -> None:
    click.echo(f"Job {result.id} [{result.status}]")
    click.echo(f"  Project:   {result.project}")
    click.echo(f"  Duration:  {result.duration_seconds:.2f}s")
    click.echo(f"  Started:   {format_time(result.started_at)}")
    click.echo(f"  Ended:     {format_time(result.finished_at)}")
    click.echo(f"  Pass Rate: {result.display_pass_rate}")

    _print_rows("Suite Summary", suite_summary(result))
    _print_rows("Device Snapshot", environment_snapshot(result))
    _print_rows("Other Details", extra_details(result))

    artifacts = associate_result(result)
    view = TreeView(result.tree)
    if collapse:
        view.collapse_all()

    click.echo("\nTest Cases")
    if not result.tree:
        click.echo("  No test case data.")
    for row in view.rows():
        indent = "  " * (row.depth + 1)
        if isinstance(row.node, CategoryNode):
            marker = "v" if row.expanded else ">"
            click.echo(f"{indent}{marker} {row.node.name}")
            continue
        case = describe_test_case(row.node)
        click.echo(f"{indent}- {case.title}  [{case.status}]  {case.duration_seconds:.2f}s")
        for step in case.steps:
            click.echo(f"{indent}    step: {step.action} [{step.status}]")
        owned = artifacts.screenshots.for_test_case(case.id) + artifacts.videos.for_test_case(
            case.id
        )
        for url in owned:
            click.echo(f"{indent}    {artifact_kind(url).value}: {url}")

    if artifacts.general:
        click.echo("\nGeneral Artifacts")
        for url in artifacts.general:
            click.echo(f"  {artifact_kind(url).value}: {url}")

    if result.messages:
        click.echo("\nMessages")
        for message in result.messages:
            click.echo(f"  {message}")

    if result.logs_url:
        click.echo(f"\nLogs: {result.logs_url}")
    elif result.inline_logs:
        click.echo("\nLogs")
        click.echo(result.inline_logs)


@cli.command("result")
@click.argument("job_id")
@click.option("--collapse", is_flag=True, help="Collapse all test categories")
@click.option("--json", "json_output", is_flag=True, help="Output as JSON")
def result(job_id: str, collapse: bool, json_output: bool):
    """Show the detailed result of one job."""
    state = FetchState.capture(
        fetch_job_result, job_id, server_url=get_server_url(), timeout=get_timeout()
    )
    _exit_on_error(state, f"result for job {job_id}")

    if json_output:
        data = state.data.to_dict()
        data["tree"] = [_node_to_dict(node) for node in state.data.tree]
        click.echo(json.dumps(data, indent=2))
        return
    _print_result(state.data, collapse)


# ============================================================================
# Job Actions
# ============================================================================


def _run_action(action, job_id: str, done: str, failed: str) -> None:
    if action(job_id, server_url=get_server_url()):
        click.echo(f"✓ {done}")
    else:
        click.echo(f"Error: {failed}", err=True)
        sys.exit(1)


@cli.command("cancel")
@click.argument("job_id")
def cancel(job_id: str):
    """Cancel a pending job."""
    _run_action(cancel_job, job_id, f"Job {job_id} cancelled.", f"Failed to cancel job {job_id}.")


@cli.command("prioritize")
@click.argument("job_id")
def prioritize(job_id: str):
    """Move a pending job to the front of its queue."""
    _run_action(
        prioritize_job, job_id, f"Job {job_id} prioritized.", f"Failed to prioritize job {job_id}."
    )


@cli.command("rerun")
@click.argument("job_id")
def rerun(job_id: str):
    """Re-queue a finished job."""
    _run_action(rerun_job, job_id, f"Job {job_id} re-queued.", f"Failed to re-run job {job_id}.")


@cli.command("abort")
@click.argument("job_id")
def abort(job_id: str):
    """Abort a running job."""
    _run_action(
        abort_job, job_id, f"Abort signal sent for job {job_id}.", f"Failed to abort job {job_id}."
    )


def main():
    """Main entry point for the CI console."""
    cli()


if __name__ == "__main__":
    main()
