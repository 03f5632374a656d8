"""Actions a console may offer for a job, based on its status and priority."""

from enum import Enum

from ci_common.models import JobSummary

# Priority 0 is already the most urgent a job can be
TOP_PRIORITY = 0


class JobAction(Enum):
    VIEW_RESULTS = "view_results"
    RERUN = "rerun"
    CANCEL = "cancel"
    PRIORITIZE = "prioritize"
    ABORT = "abort"


def available_actions(job: JobSummary) -> tuple[JobAction, ...]:
    """
    Actions that make sense for job right now.

    Finished jobs can be inspected and re-run, pending jobs cancelled or
    prioritized, running jobs aborted. Re-run and prioritize are withheld
    from jobs already at top priority.
    """
    actions: list[JobAction] = []
    can_escalate = job.priority != TOP_PRIORITY
    if job.is_finished:
        actions.append(JobAction.VIEW_RESULTS)
        if can_escalate:
            actions.append(JobAction.RERUN)
    if job.status_key == "PENDING":
        actions.append(JobAction.CANCEL)
        if can_escalate:
            actions.append(JobAction.PRIORITIZE)
    if job.status_key == "RUNNING":
        actions.append(JobAction.ABORT)
    return tuple(actions)
