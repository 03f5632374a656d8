import logging
from urllib.parse import quote

import requests

from ci_common.decode import parse_body
from ci_common.models import JobResult, JobSummary, QueueStatus
from ci_common.normalize import EntityKind, decode_entity, decode_entity_list
from ci_results.tree import attach_tree

logger = logging.getLogger(__name__)

DEFAULT_SERVER_URL = "https://localhost:8443/api/v1"
FETCH_TIMEOUT = 10
ACTION_TIMEOUT = 5


def _get(url: str, what: str, timeout: float) -> requests.Response:
    """GET url, converting transport and HTTP failures to RuntimeError."""
    logger.info(f"Fetching {what} from: {url}")
    try:
        response = requests.get(url, timeout=timeout)
        response.raise_for_status()
        return response
    except requests.exceptions.RequestException as e:
        raise RuntimeError(f"Error fetching {what}: {e}") from e


def fetch_jobs(
    server_url: str = DEFAULT_SERVER_URL, timeout: float = FETCH_TIMEOUT
) -> list[JobSummary]:
    """
    Fetch the job list.

    Returns:
        list[JobSummary]: One entry per job; an empty body is an empty list

    Raises:
        RuntimeError: If the request fails or the server returns an error status
        DecodeError: If the body is not a JSON list
    """
    response = _get(f"{server_url}/jobs", "jobs", timeout)
    payload = parse_body(response.text, allow_empty=True)
    return decode_entity_list(payload, EntityKind.JOB_SUMMARY)


def fetch_queue_statuses(
    server_url: str = DEFAULT_SERVER_URL, timeout: float = FETCH_TIMEOUT
) -> list[QueueStatus]:
    """Fetch the per-project queue overview."""
    response = _get(f"{server_url}/queues/overview", "queue statuses", timeout)
    payload = parse_body(response.text, allow_empty=True)
    return decode_entity_list(payload, EntityKind.QUEUE_STATUS)


def fetch_project_results(
    project: str, server_url: str = DEFAULT_SERVER_URL, timeout: float = FETCH_TIMEOUT
) -> list[JobResult]:
    """Fetch every result recorded for a project (trees are not built)."""
    url = f"{server_url}/projects/{quote(project, safe='')}/results"
    response = _get(url, f"project results for {project}", timeout)
    payload = parse_body(response.text, allow_empty=True)
    return decode_entity_list(payload, EntityKind.JOB_RESULT)


def fetch_job_result(
    job_id: str, server_url: str = DEFAULT_SERVER_URL, timeout: float = FETCH_TIMEOUT
) -> JobResult:
    """
    Fetch the detailed result of one job, with its test-case tree built.

    Raises:
        RuntimeError: If the request fails or the server returns an error status
        DecodeError: If the body is empty, not JSON, or not a JSON object
    """
    response = _get(f"{server_url}/results/{job_id}", f"job result {job_id}", timeout)
    result = decode_entity(parse_body(response.text), EntityKind.JOB_RESULT)
    return attach_tree(result)


def _post_action(
    job_id: str, action: str, server_url: str, timeout: float = ACTION_TIMEOUT
) -> bool:
    """POST a job action; True on any 2xx response."""
    url = f"{server_url}/jobs/{job_id}/{action}"
    logger.info(f"Attempting to {action} job {job_id} at {url}")
    try:
        response = requests.post(url, timeout=timeout)
    except requests.exceptions.RequestException as e:
        logger.error(f"Error sending {action} for job {job_id}: {e}")
        return False
    return 200 <= response.status_code < 300


def cancel_job(job_id: str, server_url: str = DEFAULT_SERVER_URL) -> bool:
    return _post_action(job_id, "cancel", server_url)


def prioritize_job(job_id: str, server_url: str = DEFAULT_SERVER_URL) -> bool:
    return _post_action(job_id, "prioritize", server_url)


def rerun_job(job_id: str, server_url: str = DEFAULT_SERVER_URL) -> bool:
    return _post_action(job_id, "rerun", server_url)


def abort_job(job_id: str, server_url: str = DEFAULT_SERVER_URL) -> bool:
    return _post_action(job_id, "abort", server_url)
