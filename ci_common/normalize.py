"""
Entity normalizer: turns parsed JSON payloads into typed entities.

Only a wrong top-level shape raises DecodeError. Anything wrong inside an
object is absorbed by the models' defaults.
"""

import logging
from enum import Enum
from typing import Any

from .decode import DecodeError
from .models import JobResult, JobSummary, QueueStatus

logger = logging.getLogger(__name__)


class EntityKind(Enum):
    """The entity shapes the job-queue service returns."""

    JOB_SUMMARY = "job_summary"
    QUEUE_STATUS = "queue_status"
    JOB_RESULT = "job_result"


_ENTITY_TYPES = {
    EntityKind.JOB_SUMMARY: JobSummary,
    EntityKind.QUEUE_STATUS: QueueStatus,
    EntityKind.JOB_RESULT: JobResult,
}


def decode_entity(payload: Any, kind: EntityKind) -> JobSummary | QueueStatus:
    """
    Build one entity from a parsed JSON value.

    Args:
        payload: Parsed JSON (expected to be an object)
        kind: Which entity to build

    Returns:
        The typed entity

    Raises:
        DecodeError: If payload is not a JSON object
    """
    if not isinstance(payload, dict):
        raise DecodeError(
            f"Expected a JSON object for {kind.value}, got {type(payload).__name__}"
        )
    return _ENTITY_TYPES[kind].from_dict(payload)


def decode_entity_list(payload: Any, kind: EntityKind) -> list:
    """
    Build entities from a parsed JSON list.

    A None payload (empty response body) is an empty list. Items that are not
    objects are skipped.

    Raises:
        DecodeError: If payload is neither None nor a JSON list
    """
    if payload is None:
        return []
    if not isinstance(payload, list):
        raise DecodeError(
            f"Expected a JSON list of {kind.value}, got {type(payload).__name__}"
        )
    entities = []
    for item in payload:
        if not isinstance(item, dict):
            logger.warning(f"Skipping malformed {kind.value} item: {item!r}")
            continue
        entities.append(_ENTITY_TYPES[kind].from_dict(item))
    return entities
