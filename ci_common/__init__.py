"""
CI Common module.

This module contains the typed entities, defensive decode primitives and the
entity normalizer shared by the result engines and the console client.

The common module has no dependencies on other ci_* modules, making it
a pure domain layer that can be imported by any component.
"""

from .decode import DecodeError, parse_body
from .fetch_state import FetchState, FetchStatus
from .models import JobResult, JobSummary, QueueStatus
from .normalize import EntityKind, decode_entity, decode_entity_list

__all__ = [
    "DecodeError",
    "EntityKind",
    "FetchState",
    "FetchStatus",
    "JobResult",
    "JobSummary",
    "QueueStatus",
    "decode_entity",
    "decode_entity_list",
    "parse_body",
]
