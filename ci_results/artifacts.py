"""
Best-effort association of artifact URLs with test cases.

A URL belongs to a test case when the file name at the end of its path
contains the test case id (case-insensitive). This is a heuristic: short or
overlapping ids can match several test cases or the wrong one, and nothing
here breaks such ties beyond iteration order.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum
from urllib.parse import urlsplit

from ci_common.models import JobResult

from .tree import TestCaseNode, build_tree, flatten_tree


class ArtifactKind(Enum):
    IMAGE = "image"
    VIDEO = "video"
    TEXT = "text"
    OTHER = "other"


_EXTENSIONS = {
    ArtifactKind.IMAGE: (".png", ".jpg", ".jpeg", ".gif", ".bmp", ".webp"),
    ArtifactKind.VIDEO: (".mp4", ".webm", ".mov", ".avi"),
    ArtifactKind.TEXT: (".txt", ".log", ".json", ".xml", ".yaml", ".yml"),
}


def artifact_file_name(url: str) -> str:
    """Lower-cased last path segment of url, without query or fragment."""
    try:
        path = urlsplit(url).path
    except ValueError:
        # Unparsable netloc (e.g. a broken IPv6 literal); cut the URL by hand
        path = re.split(r"[?#]", url, maxsplit=1)[0]
    return path.rsplit("/", 1)[-1].lower()


def artifact_kind(url: str) -> ArtifactKind:
    """Classify an artifact by its file extension."""
    name = artifact_file_name(url)
    for kind, extensions in _EXTENSIONS.items():
        if name.endswith(extensions):
            return kind
    return ArtifactKind.OTHER


def matches_test_case(url: str, test_case: TestCaseNode) -> bool:
    test_case_id = test_case.id.lower()
    return bool(test_case_id) and test_case_id in artifact_file_name(url)


def artifacts_for(test_case: TestCaseNode, urls: Iterable[str]) -> tuple[str, ...]:
    """Every URL that matches test_case, in source order."""
    return tuple(url for url in urls if matches_test_case(url, test_case))


def owner_of(url: str, test_cases: Iterable[TestCaseNode]) -> TestCaseNode | None:
    """The first test case url matches, or None."""
    for test_case in test_cases:
        if matches_test_case(url, test_case):
            return test_case
    return None


@dataclass(frozen=True)
class ArtifactPartition:
    """
    URLs split into those owned by a test case and the general remainder.

    by_test_case maps a test case id to its URLs. A URL matching several
    test cases is listed under each of them. Both halves keep every
    occurrence of a repeated URL, in source order.
    """

    by_test_case: dict[str, tuple[str, ...]] = field(default_factory=dict)
    general: tuple[str, ...] = ()

    def for_test_case(self, test_case_id: str) -> tuple[str, ...]:
        return self.by_test_case.get(test_case_id, ())


def partition_artifacts(
    urls: Iterable[str], test_cases: Sequence[TestCaseNode]
) -> ArtifactPartition:
    """Split urls into per-test-case lists and unassociated ones."""
    by_test_case: dict[str, list[str]] = {}
    general: list[str] = []
    for url in urls:
        owners = [tc for tc in test_cases if matches_test_case(url, tc)]
        if not owners:
            general.append(url)
            continue
        # Test cases sharing an id share one list
        for owner_id in dict.fromkeys(owner.id for owner in owners):
            by_test_case.setdefault(owner_id, []).append(url)
    return ArtifactPartition(
        by_test_case={key: tuple(value) for key, value in by_test_case.items()},
        general=tuple(general),
    )


@dataclass(frozen=True)
class ResultArtifacts:
    screenshots: ArtifactPartition
    videos: ArtifactPartition

    @property
    def general(self) -> tuple[str, ...]:
        return self.screenshots.general + self.videos.general


def associate_result(result: JobResult) -> ResultArtifacts:
    """Partition a result's screenshots and videos against its test cases."""
    test_cases = flatten_tree(result.tree or build_tree(result.raw_test_cases))
    return ResultArtifacts(
        screenshots=partition_artifacts(result.screenshots, test_cases),
        videos=partition_artifacts(result.videos, test_cases),
    )
