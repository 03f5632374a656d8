"""
CI Results module.

Presentation-preparation engines over the ci_common entities: the test-case
tree, artifact association, job list sorting/filtering and result summaries.
Everything here is pure and synchronous.
"""

from .actions import JobAction, available_actions
from .artifacts import ArtifactPartition, associate_result, partition_artifacts
from .job_view import JobQuery, SortKey, apply_query, filter_jobs, sort_jobs
from .tree import (
    CategoryNode,
    TestCaseNode,
    TreeView,
    attach_tree,
    build_tree,
    flatten_test_cases,
)

__all__ = [
    "ArtifactPartition",
    "CategoryNode",
    "JobAction",
    "JobQuery",
    "SortKey",
    "TestCaseNode",
    "TreeView",
    "apply_query",
    "associate_result",
    "attach_tree",
    "available_actions",
    "build_tree",
    "filter_jobs",
    "flatten_test_cases",
    "partition_artifacts",
    "sort_jobs",
]
