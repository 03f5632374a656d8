"""
Unit tests for the ci-console CLI.

Fetch functions are patched so the commands run without a server.
"""

import json
from datetime import UTC, datetime
from unittest.mock import patch

import pytest
from click.testing import CliRunner

from ci_client.cli import cli, format_time, get_server_url, get_timeout
from ci_common.models import JobResult, JobSummary, QueueStatus
from ci_results.tree import attach_tree


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def sample_jobs():
    return [
        JobSummary(
            id="job-old",
            project="A",
            status="PASSED",
            enqueued_at=datetime(2023, 1, 1, tzinfo=UTC),
        ),
        JobSummary(id="job-none", project="B", status="PENDING"),
        JobSummary(
            id="job-new",
            project="A",
            status="RUNNING",
            enqueued_at=datetime(2024, 1, 1, tzinfo=UTC),
        ),
    ]


class TestConfiguration:
    """Test suite for environment configuration."""

    def test_default_server_url(self, monkeypatch):
        monkeypatch.delenv("CI_SERVER_URL", raising=False)

        assert get_server_url() == "https://localhost:8443/api/v1"

    def test_server_url_from_env(self, monkeypatch):
        monkeypatch.setenv("CI_SERVER_URL", "http://queue:9000/api/v1")

        assert get_server_url() == "http://queue:9000/api/v1"

    @pytest.mark.parametrize("raw,expected", [("3.5", 3.5), ("abc", 10), ("-1", 10), ("", 10)])
    def test_timeout_from_env(self, monkeypatch, raw, expected):
        monkeypatch.setenv("CI_REQUEST_TIMEOUT", raw)

        assert get_timeout() == expected

    def test_format_time(self):
        assert format_time(None) == "N/A"
        assert format_time(datetime(2024, 1, 15, 10, 30, 45, tzinfo=UTC)) == "2024-01-15 10:30:45"


class TestJobsCommand:
    """Test suite for the jobs command."""

    @patch("ci_client.cli.fetch_jobs")
    def test_default_sort_is_enqueued_descending(self, mock_fetch, runner, sample_jobs):
        mock_fetch.return_value = sample_jobs

        result = runner.invoke(cli, ["jobs", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [job["job_id"] for job in data] == ["job-new", "job-old", "job-none"]

    @patch("ci_client.cli.fetch_jobs")
    def test_project_filter(self, mock_fetch, runner, sample_jobs):
        mock_fetch.return_value = sample_jobs

        result = runner.invoke(cli, ["jobs", "--project", "A", "--sort", "id", "--asc", "--json"])

        assert result.exit_code == 0
        assert [job["job_id"] for job in json.loads(result.output)] == ["job-new", "job-old"]

    @patch("ci_client.cli.fetch_jobs")
    def test_unknown_project_shows_all(self, mock_fetch, runner, sample_jobs):
        mock_fetch.return_value = sample_jobs

        result = runner.invoke(cli, ["jobs", "--project", "Gone", "--json"])

        assert len(json.loads(result.output)) == 3

    @patch("ci_client.cli.fetch_jobs")
    def test_table_output(self, mock_fetch, runner, sample_jobs):
        mock_fetch.return_value = sample_jobs

        result = runner.invoke(cli, ["jobs"])

        assert result.exit_code == 0
        assert "JOB ID" in result.output
        assert "job-new" in result.output
        assert "cancel,prioritize" in result.output

    @patch("ci_client.cli.fetch_jobs")
    def test_empty_list(self, mock_fetch, runner):
        mock_fetch.return_value = []

        result = runner.invoke(cli, ["jobs"])

        assert result.exit_code == 0
        assert "No jobs found." in result.output

    @patch("ci_client.cli.fetch_jobs")
    def test_fetch_error(self, mock_fetch, runner):
        mock_fetch.side_effect = RuntimeError("Error fetching jobs: refused")

        result = runner.invoke(cli, ["jobs"])

        assert result.exit_code == 1
        assert "Error loading jobs: Error fetching jobs: refused" in result.output

    def test_invalid_sort_key(self, runner):
        result = runner.invoke(cli, ["jobs", "--sort", "color"])

        assert result.exit_code == 2


class TestQueuesCommand:
    """Test suite for the queues command."""

    @patch("ci_client.cli.fetch_queue_statuses")
    def test_table(self, mock_fetch, runner):
        mock_fetch.return_value = [QueueStatus(project="A", pending_jobs=2, highest_priority=1)]

        result = runner.invoke(cli, ["queues"])

        assert result.exit_code == 0
        assert "PENDING" in result.output
        assert "A" in result.output

    @patch("ci_client.cli.fetch_queue_statuses")
    def test_empty(self, mock_fetch, runner):
        mock_fetch.return_value = []

        result = runner.invoke(cli, ["queues"])

        assert "No queue data available." in result.output

    @patch("ci_client.cli.fetch_queue_statuses")
    def test_json(self, mock_fetch, runner):
        mock_fetch.return_value = [QueueStatus(project="A")]

        result = runner.invoke(cli, ["queues", "--json"])

        assert json.loads(result.output)[0]["project"] == "A"


class TestResultsCommand:
    """Test suite for the results command."""

    @patch("ci_client.cli.fetch_project_results")
    def test_passes_project(self, mock_fetch, runner):
        mock_fetch.return_value = [JobResult(id="r1", project="A", pass_rate="90%")]

        result = runner.invoke(cli, ["results", "A", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)[0]["job_id"] == "r1"
        args, _ = mock_fetch.call_args
        assert args == ("A",)


class TestResultCommand:
    """Test suite for the result command."""

    @pytest.fixture
    def job_result(self):
        return attach_tree(
            JobResult.from_dict(
                {
                    "job_id": "job-9",
                    "project": "A",
                    "status": "FAILED",
                    "duration_seconds": 12.5,
                    "logs": "https://logs.example.com/job-9.log",
                    "screenshots": ["https://cdn/t1_fail.png?sig=1", "https://cdn/overview.png"],
                    "metadata": {
                        "test_cases": [
                            {
                                "Login": [
                                    {
                                        "id": "t1",
                                        "name": "valid login",
                                        "status": "FAILED",
                                        "steps": [{"action": "submit", "status": "FAILED"}],
                                    }
                                ]
                            }
                        ],
                        "suite_execution_summary": {"failed": 1, "total_tests": 1},
                    },
                }
            )
        )

    @patch("ci_client.cli.fetch_job_result")
    def test_text_output(self, mock_fetch, runner, job_result):
        mock_fetch.return_value = job_result

        result = runner.invoke(cli, ["result", "job-9"])

        assert result.exit_code == 0
        assert "Job job-9 [FAILED]" in result.output
        assert "v Login" in result.output
        assert "t1: valid login" in result.output
        assert "step: submit [FAILED]" in result.output
        assert "image: https://cdn/t1_fail.png?sig=1" in result.output
        assert "General Artifacts" in result.output
        assert "Logs: https://logs.example.com/job-9.log" in result.output
        assert result.output.index("Total Tests") < result.output.index("Failed:")

    @patch("ci_client.cli.fetch_job_result")
    def test_collapse(self, mock_fetch, runner, job_result):
        mock_fetch.return_value = job_result

        result = runner.invoke(cli, ["result", "job-9", "--collapse"])

        assert "> Login" in result.output
        assert "t1: valid login" not in result.output

    @patch("ci_client.cli.fetch_job_result")
    def test_json_includes_tree(self, mock_fetch, runner, job_result):
        mock_fetch.return_value = job_result

        result = runner.invoke(cli, ["result", "job-9", "--json"])

        data = json.loads(result.output)
        assert data["tree"][0]["category"] == "Login"
        assert data["tree"][0]["children"][0]["test_case"]["id"] == "t1"

    @patch("ci_client.cli.fetch_job_result")
    def test_error(self, mock_fetch, runner):
        mock_fetch.side_effect = RuntimeError("Error fetching job result job-9: 404")

        result = runner.invoke(cli, ["result", "job-9"])

        assert result.exit_code == 1
        assert "404" in result.output


class TestActionCommands:
    """Test suite for job action commands."""

    @patch("ci_client.cli.cancel_job")
    def test_cancel_success(self, mock_cancel, runner, monkeypatch):
        monkeypatch.setenv("CI_SERVER_URL", "http://s")
        mock_cancel.return_value = True

        result = runner.invoke(cli, ["cancel", "job-1"])

        assert result.exit_code == 0
        assert "Job job-1 cancelled." in result.output
        mock_cancel.assert_called_once_with("job-1", server_url="http://s")

    @patch("ci_client.cli.abort_job")
    def test_abort_failure(self, mock_abort, runner):
        mock_abort.return_value = False

        result = runner.invoke(cli, ["abort", "job-1"])

        assert result.exit_code == 1
        assert "Failed to abort job job-1." in result.output
