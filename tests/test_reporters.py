"""
Tests for the Reporter modules.
"""

import io
import json

import pytest
from rich.console import Console

from aws_converge.core.base_tagger import SyncResult
from aws_converge.core.poller import PollPolicy, PollResult
from aws_converge.core.sync_manager import BatchSyncResult
from aws_converge.core.tags import TagDelta
from aws_converge.reporters.cli_reporter import CLIReporter
from aws_converge.reporters.json_reporter import JSONReporter


@pytest.fixture
def sample_delta():
    """A delta with one removal, one change and one addition."""
    return TagDelta(
        to_remove={"Owner": "alice", "Env": "dev"},
        to_add={"Env": "prod", "Team": "infra"},
    )


@pytest.fixture
def sample_sync_result(sample_delta):
    return SyncResult(
        resource_type="ec2_resource",
        resource_id="vpc-123",
        region="us-east-1",
        delta=sample_delta,
    )


@pytest.fixture
def sample_batch(sample_sync_result):
    batch = BatchSyncResult(
        results=[sample_sync_result],
        errors=[
            {
                "resource_type": "acm_certificate",
                "resource_id": "arn:aws:acm:cert",
                "region": None,
                "error": "AccessDenied",
            },
            {
                "resource_type": "ec2_resource",
                "resource_id": "vpc-dup",
                "region": "us-east-1",
                "error": "denied [east]",
            },
            {
                "resource_type": "ec2_resource",
                "resource_id": "vpc-dup",
                "region": "eu-west-1",
                "error": "denied [west]",
            },
        ],
    )
    batch.complete()
    return batch


@pytest.fixture
def output():
    return io.StringIO()


@pytest.fixture
def reporter(output):
    return CLIReporter(Console(file=output, width=200, color_system=None))


class TestCLIReporter:
    """Tests for CLIReporter."""

    def test_empty_delta(self, reporter, output):
        reporter.report_delta(TagDelta({}, {}), title="vpc-123")
        assert "vpc-123: tags already converged." in output.getvalue()

    def test_delta_table(self, reporter, output, sample_delta):
        reporter.report_delta(sample_delta)
        text = output.getvalue()

        assert "remove" in text
        assert "Owner" in text
        assert "change" in text
        assert "dev" in text and "prod" in text
        assert "add" in text
        assert "Team" in text

    def test_sync_title(self, reporter, output, sample_delta):
        result = SyncResult("ec2_resource", "vpc-9", "us-east-1", sample_delta, dry_run=True)
        reporter.report_sync(result)
        assert "ec2_resource vpc-9 (dry run)" in output.getvalue()

    def test_batch(self, reporter, output, sample_batch):
        reporter.report_batch(sample_batch)
        text = output.getvalue()

        assert "Tag Sync Report" in text
        assert "Errors encountered" in text
        assert "acm_certificate arn:aws:acm:cert: AccessDenied" in text
        assert "ec2_resource vpc-dup (us-east-1): denied [east]" in text
        assert "ec2_resource vpc-dup (eu-west-1): denied [west]" in text
        assert "vpc-123" in text

    def test_poll(self, reporter, output):
        result = PollResult(attempts=3, elapsed=20.0, policy=PollPolicy(60, 10), description="cert")
        reporter.report_poll(result)
        assert "Converged: cert (20.0s, 3 checks)" in output.getvalue()

    def test_messages(self, reporter, output):
        reporter.print_error("bad")
        reporter.print_warning("careful")
        text = output.getvalue()
        assert "Error: bad" in text
        assert "Warning: careful" in text


class TestJSONReporter:
    """Tests for JSONReporter."""

    def test_delta_document(self, sample_delta):
        data = json.loads(JSONReporter().to_string(sample_delta))

        assert data["metadata"]["kind"] == "delta"
        assert data["result"]["to_remove"] == {"Env": "dev", "Owner": "alice"}
        assert data["result"]["changed_keys"] == ["Env"]

    def test_sync_document(self, sample_sync_result):
        data = JSONReporter().to_dict(sample_sync_result)
        assert data["metadata"]["kind"] == "sync"
        assert data["result"]["changed"] is True

    def test_poll_document(self):
        result = PollResult(attempts=1, elapsed=0.0, policy=PollPolicy(10, 5))
        data = json.loads(JSONReporter(indent=None).to_string(result))
        assert data["metadata"]["kind"] == "wait"
        assert data["result"]["attempts"] == 1

    def test_report_writes_file(self, tmp_path, sample_batch):
        path = tmp_path / "batch.json"

        written = JSONReporter(output_path=str(path)).report(sample_batch)

        assert written == str(path)
        data = json.loads(path.read_text())
        assert data["metadata"]["kind"] == "batch"
        assert data["result"]["failed"] == 3
        assert data["result"]["total"] == 4
        assert [e["region"] for e in data["result"]["errors"]] == [None, "us-east-1", "eu-west-1"]

    def test_default_filename(self, tmp_path, monkeypatch, sample_delta):
        monkeypatch.chdir(tmp_path)
        written = JSONReporter().report(sample_delta)
        assert written.startswith("aws_converge_delta_")
        assert (tmp_path / written).exists()

    def test_unknown_type(self):
        with pytest.raises(TypeError):
            JSONReporter().to_string({"not": "a result"})
