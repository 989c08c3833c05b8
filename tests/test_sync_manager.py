"""
Tests for the Sync Manager module.
"""

from unittest.mock import MagicMock

import pytest

from aws_converge.core.sync_manager import BatchSyncResult, SyncJob, SyncManager
from aws_converge.taggers import Ec2Tagger


class TestSyncJob:
    """Tests for SyncJob."""

    def test_from_dict(self):
        job = SyncJob.from_dict(
            {
                "resource_type": "ec2_resource",
                "resource_id": "vpc-1",
                "tags": {"Env": "prod"},
                "region": "eu-west-1",
            }
        )
        assert job == SyncJob("ec2_resource", "vpc-1", {"Env": "prod"}, "eu-west-1")

    def test_from_dict_defaults(self):
        """Missing tags mean 'no tags'; missing region means the default."""
        job = SyncJob.from_dict({"resource_type": "ec2_resource", "resource_id": "vpc-1"})
        assert job.tags == {}
        assert job.region is None

    def test_from_dict_requires_id(self):
        with pytest.raises(KeyError):
            SyncJob.from_dict({"resource_type": "ec2_resource"})

    @pytest.mark.parametrize("tags", [["Env"], "Env=prod", 3])
    def test_from_dict_rejects_non_mapping_tags(self, tags):
        """Tags must be an object; lists and strings are refused up front."""
        with pytest.raises(ValueError, match="must be an object"):
            SyncJob.from_dict(
                {"resource_type": "ec2_resource", "resource_id": "vpc-1", "tags": tags}
            )


class TestSyncManager:
    """Tests for SyncManager class."""

    def test_initialization(self, mock_aws_environment):
        """Test basic initialization."""
        manager = SyncManager()
        assert manager.region == "us-east-1"
        assert manager.profile is None
        assert manager.max_workers == 10

    def test_get_client_for_region(self, mock_aws_environment):
        manager = SyncManager(profile=None, max_retries=5, timeout=60)
        client = manager.get_client_for_region("eu-west-1")

        assert client.region == "eu-west-1"
        assert client.max_retries == 5

    def test_sync_many(self, mock_aws_environment, ec2_client):
        """Every job converges and the batch counts reflect it."""
        vpcs = [
            ec2_client.create_vpc(CidrBlock=f"10.{i}.0.0/16")["Vpc"]["VpcId"]
            for i in range(3)
        ]
        ec2_client.create_tags(Resources=[vpcs[2]], Tags=[{"Key": "Env", "Value": "prod"}])

        jobs = [SyncJob("ec2_resource", vpc_id, {"Env": "prod"}) for vpc_id in vpcs]
        batch = SyncManager(max_workers=2).sync_many(jobs)

        assert batch.total == 3
        assert batch.changed == 2
        assert batch.unchanged == 1
        assert not batch.has_errors
        assert batch.end_time is not None

        tagger = Ec2Tagger(SyncManager().get_client_for_region("us-east-1"))
        for vpc_id in vpcs:
            assert tagger.get_tags(vpc_id) == {"Env": "prod"}

    def test_failures_are_isolated(self, mock_aws_environment, vpc):
        """A bad job is recorded without stopping the others."""
        statuses = []
        jobs = [
            SyncJob("ec2_resource", vpc, {"Env": "prod"}),
            SyncJob("s3_bucket", "my-bucket", {"Env": "prod"}),
        ]

        batch = SyncManager().sync_many(
            jobs,
            progress_callback=lambda job, status: statuses.append(
                (job.resource_id, status)
            ),
        )

        assert batch.changed == 1
        assert batch.failed == 1
        assert batch.errors[0]["resource_id"] == "my-bucket"
        assert batch.errors[0]["resource_type"] == "s3_bucket"
        assert "s3_bucket" in batch.errors[0]["error"]
        assert sorted(statuses) == [("my-bucket", "error"), (vpc, "complete")]

    def test_failures_with_same_id_kept_apart(self):
        """Two failing jobs for one ID in different regions are both counted."""
        manager = SyncManager(client_factory=lambda region: MagicMock(region=region))
        jobs = [
            SyncJob("s3_bucket", "vpc-1", {}, region="us-east-1"),
            SyncJob("s3_bucket", "vpc-1", {}, region="eu-west-1"),
        ]

        batch = manager.sync_many(jobs)

        assert batch.total == 2
        assert batch.failed == 2
        assert sorted(e["region"] for e in batch.errors) == ["eu-west-1", "us-east-1"]

    def test_dry_run(self, mock_aws_environment, vpc):
        batch = SyncManager().sync_many(
            [SyncJob("ec2_resource", vpc, {"Env": "prod"})], dry_run=True
        )

        assert batch.dry_run
        assert batch.results[0].dry_run
        assert batch.changed == 1

    def test_job_region_used(self):
        """Jobs without a region use the manager default."""
        regions = []

        def factory(region):
            regions.append(region)
            client = MagicMock()
            client.region = region
            client.get_ec2_client.return_value.get_paginator.return_value.paginate.return_value = []
            return client

        manager = SyncManager(region="eu-central-1", client_factory=factory)
        manager.sync_many(
            [
                SyncJob("ec2_resource", "vpc-1", {}),
                SyncJob("ec2_resource", "vpc-2", {}, region="ap-south-1"),
            ]
        )

        assert sorted(regions) == ["ap-south-1", "eu-central-1"]


class TestBatchSyncResult:
    """Tests for BatchSyncResult."""

    def test_empty(self):
        batch = BatchSyncResult()
        assert batch.total == 0
        assert not batch.has_errors

    def test_to_dict(self):
        error = {
            "resource_type": "ec2_resource",
            "resource_id": "vpc-1",
            "region": None,
            "error": "denied",
        }
        batch = BatchSyncResult(errors=[error], dry_run=True)
        batch.complete()

        data = batch.to_dict()

        assert data["failed"] == 1
        assert data["dry_run"] is True
        assert data["errors"] == [error]
        assert data["end_time"] is not None
