"""
Sync Manager Module
===================

Runs many tag syncs in parallel and aggregates their outcome.

Each job runs on its own worker thread with an independent AWSClient, so
jobs for different regions or services never share a boto3 client. A
failing job is recorded in the batch result and does not stop the others.

Classes
-------
SyncJob
    One resource whose tags should converge.
BatchSyncResult
    Aggregated results of a batch.
SyncManager
    Orchestrates the batch on a thread pool.

Example
-------
>>> from aws_converge.core.sync_manager import SyncJob, SyncManager
>>>
>>> manager = SyncManager(profile="production", max_workers=8)
>>> result = manager.sync_many([
...     SyncJob("ec2_resource", "vpc-0abc", {"Env": "prod"}, region="eu-west-1"),
...     SyncJob("acm_certificate", cert_arn, {"Env": "prod"}),
... ])
>>> print(f"{result.changed} changed, {result.failed} failed")
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor, as_completed
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Callable, Dict, List, Mapping, Optional

from aws_converge.core.aws_client import AWSClient
from aws_converge.core.base_tagger import SyncResult
from aws_converge.taggers import get_tagger

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class SyncJob:
    """
    A single tag sync request.

    Parameters
    ----------
    resource_type : str
        Registered tagger type (see ``aws_converge.taggers.TAGGERS``).
    resource_id : str
        ID or ARN of the resource.
    tags : mapping
        Desired tags.
    region : str, optional
        Region override; the manager's default region otherwise.
    """

    resource_type: str
    resource_id: str
    tags: Mapping[str, str]
    region: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> SyncJob:
        """
        Build a job from a manifest entry.

        Raises
        ------
        KeyError
            If ``resource_type`` or ``resource_id`` is missing.
        ValueError
            If ``tags`` is present but not a mapping.
        """
        tags = data.get("tags") or {}
        if not isinstance(tags, Mapping):
            raise ValueError(
                f"tags of {data.get('resource_id')!r} must be an object of "
                f"KEY: VALUE pairs, got {type(tags).__name__}"
            )
        return cls(
            resource_type=data["resource_type"],
            resource_id=data["resource_id"],
            tags=dict(tags),
            region=data.get("region"),
        )

    def describe(self) -> Dict[str, Any]:
        """Identify the job in reports."""
        return {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "region": self.region,
        }


@dataclass
class BatchSyncResult:
    """
    Aggregated results from a batch of tag syncs.

    Parameters
    ----------
    results : list of SyncResult
        Results of the jobs that completed.
    errors : list of dict
        One entry per failed job: resource_type, resource_id, region and
        error message. Jobs sharing an ID are reported separately.
    dry_run : bool
        Whether the batch ran in dry-run mode.
    start_time, end_time : datetime
        Timestamps of the batch.
    """

    results: List[SyncResult] = field(default_factory=list)
    errors: List[Dict[str, Any]] = field(default_factory=list)
    dry_run: bool = False
    start_time: datetime = field(default_factory=datetime.utcnow)
    end_time: Optional[datetime] = None

    @property
    def total(self) -> int:
        return len(self.results) + len(self.errors)

    @property
    def changed(self) -> int:
        return sum(1 for r in self.results if r.changed)

    @property
    def unchanged(self) -> int:
        return sum(1 for r in self.results if not r.changed)

    @property
    def failed(self) -> int:
        return len(self.errors)

    @property
    def has_errors(self) -> bool:
        return bool(self.errors)

    def complete(self) -> None:
        """Mark the batch as complete."""
        self.end_time = datetime.utcnow()

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "total": self.total,
            "changed": self.changed,
            "unchanged": self.unchanged,
            "failed": self.failed,
            "dry_run": self.dry_run,
            "results": [r.to_dict() for r in self.results],
            "errors": self.errors,
            "start_time": self.start_time.isoformat(),
            "end_time": self.end_time.isoformat() if self.end_time else None,
        }

    def __repr__(self) -> str:
        return (
            f"BatchSyncResult(total={self.total}, "
            f"changed={self.changed}, failed={self.failed})"
        )


class SyncManager:
    """
    Runs tag syncs for many resources concurrently.

    Parameters
    ----------
    region : str, default="us-east-1"
        Region for jobs that do not set one.
    profile : str, optional
        AWS profile name from ~/.aws/credentials.
    max_workers : int, default=10
        Maximum number of parallel syncs.
    max_retries : int, default=3
        Maximum retries for failed API calls.
    timeout : int, default=30
        Request timeout in seconds.
    client_factory : callable, optional
        ``client_factory(region) -> AWSClient``; defaults to building an
        AWSClient from the settings above.
    """

    def __init__(
        self,
        region: str = "us-east-1",
        profile: Optional[str] = None,
        max_workers: int = 10,
        max_retries: int = 3,
        timeout: int = 30,
        client_factory: Optional[Callable[[str], AWSClient]] = None,
    ) -> None:
        self.region = region
        self.profile = profile
        self.max_workers = max_workers
        self.max_retries = max_retries
        self.timeout = timeout
        self._client_factory = client_factory or self.get_client_for_region

        logger.debug(f"Initialized SyncManager with max_workers={max_workers}")

    def get_client_for_region(self, region: str) -> AWSClient:
        """Create an AWSClient configured for a specific region."""
        return AWSClient(
            region=region,
            profile=self.profile,
            max_retries=self.max_retries,
            timeout=self.timeout,
        )

    def _sync_one(self, job: SyncJob, dry_run: bool) -> SyncResult:
        client = self._client_factory(job.region or self.region)
        tagger = get_tagger(job.resource_type, client)
        return tagger.sync(job.resource_id, job.tags, dry_run=dry_run)

    def sync_many(
        self,
        jobs: List[SyncJob],
        dry_run: bool = False,
        progress_callback: Optional[Callable[[SyncJob, str], None]] = None,
    ) -> BatchSyncResult:
        """
        Sync all jobs in parallel.

        Parameters
        ----------
        jobs : list of SyncJob
            Resources to converge.
        dry_run : bool, default=False
            Only compute plans.
        progress_callback : callable, optional
            Called with (job, status); status is 'complete' or 'error'.

        Returns
        -------
        BatchSyncResult
            Results in the order the jobs finished.
        """
        batch = BatchSyncResult(dry_run=dry_run)
        logger.info(f"Starting tag sync of {len(jobs)} resources")

        with ThreadPoolExecutor(max_workers=self.max_workers) as executor:
            futures = {
                executor.submit(self._sync_one, job, dry_run): job for job in jobs
            }

            for future in as_completed(futures):
                job = futures[future]
                try:
                    batch.results.append(future.result())
                    status = "complete"
                except Exception as e:
                    logger.error(f"Tag sync of {job.resource_id} failed: {e}")
                    batch.errors.append({**job.describe(), "error": str(e)})
                    status = "error"

                if progress_callback:
                    progress_callback(job, status)

        batch.complete()
        logger.info(
            f"Tag sync complete: {batch.changed} changed, "
            f"{batch.unchanged} unchanged, {batch.failed} failed"
        )
        return batch

    def __repr__(self) -> str:
        return (
            f"SyncManager(profile={self.profile!r}, "
            f"max_workers={self.max_workers})"
        )
