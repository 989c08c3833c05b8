"""
Base Tagger Module
==================

Provides the abstract base class for service taggers.

A tagger knows three calls for one AWS service: read the tags of a
resource, remove tags, add tags. :meth:`BaseTagger.sync` combines them
with :func:`aws_converge.core.tags.diff` so that every service converges
tags the same way: plan, remove first, then add.

Classes
-------
SyncResult
    Outcome of one tag sync.
BaseTagger
    Abstract base class for taggers.

Example
-------
>>> from aws_converge.core.base_tagger import BaseTagger
>>>
>>> class QueueTagger(BaseTagger):
...     def get_resource_type(self) -> str:
...         return "sqs_queue"
...
...     def get_tags(self, resource_id):
...         return self.client.list_queue_tags(QueueUrl=resource_id).get("Tags", {})
...
...     def remove_tags(self, resource_id, tags):
...         self.client.untag_queue(QueueUrl=resource_id, TagKeys=list(tags))
...
...     def add_tags(self, resource_id, tags):
...         self.client.tag_queue(QueueUrl=resource_id, Tags=dict(tags))
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional

from botocore.exceptions import ClientError

from aws_converge.core.exceptions import TaggingError
from aws_converge.core.tags import TagDelta, diff, strip_reserved

# Module logger
logger = logging.getLogger(__name__)


@dataclass
class SyncResult:
    """
    Result of converging the tags of one resource.

    Parameters
    ----------
    resource_type : str
        Tagger resource type (e.g. 'acm_certificate').
    resource_id : str
        ID or ARN of the resource.
    region : str
        AWS region of the client used.
    delta : TagDelta
        The plan that was (or, in dry-run mode, would be) applied.
    dry_run : bool
        True if no remote call was made.
    sync_time : datetime, optional
        When the sync ran (defaults to now).
    """

    resource_type: str
    resource_id: str
    region: str
    delta: TagDelta
    dry_run: bool = False
    sync_time: datetime = field(default_factory=datetime.utcnow)

    @property
    def changed(self) -> bool:
        """True if the plan was not empty."""
        return not self.delta.is_empty

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "resource_type": self.resource_type,
            "resource_id": self.resource_id,
            "region": self.region,
            "changed": self.changed,
            "dry_run": self.dry_run,
            "delta": self.delta.to_dict(),
            "sync_time": self.sync_time.isoformat(),
        }

    def __repr__(self) -> str:
        return (
            f"SyncResult(resource_type='{self.resource_type}', "
            f"resource_id='{self.resource_id}', changed={self.changed})"
        )


class BaseTagger(ABC):
    """
    Abstract base class for all service taggers.

    Parameters
    ----------
    aws_client : AWSClient
        Instance of AWSClient for AWS API access.

    Attributes
    ----------
    aws_client : AWSClient
        The AWS client instance.
    region : str
        Region of the AWS client.

    Methods
    -------
    get_resource_type()
        Return the resource type identifier (abstract).
    get_tags(resource_id)
        Read the tags currently applied (abstract).
    remove_tags(resource_id, tags)
        Remove the given keys (abstract).
    add_tags(resource_id, tags)
        Add or overwrite the given tags (abstract).
    plan(resource_id, desired, current=None)
        Compute the TagDelta without changing anything.
    sync(resource_id, desired, current=None, dry_run=False)
        Converge remote tags to ``desired``.
    """

    def __init__(self, aws_client) -> None:
        self.aws_client = aws_client
        self.region = aws_client.region
        self._client = None
        logger.debug(f"Initialized {self.__class__.__name__} for region {self.region}")

    @property
    def client(self) -> Any:
        """Lazy load the service client."""
        if self._client is None:
            self._client = self.create_client()
        return self._client

    @abstractmethod
    def create_client(self) -> Any:
        """Return the boto3 service client this tagger talks to."""
        pass

    @abstractmethod
    def get_resource_type(self) -> str:
        """
        Get the type of resource this tagger handles.

        Convention: lowercase with underscores (e.g. 'acm_certificate').
        """
        pass

    @abstractmethod
    def get_tags(self, resource_id: str) -> Dict[str, str]:
        """Read the tags currently applied to the resource."""
        pass

    @abstractmethod
    def remove_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        """
        Remove tags from the resource.

        ``tags`` maps each key to the value currently applied; services
        that match on value as well as key need both.
        """
        pass

    @abstractmethod
    def add_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        """Add tags to the resource."""
        pass

    def plan(
        self,
        resource_id: str,
        desired: Mapping[str, str],
        current: Optional[Mapping[str, str]] = None,
    ) -> TagDelta:
        """
        Compute the plan for ``resource_id`` without applying it.

        Parameters
        ----------
        resource_id : str
            ID or ARN of the resource.
        desired : mapping
            Tags declared in configuration.
        current : mapping, optional
            Tags known to be applied. Read from AWS when omitted.

        Returns
        -------
        TagDelta
            Plan with AWS-managed ``aws:`` tags left out.
        """
        if current is None:
            current = self._call("read tags", resource_id, self.get_tags, resource_id)
        return diff(strip_reserved(desired), strip_reserved(current))

    def sync(
        self,
        resource_id: str,
        desired: Mapping[str, str],
        current: Optional[Mapping[str, str]] = None,
        dry_run: bool = False,
    ) -> SyncResult:
        """
        Converge the tags of ``resource_id`` to ``desired``.

        Removals are issued before additions so a changed key never
        appears twice in a single tagging call.

        Raises
        ------
        TaggingError
            If AWS rejects one of the calls.
        InvalidTagError
            If a tag set contains a null key or value.
        """
        delta = self.plan(resource_id, desired, current)
        result = SyncResult(
            resource_type=self.get_resource_type(),
            resource_id=resource_id,
            region=self.region,
            delta=delta,
            dry_run=dry_run,
        )

        if delta.is_empty:
            logger.debug(f"Tags of {resource_id} already converged")
            return result

        if dry_run:
            logger.info(f"Dry run: {delta!r} for {resource_id}")
            return result

        if delta.to_remove:
            self._call("remove tags", resource_id, self.remove_tags, resource_id, delta.to_remove)
        if delta.to_add:
            self._call("add tags", resource_id, self.add_tags, resource_id, delta.to_add)

        logger.info(
            f"Synced tags of {self.get_resource_type()} {resource_id}: "
            f"-{len(delta.to_remove)} +{len(delta.to_add)}"
        )
        return result

    def _call(self, action: str, resource_id: str, fn, *args):
        """Run one service call, wrapping ClientError into TaggingError."""
        try:
            return fn(*args)
        except ClientError as e:
            error = e.response.get("Error", {})
            raise TaggingError(
                f"Failed to {action}: {error.get('Message', str(e))}",
                resource_id=resource_id,
                resource_type=self.get_resource_type(),
                details={"error_code": error.get("Code", "Unknown")},
            ) from e

    def __repr__(self) -> str:
        return (
            f"{self.__class__.__name__}("
            f"region='{self.region}', "
            f"resource_type='{self.get_resource_type()}')"
        )
