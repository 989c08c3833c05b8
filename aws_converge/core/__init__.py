"""
Core Components
===============

This package provides the building blocks of aws-converge:

- :func:`diff` / :class:`TagReconciler` - minimal tag remove/add plans
- :class:`ConvergencePoller` - wait until a remote condition holds
- :class:`AWSClient` - boto3 session and service clients
- :class:`BaseTagger` - interface for service taggers
- Exception hierarchy for error handling

:class:`~aws_converge.core.sync_manager.SyncManager` depends on the
tagger registry and is imported from its own module.

Example
-------
>>> from aws_converge.core import ConvergencePoller, PollPolicy, diff
>>>
>>> delta = diff({"Env": "prod"}, {"Env": "dev"})
>>> ConvergencePoller().wait(is_ready, PollPolicy(max_wait=600, interval=10))
"""

from aws_converge.core.aws_client import AWSClient
from aws_converge.core.base_tagger import BaseTagger, SyncResult
from aws_converge.core.exceptions import (
    AWSClientError,
    ConditionFailedError,
    ConvergeError,
    CredentialsError,
    InvalidTagError,
    PollCancelledError,
    PollError,
    PollTimeoutError,
    RegionError,
    ResourceNotYetAvailableError,
    ServiceError,
    TaggingError,
    UnsupportedResourceError,
)
from aws_converge.core.poller import (
    ConvergencePoller,
    PollPolicy,
    PollResult,
    SystemClock,
    wait_until,
)
from aws_converge.core.tags import TagDelta, TagReconciler, diff, strip_reserved

__all__ = [
    # Tags
    "TagDelta",
    "TagReconciler",
    "diff",
    "strip_reserved",
    # Polling
    "ConvergencePoller",
    "PollPolicy",
    "PollResult",
    "SystemClock",
    "wait_until",
    # Client
    "AWSClient",
    # Tagger base
    "BaseTagger",
    "SyncResult",
    # Exceptions
    "ConvergeError",
    "AWSClientError",
    "CredentialsError",
    "RegionError",
    "ServiceError",
    "TaggingError",
    "InvalidTagError",
    "UnsupportedResourceError",
    "PollError",
    "PollTimeoutError",
    "PollCancelledError",
    "ConditionFailedError",
    "ResourceNotYetAvailableError",
]
