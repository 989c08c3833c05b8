"""
aws-converge: Tag Reconciliation & Convergence Waits for AWS
============================================================

Reusable pieces of an AWS infrastructure-as-code provider: computing and
applying minimal tag changes, and waiting for asynchronous AWS operations
to converge.

Modules
-------
core
    Tag diffing, convergence poller, AWS client, tagger base, sync manager
taggers
    Service-specific taggers (ACM, EC2, Elasticsearch, Global Accelerator)
waiters
    Condition builders and poll policies for asynchronous operations
reporters
    Output formatters (CLI, JSON)

Example
-------
>>> from aws_converge import AWSClient, ConvergencePoller, get_tagger
>>> from aws_converge.waiters import POLICIES, certificate_issued
>>>
>>> client = AWSClient(region="us-east-1")
>>> get_tagger("acm_certificate", client).sync(cert_arn, {"Env": "prod"})
>>> ConvergencePoller().wait(
...     certificate_issued(client.get_acm_client(), cert_arn),
...     POLICIES["certificate_issued"],
... )

Notes
-----
Requires AWS credentials configured via:
- Environment variables (AWS_ACCESS_KEY_ID, AWS_SECRET_ACCESS_KEY)
- AWS credentials file (~/.aws/credentials)
- IAM role (when running on AWS infrastructure)
"""

__version__ = "0.1.0"

# Public API
from aws_converge.core.aws_client import AWSClient, AWSClientError
from aws_converge.core.base_tagger import BaseTagger, SyncResult
from aws_converge.core.poller import ConvergencePoller, PollPolicy, wait_until
from aws_converge.core.sync_manager import BatchSyncResult, SyncJob, SyncManager
from aws_converge.core.tags import TagDelta, TagReconciler, diff
from aws_converge.taggers import get_tagger

__all__ = [
    "__version__",
    "AWSClient",
    "AWSClientError",
    "BaseTagger",
    "SyncResult",
    "ConvergencePoller",
    "PollPolicy",
    "wait_until",
    "SyncManager",
    "SyncJob",
    "BatchSyncResult",
    "TagDelta",
    "TagReconciler",
    "diff",
    "get_tagger",
]
