"""
Convergence Conditions
======================

Ready-made ``condition()`` closures for the asynchronous AWS operations
that resources wait on, together with the poll policy each call site
uses.

Every builder takes an already-created boto3 client, so the caller
decides credentials and region. The returned closure re-reads remote
state on each call and returns True once the operation has converged.

Example
-------
>>> from aws_converge.core.poller import ConvergencePoller
>>> from aws_converge.waiters.conditions import (
...     POLICIES, certificate_issued, client_error_codes,
... )
>>>
>>> poller = ConvergencePoller(is_transient=client_error_codes("ResourceNotFoundException"))
>>> poller.wait(certificate_issued(acm, arn), POLICIES["certificate_issued"])
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict

from botocore.exceptions import ClientError

from aws_converge.core.exceptions import (
    ConditionFailedError,
    ResourceNotYetAvailableError,
)
from aws_converge.core.poller import PollCondition, PollPolicy, TransientPredicate

# Module logger
logger = logging.getLogger(__name__)

# Certificate states that can never turn into ISSUED
FAILED_CERTIFICATE_STATES = {"FAILED", "REVOKED", "VALIDATION_TIMED_OUT"}

POLICIES: Dict[str, PollPolicy] = {
    "certificate_validation_options": PollPolicy(max_wait=10, interval=5),
    "certificate_issued": PollPolicy(max_wait=30 * 60, interval=10),
    "elasticsearch_domain_ready": PollPolicy(max_wait=20 * 60, interval=4 * 60),
    "elasticsearch_domain_deleted": PollPolicy(max_wait=20 * 60, interval=4 * 60),
    "accelerator_deployed": PollPolicy(max_wait=20 * 60, interval=10),
}


def error_code(error: BaseException) -> str:
    """Return the AWS error code of a ClientError, or '' for anything else."""
    if isinstance(error, ClientError):
        return error.response.get("Error", {}).get("Code", "")
    return ""


def client_error_codes(*codes: str) -> TransientPredicate:
    """
    Build a transient-error predicate for the poller.

    The predicate accepts ``ResourceNotYetAvailableError`` and any
    ``ClientError`` whose code is one of ``codes``.

    Example
    -------
    >>> is_transient = client_error_codes("ResourceNotFoundException")
    """
    accepted = set(codes)

    def is_transient(error: BaseException) -> bool:
        if isinstance(error, ResourceNotYetAvailableError):
            return True
        return error_code(error) in accepted

    return is_transient


# =============================================================================
# ACM
# =============================================================================


def _describe_certificate(acm_client: Any, certificate_arn: str) -> Dict[str, Any]:
    return acm_client.describe_certificate(CertificateArn=certificate_arn).get(
        "Certificate", {}
    )


def certificate_has_validation_options(acm_client: Any, certificate_arn: str) -> PollCondition:
    """True once ACM has generated the domain validation options."""

    def condition() -> bool:
        certificate = _describe_certificate(acm_client, certificate_arn)
        return bool(certificate.get("DomainValidationOptions"))

    condition.__name__ = f"validation options of {certificate_arn}"
    return condition


def certificate_issued(acm_client: Any, certificate_arn: str) -> PollCondition:
    """
    True once the certificate status is ISSUED.

    Raises
    ------
    ConditionFailedError
        If the certificate reached a state it cannot recover from.
    """

    def condition() -> bool:
        status = _describe_certificate(acm_client, certificate_arn).get("Status")
        if status in FAILED_CERTIFICATE_STATES:
            raise ConditionFailedError(
                f"Certificate {certificate_arn} is {status}",
                details={"certificate_arn": certificate_arn, "status": status},
            )
        return status == "ISSUED"

    condition.__name__ = f"issuance of {certificate_arn}"
    return condition


# =============================================================================
# Elasticsearch
# =============================================================================


def _domain_gone(status: Dict[str, Any]) -> bool:
    """A domain marked deleted counts as absent once it stops processing."""
    return status.get("Deleted") is True and status.get("Processing") is not True


def elasticsearch_domain_ready(es_client: Any, domain_name: str) -> PollCondition:
    """
    True once the domain is created and no longer processing.

    A domain that cannot be described yet raises
    ResourceNotYetAvailableError so the poller keeps waiting.
    """

    def condition() -> bool:
        try:
            response = es_client.describe_elasticsearch_domain(DomainName=domain_name)
        except ClientError as e:
            if error_code(e) == "ResourceNotFoundException":
                raise ResourceNotYetAvailableError(
                    f"Domain {domain_name} not found yet"
                ) from e
            raise
        status = response.get("DomainStatus", {})
        if _domain_gone(status):
            return False
        return status.get("Created") is True and status.get("Processing") is False

    condition.__name__ = f"domain {domain_name} ready"
    return condition


def elasticsearch_domain_deleted(es_client: Any, domain_name: str) -> PollCondition:
    """
    True once the domain no longer exists.

    Either describing it fails with ResourceNotFoundException, or it is
    reported as deleted and no longer processing.
    """

    def condition() -> bool:
        try:
            response = es_client.describe_elasticsearch_domain(DomainName=domain_name)
        except ClientError as e:
            if error_code(e) == "ResourceNotFoundException":
                return True
            raise
        return _domain_gone(response.get("DomainStatus", {}))

    condition.__name__ = f"domain {domain_name} deleted"
    return condition


# =============================================================================
# Global Accelerator
# =============================================================================


def accelerator_deployed(ga_client: Any, accelerator_arn: str) -> PollCondition:
    """True once the accelerator status is DEPLOYED."""

    def condition() -> bool:
        response = ga_client.describe_accelerator(AcceleratorArn=accelerator_arn)
        return response.get("Accelerator", {}).get("Status") == "DEPLOYED"

    condition.__name__ = f"deployment of {accelerator_arn}"
    return condition


# =============================================================================
# Registry
# =============================================================================


@dataclass(frozen=True)
class WaiterSpec:
    """
    Everything needed to run a named wait from the CLI.

    Parameters
    ----------
    builder : callable
        ``builder(service_client, resource_id) -> condition``.
    service : str
        Name of the AWSClient accessor suffix (``get_<service>_client``).
    policy : PollPolicy
        Default policy for this call site.
    transient_codes : tuple of str
        Service error codes treated as "not yet available".
    """

    builder: Callable[[Any, str], PollCondition]
    service: str
    policy: PollPolicy
    transient_codes: tuple = ()

    def client_for(self, aws_client) -> Any:
        """Get the service client for this waiter from an AWSClient."""
        return getattr(aws_client, f"get_{self.service}_client")()

    def is_transient(self) -> TransientPredicate:
        return client_error_codes(*self.transient_codes)


WAITERS: Dict[str, WaiterSpec] = {
    "certificate-validation-options": WaiterSpec(
        certificate_has_validation_options,
        "acm",
        POLICIES["certificate_validation_options"],
        ("ResourceNotFoundException",),
    ),
    "certificate-issued": WaiterSpec(
        certificate_issued,
        "acm",
        POLICIES["certificate_issued"],
        ("ResourceNotFoundException",),
    ),
    "elasticsearch-domain-ready": WaiterSpec(
        elasticsearch_domain_ready,
        "es",
        POLICIES["elasticsearch_domain_ready"],
    ),
    "elasticsearch-domain-deleted": WaiterSpec(
        elasticsearch_domain_deleted,
        "es",
        POLICIES["elasticsearch_domain_deleted"],
    ),
    "accelerator-deployed": WaiterSpec(
        accelerator_deployed,
        "globalaccelerator",
        POLICIES["accelerator_deployed"],
        ("AcceleratorNotFoundException",),
    ),
}
