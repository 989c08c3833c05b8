"""
Custom Exceptions for aws-converge
==================================

This module defines a hierarchy of custom exceptions used throughout
the application for consistent error handling and reporting.

Exception Hierarchy
-------------------
::

    ConvergeError (base)
    ├── AWSClientError
    │   ├── CredentialsError
    │   ├── RegionError
    │   └── ServiceError
    ├── TaggingError
    │   ├── InvalidTagError
    │   └── UnsupportedResourceError
    ├── PollError
    │   ├── PollTimeoutError
    │   ├── PollCancelledError
    │   └── ConditionFailedError
    └── ResourceNotYetAvailableError

``ResourceNotYetAvailableError`` is not a failure: conditions raise it to
tell the poller that the remote object does not exist *yet*.

Example
-------
>>> from aws_converge.core.exceptions import PollTimeoutError, PollError
>>>
>>> try:
...     poller.wait(condition, policy)
... except PollTimeoutError as e:
...     print(f"Did not converge after {e.elapsed:.0f}s")
... except PollError as e:
...     print(f"Wait aborted: {e}")
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from aws_converge.core.poller import PollPolicy


class ConvergeError(Exception):
    """
    Base exception for all aws-converge errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    details : dict, optional
        Additional context about the error.

    Attributes
    ----------
    message : str
        The error message.
    details : dict
        Additional error details.

    Example
    -------
    >>> raise ConvergeError("Something went wrong", details={"code": 500})
    """

    def __init__(
        self,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(self.message)

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} (Details: {self.details})"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert exception to dictionary for serialization.

        Returns
        -------
        dict
            Dictionary representation of the error.
        """
        return {
            "error_type": self.__class__.__name__,
            "message": self.message,
            "details": self.details,
        }


# =============================================================================
# AWS Client Exceptions
# =============================================================================


class AWSClientError(ConvergeError):
    """
    Base exception for AWS client-related errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    service : str, optional
        The AWS service that caused the error.
    region : str, optional
        The AWS region where the error occurred.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        service: Optional[str] = None,
        region: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.service = service
        self.region = region
        full_details = details or {}
        if service:
            full_details["service"] = service
        if region:
            full_details["region"] = region
        super().__init__(message, full_details)


class CredentialsError(AWSClientError):
    """Raised when AWS credentials are invalid, missing, or expired."""

    pass


class RegionError(AWSClientError):
    """Raised when there's an issue with the specified AWS region."""

    pass


class ServiceError(AWSClientError):
    """
    Raised when there's an error accessing a specific AWS service.

    Example
    -------
    >>> raise ServiceError(
    ...     "Failed to create acm client",
    ...     service="acm",
    ...     region="us-east-1"
    ... )
    """

    pass


# =============================================================================
# Tagging Exceptions
# =============================================================================


class TaggingError(ConvergeError):
    """
    Base exception for tag reconciliation errors.

    Parameters
    ----------
    message : str
        Human-readable error message.
    resource_id : str, optional
        Identifier (ID or ARN) of the resource being tagged.
    resource_type : str, optional
        The type of resource being tagged.
    details : dict, optional
        Additional context about the error.
    """

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        resource_type: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> None:
        self.resource_id = resource_id
        self.resource_type = resource_type
        full_details = details or {}
        if resource_id:
            full_details["resource_id"] = resource_id
        if resource_type:
            full_details["resource_type"] = resource_type
        super().__init__(message, full_details)


class InvalidTagError(TaggingError):
    """
    Raised when a tag set contains a null key or value.

    Example
    -------
    >>> raise InvalidTagError("Tag keys must be strings", details={"key": None})
    """

    pass


class UnsupportedResourceError(TaggingError):
    """Raised when no tagger is registered for a resource type."""

    pass


# =============================================================================
# Polling Exceptions
# =============================================================================


class PollError(ConvergeError):
    """Base exception for convergence polling errors."""

    pass


class PollTimeoutError(PollError):
    """
    Raised when a condition did not become true within ``policy.max_wait``.

    Parameters
    ----------
    elapsed : float
        Seconds spent polling.
    policy : PollPolicy
        The policy the wait ran under.
    attempts : int
        Number of times the condition was evaluated.
    description : str, optional
        What was being waited for, used in the message.

    Example
    -------
    >>> raise PollTimeoutError(elapsed=1200.0, policy=policy, attempts=6)
    """

    def __init__(
        self,
        elapsed: float,
        policy: "PollPolicy",
        attempts: int,
        description: Optional[str] = None,
    ) -> None:
        self.elapsed = elapsed
        self.policy = policy
        self.attempts = attempts
        self.description = description
        target = description or "condition"
        super().__init__(
            f"Timed out after {elapsed:.1f}s waiting for {target}",
            details={
                "elapsed_seconds": round(elapsed, 3),
                "attempts": attempts,
                "max_wait_seconds": policy.max_wait,
                "interval_seconds": policy.interval,
            },
        )


class PollCancelledError(PollError):
    """
    Raised when a wait is cancelled through its cancel event.

    Parameters
    ----------
    elapsed : float
        Seconds spent polling before the cancellation was observed.
    attempts : int
        Number of times the condition was evaluated.
    """

    def __init__(
        self,
        elapsed: float,
        attempts: int,
        description: Optional[str] = None,
    ) -> None:
        self.elapsed = elapsed
        self.attempts = attempts
        self.description = description
        target = description or "condition"
        super().__init__(
            f"Cancelled after {elapsed:.1f}s waiting for {target}",
            details={"elapsed_seconds": round(elapsed, 3), "attempts": attempts},
        )


class ConditionFailedError(PollError):
    """
    Raised by a condition when the remote object reached a terminal state
    that can never satisfy the wait (e.g. a certificate in ``FAILED``).
    """

    pass


class ResourceNotYetAvailableError(ConvergeError):
    """
    Transient signal: the remote object does not exist or is not readable yet.

    Conditions raise this (or a service error mapped to it) and the poller
    treats it as "not yet true" instead of aborting.
    """

    pass
