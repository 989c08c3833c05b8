"""
Waiters
=======

Condition builders and poll policies for asynchronous AWS operations.

See :mod:`aws_converge.waiters.conditions`.
"""

from aws_converge.waiters.conditions import (
    POLICIES,
    WAITERS,
    WaiterSpec,
    accelerator_deployed,
    certificate_has_validation_options,
    certificate_issued,
    client_error_codes,
    elasticsearch_domain_deleted,
    elasticsearch_domain_ready,
)

__all__ = [
    "POLICIES",
    "WAITERS",
    "WaiterSpec",
    "accelerator_deployed",
    "certificate_has_validation_options",
    "certificate_issued",
    "client_error_codes",
    "elasticsearch_domain_deleted",
    "elasticsearch_domain_ready",
]
