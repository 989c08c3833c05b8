"""
Service Taggers
===============

Each tagger converges the tags of one kind of AWS resource by reading
its live tags, computing a TagDelta and issuing remove-then-add calls.

Available Taggers
-----------------
AcmCertificateTagger
    ACM certificates (by ARN).
Ec2Tagger
    Any EC2 resource (by ID).
ElasticsearchDomainTagger
    Elasticsearch domains (by ARN).
AcceleratorTagger
    Global Accelerator accelerators (by ARN).

Example
-------
>>> from aws_converge.taggers import get_tagger
>>> from aws_converge.core import AWSClient
>>>
>>> tagger = get_tagger("ec2_resource", AWSClient(region="us-east-1"))
>>> result = tagger.sync("vpc-0abc", {"Name": "core", "Env": "prod"})
>>> print(result.delta)
"""

from typing import Dict, Type

from aws_converge.core.base_tagger import BaseTagger
from aws_converge.core.exceptions import UnsupportedResourceError
from aws_converge.taggers.accelerator_tagger import AcceleratorTagger
from aws_converge.taggers.acm_tagger import AcmCertificateTagger
from aws_converge.taggers.ec2_tagger import Ec2Tagger
from aws_converge.taggers.elasticsearch_tagger import ElasticsearchDomainTagger

TAGGERS: Dict[str, Type[BaseTagger]] = {
    "acm_certificate": AcmCertificateTagger,
    "ec2_resource": Ec2Tagger,
    "elasticsearch_domain": ElasticsearchDomainTagger,
    "global_accelerator": AcceleratorTagger,
}


def get_tagger(resource_type: str, aws_client) -> BaseTagger:
    """
    Instantiate the tagger registered for ``resource_type``.

    Raises
    ------
    UnsupportedResourceError
        If no tagger handles the resource type.
    """
    try:
        tagger_class = TAGGERS[resource_type]
    except KeyError:
        raise UnsupportedResourceError(
            f"No tagger for resource type '{resource_type}'",
            resource_type=resource_type,
            details={"supported": sorted(TAGGERS)},
        )
    return tagger_class(aws_client)


__all__ = [
    "TAGGERS",
    "get_tagger",
    "AcmCertificateTagger",
    "Ec2Tagger",
    "ElasticsearchDomainTagger",
    "AcceleratorTagger",
]
