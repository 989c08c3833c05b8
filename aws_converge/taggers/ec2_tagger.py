"""
Tagger for EC2 resources (instances, VPCs, subnets, volumes, ...).

EC2 exposes one tagging API for every resource type, keyed by resource
ID. Tags are read through the DescribeTags paginator.
"""

from typing import Any, Dict, Mapping

from ..core.base_tagger import BaseTagger
from ..core.tags import to_aws_tags


class Ec2Tagger(BaseTagger):
    """Converges tags on any EC2 resource identified by its ID."""

    def create_client(self) -> Any:
        return self.aws_client.get_ec2_client()

    def get_resource_type(self) -> str:
        return "ec2_resource"

    def get_tags(self, resource_id: str) -> Dict[str, str]:
        tags = {}
        paginator = self.client.get_paginator("describe_tags")
        pages = paginator.paginate(
            Filters=[{"Name": "resource-id", "Values": [resource_id]}]
        )
        for page in pages:
            for description in page.get("Tags", []):
                tags[description["Key"]] = description.get("Value", "")
        return tags

    def remove_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.delete_tags(Resources=[resource_id], Tags=to_aws_tags(tags))

    def add_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.create_tags(Resources=[resource_id], Tags=to_aws_tags(tags))
