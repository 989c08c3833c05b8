"""
Tagger for AWS Global Accelerator accelerators.

Accelerators are global; the client is always bound to us-west-2.
"""

from typing import Any, Dict, Mapping

from ..core.base_tagger import BaseTagger
from ..core.tags import from_aws_tags, to_aws_tags


class AcceleratorTagger(BaseTagger):
    """Converges tags on an accelerator identified by its ARN."""

    def create_client(self) -> Any:
        return self.aws_client.get_globalaccelerator_client()

    def get_resource_type(self) -> str:
        return "global_accelerator"

    def get_tags(self, resource_id: str) -> Dict[str, str]:
        response = self.client.list_tags_for_resource(ResourceArn=resource_id)
        return from_aws_tags(response.get("Tags"))

    def remove_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.untag_resource(ResourceArn=resource_id, TagKeys=sorted(tags))

    def add_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.tag_resource(ResourceArn=resource_id, Tags=to_aws_tags(tags))
