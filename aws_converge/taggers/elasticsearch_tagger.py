"""
Tagger for Amazon Elasticsearch Service domains.

The ES API addresses domains by ARN and removes tags by key only.
"""

from typing import Any, Dict, Mapping

from ..core.base_tagger import BaseTagger
from ..core.tags import from_aws_tags, to_aws_tags


class ElasticsearchDomainTagger(BaseTagger):
    """Converges tags on an Elasticsearch domain identified by its ARN."""

    def create_client(self) -> Any:
        return self.aws_client.get_es_client()

    def get_resource_type(self) -> str:
        return "elasticsearch_domain"

    def get_tags(self, resource_id: str) -> Dict[str, str]:
        response = self.client.list_tags(ARN=resource_id)
        return from_aws_tags(response.get("TagList"))

    def remove_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.remove_tags(ARN=resource_id, TagKeys=sorted(tags))

    def add_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.add_tags(ARN=resource_id, TagList=to_aws_tags(tags))
