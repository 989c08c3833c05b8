"""
Tagger for AWS Certificate Manager certificates.

ACM removes a tag only when both key and value match, so removals carry
the value currently applied.
"""

from typing import Any, Dict, Mapping

from ..core.base_tagger import BaseTagger
from ..core.tags import from_aws_tags, to_aws_tags


class AcmCertificateTagger(BaseTagger):
    """Converges tags on an ACM certificate identified by its ARN."""

    def create_client(self) -> Any:
        return self.aws_client.get_acm_client()

    def get_resource_type(self) -> str:
        return "acm_certificate"

    def get_tags(self, resource_id: str) -> Dict[str, str]:
        response = self.client.list_tags_for_certificate(CertificateArn=resource_id)
        return from_aws_tags(response.get("Tags"))

    def remove_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.remove_tags_from_certificate(
            CertificateArn=resource_id,
            Tags=to_aws_tags(tags),
        )

    def add_tags(self, resource_id: str, tags: Mapping[str, str]) -> None:
        self.client.add_tags_to_certificate(
            CertificateArn=resource_id,
            Tags=to_aws_tags(tags),
        )
