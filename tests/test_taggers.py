"""
Tests for the service taggers.
"""

from unittest.mock import MagicMock, call

import pytest
from botocore.exceptions import ClientError

from aws_converge.core.exceptions import TaggingError, UnsupportedResourceError
from aws_converge.taggers import (
    TAGGERS,
    AcceleratorTagger,
    AcmCertificateTagger,
    Ec2Tagger,
    ElasticsearchDomainTagger,
    get_tagger,
)


def mock_aws_client(service_client, region="us-east-1"):
    """AWSClient stand-in whose accessors all return ``service_client``."""
    aws_client = MagicMock()
    aws_client.region = region
    aws_client.get_es_client.return_value = service_client
    aws_client.get_globalaccelerator_client.return_value = service_client
    aws_client.get_acm_client.return_value = service_client
    aws_client.get_ec2_client.return_value = service_client
    return aws_client


def client_error(code="AccessDeniedException", message="not allowed", operation="ListTags"):
    return ClientError({"Error": {"Code": code, "Message": message}}, operation)


class TestEc2Tagger:
    """Tests for Ec2Tagger against moto."""

    def test_resource_type(self, aws_client):
        assert Ec2Tagger(aws_client).get_resource_type() == "ec2_resource"

    def test_sync_adds_tags(self, aws_client, ec2_client, vpc):
        """Tags are created on an untagged resource."""
        result = Ec2Tagger(aws_client).sync(vpc, {"Name": "core", "Env": "prod"})

        assert result.changed
        assert result.delta.to_add == {"Name": "core", "Env": "prod"}
        assert Ec2Tagger(aws_client).get_tags(vpc) == {"Name": "core", "Env": "prod"}

    def test_sync_converges_changes(self, aws_client, ec2_client, vpc):
        """Stale keys are removed and changed values replaced."""
        ec2_client.create_tags(
            Resources=[vpc],
            Tags=[
                {"Key": "Env", "Value": "dev"},
                {"Key": "Owner", "Value": "alice"},
                {"Key": "Name", "Value": "core"},
            ],
        )

        tagger = Ec2Tagger(aws_client)
        result = tagger.sync(vpc, {"Env": "prod", "Name": "core", "Team": "infra"})

        assert result.delta.to_remove == {"Env": "dev", "Owner": "alice"}
        assert result.delta.to_add == {"Env": "prod", "Team": "infra"}
        assert tagger.get_tags(vpc) == {"Env": "prod", "Name": "core", "Team": "infra"}

    def test_sync_already_converged(self, aws_client, ec2_client, vpc):
        """Matching tags produce an unchanged result."""
        ec2_client.create_tags(Resources=[vpc], Tags=[{"Key": "Env", "Value": "prod"}])

        result = Ec2Tagger(aws_client).sync(vpc, {"Env": "prod"})

        assert not result.changed
        assert result.delta.is_empty

    def test_dry_run_leaves_tags(self, aws_client, ec2_client, vpc):
        """Dry runs plan without writing."""
        ec2_client.create_tags(Resources=[vpc], Tags=[{"Key": "Env", "Value": "dev"}])

        tagger = Ec2Tagger(aws_client)
        result = tagger.sync(vpc, {"Env": "prod"}, dry_run=True)

        assert result.dry_run
        assert result.delta.changed_keys == {"Env"}
        assert tagger.get_tags(vpc) == {"Env": "dev"}

    def test_reserved_tags_never_planned(self, aws_client, vpc):
        """AWS-managed aws: tags are left alone on both sides."""
        tagger = Ec2Tagger(aws_client)
        delta = tagger.plan(
            vpc,
            {"Env": "prod"},
            current={"Env": "prod", "aws:cloudformation:stack-name": "core"},
        )
        assert delta.is_empty


class TestAcmCertificateTagger:
    """Tests for AcmCertificateTagger against moto."""

    def test_sync_round(self, aws_client, acm_client, certificate_arn):
        """Tags on a certificate converge to the desired set."""
        acm_client.add_tags_to_certificate(
            CertificateArn=certificate_arn,
            Tags=[{"Key": "Env", "Value": "dev"}, {"Key": "Stale", "Value": "1"}],
        )

        tagger = AcmCertificateTagger(aws_client)
        result = tagger.sync(certificate_arn, {"Env": "prod", "App": "web"})

        assert result.resource_type == "acm_certificate"
        assert result.delta.to_remove == {"Env": "dev", "Stale": "1"}
        assert tagger.get_tags(certificate_arn) == {"Env": "prod", "App": "web"}

    def test_sync_to_empty_removes_everything(self, aws_client, acm_client, certificate_arn):
        """An empty desired set clears the certificate's tags."""
        acm_client.add_tags_to_certificate(
            CertificateArn=certificate_arn,
            Tags=[{"Key": "Env", "Value": "dev"}],
        )

        tagger = AcmCertificateTagger(aws_client)
        tagger.sync(certificate_arn, {})

        assert tagger.get_tags(certificate_arn) == {}

    def test_remove_passes_current_values(self):
        """ACM removals carry key and value."""
        acm = MagicMock()
        AcmCertificateTagger(mock_aws_client(acm)).remove_tags("arn:cert", {"Env": "dev"})

        acm.remove_tags_from_certificate.assert_called_once_with(
            CertificateArn="arn:cert",
            Tags=[{"Key": "Env", "Value": "dev"}],
        )


class TestElasticsearchDomainTagger:
    """Tests for ElasticsearchDomainTagger call shapes."""

    ARN = "arn:aws:es:us-east-1:123456789012:domain/logs"

    def test_get_tags(self):
        es = MagicMock()
        es.list_tags.return_value = {"TagList": [{"Key": "Env", "Value": "prod"}]}

        tags = ElasticsearchDomainTagger(mock_aws_client(es)).get_tags(self.ARN)

        assert tags == {"Env": "prod"}
        es.list_tags.assert_called_once_with(ARN=self.ARN)

    def test_sync_removes_before_adding(self):
        """Removal of a changed key happens before its new value is added."""
        es = MagicMock()
        es.list_tags.return_value = {
            "TagList": [
                {"Key": "Env", "Value": "dev"},
                {"Key": "Old", "Value": "x"},
            ]
        }

        ElasticsearchDomainTagger(mock_aws_client(es)).sync(
            self.ARN, {"Env": "prod", "New": "y"}
        )

        assert es.method_calls == [
            call.list_tags(ARN=self.ARN),
            call.remove_tags(ARN=self.ARN, TagKeys=["Env", "Old"]),
            call.add_tags(
                ARN=self.ARN,
                TagList=[
                    {"Key": "Env", "Value": "prod"},
                    {"Key": "New", "Value": "y"},
                ],
            ),
        ]

    def test_no_calls_when_converged(self):
        es = MagicMock()
        es.list_tags.return_value = {"TagList": [{"Key": "Env", "Value": "prod"}]}

        ElasticsearchDomainTagger(mock_aws_client(es)).sync(self.ARN, {"Env": "prod"})

        es.remove_tags.assert_not_called()
        es.add_tags.assert_not_called()

    def test_client_error_becomes_tagging_error(self):
        """Service failures surface as TaggingError with the AWS code."""
        es = MagicMock()
        es.list_tags.side_effect = client_error()

        tagger = ElasticsearchDomainTagger(mock_aws_client(es))
        with pytest.raises(TaggingError) as exc_info:
            tagger.sync(self.ARN, {"Env": "prod"})

        error = exc_info.value
        assert error.resource_id == self.ARN
        assert error.resource_type == "elasticsearch_domain"
        assert error.details["error_code"] == "AccessDeniedException"
        assert isinstance(error.__cause__, ClientError)


class TestAcceleratorTagger:
    """Tests for AcceleratorTagger call shapes."""

    ARN = "arn:aws:globalaccelerator::123456789012:accelerator/abcd"

    def test_uses_pinned_client(self):
        ga = MagicMock()
        aws_client = mock_aws_client(ga, region="eu-west-1")

        tagger = AcceleratorTagger(aws_client)

        assert tagger.client is ga
        aws_client.get_globalaccelerator_client.assert_called_once_with()

    def test_sync_calls(self):
        ga = MagicMock()
        ga.list_tags_for_resource.return_value = {
            "Tags": [{"Key": "Env", "Value": "dev"}]
        }

        result = AcceleratorTagger(mock_aws_client(ga)).sync(self.ARN, {"Env": "prod"})

        assert result.resource_type == "global_accelerator"
        ga.untag_resource.assert_called_once_with(ResourceArn=self.ARN, TagKeys=["Env"])
        ga.tag_resource.assert_called_once_with(
            ResourceArn=self.ARN,
            Tags=[{"Key": "Env", "Value": "prod"}],
        )

    def test_failed_add_reports_action(self):
        ga = MagicMock()
        ga.list_tags_for_resource.return_value = {"Tags": []}
        ga.tag_resource.side_effect = client_error(
            "TooManyTagsException", "limit", "TagResource"
        )

        with pytest.raises(TaggingError, match="Failed to add tags"):
            AcceleratorTagger(mock_aws_client(ga)).sync(self.ARN, {"Env": "prod"})


class TestRegistry:
    """Tests for the tagger registry."""

    @pytest.mark.parametrize("resource_type", sorted(TAGGERS))
    def test_get_tagger(self, resource_type):
        tagger = get_tagger(resource_type, mock_aws_client(MagicMock()))
        assert tagger.get_resource_type() == resource_type

    def test_unknown_resource_type(self):
        with pytest.raises(UnsupportedResourceError) as exc_info:
            get_tagger("s3_bucket", mock_aws_client(MagicMock()))

        assert exc_info.value.details["supported"] == sorted(TAGGERS)
