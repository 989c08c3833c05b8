"""
Pytest configuration and shared fixtures for testing.
"""

import boto3
import pytest
from moto import mock_aws

from aws_converge.core.aws_client import AWSClient


class FakeClock:
    """Clock double: sleeping advances virtual time instantly."""

    def __init__(self):
        self.time = 0.0
        self.sleeps = []

    def now(self):
        return self.time

    def sleep(self, seconds, cancel_event=None):
        self.sleeps.append(seconds)
        if cancel_event is not None and cancel_event.is_set():
            return True
        self.time += seconds
        return False


@pytest.fixture
def fake_clock():
    """Virtual clock for deterministic poller tests."""
    return FakeClock()


@pytest.fixture
def aws_credentials(monkeypatch):
    """Mock AWS credentials for moto."""
    monkeypatch.setenv("AWS_ACCESS_KEY_ID", "testing")
    monkeypatch.setenv("AWS_SECRET_ACCESS_KEY", "testing")
    monkeypatch.setenv("AWS_SECURITY_TOKEN", "testing")
    monkeypatch.setenv("AWS_SESSION_TOKEN", "testing")
    monkeypatch.setenv("AWS_DEFAULT_REGION", "us-east-1")
    monkeypatch.delenv("AWS_PROFILE", raising=False)


@pytest.fixture
def mock_aws_environment(aws_credentials):
    """Create a mocked AWS environment."""
    with mock_aws():
        yield


@pytest.fixture
def aws_client(mock_aws_environment):
    """Create an AWSClient instance for testing."""
    return AWSClient(region="us-east-1")


@pytest.fixture
def ec2_client(mock_aws_environment):
    """Create a boto3 EC2 client for setting up test resources."""
    return boto3.client("ec2", region_name="us-east-1")


@pytest.fixture
def acm_client(mock_aws_environment):
    """Create a boto3 ACM client for setting up test resources."""
    return boto3.client("acm", region_name="us-east-1")


@pytest.fixture
def vpc(ec2_client):
    """Create a VPC for testing."""
    response = ec2_client.create_vpc(CidrBlock="10.0.0.0/16")
    return response["Vpc"]["VpcId"]


@pytest.fixture
def certificate_arn(acm_client):
    """Request an ACM certificate for testing."""
    response = acm_client.request_certificate(
        DomainName="example.com",
        ValidationMethod="DNS",
    )
    return response["CertificateArn"]
