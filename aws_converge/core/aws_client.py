"""
AWS Client Module
=================

Owns the boto3 session and hands out the service clients that taggers
and convergence conditions talk to.

Nothing here is global. A caller builds one ``AWSClient`` for an
account and region and passes it, or the service clients it returns,
to whatever needs AWS access.

Classes
-------
AWSClient
    Session, retry policy and per-service client cache.

Example
-------
>>> from aws_converge.core.aws_client import AWSClient
>>>
>>> client = AWSClient(region="eu-west-1", profile="production")
>>> client.validate_credentials()
>>> acm = client.get_acm_client()
>>> ga = client.get_globalaccelerator_client()  # always us-west-2
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional, Tuple

import boto3
from botocore.config import Config
from botocore.exceptions import (
    ClientError,
    NoCredentialsError,
    NoRegionError,
    ProfileNotFound,
)

from aws_converge.core.exceptions import (
    AWSClientError,
    CredentialsError,
    RegionError,
    ServiceError,
)

# Module logger
logger = logging.getLogger(__name__)

# Global Accelerator's control plane only exists in this region
GLOBAL_ACCELERATOR_REGION = "us-west-2"

# STS codes that mean the keys themselves are wrong
INVALID_KEY_CODES = ("InvalidClientTokenId", "SignatureDoesNotMatch")

CREDENTIALS_HINT = (
    "Run 'aws configure' or export AWS_ACCESS_KEY_ID and AWS_SECRET_ACCESS_KEY"
)


class AWSClient:
    """
    Session and service-client factory for one account and region.

    Parameters
    ----------
    region : str, default="us-east-1"
        Default region for service clients.
    profile : str, optional
        Named profile from ~/.aws/credentials.
    max_retries : int, default=3
        Attempts per API call under botocore's adaptive retry mode.
    timeout : int, default=30
        Connect and read timeout in seconds.

    Examples
    --------
    >>> client = AWSClient(region="us-east-1")
    >>> es = client.get_es_client()

    The same settings against another region:

    >>> eu_client = client.with_region("eu-west-1")
    """

    def __init__(
        self,
        region: str = "us-east-1",
        profile: Optional[str] = None,
        max_retries: int = 3,
        timeout: int = 30,
    ) -> None:
        self.region = region
        self.profile = profile
        self.max_retries = max_retries
        self.timeout = timeout

        self._session: Optional[boto3.Session] = None
        self._clients: Dict[Tuple[str, str], Any] = {}
        self._config = Config(
            retries={"max_attempts": max_retries, "mode": "adaptive"},
            connect_timeout=timeout,
            read_timeout=timeout,
        )

        logger.debug(f"AWSClient ready (region={region}, profile={profile})")

    @property
    def session(self) -> boto3.Session:
        """The boto3 session, opened on first use."""
        if self._session is None:
            self._session = self._open_session()
        return self._session

    def _open_session(self) -> boto3.Session:
        kwargs = {"region_name": self.region}
        if self.profile:
            kwargs["profile_name"] = self.profile

        try:
            return boto3.Session(**kwargs)
        except ProfileNotFound:
            raise CredentialsError(
                f"AWS profile '{self.profile}' not found",
                details={"profile": self.profile},
            )
        except NoRegionError:
            raise RegionError(f"No usable region: {self.region}", region=self.region)
        except Exception as e:
            logger.exception("Could not open boto3 session")
            raise AWSClientError(f"Could not open AWS session: {e}", region=self.region)

    def get_client(self, service_name: str, region: Optional[str] = None) -> Any:
        """
        Return the cached boto3 client for a service, creating it if needed.

        Parameters
        ----------
        service_name : str
            boto3 service name, e.g. 'acm' or 'es'.
        region : str, optional
            Region for this service only; defaults to ``self.region``.

        Raises
        ------
        CredentialsError
            If no credentials can be found.
        ServiceError
            If boto3 cannot build the client.
        """
        region_name = region or self.region
        key = (service_name, region_name)
        if key not in self._clients:
            self._clients[key] = self._build_client(service_name, region_name)
        return self._clients[key]

    def _build_client(self, service_name: str, region_name: str) -> Any:
        try:
            client = self.session.client(
                service_name, region_name=region_name, config=self._config
            )
        except NoCredentialsError:
            raise CredentialsError(
                "AWS credentials not found",
                details={"hint": CREDENTIALS_HINT},
            )
        except AWSClientError:
            raise
        except Exception as e:
            logger.exception(f"Could not build {service_name} client")
            raise ServiceError(
                f"Failed to create {service_name} client: {e}",
                service=service_name,
                region=region_name,
            )
        logger.debug(f"Built {service_name} client in {region_name}")
        return client

    def get_acm_client(self) -> Any:
        return self.get_client("acm")

    def get_ec2_client(self) -> Any:
        return self.get_client("ec2")

    def get_es_client(self) -> Any:
        return self.get_client("es")

    def get_globalaccelerator_client(self) -> Any:
        """
        Global Accelerator client, bound to us-west-2 whatever ``self.region`` is.
        """
        return self.get_client("globalaccelerator", region=GLOBAL_ACCELERATOR_REGION)

    def get_sts_client(self) -> Any:
        return self.get_client("sts")

    def _caller_identity(self) -> Dict[str, Any]:
        return self.get_sts_client().get_caller_identity()

    def validate_credentials(self) -> bool:
        """
        Check the credentials with STS GetCallerIdentity.

        Returns
        -------
        bool
            True when STS accepts the credentials.

        Raises
        ------
        CredentialsError
            If the credentials are missing, invalid or expired.
        """
        try:
            identity = self._caller_identity()
        except CredentialsError:
            raise
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "Unknown")
            if code in INVALID_KEY_CODES:
                raise CredentialsError(
                    "Invalid AWS credentials",
                    details={"error_code": code},
                )
            raise CredentialsError(f"Failed to validate credentials: {e}")
        except Exception as e:
            logger.exception("Credential check failed")
            raise CredentialsError(f"Failed to validate credentials: {e}")

        logger.info(f"Credentials valid for {identity['Arn']}")
        return True

    def get_account_id(self) -> str:
        """Account ID the credentials belong to."""
        try:
            return self._caller_identity()["Account"]
        except AWSClientError:
            raise
        except Exception as e:
            raise AWSClientError(f"Failed to get account ID: {e}")

    def with_region(self, region: str) -> AWSClient:
        """Copy of this client (profile, retries, timeout) for another region."""
        return AWSClient(
            region=region,
            profile=self.profile,
            max_retries=self.max_retries,
            timeout=self.timeout,
        )

    def __enter__(self) -> AWSClient:
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self._clients.clear()
        self._session = None

    def __repr__(self) -> str:
        return (
            f"AWSClient(region='{self.region}', "
            f"profile={self.profile!r}, "
            f"max_retries={self.max_retries})"
        )


__all__ = ["AWSClient", "AWSClientError"]
