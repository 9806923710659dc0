"""
Remote secret-manager clients.

Adapters exposing the ``RemoteSecretClient`` contract (async ``get`` and
``create``) over AWS Secrets Manager and GCP Secret Manager. The vendor SDKs
are blocking, so calls run in a worker thread.

Vendor SDKs are optional extras (``navigator-secret[aws]`` /
``navigator-secret[gcp]``) and imported when an adapter is built.
"""
import os
import asyncio
import logging
from typing import Any, Optional

from ..conf import (
    ENV_AWS_REGION,
    ENV_GCP_PROJECT,
    storage_type,
)
from ..exceptions import SecretNotFoundError, SecretAlreadyExistsError

logger = logging.getLogger("navigator.secret")


class AWSSecretsManagerClient:
    """AWS Secrets Manager adapter (boto3)."""

    def __init__(self, region: Optional[str] = None, client: Any = None):
        from botocore.exceptions import ClientError

        self._client_error = ClientError
        if client is None:
            import boto3

            client = boto3.client(
                "secretsmanager", region_name=region or "us-east-1"
            )
        self._client = client

    def _error_code(self, err: Exception) -> str:
        return getattr(err, "response", {}).get("Error", {}).get("Code", "")

    async def get(self, name: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.get_secret_value, SecretId=name
            )
        except self._client_error as err:
            if self._error_code(err) == "ResourceNotFoundException":
                raise SecretNotFoundError(name) from err
            raise
        value = response.get("SecretString")
        if not value:
            raise ValueError(f"Secret {name} has no SecretString value")
        return value

    async def create(self, name: str, value: str) -> None:
        try:
            await asyncio.to_thread(
                self._client.create_secret, Name=name, SecretString=value
            )
        except self._client_error as err:
            if self._error_code(err) == "ResourceExistsException":
                raise SecretAlreadyExistsError(name) from err
            raise


class GCPSecretManagerClient:
    """GCP Secret Manager adapter (google-cloud-secret-manager)."""

    def __init__(self, project: str, client: Any = None):
        from google.api_core import exceptions

        self._exceptions = exceptions
        if client is None:
            from google.cloud import secretmanager

            client = secretmanager.SecretManagerServiceClient()
        self._client = client
        self.project = project

    def _secret_path(self, name: str) -> str:
        return f"projects/{self.project}/secrets/{name}"

    async def get(self, name: str) -> str:
        try:
            response = await asyncio.to_thread(
                self._client.access_secret_version,
                request={"name": f"{self._secret_path(name)}/versions/latest"},
            )
        except self._exceptions.NotFound as err:
            raise SecretNotFoundError(name) from err
        return response.payload.data.decode("utf-8")

    async def create(self, name: str, value: str) -> None:
        try:
            secret = await asyncio.to_thread(
                self._client.create_secret,
                request={
                    "parent": f"projects/{self.project}",
                    "secret_id": name,
                    "secret": {"replication": {"automatic": {}}},
                },
            )
        except self._exceptions.AlreadyExists as err:
            raise SecretAlreadyExistsError(name) from err
        await asyncio.to_thread(
            self._client.add_secret_version,
            request={
                "parent": secret.name,
                "payload": {"data": value.encode("utf-8")},
            },
        )


def remote_client_from_env() -> Optional[Any]:
    """Build the remote client selected by SECRETKEY_STORAGE_TYPE.

    Called once by the hosting process at startup. Returns None when no
    remote manager is requested, or when the requested one cannot be built;
    the provider then refuses to start instead of falling back to files.
    """
    kind = storage_type()
    try:
        if kind == "aws":
            return AWSSecretsManagerClient(region=os.environ.get(ENV_AWS_REGION))
        if kind == "gcp":
            project = os.environ.get(ENV_GCP_PROJECT)
            if not project:
                logger.error(
                    "%s is required for GCP Secret Manager", ENV_GCP_PROJECT
                )
                return None
            return GCPSecretManagerClient(project=project)
    except Exception as err:
        logger.error("Unable to configure %s secret manager: %s", kind, err)
    return None
