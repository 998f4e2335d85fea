"""
AWS KMS Seal Wrapper.

Wraps data with a customer master key held in AWS Key Management Service.
"""

from typing import Dict, Mapping, Optional

from ..wrapper import (
    BlobInfo,
    KeyInfo,
    KeyNotFoundError,
    Wrapper,
    WrapperAuthenticationError,
    WrapperConfigError,
    WrapperError,
    WrapperOptions,
    WrapperType,
    lookup,
)

_AUTH_ERROR_CODES = (
    "AccessDenied",
    "AccessDeniedException",
    "UnauthorizedAccess",
    "UnrecognizedClientException",
    "InvalidSignatureException",
    "ExpiredTokenException",
)


class AWSKMSWrapper(Wrapper):
    """
    AWS KMS wrapper.

    Requirements:
    - boto3 library installed
    - AWS credentials configured (env vars, IAM role, or explicit keys)
    - kms:DescribeKey, kms:Encrypt and kms:Decrypt on the seal key
    """

    wrapper_type = WrapperType.AWS_KMS

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._client = None
        self._region = ""
        self._endpoint = ""

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Resolve region and key, build the KMS client and describe the key."""
        try:
            import boto3
            from botocore.exceptions import BotoCoreError, ClientError
        except ImportError:
            raise WrapperConfigError("boto3 is required for AWS KMS. Install with: pip install boto3")

        key_id = self._require(
            lookup(config, "kms_key_id", "VAULT_AWSKMS_SEAL_KEY_ID"), "kms_key_id"
        )
        self._region = lookup(config, "region", "AWS_REGION", "AWS_DEFAULT_REGION", default="us-east-1")
        self._endpoint = lookup(config, "endpoint", "AWS_KMS_ENDPOINT")

        info = {"region": self._region, "kms_key_id": key_id}
        if self._endpoint:
            info["endpoint"] = self._endpoint

        try:
            self._client = boto3.client(
                "kms",
                region_name=self._region,
                endpoint_url=self._endpoint or None,
                aws_access_key_id=config.get("access_key") or None,
                aws_secret_access_key=config.get("secret_key") or None,
                aws_session_token=config.get("session_token") or None,
            )
            response = self._client.describe_key(KeyId=key_id)
        except ClientError as e:
            code = e.response.get("Error", {}).get("Code", "")
            if code == "NotFoundException":
                raise KeyNotFoundError(f"AWS KMS key not found: {key_id}", info=info)
            if code in _AUTH_ERROR_CODES:
                raise WrapperAuthenticationError(f"AWS authentication failed: {e}", info=info)
            raise WrapperError(f"error fetching AWS KMS key information: {e}", info=info)
        except BotoCoreError as e:
            raise WrapperError(f"error fetching AWS KMS key information: {e}", info=info)

        self._key_id = response["KeyMetadata"]["Arn"]
        self._logger.debug("AWS KMS wrapper configured (region: %s, key: %s)", self._region, self._key_id)

        return info

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """Encrypt data using AWS KMS."""
        from botocore.exceptions import ClientError

        if self._client is None:
            raise WrapperError("AWS KMS wrapper is not configured")

        try:
            response = self._client.encrypt(KeyId=self._key_id, Plaintext=plaintext)
        except ClientError as e:
            raise WrapperError(f"error encrypting data: {e}")

        # Record the key that actually wrapped the data; it changes on rotation
        return BlobInfo(
            ciphertext=response["CiphertextBlob"],
            key_info=KeyInfo(key_id=response.get("KeyId", self._key_id)),
        )

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """Decrypt data using AWS KMS."""
        from botocore.exceptions import ClientError

        if self._client is None:
            raise WrapperError("AWS KMS wrapper is not configured")

        try:
            response = self._client.decrypt(
                CiphertextBlob=blob.ciphertext,
                KeyId=blob.key_info.key_id or self._key_id,
            )
        except ClientError as e:
            if e.response.get("Error", {}).get("Code") == "NotFoundException":
                raise KeyNotFoundError(f"AWS KMS key not found: {blob.key_info.key_id}")
            raise WrapperError(f"error decrypting data: {e}")

        return response["Plaintext"]
