"""
AliCloud KMS Seal Wrapper.

Wraps data with a customer master key held in Alibaba Cloud KMS.
"""

import base64
import json
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
    "InvalidAccessKeyId.NotFound",
    "SignatureDoesNotMatch",
    "Forbidden.RAM",
    "Forbidden.NoPermission",
)


class AliCloudKMSWrapper(Wrapper):
    """
    AliCloud KMS wrapper.

    Requirements:
    - aliyun-python-sdk-core and aliyun-python-sdk-kms installed
    - An access key pair allowed to describe, encrypt and decrypt with the key
    """

    wrapper_type = WrapperType.ALICLOUD_KMS

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._client = None
        self._domain = ""

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Build the KMS client and describe the key."""
        try:
            from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException
            from aliyunsdkcore.client import AcsClient
            from aliyunsdkkms.request.v20160120.DescribeKeyRequest import DescribeKeyRequest
        except ImportError:
            raise WrapperConfigError(
                "aliyun-python-sdk-kms is required for AliCloud KMS. "
                "Install with: pip install aliyun-python-sdk-core aliyun-python-sdk-kms"
            )

        key_id = self._require(
            lookup(config, "kms_key_id", "VAULT_ALICLOUDKMS_SEAL_KEY_ID"), "kms_key_id"
        )
        region = lookup(config, "region", "ALICLOUD_REGION", default="us-east-1")
        self._domain = lookup(config, "domain", "ALICLOUD_DOMAIN")
        access_key = lookup(config, "access_key", "ALICLOUD_ACCESS_KEY")
        secret_key = lookup(config, "secret_key", "ALICLOUD_SECRET_KEY")

        info = {"region": region, "kms_key_id": key_id}
        if self._domain:
            info["domain"] = self._domain

        request = self._prepare(DescribeKeyRequest())
        request.set_KeyId(key_id)
        try:
            self._client = AcsClient(access_key, secret_key, region)
            response = json.loads(self._client.do_action_with_exception(request))
        except ServerException as e:
            if e.get_error_code() == "Forbidden.KeyNotFound":
                raise KeyNotFoundError(f"AliCloud KMS key not found: {key_id}", info=info)
            if e.get_error_code() in _AUTH_ERROR_CODES:
                raise WrapperAuthenticationError(f"AliCloud authentication failed: {e}", info=info)
            raise WrapperError(f"error fetching AliCloud KMS key information: {e}", info=info)
        except ClientException as e:
            raise WrapperError(f"error fetching AliCloud KMS key information: {e}", info=info)

        self._key_id = response["KeyMetadata"]["KeyId"]
        self._logger.debug("AliCloud KMS wrapper configured (region: %s, key: %s)", region, self._key_id)

        return info

    def _prepare(self, request):
        request.set_accept_format("json")
        if self._domain:
            request.set_endpoint(self._domain)
        return request

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """Encrypt data using AliCloud KMS."""
        from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException
        from aliyunsdkkms.request.v20160120.EncryptRequest import EncryptRequest

        if self._client is None:
            raise WrapperError("AliCloud KMS wrapper is not configured")

        request = self._prepare(EncryptRequest())
        request.set_KeyId(self._key_id)
        request.set_Plaintext(base64.b64encode(plaintext).decode())
        try:
            response = json.loads(self._client.do_action_with_exception(request))
        except (ClientException, ServerException) as e:
            raise WrapperError(f"error encrypting data: {e}")

        return BlobInfo(
            ciphertext=response["CiphertextBlob"].encode(),
            key_info=KeyInfo(key_id=response.get("KeyId", self._key_id)),
        )

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """Decrypt data using AliCloud KMS."""
        from aliyunsdkcore.acs_exception.exceptions import ClientException, ServerException
        from aliyunsdkkms.request.v20160120.DecryptRequest import DecryptRequest

        if self._client is None:
            raise WrapperError("AliCloud KMS wrapper is not configured")

        request = self._prepare(DecryptRequest())
        request.set_CiphertextBlob(blob.ciphertext.decode())
        try:
            response = json.loads(self._client.do_action_with_exception(request))
        except (ClientException, ServerException) as e:
            raise WrapperError(f"error decrypting data: {e}")

        return base64.b64decode(response["Plaintext"])
