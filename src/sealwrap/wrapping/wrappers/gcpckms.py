"""
Google Cloud KMS Seal Wrapper.

Wraps data with a symmetric crypto key held in Google Cloud KMS.
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


class GCPCKMSWrapper(Wrapper):
    """
    Google Cloud KMS wrapper.

    Requirements:
    - google-cloud-kms library installed
    - GCP credentials (credentials file or application default credentials)
    - cloudkms.cryptoKeyVersions.useToEncrypt/useToDecrypt on the crypto key
    """

    wrapper_type = WrapperType.GCP_CKMS

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._client = None
        self._parent_name = ""

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Resolve the crypto key path and fetch the key."""
        try:
            from google.api_core import exceptions
            from google.auth import exceptions as auth_exceptions
            from google.cloud import kms
        except ImportError:
            raise WrapperConfigError(
                "google-cloud-kms is required for GCP Cloud KMS. "
                "Install with: pip install google-cloud-kms"
            )

        credentials = lookup(config, "credentials", "GOOGLE_CREDENTIALS", "GOOGLE_APPLICATION_CREDENTIALS")
        project = self._require(lookup(config, "project", "GOOGLE_PROJECT"), "project")
        region = lookup(config, "region", "GOOGLE_REGION", default="global")
        key_ring = self._require(lookup(config, "key_ring", "VAULT_GCPCKMS_SEAL_KEY_RING"), "key_ring")
        crypto_key = self._require(
            lookup(config, "crypto_key", "VAULT_GCPCKMS_SEAL_CRYPTO_KEY"), "crypto_key"
        )

        info = {"project": project, "region": region, "key_ring": key_ring, "crypto_key": crypto_key}

        try:
            if credentials:
                self._client = kms.KeyManagementServiceClient.from_service_account_file(credentials)
            else:
                self._client = kms.KeyManagementServiceClient()

            self._parent_name = self._client.crypto_key_path(project, region, key_ring, crypto_key)
            key = self._client.get_crypto_key(request={"name": self._parent_name})
        except exceptions.NotFound:
            raise KeyNotFoundError(f"GCP crypto key not found: {crypto_key}", info=info)
        except (exceptions.PermissionDenied, exceptions.Unauthenticated) as e:
            raise WrapperAuthenticationError(f"GCP authentication/authorization failed: {e}", info=info)
        except exceptions.GoogleAPIError as e:
            raise WrapperError(f"failed to get crypto key: {e}", info=info)
        except auth_exceptions.GoogleAuthError as e:
            raise WrapperAuthenticationError(f"failed to load GCP credentials: {e}", info=info)
        except OSError as e:
            raise WrapperConfigError(f"failed to read GCP credentials file {credentials!r}: {e}", info=info)

        if key.purpose != kms.CryptoKey.CryptoKeyPurpose.ENCRYPT_DECRYPT:
            raise WrapperConfigError(
                f"crypto key {crypto_key!r} does not have ENCRYPT_DECRYPT purpose", info=info
            )

        self._key_id = key.primary.name
        self._logger.debug("GCP Cloud KMS wrapper configured (key: %s)", self._key_id)

        return info

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """Encrypt data using Cloud KMS."""
        from google.api_core import exceptions

        if self._client is None:
            raise WrapperError("GCP Cloud KMS wrapper is not configured")

        request = {"name": self._parent_name, "plaintext": plaintext}
        if aad:
            request["additional_authenticated_data"] = aad

        try:
            response = self._client.encrypt(request=request)
        except exceptions.GoogleAPIError as e:
            raise WrapperError(f"failed to encrypt data: {e}")

        # response.name is the key version that was used
        return BlobInfo(ciphertext=response.ciphertext, key_info=KeyInfo(key_id=response.name))

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """Decrypt data using Cloud KMS."""
        from google.api_core import exceptions

        if self._client is None:
            raise WrapperError("GCP Cloud KMS wrapper is not configured")

        request = {"name": self._parent_name, "ciphertext": blob.ciphertext}
        if aad:
            request["additional_authenticated_data"] = aad

        try:
            response = self._client.decrypt(request=request)
        except exceptions.NotFound:
            raise KeyNotFoundError(f"GCP crypto key not found: {self._parent_name}")
        except exceptions.GoogleAPIError as e:
            raise WrapperError(f"failed to decrypt data: {e}")

        return response.plaintext
