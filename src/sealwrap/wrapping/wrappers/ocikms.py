"""
OCI KMS Seal Wrapper.

Wraps data with a master encryption key held in Oracle Cloud Infrastructure
Vault.
"""

import base64
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
    parse_bool,
)

# Config keys, also used as metadata keys
KMS_CONFIG_KEY_ID = "key_id"
KMS_CONFIG_CRYPTO_ENDPOINT = "crypto_endpoint"
KMS_CONFIG_MANAGEMENT_ENDPOINT = "management_endpoint"
KMS_CONFIG_AUTH_TYPE_API_KEY = "auth_type_api_key"

PRINCIPAL_TYPE_USER = "user"
PRINCIPAL_TYPE_INSTANCE = "instance"


class OCIKMSWrapper(Wrapper):
    """
    OCI KMS wrapper.

    Authenticates with instance principals unless auth_type_api_key is set,
    in which case the API key from the default OCI config file is used.

    Requirements:
    - oci library installed
    - A policy allowing use of the key in its vault
    """

    wrapper_type = WrapperType.OCI_KMS

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._crypto_client = None
        self._key_version_id = ""

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Build the crypto and management clients and fetch the key."""
        try:
            import oci
        except ImportError:
            raise WrapperConfigError("oci is required for OCI KMS. Install with: pip install oci")

        key_id = self._require(
            lookup(config, KMS_CONFIG_KEY_ID, "VAULT_OCIKMS_SEAL_KEY_ID"), KMS_CONFIG_KEY_ID
        )
        crypto_endpoint = self._require(
            lookup(config, KMS_CONFIG_CRYPTO_ENDPOINT, "VAULT_OCIKMS_CRYPTO_ENDPOINT"),
            KMS_CONFIG_CRYPTO_ENDPOINT,
        )
        management_endpoint = self._require(
            lookup(config, KMS_CONFIG_MANAGEMENT_ENDPOINT, "VAULT_OCIKMS_MANAGEMENT_ENDPOINT"),
            KMS_CONFIG_MANAGEMENT_ENDPOINT,
        )
        use_api_key = parse_bool(config.get(KMS_CONFIG_AUTH_TYPE_API_KEY, "false"))

        info = {
            KMS_CONFIG_KEY_ID: key_id,
            KMS_CONFIG_CRYPTO_ENDPOINT: crypto_endpoint,
            KMS_CONFIG_MANAGEMENT_ENDPOINT: management_endpoint,
            "principal_type": PRINCIPAL_TYPE_USER if use_api_key else PRINCIPAL_TYPE_INSTANCE,
        }

        try:
            if use_api_key:
                client_kwargs = {"config": oci.config.from_file()}
            else:
                signer = oci.auth.signers.InstancePrincipalsSecurityTokenSigner()
                client_kwargs = {"config": {}, "signer": signer}

            self._crypto_client = oci.key_management.KmsCryptoClient(
                service_endpoint=crypto_endpoint, **client_kwargs
            )
            management_client = oci.key_management.KmsManagementClient(
                service_endpoint=management_endpoint, **client_kwargs
            )
            key = management_client.get_key(key_id).data
        except oci.exceptions.ServiceError as e:
            if e.status == 404:
                raise KeyNotFoundError(f"OCI KMS key not found: {key_id}", info=info)
            if e.status in (401, 403):
                raise WrapperAuthenticationError(f"OCI authentication failed: {e}", info=info)
            raise WrapperError(f"failed to get OCI KMS key: {e}", info=info)
        except (oci.exceptions.ClientError, oci.exceptions.ConfigFileNotFound) as e:
            raise WrapperConfigError(f"failed to create OCI KMS clients: {e}", info=info)
        except oci.exceptions.RequestException as e:
            raise WrapperError(f"failed to reach OCI KMS at {management_endpoint}: {e}", info=info)

        self._key_id = key_id
        self._key_version_id = key.current_key_version
        self._logger.debug("OCI KMS wrapper configured (key: %s)", key_id)

        return info

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """Encrypt data using OCI KMS."""
        import oci

        if self._crypto_client is None:
            raise WrapperError("OCI KMS wrapper is not configured")

        details = oci.key_management.models.EncryptDataDetails(
            key_id=self._key_id,
            plaintext=base64.b64encode(plaintext).decode(),
        )
        try:
            data = self._crypto_client.encrypt(details).data
        except (oci.exceptions.ServiceError, oci.exceptions.RequestException) as e:
            raise WrapperError(f"error encrypting data: {e}")

        return BlobInfo(
            ciphertext=data.ciphertext.encode(),
            key_info=KeyInfo(key_id=self._key_version_id or self._key_id),
        )

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """Decrypt data using OCI KMS."""
        import oci

        if self._crypto_client is None:
            raise WrapperError("OCI KMS wrapper is not configured")

        details = oci.key_management.models.DecryptDataDetails(
            key_id=self._key_id,
            ciphertext=blob.ciphertext.decode(),
        )
        try:
            data = self._crypto_client.decrypt(details).data
        except (oci.exceptions.ServiceError, oci.exceptions.RequestException) as e:
            raise WrapperError(f"error decrypting data: {e}")

        return base64.b64decode(data.plaintext)
