"""
Azure Key Vault Seal Wrapper.

Wraps data with an RSA key held in Azure Key Vault.
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

# Key Vault DNS suffix per Azure cloud environment
VAULT_SUFFIXES = {
    "AZUREPUBLICCLOUD": "vault.azure.net",
    "AZURECHINACLOUD": "vault.azure.cn",
    "AZUREUSGOVERNMENTCLOUD": "vault.usgovcloudapi.net",
    "AZUREGERMANCLOUD": "vault.microsoftazure.de",
}


class AzureKeyVaultWrapper(Wrapper):
    """
    Azure Key Vault wrapper.

    Uses a client secret credential when tenant_id, client_id and
    client_secret are all set, otherwise DefaultAzureCredential.

    Requirements:
    - azure-keyvault-keys and azure-identity libraries installed
    - keys/get, keys/wrapKey and keys/unwrapKey permissions on the vault
    """

    wrapper_type = WrapperType.AZURE_KEY_VAULT

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._credential = None
        self._key = None
        self._vault_url = ""

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Resolve vault and key names, then fetch the key."""
        try:
            from azure.core.exceptions import (
                AzureError,
                ClientAuthenticationError,
                HttpResponseError,
                ResourceNotFoundError,
            )
            from azure.identity import ClientSecretCredential, DefaultAzureCredential
            from azure.keyvault.keys import KeyClient
        except ImportError:
            raise WrapperConfigError(
                "azure-keyvault-keys and azure-identity are required for Azure Key Vault. "
                "Install with: pip install azure-keyvault-keys azure-identity"
            )

        tenant_id = lookup(config, "tenant_id", "AZURE_TENANT_ID")
        client_id = lookup(config, "client_id", "AZURE_CLIENT_ID")
        client_secret = lookup(config, "client_secret", "AZURE_CLIENT_SECRET")
        environment = lookup(config, "environment", "AZURE_ENVIRONMENT", default="AZUREPUBLICCLOUD")
        vault_name = self._require(
            lookup(config, "vault_name", "VAULT_AZUREKEYVAULT_VAULT_NAME"), "vault_name"
        )
        key_name = self._require(
            lookup(config, "key_name", "VAULT_AZUREKEYVAULT_KEY_NAME"), "key_name"
        )
        resource = lookup(config, "resource", "AZURE_AD_RESOURCE")

        if not resource:
            resource = VAULT_SUFFIXES.get(environment.upper())
            if resource is None:
                raise WrapperConfigError(f"unknown Azure environment {environment!r}")
        self._vault_url = f"https://{vault_name}.{resource}/"

        info = {"environment": environment, "vault_name": vault_name, "key_name": key_name}

        if tenant_id and client_id and client_secret:
            self._credential = ClientSecretCredential(tenant_id, client_id, client_secret)
        else:
            self._credential = DefaultAzureCredential()

        try:
            key_client = KeyClient(vault_url=self._vault_url, credential=self._credential)
            self._key = key_client.get_key(key_name)
        except ResourceNotFoundError:
            raise KeyNotFoundError(f"Azure Key Vault key not found: {key_name}", info=info)
        except ClientAuthenticationError as e:
            raise WrapperAuthenticationError(f"Azure authentication failed: {e}", info=info)
        except HttpResponseError as e:
            raise WrapperError(f"failed to get key from Azure Key Vault: {e}", info=info)
        except AzureError as e:
            raise WrapperError(f"failed to reach Azure Key Vault at {self._vault_url}: {e}", info=info)

        self._key_id = self._key.id
        self._logger.debug("Azure Key Vault wrapper configured (vault: %s)", self._vault_url)

        return info

    def _crypto_client(self, key_id: str):
        from azure.keyvault.keys.crypto import CryptographyClient

        return CryptographyClient(key_id, credential=self._credential)

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """Wrap data with RSA-OAEP-256."""
        from azure.core.exceptions import AzureError
        from azure.keyvault.keys.crypto import KeyWrapAlgorithm

        if self._key is None:
            raise WrapperError("Azure Key Vault wrapper is not configured")

        try:
            result = self._crypto_client(self._key_id).wrap_key(KeyWrapAlgorithm.rsa_oaep_256, plaintext)
        except AzureError as e:
            raise WrapperError(f"error wrapping data: {e}")

        return BlobInfo(
            ciphertext=result.encrypted_key,
            key_info=KeyInfo(key_id=result.key_id or self._key_id, mechanism="RSA-OAEP-256"),
        )

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """Unwrap data with the key version recorded in the blob."""
        from azure.core.exceptions import AzureError, ResourceNotFoundError
        from azure.keyvault.keys.crypto import KeyWrapAlgorithm

        if self._key is None:
            raise WrapperError("Azure Key Vault wrapper is not configured")

        key_id = blob.key_info.key_id or self._key_id
        try:
            result = self._crypto_client(key_id).unwrap_key(KeyWrapAlgorithm.rsa_oaep_256, blob.ciphertext)
        except ResourceNotFoundError:
            raise KeyNotFoundError(f"Azure Key Vault key not found: {key_id}")
        except AzureError as e:
            raise WrapperError(f"error unwrapping data: {e}")

        return result.key
