"""
Transit Seal Wrapper.

Wraps data with a key held in a Vault Transit secrets engine.
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


class TransitWrapper(Wrapper):
    """
    Vault Transit wrapper.

    Requirements:
    - hvac library installed
    - Transit secrets engine mounted on the target Vault
    - A token allowed to read, encrypt and decrypt with the seal key
    """

    wrapper_type = WrapperType.TRANSIT

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._client = None
        self._mount_path = ""
        self._key_name = ""

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Build the Vault client and read the transit key."""
        try:
            import hvac
            from hvac.exceptions import Forbidden, InvalidPath, Unauthorized, VaultError
            from requests.exceptions import RequestException
        except ImportError:
            raise WrapperConfigError("hvac is required for Transit. Install with: pip install hvac")

        address = lookup(config, "address", "VAULT_ADDR", default="https://127.0.0.1:8200")
        token = lookup(config, "token", "VAULT_TOKEN")
        key_name = self._require(lookup(config, "key_name", "VAULT_TRANSIT_SEAL_KEY_NAME"), "key_name")
        mount_path = self._require(
            lookup(config, "mount_path", "VAULT_TRANSIT_SEAL_MOUNT_PATH"), "mount_path"
        ).strip("/")
        namespace = lookup(config, "namespace", "VAULT_NAMESPACE")

        verify = True
        if parse_bool(lookup(config, "tls_skip_verify", "VAULT_SKIP_VERIFY", default="false")):
            verify = False
        elif lookup(config, "tls_ca_cert", "VAULT_CACERT"):
            verify = lookup(config, "tls_ca_cert", "VAULT_CACERT")

        cert = None
        client_cert = lookup(config, "tls_client_cert", "VAULT_CLIENT_CERT")
        client_key = lookup(config, "tls_client_key", "VAULT_CLIENT_KEY")
        if client_cert and client_key:
            cert = (client_cert, client_key)

        info = {"address": address, "mount_path": mount_path, "key_name": key_name}
        if namespace:
            info["namespace"] = namespace

        self._mount_path = mount_path
        self._key_name = key_name

        try:
            self._client = hvac.Client(
                url=address,
                token=token or None,
                namespace=namespace or None,
                verify=verify,
                cert=cert,
            )
            self._client.secrets.transit.read_key(name=key_name, mount_point=mount_path)
        except InvalidPath:
            raise KeyNotFoundError(f"transit key not found: {mount_path}/keys/{key_name}", info=info)
        except (Forbidden, Unauthorized) as e:
            raise WrapperAuthenticationError(f"Vault authentication failed: {e}", info=info)
        except VaultError as e:
            raise WrapperError(f"failed to read transit key: {e}", info=info)
        except RequestException as e:
            raise WrapperError(f"failed to reach Vault at {address}: {e}", info=info)

        self._key_id = key_name
        self._logger.debug("transit wrapper configured (addr: %s, key: %s)", address, key_name)

        return info

    def finalize(self) -> None:
        if self._client is not None:
            self._client.adapter.close()

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """
        Encrypt data using Vault Transit.

        aad is not bound to the ciphertext; transit has no associated-data input.
        """
        from hvac.exceptions import VaultError
        from requests.exceptions import RequestException

        if self._client is None:
            raise WrapperError("transit wrapper is not configured")

        try:
            response = self._client.secrets.transit.encrypt_data(
                name=self._key_name,
                plaintext=base64.b64encode(plaintext).decode(),
                mount_point=self._mount_path,
            )
        except (VaultError, RequestException) as e:
            raise WrapperError(f"error encrypting data: {e}")

        # Transit ciphertext is already versioned, e.g. "vault:v1:..."
        return BlobInfo(
            ciphertext=response["data"]["ciphertext"].encode(),
            key_info=KeyInfo(key_id=self._key_name),
        )

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """
        Decrypt data using Vault Transit.

        aad is ignored, matching encrypt().
        """
        from hvac.exceptions import InvalidPath, VaultError
        from requests.exceptions import RequestException

        if self._client is None:
            raise WrapperError("transit wrapper is not configured")

        try:
            response = self._client.secrets.transit.decrypt_data(
                name=self._key_name,
                ciphertext=blob.ciphertext.decode(),
                mount_point=self._mount_path,
            )
        except InvalidPath:
            raise KeyNotFoundError(f"transit key not found: {self._key_name}")
        except (VaultError, RequestException) as e:
            raise WrapperError(f"error decrypting data: {e}")

        return base64.b64decode(response["data"]["plaintext"])
