"""
AEAD Seal Wrapper.

Wraps data locally with AES-GCM using a key supplied in configuration.
"""

import base64
import binascii
import secrets
from typing import Dict, Mapping, Optional

from cryptography.exceptions import InvalidTag
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from ..wrapper import (
    BlobInfo,
    KeyInfo,
    Wrapper,
    WrapperConfigError,
    WrapperError,
    WrapperOptions,
    WrapperType,
)

AES_GCM = "aes-gcm"


class AEADWrapper(Wrapper):
    """
    AEAD wrapper backed by AES-GCM.

    The key is read from the base64 'key' setting. It may also be set later
    with set_aes_gcm_key_bytes(), so a missing key is not a config error.
    """

    wrapper_type = WrapperType.AEAD
    NONCE_SIZE = 12

    def __init__(self, opts: Optional[WrapperOptions] = None):
        super().__init__(opts)
        self._aead: Optional[AESGCM] = None
        self._aead_type = AES_GCM

    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """Configure the AEAD type, key and key id."""
        aead_type = (config.get("aead_type") or AES_GCM).lower()
        if aead_type != AES_GCM:
            raise WrapperConfigError(f"unsupported aead_type {aead_type!r}")
        self._aead_type = aead_type

        key_b64 = config.get("key", "")
        if key_b64:
            try:
                key = base64.b64decode(key_b64, validate=True)
            except (binascii.Error, ValueError) as e:
                raise WrapperConfigError(f"error base64-decoding key: {e}")
            self.set_aes_gcm_key_bytes(key)

        self._key_id = config.get("key_id", "")

        return {"aead_type": self._aead_type}

    def set_aes_gcm_key_bytes(self, key: bytes) -> None:
        """Install raw AES key material."""
        if len(key) not in (16, 24, 32):
            raise WrapperConfigError(f"invalid AES-GCM key length {len(key)}")
        self._aead = AESGCM(key)

    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        if self._aead is None:
            raise WrapperError("AEAD wrapper has no key configured")

        nonce = secrets.token_bytes(self.NONCE_SIZE)
        ciphertext = self._aead.encrypt(nonce, plaintext, aad)
        return BlobInfo(
            ciphertext=ciphertext,
            iv=nonce,
            key_info=KeyInfo(key_id=self._key_id, mechanism=self._aead_type),
        )

    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        if self._aead is None:
            raise WrapperError("AEAD wrapper has no key configured")
        if not blob.iv:
            raise WrapperError("blob has no nonce")

        try:
            return self._aead.decrypt(blob.iv, blob.ciphertext, aad)
        except InvalidTag:
            raise WrapperError("decryption failed: authentication tag mismatch")
