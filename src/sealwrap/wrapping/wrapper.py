"""
Seal Wrapper Base Interface.

Defines the abstract interface that all seal wrappers must implement,
along with the error taxonomy shared by every provider.
"""

import logging
import os
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Mapping, Optional


class WrapperErrorKind(str, Enum):
    """Kinds of failure a wrapper can report."""

    CONSTRUCTION = "construction"
    CONFIGURATION = "configuration"
    AUTHENTICATION = "authentication"
    KEY_NOT_FOUND = "key_not_found"
    OPERATION = "operation"


class WrapperError(Exception):
    """Base exception for wrapper operations."""

    kind = WrapperErrorKind.OPERATION

    def __init__(self, message: str, info: Optional[Mapping[str, str]] = None):
        super().__init__(message)
        # Metadata resolved before the failure, if any
        self.info: Dict[str, str] = dict(info or {})


class WrapperConstructionError(WrapperError):
    """Wrapper could not be built from its options."""

    kind = WrapperErrorKind.CONSTRUCTION


class WrapperConfigError(WrapperError):
    """Wrapper configuration is missing or invalid."""

    kind = WrapperErrorKind.CONFIGURATION


class WrapperAuthenticationError(WrapperError):
    """Authentication to the provider failed."""

    kind = WrapperErrorKind.AUTHENTICATION


class KeyNotFoundError(WrapperError):
    """Configured key does not exist at the provider."""

    kind = WrapperErrorKind.KEY_NOT_FOUND


class WrapperType(str, Enum):
    """Seal types recognised by the wrapper layer."""

    SHAMIR = "shamir"
    AEAD = "aead"
    ALICLOUD_KMS = "alicloudkms"
    AWS_KMS = "awskms"
    AZURE_KEY_VAULT = "azurekeyvault"
    GCP_CKMS = "gcpckms"
    OCI_KMS = "ocikms"
    TRANSIT = "transit"
    PKCS11 = "pkcs11"


@dataclass
class WrapperOptions:
    """Options passed to every wrapper constructor."""

    logger: Optional[logging.Logger] = None


@dataclass
class KeyInfo:
    """Identifies the key that produced a blob."""

    key_id: str = ""
    mechanism: str = ""
    wrapped_key: Optional[bytes] = None


@dataclass
class BlobInfo:
    """Result of a wrapper encrypt operation."""

    ciphertext: bytes
    iv: Optional[bytes] = None
    key_info: KeyInfo = field(default_factory=KeyInfo)


def lookup(config: Mapping[str, str], key: str, *env_vars: str, default: str = "") -> str:
    """
    Resolve a setting, letting environment variables override the config map.

    Args:
        config: Wrapper configuration map
        key: Config key to read
        env_vars: Environment variables checked first, in order
        default: Value used when nothing is set

    Returns:
        The resolved value, or default
    """
    for name in env_vars:
        value = os.getenv(name)
        if value:
            return value
    return config.get(key) or default


def parse_bool(value: str) -> bool:
    """Parse a config flag the way the seal stanzas write them."""
    return value.strip().lower() in ("1", "t", "true", "yes", "on")


class Wrapper(ABC):
    """
    Abstract base class for seal wrappers.

    A wrapper is built from WrapperOptions, then configured with
    set_config(). Configuration resolves settings, builds the provider
    client and verifies the key, returning non-secret metadata.
    """

    wrapper_type: WrapperType

    def __init__(self, opts: Optional[WrapperOptions] = None):
        if opts is None:
            opts = WrapperOptions()
        if not isinstance(opts, WrapperOptions):
            raise WrapperConstructionError(
                f"{type(self).__name__} expects WrapperOptions, got {type(opts).__name__}"
            )
        if opts.logger is not None and not isinstance(
            opts.logger, (logging.Logger, logging.LoggerAdapter)
        ):
            raise WrapperConstructionError("WrapperOptions.logger must be a logging.Logger")

        self._logger = opts.logger or logging.getLogger(type(self).__module__)
        self._key_id = ""

    @property
    def key_id(self) -> str:
        """Return the id of the key currently used for encryption."""
        return self._key_id

    @abstractmethod
    def set_config(self, config: Mapping[str, str]) -> Optional[Dict[str, str]]:
        """
        Configure the wrapper.

        Args:
            config: Provider-specific settings

        Returns:
            Non-secret metadata describing the configuration

        Raises:
            WrapperConfigError: If a required setting is missing or invalid
            WrapperAuthenticationError: If the provider rejects credentials
            KeyNotFoundError: If the configured key does not exist
            WrapperError: If the provider call fails
        """
        pass

    @abstractmethod
    def encrypt(self, plaintext: bytes, aad: Optional[bytes] = None) -> BlobInfo:
        """
        Encrypt data with the configured key.

        Args:
            plaintext: Data to encrypt
            aad: Optional additional authenticated data

        Returns:
            BlobInfo holding the ciphertext
        """
        pass

    @abstractmethod
    def decrypt(self, blob: BlobInfo, aad: Optional[bytes] = None) -> bytes:
        """
        Decrypt a blob produced by encrypt().

        Args:
            blob: BlobInfo returned by encrypt()
            aad: Additional authenticated data used at encryption

        Returns:
            Plaintext bytes
        """
        pass

    def init(self) -> None:
        """Start any background work the wrapper needs."""
        pass

    def finalize(self) -> None:
        """Release resources held by the wrapper."""
        pass

    def _require(self, value: str, name: str) -> str:
        if not value:
            raise WrapperConfigError(
                f"'{name}' not found for {self.wrapper_type.value} wrapper configuration"
            )
        return value
