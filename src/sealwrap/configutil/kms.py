"""
Seal Wrapper Configuration.

Selects and configures the seal wrapper named by a KMS stanza, and collects
non-secret diagnostic info for operators.
"""

import logging
import secrets
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from ..wrapping.wrapper import (
    Wrapper,
    WrapperError,
    WrapperErrorKind,
    WrapperOptions,
    WrapperType,
)
from ..wrapping.wrappers.aead import AEADWrapper
from ..wrapping.wrappers.alicloudkms import AliCloudKMSWrapper
from ..wrapping.wrappers.awskms import AWSKMSWrapper
from ..wrapping.wrappers.azurekeyvault import AzureKeyVaultWrapper
from ..wrapping.wrappers.gcpckms import GCPCKMSWrapper
from ..wrapping.wrappers.ocikms import (
    KMS_CONFIG_CRYPTO_ENDPOINT,
    KMS_CONFIG_KEY_ID,
    KMS_CONFIG_MANAGEMENT_ENDPOINT,
    OCIKMSWrapper,
)
from ..wrapping.wrappers.transit import TransitWrapper


class KMSConfigError(Exception):
    """Base exception for seal selection."""

    pass


class UnsupportedKMSTypeError(KMSConfigError):
    """KMS type is not recognised."""

    def __init__(self, kms_type: str):
        super().__init__(f'Unknown KMS type "{kms_type}"')
        self.kms_type = kms_type


class EnterpriseRequiredError(KMSConfigError):
    """KMS type needs a capability missing from this build."""

    def __init__(self, kms_type: str = WrapperType.PKCS11.value):
        super().__init__(f"KMS type '{kms_type}' requires the Vault Enterprise HSM binary")
        self.kms_type = kms_type


@dataclass
class KMS:
    """A parsed seal (or kms) stanza."""

    type: str
    purpose: str = ""
    disabled: bool = False
    config: Dict[str, str] = field(default_factory=dict)


Configurator = Callable[[WrapperOptions, KMS], Tuple[Wrapper, Dict[str, str]]]


def _set_config(wrapper: Wrapper, kms: KMS, tolerate_missing_key: bool) -> Dict[str, str]:
    """Apply the stanza's config, optionally accepting a key that does not exist yet."""
    try:
        return wrapper.set_config(kms.config) or {}
    except WrapperError as e:
        if not tolerate_missing_key or e.kind is not WrapperErrorKind.KEY_NOT_FOUND:
            raise
        return e.info


def _labels(wrapper_info: Mapping[str, str], mapping: List[Tuple[str, str]]) -> Dict[str, str]:
    """Translate raw wrapper metadata into display labels, skipping absent keys."""
    info = {}
    for label, raw_key in mapping:
        if raw_key in wrapper_info:
            info[label] = wrapper_info[raw_key]
    return info


def get_aead_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = AEADWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=False)

    label = "AEAD Type"
    if kms.purpose:
        label = f"{kms.purpose} {label}"
    return wrapper, _labels(wrapper_info, [(label, "aead_type")])


def get_alicloud_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = AliCloudKMSWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=True)
    return wrapper, _labels(
        wrapper_info,
        [
            ("AliCloud KMS Region", "region"),
            ("AliCloud KMS KeyID", "kms_key_id"),
            ("AliCloud KMS Domain", "domain"),
        ],
    )


def get_aws_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = AWSKMSWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=True)
    return wrapper, _labels(
        wrapper_info,
        [
            ("AWS KMS Region", "region"),
            ("AWS KMS KeyID", "kms_key_id"),
            ("AWS KMS Endpoint", "endpoint"),
        ],
    )


def get_azure_key_vault_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = AzureKeyVaultWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=True)
    return wrapper, _labels(
        wrapper_info,
        [
            ("Azure Environment", "environment"),
            ("Azure Vault Name", "vault_name"),
            ("Azure Key Name", "key_name"),
        ],
    )


def get_gcpckms_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = GCPCKMSWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=True)
    return wrapper, _labels(
        wrapper_info,
        [
            ("GCP KMS Project", "project"),
            ("GCP KMS Region", "region"),
            ("GCP KMS Key Ring", "key_ring"),
            ("GCP KMS Crypto Key", "crypto_key"),
        ],
    )


def get_ocikms_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = OCIKMSWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=False)
    return wrapper, _labels(
        wrapper_info,
        [
            ("OCI KMS KeyID", KMS_CONFIG_KEY_ID),
            ("OCI KMS Crypto Endpoint", KMS_CONFIG_CRYPTO_ENDPOINT),
            ("OCI KMS Management Endpoint", KMS_CONFIG_MANAGEMENT_ENDPOINT),
            ("OCI KMS Principal Type", "principal_type"),
        ],
    )


def get_transit_kms(opts: WrapperOptions, kms: KMS) -> Tuple[Wrapper, Dict[str, str]]:
    wrapper = TransitWrapper(opts)
    wrapper_info = _set_config(wrapper, kms, tolerate_missing_key=True)
    return wrapper, _labels(
        wrapper_info,
        [
            ("Transit Address", "address"),
            ("Transit Mount Path", "mount_path"),
            ("Transit Key Name", "key_name"),
            ("Transit Namespace", "namespace"),
        ],
    )


DEFAULT_CONFIGURATORS: Mapping[WrapperType, Configurator] = MappingProxyType(
    {
        WrapperType.AEAD: get_aead_kms,
        WrapperType.ALICLOUD_KMS: get_alicloud_kms,
        WrapperType.AWS_KMS: get_aws_kms,
        WrapperType.AZURE_KEY_VAULT: get_azure_key_vault_kms,
        WrapperType.GCP_CKMS: get_gcpckms_kms,
        WrapperType.OCI_KMS: get_ocikms_kms,
        WrapperType.TRANSIT: get_transit_kms,
    }
)


def configure_wrapper(
    kms: KMS,
    info_keys: List[str],
    info: Dict[str, str],
    logger: Optional[logging.Logger] = None,
    configurators: Optional[Mapping[WrapperType, Configurator]] = None,
) -> Optional[Wrapper]:
    """
    Build and configure the wrapper for a KMS stanza.

    Diagnostic info from the wrapper is appended to info_keys (in the order
    the configurator returned it) and set in info. Nothing is appended when
    an error is raised.

    Args:
        kms: Parsed KMS stanza
        info_keys: Caller-owned list of diagnostic keys
        info: Caller-owned map of diagnostic values
        logger: Logger handed to the wrapper
        configurators: Type to configurator table. Defaults to DEFAULT_CONFIGURATORS

    Returns:
        The configured wrapper, or None for shamir

    Raises:
        EnterpriseRequiredError: For pkcs11
        UnsupportedKMSTypeError: For any type without a configurator
        WrapperError: If the wrapper could not be built or configured
    """
    if configurators is None:
        configurators = DEFAULT_CONFIGURATORS

    opts = WrapperOptions(logger=logger)

    try:
        kms_type = WrapperType(kms.type)
    except ValueError:
        raise UnsupportedKMSTypeError(kms.type)

    if kms_type == WrapperType.SHAMIR:
        return None
    if kms_type == WrapperType.PKCS11:
        raise EnterpriseRequiredError(kms_type.value)

    configurator = configurators.get(kms_type)
    if configurator is None:
        raise UnsupportedKMSTypeError(kms.type)

    wrapper, kms_info = configurator(opts, kms)

    for key, value in kms_info.items():
        info_keys.append(key)
        info[key] = value

    return wrapper


class WrapperConfigurator:
    """configure_wrapper() bound to one configurator table."""

    def __init__(self, configurators: Optional[Mapping[WrapperType, Configurator]] = None):
        if configurators is None:
            configurators = DEFAULT_CONFIGURATORS
        self._configurators = MappingProxyType(dict(configurators))

    @property
    def supported_types(self) -> List[WrapperType]:
        return list(self._configurators)

    def configure(
        self,
        kms: KMS,
        info_keys: List[str],
        info: Dict[str, str],
        logger: Optional[logging.Logger] = None,
    ) -> Optional[Wrapper]:
        return configure_wrapper(kms, info_keys, info, logger, configurators=self._configurators)


class SecureRandomReader:
    """Reads from the platform CSPRNG."""

    def read(self, size: int = 32) -> bytes:
        if size < 0:
            raise ValueError("size must be non-negative")
        return secrets.token_bytes(size)

    def readinto(self, buffer) -> int:
        view = memoryview(buffer).cast("B")
        view[:] = secrets.token_bytes(len(view))
        return len(view)


def create_secure_random_reader(conf, wrapper: Optional[Wrapper]) -> SecureRandomReader:
    """
    Return the random source used for key generation.

    This build always uses the platform CSPRNG; conf and wrapper are accepted
    so callers need not know whether entropy augmentation is available.
    """
    return SecureRandomReader()
