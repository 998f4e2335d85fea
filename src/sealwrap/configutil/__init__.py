"""
Seal Configuration Utilities.

Turns parsed seal stanzas into configured wrappers.

Usage:
    from sealwrap.configutil import KMS, configure_wrapper

    info_keys, info = [], {}
    wrapper = configure_wrapper(KMS(type="awskms", config={...}), info_keys, info, logger)
"""

from .config import (
    ConfigError,
    Entropy,
    SharedConfig,
    load_config_file,
    parse_config,
    parse_kmses,
)
from .kms import (
    DEFAULT_CONFIGURATORS,
    KMS,
    EnterpriseRequiredError,
    KMSConfigError,
    SecureRandomReader,
    UnsupportedKMSTypeError,
    WrapperConfigurator,
    configure_wrapper,
    create_secure_random_reader,
)

__all__ = [
    "KMS",
    "SharedConfig",
    "Entropy",
    "ConfigError",
    "KMSConfigError",
    "UnsupportedKMSTypeError",
    "EnterpriseRequiredError",
    "DEFAULT_CONFIGURATORS",
    "WrapperConfigurator",
    "SecureRandomReader",
    "configure_wrapper",
    "create_secure_random_reader",
    "load_config_file",
    "parse_config",
    "parse_kmses",
]
