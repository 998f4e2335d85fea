"""
Seal Wrapper Layer.

Provides one wrapper per supported seal backend. Each wrapper delegates to
the vendor SDK, which is imported only when the wrapper is configured.

Supported providers:
- AEAD (local AES-GCM key)
- AliCloud KMS
- AWS KMS
- Azure Key Vault
- GCP Cloud KMS
- OCI KMS
- Vault Transit
"""

from .wrapper import (
    BlobInfo,
    KeyInfo,
    KeyNotFoundError,
    Wrapper,
    WrapperAuthenticationError,
    WrapperConfigError,
    WrapperConstructionError,
    WrapperError,
    WrapperErrorKind,
    WrapperOptions,
    WrapperType,
)

__all__ = [
    "Wrapper",
    "WrapperType",
    "WrapperOptions",
    "BlobInfo",
    "KeyInfo",
    "WrapperError",
    "WrapperErrorKind",
    "WrapperConstructionError",
    "WrapperConfigError",
    "WrapperAuthenticationError",
    "KeyNotFoundError",
]
