"""
sealwrap: seal backend selection for a secrets server.

Picks and configures the key-wrapping backend named by a seal stanza
(AEAD, AliCloud KMS, AWS KMS, Azure Key Vault, GCP Cloud KMS, OCI KMS or
Vault Transit) and reports non-secret diagnostic info about it.
"""

from .configutil import KMS, configure_wrapper, create_secure_random_reader
from .version import sealwrap_version
from .wrapping import Wrapper, WrapperError, WrapperOptions, WrapperType

__version__ = sealwrap_version()

__all__ = [
    "KMS",
    "Wrapper",
    "WrapperError",
    "WrapperOptions",
    "WrapperType",
    "configure_wrapper",
    "create_secure_random_reader",
    "__version__",
]
