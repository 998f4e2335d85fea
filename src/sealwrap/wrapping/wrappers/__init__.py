"""Seal Wrapper Implementations."""

from .aead import AEADWrapper
from .alicloudkms import AliCloudKMSWrapper
from .awskms import AWSKMSWrapper
from .azurekeyvault import AzureKeyVaultWrapper
from .gcpckms import GCPCKMSWrapper
from .ocikms import OCIKMSWrapper
from .transit import TransitWrapper

__all__ = [
    "AEADWrapper",
    "AliCloudKMSWrapper",
    "AWSKMSWrapper",
    "AzureKeyVaultWrapper",
    "GCPCKMSWrapper",
    "OCIKMSWrapper",
    "TransitWrapper",
]
