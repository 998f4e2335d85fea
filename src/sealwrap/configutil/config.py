"""
Shared Server Configuration.

Parses the parts of a server configuration file that the seal layer needs:
seal stanzas, entropy augmentation and logging settings.

Usage:
    from sealwrap.configutil import load_config_file

    config = load_config_file("server.yaml")
    for kms in config.seals:
        ...
"""

import json
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import yaml

from .kms import KMS

logger = logging.getLogger(__name__)

MAX_SEAL_BLOCKS = 2
ENTROPY_MODE_AUGMENTATION = "augmentation"


class ConfigError(ValueError):
    """Configuration file or stanza is malformed."""

    pass


@dataclass
class Entropy:
    """Entropy augmentation settings."""

    mode: str = ENTROPY_MODE_AUGMENTATION
    seal_name: str = ""


@dataclass
class SharedConfig:
    """Settings shared by every server component."""

    seals: List[KMS] = field(default_factory=list)
    entropy: Optional[Entropy] = None
    log_level: str = "info"
    cluster_name: str = ""
    disable_mlock: bool = False
    pid_file: str = ""


def _stringify(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (dict, list)):
        return json.dumps(value)
    return str(value)


def _parse_bool(value: Any, name: str) -> bool:
    if isinstance(value, bool):
        return value
    if isinstance(value, str) and value.strip().lower() in ("true", "false", "1", "0"):
        return value.strip().lower() in ("true", "1")
    raise ConfigError(f"{name} must be a boolean, got {value!r}")


def _parse_kms(kms_type: str, body: Any, block_name: str) -> KMS:
    if body is None:
        body = {}
    if not isinstance(body, dict):
        raise ConfigError(f"{block_name} {kms_type!r}: expected a mapping of settings")

    settings = dict(body)

    purpose = settings.pop("purpose", "")
    if not isinstance(purpose, str):
        raise ConfigError(f"{block_name} {kms_type!r}: purpose must be a string")

    disabled = _parse_bool(settings.pop("disabled", False), f"{block_name} {kms_type!r} disabled")

    return KMS(
        type=kms_type.lower(),
        purpose=purpose,
        disabled=disabled,
        config={str(k): _stringify(v) for k, v in settings.items() if v is not None},
    )


def parse_kmses(obj: Any, block_name: str = "seal") -> List[KMS]:
    """
    Parse seal stanzas.

    Accepts either a mapping of type to settings, or a list of such
    mappings, which is how an HCL ``seal "<type>" { ... }`` block decodes.

    Args:
        obj: Decoded value of the block
        block_name: Block name used in error messages

    Returns:
        Parsed stanzas, in file order

    Raises:
        ConfigError: If the block is malformed or has too many entries
    """
    if obj is None:
        return []

    if isinstance(obj, dict):
        blocks = [obj]
    elif isinstance(obj, list):
        blocks = obj
    else:
        raise ConfigError(f"{block_name}: expected a mapping or a list of mappings")

    result = []
    for block in blocks:
        if not isinstance(block, dict):
            raise ConfigError(f"{block_name}: expected a mapping, got {type(block).__name__}")
        for kms_type, body in block.items():
            if not kms_type:
                raise ConfigError(f"{block_name}: missing type")
            result.append(_parse_kms(str(kms_type), body, block_name))

    if len(result) > MAX_SEAL_BLOCKS:
        raise ConfigError(f"only two or less {block_name!r} blocks are permitted")

    return result


def parse_entropy(obj: Any) -> Optional[Entropy]:
    """Parse an ``entropy "seal" { mode = ... }`` block."""
    if obj is None:
        return None
    if not isinstance(obj, dict) or len(obj) != 1:
        raise ConfigError("entropy: expected exactly one entropy source")

    seal_name, body = next(iter(obj.items()))
    body = body or {}
    mode = str(body.get("mode", ENTROPY_MODE_AUGMENTATION)).lower()
    if mode != ENTROPY_MODE_AUGMENTATION:
        raise ConfigError(f"entropy: unknown mode {mode!r}")

    return Entropy(mode=mode, seal_name=str(seal_name))


def parse_config(data: Optional[Dict[str, Any]]) -> SharedConfig:
    """Build a SharedConfig from a decoded configuration document."""
    if data is None:
        data = {}
    if not isinstance(data, dict):
        raise ConfigError("configuration root must be a mapping")

    return SharedConfig(
        seals=parse_kmses(data.get("seal")),
        entropy=parse_entropy(data.get("entropy")),
        log_level=str(data.get("log_level", "info")).lower(),
        cluster_name=str(data.get("cluster_name", "")),
        disable_mlock=_parse_bool(data.get("disable_mlock", False), "disable_mlock"),
        pid_file=str(data.get("pid_file", "")),
    )


def load_config_file(path: Union[str, Path]) -> SharedConfig:
    """
    Load configuration from a YAML or JSON file.

    Args:
        path: Path to configuration file

    Returns:
        Parsed SharedConfig
    """
    path = Path(path)

    if not path.exists():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    with open(path) as f:
        try:
            if path.suffix in (".yaml", ".yml"):
                data = yaml.safe_load(f)
            elif path.suffix == ".json":
                data = json.load(f)
            else:
                raise ConfigError(f"Unsupported config format: {path.suffix}")
        except (yaml.YAMLError, json.JSONDecodeError) as e:
            raise ConfigError(f"failed to parse {path}: {e}")

    config = parse_config(data)
    logger.info(f"Loaded configuration from {path}")
    return config
