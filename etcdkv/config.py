"""Loading client configuration from YAML files.

Example file::

    endpoint: http://127.0.0.1:2379
    timeout: 5000           # ms
    swap_retry_delay: 50    # ms
"""

from dataclasses import fields
from pathlib import Path
from typing import Any, Dict, Union

import yaml

from etcdkv.errors import InvalidArgumentError
from etcdkv.types import ClientConfig


def config_from_dict(data: Dict[str, Any]) -> ClientConfig:
    """Build a ClientConfig from a mapping of its field names.

    Raises:
        InvalidArgumentError: If a key is unknown, ``endpoint`` is missing,
            or a value has the wrong type
    """
    known = {f.name for f in fields(ClientConfig)}
    unknown = sorted(set(data) - known)
    if unknown:
        raise InvalidArgumentError(f"Unknown configuration keys: {', '.join(unknown)}")

    if not data.get("endpoint"):
        raise InvalidArgumentError("Configuration is missing 'endpoint'")
    if not isinstance(data["endpoint"], str):
        raise InvalidArgumentError("'endpoint' must be a string")

    for name in ("timeout", "swap_retry_delay"):
        value = data.get(name)
        # bool is an int subclass
        if name in data and (isinstance(value, bool) or not isinstance(value, int)):
            raise InvalidArgumentError(f"'{name}' must be an integer number of ms")

    return ClientConfig(**data)


def load_config(path: Union[str, Path]) -> ClientConfig:
    """Read a ClientConfig from a YAML file.

    Args:
        path: Path to the YAML file

    Returns:
        The parsed configuration

    Raises:
        InvalidArgumentError: If the document is not a mapping of known keys
    """
    with open(path) as f:
        data = yaml.safe_load(f)

    if not isinstance(data, dict):
        raise InvalidArgumentError(f"{path}: expected a mapping at the top level")

    return config_from_dict(data)
