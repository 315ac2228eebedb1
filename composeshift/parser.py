"""
Compose descriptor parser for composeshift.

Loads docker-compose style files and finds candidate descriptors on disk.
"""

import re
from pathlib import Path
from typing import Any, Dict, List

import yaml

from .types import ComposeManifest, ConfigurationError

YAML_INT_TAG = "tag:yaml.org,2002:int"


class DescriptorLoader(yaml.SafeLoader):
    """SafeLoader that keeps ``22:22`` a string instead of a base-60 integer."""


DescriptorLoader.yaml_implicit_resolvers = {
    first: [(tag, regexp) for tag, regexp in resolvers if tag != YAML_INT_TAG]
    for first, resolvers in yaml.SafeLoader.yaml_implicit_resolvers.items()
}
DescriptorLoader.add_implicit_resolver(
    YAML_INT_TAG,
    re.compile(
        r"""^(?:[-+]?0b[0-1_]+
        |[-+]?0[0-7_]+
        |[-+]?(?:0|[1-9][0-9_]*)
        |[-+]?0x[0-9a-fA-F_]+)$""",
        re.X,
    ),
    list("-+0123456789"),
)

DESCRIPTOR_NAMES = [
    "docker-compose.yml",
    "docker-compose.yaml",
    "compose.yml",
    "compose.yaml",
]


def load_descriptor(path: str) -> Dict[str, Any]:
    """
    Load a compose descriptor file.

    Args:
        path: Path to the descriptor

    Returns:
        Parsed YAML content

    Raises:
        FileNotFoundError: If the descriptor does not exist
        ConfigurationError: If the file is not valid YAML or not a mapping
    """
    descriptor_path = Path(path)
    if not descriptor_path.is_file():
        raise FileNotFoundError(f"Compose descriptor not found: {path}")

    with open(descriptor_path) as f:
        try:
            data = yaml.load(f, Loader=DescriptorLoader)
        except yaml.YAMLError as e:
            raise ConfigurationError(f"Invalid YAML in {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigurationError(f"Compose descriptor {path} must be a mapping")
    return data


def parse_manifest(path: str) -> ComposeManifest:
    """
    Parse a compose descriptor into its service list.

    Args:
        path: Path to the descriptor

    Returns:
        Parsed ComposeManifest

    Raises:
        ConfigurationError: If the descriptor declares no services
    """
    manifest = ComposeManifest.from_dict(path, load_descriptor(path))
    if not manifest.services:
        raise ConfigurationError(f"No services defined in {path}")
    return manifest


def discover_descriptors(directory: str = ".") -> List[str]:
    """Return compose descriptors found in a directory, in preference order."""
    base = Path(directory)
    return [str(base / name) for name in DESCRIPTOR_NAMES if (base / name).is_file()]
