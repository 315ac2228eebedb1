"""
Skeleton manifests for composeshift.

The deployment and service skeletons are loaded once and never modified;
callers always receive deep copies to fill in.
"""

import copy
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

TEMPLATE_DIR = Path(__file__).parent
DEPLOYMENT_TEMPLATE = "deployment.yml"
SERVICE_TEMPLATE = "service.yml"


def _load_template(path: Path) -> Dict[str, Any]:
    if not path.is_file():
        raise FileNotFoundError(f"Template not found: {path}")
    with open(path) as f:
        data = yaml.safe_load(f)
    if not isinstance(data, dict):
        raise ValueError(f"Template {path} must be a mapping")
    return data


@dataclass(frozen=True)
class TemplateStore:
    """Deployment and service skeletons."""
    _deployment: Dict[str, Any]
    _service: Dict[str, Any]

    @classmethod
    def load(cls, directory: Optional[str] = None) -> "TemplateStore":
        """
        Load both skeletons.

        Args:
            directory: Directory holding deployment.yml and service.yml
                (default: the templates bundled with composeshift)

        Raises:
            FileNotFoundError: If a skeleton is missing
        """
        base = Path(directory) if directory else TEMPLATE_DIR
        return cls(
            _deployment=_load_template(base / DEPLOYMENT_TEMPLATE),
            _service=_load_template(base / SERVICE_TEMPLATE),
        )

    def deployment(self) -> Dict[str, Any]:
        return copy.deepcopy(self._deployment)

    def service(self) -> Dict[str, Any]:
        return copy.deepcopy(self._service)
