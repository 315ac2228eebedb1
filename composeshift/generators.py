"""
Cluster manifest generators for compose services.

Converts compose services to Deployment and Service documents built from the
bundled skeletons, and writes them to disk.
"""

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .templates import TemplateStore
from .types import (
    ComposeManifest,
    ConfigurationError,
    EnvVar,
    NamingContext,
    PortMapping,
    ServiceSpec,
)

logger = logging.getLogger(__name__)

PROTOCOL = "TCP"


@dataclass
class Translation:
    """Documents generated for one compose service."""
    service: str
    name: str
    deployment: Dict[str, Any]
    network_service: Optional[Dict[str, Any]] = None


def _container(deployment: Dict[str, Any]) -> Dict[str, Any]:
    return deployment["spec"]["template"]["spec"]["containers"][0]


def _set_labels(labels: Optional[Dict[str, Any]], name: str, group: bool = True) -> Dict[str, Any]:
    labels = dict(labels or {})
    labels["app"] = name
    if group:
        labels["group"] = name
    return labels


def generate_deployment(
    service: ServiceSpec,
    naming: NamingContext,
    templates: TemplateStore,
) -> Dict[str, Any]:
    """
    Generate a Deployment from a compose service.

    Args:
        service: Compose service
        naming: Prefix used to derive resource names
        templates: Skeleton store

    Returns:
        Deployment manifest dict

    Raises:
        ConfigurationError: If the service has no image
        TranslationError: If an environment or port entry is malformed
    """
    if not service.image:
        raise ConfigurationError(f"Service '{service.name}' has no image")

    name = naming.derive(service.name)
    deployment = templates.deployment()

    # Cluster tools require the app label to match at every level
    metadata = deployment.setdefault("metadata", {})
    metadata["name"] = name
    metadata["labels"] = _set_labels(metadata.get("labels"), name)

    spec = deployment["spec"]
    spec.setdefault("selector", {})["matchLabels"] = _set_labels(
        spec["selector"].get("matchLabels"), name, group=False
    )
    pod_metadata = spec["template"].setdefault("metadata", {})
    pod_metadata["labels"] = _set_labels(pod_metadata.get("labels"), name)

    container = _container(deployment)
    container["name"] = name
    container["image"] = service.image

    env = [EnvVar.parse(service.name, item).to_dict() for item in service.environment]
    if env:
        container["env"] = env
    else:
        container.pop("env", None)

    ports = [PortMapping.parse(service.name, p) for p in service.ports]
    if ports:
        container["ports"] = [
            {"containerPort": p.internal, "protocol": PROTOCOL}
            for p in ports
        ]
    else:
        container.pop("ports", None)

    return deployment


def generate_service(
    service: ServiceSpec,
    naming: NamingContext,
    templates: TemplateStore,
) -> Optional[Dict[str, Any]]:
    """
    Generate a Service from a compose service.

    Returns:
        Service manifest dict or None if no ports are published
    """
    if not service.ports:
        return None

    name = naming.derive(service.name)
    ports = [PortMapping.parse(service.name, p) for p in service.ports]

    document = templates.service()
    metadata = document.setdefault("metadata", {})
    metadata["name"] = naming.service_name(service.name)
    labels = dict(metadata.get("labels") or {})
    labels["group"] = name
    metadata["labels"] = labels

    spec = document.setdefault("spec", {})
    spec["selector"] = {"app": name}
    spec["ports"] = [
        {
            "protocol": PROTOCOL,
            "port": p.published,
            "targetPort": p.internal,
        }
        for p in ports
    ]
    return document


def translate(
    service: ServiceSpec,
    naming: NamingContext,
    templates: TemplateStore,
) -> Translation:
    """Translate one compose service into its Deployment and optional Service."""
    return Translation(
        service=service.name,
        name=naming.derive(service.name),
        deployment=generate_deployment(service, naming, templates),
        network_service=generate_service(service, naming, templates),
    )


def translate_manifest(
    manifest: ComposeManifest,
    naming: NamingContext,
    templates: TemplateStore,
) -> List[Translation]:
    """Translate every service of a descriptor, failing on the first bad one."""
    translations = [translate(s, naming, templates) for s in manifest.services]
    logger.debug(f"Translated {len(translations)} services from {manifest.path}")
    return translations


def dump_document(document: Dict[str, Any]) -> str:
    """Serialize a manifest to YAML."""
    return yaml.dump(document, default_flow_style=False, sort_keys=False)


def write_translation(
    translation: Translation,
    output_dir: str = ".",
) -> Tuple[Path, Optional[Path]]:
    """
    Write a translation to ``{name}.pod.yml`` and ``{name}.service.yml``.

    Args:
        translation: Generated documents for one service
        output_dir: Directory to write into

    Returns:
        Tuple of (pod file, service file or None)
    """
    out_dir = Path(output_dir)
    out_dir.mkdir(parents=True, exist_ok=True)

    pod_file = out_dir / f"{translation.name}.pod.yml"
    pod_file.write_text(dump_document(translation.deployment))
    logger.debug(f"Written: {pod_file}")

    service_file = None
    if translation.network_service is not None:
        service_file = out_dir / f"{translation.name}.service.yml"
        service_file.write_text(dump_document(translation.network_service))
        logger.debug(f"Written: {service_file}")

    return pod_file, service_file
