"""
composeshift - CLI tool for compose projects on OpenShift-style clusters

Converts docker-compose descriptors to cluster manifests and creates or
removes them through the cluster CLI.
"""

__version__ = "0.1.0"

from .types import (
    AuthenticationError,
    ComposeManifest,
    ComposeShiftError,
    ConfigurationError,
    ExecutionOutcome,
    GatewayError,
    Mode,
    NamingContext,
    PortMapping,
    RunReport,
    ServiceSpec,
    TranslationError,
)

from .parser import (
    discover_descriptors,
    load_descriptor,
    parse_manifest,
)

from .templates import TemplateStore

from .generators import (
    Translation,
    generate_deployment,
    generate_service,
    translate,
    translate_manifest,
    write_translation,
)

from .gateway import ClusterGateway
from .config import RunConfig
from .orchestrator import DeployPlan, LifecycleOrchestrator

__all__ = [
    # Types
    "AuthenticationError",
    "ComposeManifest",
    "ComposeShiftError",
    "ConfigurationError",
    "ExecutionOutcome",
    "GatewayError",
    "Mode",
    "NamingContext",
    "PortMapping",
    "RunReport",
    "ServiceSpec",
    "TranslationError",
    # Parser
    "discover_descriptors",
    "load_descriptor",
    "parse_manifest",
    # Generators
    "TemplateStore",
    "Translation",
    "generate_deployment",
    "generate_service",
    "translate",
    "translate_manifest",
    "write_translation",
    # Cluster
    "ClusterGateway",
    "RunConfig",
    "DeployPlan",
    "LifecycleOrchestrator",
]
