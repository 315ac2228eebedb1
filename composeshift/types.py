"""
Type definitions for composeshift.

These dataclasses represent compose services, derived resource names and
the results of running the cluster CLI.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple


class ComposeShiftError(Exception):
    """Base class for composeshift errors."""


class ConfigurationError(ComposeShiftError, ValueError):
    """Invalid run configuration or descriptor content."""


class TranslationError(ConfigurationError):
    """A service could not be translated into cluster manifests."""

    def __init__(self, service: str, token: Any, reason: str):
        self.service = service
        self.token = token
        super().__init__(f"Service '{service}': {reason} ({token!r})")


class AuthenticationError(ComposeShiftError):
    """Login to the cluster failed."""


class GatewayError(ComposeShiftError):
    """A run-level cluster command failed."""


class Mode(str, Enum):
    """What to do after the manifests are written."""
    GENERATE = "generate"
    UP = "up"
    DOWN = "down"
    DOWN_ALL = "down-all"


class UnitState(str, Enum):
    """Progress of a single service through a create or delete run."""
    IDLE = "idle"
    PROJECT_SELECTED = "project-selected"
    DEPLOYMENT_CREATED = "deployment-created"
    SERVICE_CREATED = "service-created"
    ROUTE_EXPOSED = "route-exposed"
    DELETED = "deleted"
    DONE = "done"
    FAILED = "failed"


MAX_PORT = 65535


def _parse_port_number(service: str, token: Any, value: str) -> int:
    if not value.isdigit():
        raise TranslationError(service, token, "port is not numeric")
    port = int(value)
    if not 1 <= port <= MAX_PORT:
        raise TranslationError(service, token, f"port out of range 1-{MAX_PORT}")
    return port


@dataclass(frozen=True)
class PortMapping:
    """Published/internal port pair."""
    published: int
    internal: int

    @classmethod
    def parse(cls, service: str, port_spec: Any) -> "PortMapping":
        """
        Parse a port token from the descriptor.

        Accepted forms are a bare port (``80`` or ``"80"``), ``"8080:80"``
        ``"127.0.0.1:8080:80"`` and the long syntax
        (``{"target": 80, "published": 8080}``). A bare port is published and
        used inside the container unchanged.

        Raises:
            TranslationError: If the token is not a valid port specification
        """
        if isinstance(port_spec, bool):
            raise TranslationError(service, port_spec, "port is not numeric")
        if isinstance(port_spec, int):
            port = _parse_port_number(service, port_spec, str(port_spec))
            return cls(published=port, internal=port)
        if isinstance(port_spec, dict):
            if "target" not in port_spec:
                raise TranslationError(service, port_spec, "port mapping has no target")
            internal = _parse_port_number(service, port_spec, str(port_spec["target"]))
            published = port_spec.get("published")
            return cls(
                published=internal if published is None
                else _parse_port_number(service, port_spec, str(published)),
                internal=internal,
            )
        if not isinstance(port_spec, str):
            raise TranslationError(service, port_spec, "unsupported port specification")

        parts = port_spec.strip().split(":")
        if len(parts) == 1:
            port = _parse_port_number(service, port_spec, parts[0])
            return cls(published=port, internal=port)
        if len(parts) == 2:
            published, internal = parts
        elif len(parts) == 3:
            # IP:published:internal
            _, published, internal = parts
        else:
            raise TranslationError(service, port_spec, "unsupported port specification")

        return cls(
            published=_parse_port_number(service, port_spec, published),
            internal=_parse_port_number(service, port_spec, internal),
        )


@dataclass(frozen=True)
class EnvVar:
    """Single environment assignment."""
    name: str
    value: str

    @classmethod
    def parse(cls, service: str, item: str) -> "EnvVar":
        """Split a ``KEY=VALUE`` entry on the first ``=``."""
        if not isinstance(item, str):
            raise TranslationError(service, item, "environment entry is not a string")
        name, _, value = item.partition("=")
        if not name:
            raise TranslationError(service, item, "environment entry has no name")
        return cls(name=name, value=value)

    def to_dict(self) -> Dict[str, str]:
        return {"name": self.name, "value": self.value}


@dataclass(frozen=True)
class ServiceSpec:
    """Compose service as written in the descriptor."""
    name: str
    image: str = ""
    environment: Tuple[str, ...] = ()
    ports: Tuple[Any, ...] = ()

    @classmethod
    def from_dict(cls, name: str, data: Optional[Dict]) -> "ServiceSpec":
        """
        Parse from a compose service definition.

        Raises:
            ConfigurationError: If the service, its environment or its ports
                have the wrong shape
        """
        if data is None:
            data = {}
        if not isinstance(data, dict):
            raise ConfigurationError(f"Service '{name}' must be a mapping")

        # Environment may be a list of KEY=VALUE or a mapping
        env_data = data.get("environment")
        if env_data is None:
            environment = ()
        elif isinstance(env_data, dict):
            environment = tuple(
                f"{k}={'' if v is None else v}" for k, v in env_data.items()
            )
        elif isinstance(env_data, list):
            environment = tuple(env_data)
        else:
            raise ConfigurationError(
                f"Service '{name}': environment must be a list or a mapping"
            )

        ports_data = data.get("ports")
        if ports_data is None:
            ports_data = []
        elif not isinstance(ports_data, list):
            raise ConfigurationError(f"Service '{name}': ports must be a list")

        image = data.get("image")
        return cls(
            name=str(name),
            image="" if image is None else str(image),
            environment=environment,
            ports=tuple(ports_data),
        )


@dataclass
class ComposeManifest:
    """Parsed compose descriptor."""
    path: str
    services: List[ServiceSpec] = field(default_factory=list)

    @classmethod
    def from_dict(cls, path: str, data: Optional[Dict]) -> "ComposeManifest":
        """Parse from descriptor content."""
        services_data = (data or {}).get("services") or {}
        if not isinstance(services_data, dict):
            raise ConfigurationError(f"'services' in {path} must be a mapping")

        services = [
            ServiceSpec.from_dict(name, svc_data)
            for name, svc_data in services_data.items()
        ]
        return cls(path=path, services=services)

    @property
    def names(self) -> List[str]:
        return [s.name for s in self.services]

    def get(self, name: str) -> Optional[ServiceSpec]:
        for service in self.services:
            if service.name == name:
                return service
        return None


@dataclass(frozen=True)
class NamingContext:
    """Derives cluster resource names from a prefix and a service name."""
    prefix: str

    def derive(self, service: str) -> str:
        return f"{self.prefix.lower()}-{service}"

    def service_name(self, service: str) -> str:
        return f"{self.derive(service)}-service"

    def route_name(self, service: str) -> str:
        return f"{self.derive(service)}-route"

    def selector(self, service: str) -> str:
        """Label selector matching every resource created for a service."""
        return f"group={self.derive(service)}"


@dataclass(frozen=True)
class ExecutionOutcome:
    """Result of one cluster CLI invocation."""
    ok: bool
    stdout: str = ""
    message: str = ""

    @classmethod
    def success(cls, stdout: str = "") -> "ExecutionOutcome":
        return cls(ok=True, stdout=stdout)

    @classmethod
    def failure(cls, message: str) -> "ExecutionOutcome":
        return cls(ok=False, message=message)


@dataclass
class UnitResult:
    """Final state of one service's create or delete unit."""
    service: str
    state: UnitState
    reached: UnitState = UnitState.IDLE
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.state != UnitState.FAILED


@dataclass
class RunReport:
    """Outcome of an orchestrated run, collected after every unit finished."""
    mode: Mode
    units: List[UnitResult] = field(default_factory=list)
    routes: Optional[str] = None

    @property
    def failures(self) -> List[UnitResult]:
        return [u for u in self.units if not u.ok]

    @property
    def ok(self) -> bool:
        return not self.failures
