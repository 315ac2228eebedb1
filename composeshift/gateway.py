"""
Cluster CLI gateway.

Runs the cluster-management tool (``oc`` by default) as a subprocess and
reports every invocation as an ExecutionOutcome. Nothing is retried.
"""

import asyncio
import logging
from typing import List, Sequence

from .types import ExecutionOutcome

logger = logging.getLogger(__name__)

DEFAULT_CLI = "oc"


class ClusterGateway:
    """Async wrapper around the cluster CLI."""

    def __init__(self, binary: str = DEFAULT_CLI):
        self.binary = binary

    async def run(self, args: Sequence[str]) -> ExecutionOutcome:
        """
        Run the cluster CLI with the given arguments and wait for it to exit.

        Launch errors and non-zero exit codes are returned as failure
        outcomes carrying the tool's own diagnostic.

        Args:
            args: CLI arguments (e.g. ``["create", "-f", "web.pod.yml"]``)

        Returns:
            ExecutionOutcome with captured stdout on success
        """
        command = [self.binary, *args]
        logger.debug(f"Running: {' '.join(command)}")

        try:
            process = await asyncio.create_subprocess_exec(
                *command,
                stdout=asyncio.subprocess.PIPE,
                stderr=asyncio.subprocess.PIPE,
            )
            stdout, stderr = await process.communicate()
        except OSError as e:
            logger.debug(f"Failed to launch {self.binary}: {e}")
            return ExecutionOutcome.failure(f"Failed to run {self.binary}: {e}")

        out = stdout.decode(errors="replace").strip()
        err = stderr.decode(errors="replace").strip()

        if process.returncode != 0:
            message = err or out or (
                f"{self.binary} {' '.join(args)} exited with code {process.returncode}"
            )
            return ExecutionOutcome.failure(message)

        return ExecutionOutcome.success(out)

    # Argument lists for the operations the orchestrator needs

    @staticmethod
    def status_args() -> List[str]:
        return ["status"]

    @staticmethod
    def login_args(server: str, user: str, secret: str) -> List[str]:
        return ["login", server, "-u", user, "-p", secret]

    @staticmethod
    def project_args(project: str) -> List[str]:
        return ["project", project]

    @staticmethod
    def create_args(path: str) -> List[str]:
        return ["create", "-f", path]

    @staticmethod
    def delete_args(selector: str) -> List[str]:
        return ["delete", "all", "-l", selector]

    @staticmethod
    def expose_args(service_name: str, route_name: str) -> List[str]:
        return ["expose", f"svc/{service_name}", f"--name={route_name}"]

    @staticmethod
    def routes_args() -> List[str]:
        return ["get", "routes"]
