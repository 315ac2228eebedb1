"""
Lifecycle orchestration against a live cluster.

Create runs walk every service through
project selection -> deployment -> service -> route, concurrently and
independently. Delete runs remove resources by their group label. Each run
waits for every unit to finish before reporting.
"""

import asyncio
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import List, Optional, Sequence

from .config import RunConfig
from .gateway import ClusterGateway
from .prompts import Prompter
from .types import (
    AuthenticationError,
    ConfigurationError,
    GatewayError,
    Mode,
    RunReport,
    UnitResult,
    UnitState,
)

logger = logging.getLogger(__name__)


@dataclass
class DeployPlan:
    """Files written for one service, ready to be created on the cluster."""
    service: str
    pod_file: Path
    service_file: Optional[Path] = None


class UnitFailed(Exception):
    """Internal signal that a unit's gateway call failed."""


class LifecycleOrchestrator:
    """Sequences cluster operations for create and delete runs."""

    def __init__(self, gateway: ClusterGateway, prompter: Prompter, config: RunConfig):
        self.gateway = gateway
        self.prompter = prompter
        self.config = config
        self.naming = config.naming

    async def ensure_login(self) -> None:
        """
        Make sure the cluster CLI has an authenticated session.

        When ``status`` fails, credentials (and the server URL if it is not
        configured) are collected from the prompter and used to log in.

        Raises:
            AuthenticationError: If the login attempt fails
        """
        outcome = await self.gateway.run(self.gateway.status_args())
        if outcome.ok:
            logger.debug("Cluster session is authenticated")
            return

        logger.info("You must log in to the cluster before continuing")
        server = self.config.server or await self.prompter.ask("Cluster server URL")
        if not server:
            raise ConfigurationError("A cluster server URL is required to log in")
        credentials = await self.prompter.prompt_credentials()

        outcome = await self.gateway.run(
            self.gateway.login_args(server, credentials.user, credentials.secret)
        )
        if not outcome.ok:
            raise AuthenticationError(f"Login to {server} failed: {outcome.message}")
        logger.info(f"Logged in to {server} as {credentials.user}")

    async def select_project(self) -> None:
        """Switch the CLI to the configured project."""
        project = self.config.project
        if not project:
            raise ConfigurationError("A project is required (--project)")
        outcome = await self.gateway.run(self.gateway.project_args(project))
        if not outcome.ok:
            raise GatewayError(f"Could not select project {project}: {outcome.message}")

    async def _step(self, result: UnitResult, args: List[str], reached: UnitState) -> None:
        outcome = await self.gateway.run(args)
        if not outcome.ok:
            raise UnitFailed(outcome.message)
        result.reached = reached

    async def _create_unit(self, plan: DeployPlan) -> UnitResult:
        result = UnitResult(service=plan.service, state=UnitState.IDLE)
        gw = self.gateway
        try:
            # The current project is shared by every unit, so re-select it
            await self._step(result, gw.project_args(self.config.project), UnitState.PROJECT_SELECTED)
            await self._step(result, gw.create_args(str(plan.pod_file)), UnitState.DEPLOYMENT_CREATED)

            if plan.service_file is not None:
                await self._step(result, gw.create_args(str(plan.service_file)), UnitState.SERVICE_CREATED)
                await self._step(
                    result,
                    gw.expose_args(
                        self.naming.service_name(plan.service),
                        self.naming.route_name(plan.service),
                    ),
                    UnitState.ROUTE_EXPOSED,
                )
        except UnitFailed as e:
            result.state = UnitState.FAILED
            result.error = str(e)
            logger.error(f"{plan.service}: failed after {result.reached.value}: {e}")
            return result

        result.state = UnitState.DONE
        logger.info(f"{plan.service}: created")
        return result

    async def _delete_unit(self, service: str) -> UnitResult:
        result = UnitResult(service=service, state=UnitState.IDLE)
        selector = self.naming.selector(service)
        outcome = await self.gateway.run(self.gateway.delete_args(selector))
        if not outcome.ok:
            result.state = UnitState.FAILED
            result.error = outcome.message
            logger.error(f"{service}: delete {selector} failed: {outcome.message}")
            return result

        result.reached = UnitState.DELETED
        result.state = UnitState.DONE
        logger.info(f"{service}: deleted resources matching {selector}")
        return result

    async def up(self, plans: Sequence[DeployPlan]) -> RunReport:
        """
        Create every planned service on the cluster.

        Units run concurrently; a failing unit stops only itself. The route
        list is fetched once every unit succeeded.

        Args:
            plans: Written manifests per service

        Returns:
            RunReport with one UnitResult per plan
        """
        await self.ensure_login()
        await self.select_project()

        units = await asyncio.gather(*(self._create_unit(p) for p in plans))
        report = RunReport(mode=Mode.UP, units=list(units))

        if report.ok:
            outcome = await self.gateway.run(self.gateway.routes_args())
            if outcome.ok:
                report.routes = outcome.stdout
            else:
                logger.warning(f"Could not list routes: {outcome.message}")
        return report

    async def down_all(self, services: Sequence[str]) -> RunReport:
        """Delete the resources of every service, concurrently."""
        await self.ensure_login()
        await self.select_project()

        units = await asyncio.gather(*(self._delete_unit(s) for s in services))
        return RunReport(mode=Mode.DOWN_ALL, units=list(units))

    async def down(self, services: Sequence[str]) -> RunReport:
        """Delete the resources of one service chosen through the prompter."""
        await self.ensure_login()
        await self.select_project()

        service = await self.prompter.select_one("Select the service to remove", services)
        if service not in services:
            raise ConfigurationError(f"Unknown service: {service}")

        unit = await self._delete_unit(service)
        return RunReport(mode=Mode.DOWN, units=[unit])
