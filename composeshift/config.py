"""
Run configuration for composeshift.

Built once from the parsed command line and the environment, then passed to
every component that needs it.
"""

import argparse
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from .gateway import DEFAULT_CLI
from .types import ConfigurationError, Mode, NamingContext

ENV_CLI = "COMPOSESHIFT_CLI"
ENV_SERVER = "COMPOSESHIFT_SERVER"
ENV_PROJECT = "COMPOSESHIFT_PROJECT"


@dataclass(frozen=True)
class RunConfig:
    """Settings for a single composeshift run."""
    prefix: str
    mode: Mode = Mode.GENERATE
    descriptor: Optional[str] = None
    project: Optional[str] = None
    output_dir: str = "."
    cli: str = DEFAULT_CLI
    server: Optional[str] = None

    @classmethod
    def from_args(
        cls,
        args: argparse.Namespace,
        environ: Optional[Mapping[str, str]] = None,
    ) -> "RunConfig":
        """
        Build the configuration from CLI arguments.

        Command-line values win over COMPOSESHIFT_* environment variables.

        Raises:
            ConfigurationError: If a required setting is missing
        """
        env = os.environ if environ is None else environ

        if args.down_all:
            mode = Mode.DOWN_ALL
        elif args.down:
            mode = Mode.DOWN
        elif args.up:
            mode = Mode.UP
        else:
            mode = Mode.GENERATE

        config = cls(
            prefix=(args.prefix or "").strip(),
            mode=mode,
            descriptor=args.descriptor,
            project=args.project or env.get(ENV_PROJECT) or None,
            output_dir=args.output_dir,
            cli=args.cli or env.get(ENV_CLI) or DEFAULT_CLI,
            server=args.server or env.get(ENV_SERVER) or None,
        )
        config.validate()
        return config

    def validate(self) -> None:
        if not self.prefix:
            raise ConfigurationError("A naming prefix is required (--prefix)")
        if self.mode != Mode.GENERATE and not self.project:
            raise ConfigurationError(
                f"A project is required for {self.mode.value} (--project)"
            )

    @property
    def naming(self) -> NamingContext:
        return NamingContext(self.prefix)
