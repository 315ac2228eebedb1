"""
Interactive prompts.

The orchestrator and CLI only talk to a Prompter; TerminalPrompter is the
implementation used from a shell.
"""

import asyncio
import getpass
import sys
from dataclasses import dataclass
from typing import List, Protocol, Sequence

from .types import ConfigurationError


@dataclass(frozen=True)
class Credentials:
    """Cluster login credentials."""
    user: str
    secret: str


class Prompter(Protocol):
    async def select_one(self, message: str, options: Sequence[str]) -> str:
        ...

    async def prompt_credentials(self) -> Credentials:
        ...

    async def ask(self, message: str) -> str:
        ...


class TerminalPrompter:
    """Prompter reading from stdin, run off the event loop."""

    async def select_one(self, message: str, options: Sequence[str]) -> str:
        return await asyncio.to_thread(self._select_one, message, list(options))

    async def prompt_credentials(self) -> Credentials:
        return await asyncio.to_thread(self._prompt_credentials)

    async def ask(self, message: str) -> str:
        return await asyncio.to_thread(self._ask, message)

    def _select_one(self, message: str, options: List[str]) -> str:
        if not options:
            raise ConfigurationError(f"Nothing to choose from: {message}")
        if len(options) == 1:
            return options[0]

        print(message, file=sys.stderr)
        for i, option in enumerate(options, 1):
            print(f"  {i}) {option}", file=sys.stderr)

        while True:
            answer = input(f"Choose [1-{len(options)}]: ").strip()
            if answer in options:
                return answer
            if answer.isdigit() and 1 <= int(answer) <= len(options):
                return options[int(answer) - 1]
            print(f"Invalid choice: {answer}", file=sys.stderr)

    def _prompt_credentials(self) -> Credentials:
        user = input("Username: ").strip()
        secret = getpass.getpass("Password: ")
        return Credentials(user=user, secret=secret)

    def _ask(self, message: str) -> str:
        return input(f"{message}: ").strip()
