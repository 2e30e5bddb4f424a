"""
Interactive console implementation of OperatorPrompt.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from .exceptions import UserCancelledError

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence

    from .gateways import GatewayOption


class ConsolePrompt:
    """Asks the operator on the terminal. Input is read until a usable answer is given."""

    def __init__(self, read: Callable[[str], str] = input, write: Callable[[str], None] = print) -> None:
        self._read: Callable[[str], str] = read
        self._write: Callable[[str], None] = write

    def confirm(self, message: str) -> bool:
        try:
            answer = self._read(f"{message} [y/N]: ")
        except EOFError:
            return False
        return answer.strip().lower() in ("y", "yes")

    def select_gateway(self, source_gateway: str, options: Sequence[GatewayOption]) -> int | None:
        self._write(f"\nNo target gateway named {source_gateway}. Choose what to do:")
        for number, option in enumerate(options, start=1):
            self._write(f"  {number}. {option.label}")
        try:
            answer = self._read("Selection: ").strip()
        except EOFError as e:
            msg = f"Migration cancelled: input ended while matching gateway {source_gateway}"
            raise UserCancelledError(msg) from e
        try:
            return int(answer)
        except ValueError:
            return None

    def report(self, message: str) -> None:
        self._write(message)
